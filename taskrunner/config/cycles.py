from __future__ import annotations

from enum import Enum, auto
from typing import Mapping, Sequence


class _Visit(Enum):
    UNVISITED = auto()
    VISITING = auto()
    VISITED = auto()


def find_cycle(refs: Mapping[str, Sequence[str]]) -> list[str] | None:
    """Return the first composition cycle found, e.g. ``["a", "b", "a"]``.

    ``refs`` maps a composite task id to the ids it runs. Visiting order is
    sorted so the reported cycle is deterministic.
    """
    state = {tid: _Visit.UNVISITED for tid in refs}
    stack: list[str] = []
    pos: dict[str, int] = {}

    def visit(tid: str) -> list[str] | None:
        if state[tid] == _Visit.VISITING:
            return stack[pos[tid] :] + [tid]
        if state[tid] == _Visit.VISITED:
            return None

        state[tid] = _Visit.VISITING
        pos[tid] = len(stack)
        stack.append(tid)

        for ref in sorted(set(refs[tid])):
            if ref in state:
                cycle = visit(ref)
                if cycle:
                    return cycle

        stack.pop()
        pos.pop(tid)
        state[tid] = _Visit.VISITED
        return None

    for tid in sorted(refs):
        cycle = visit(tid)
        if cycle:
            return cycle

    return None
