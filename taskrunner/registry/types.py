from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:
    from taskrunner.executor import Executor


class TaskContext:
    """What a task body receives: its own id, the forwarded flags and a way
    to run other registered tasks with those same flags."""

    def __init__(self, task_id: str, flags: tuple[str, ...], executor: Executor):
        self.task_id = task_id
        self.flags = flags
        self._executor = executor

    def sequence(self, *task_ids: str) -> int:
        return self._executor.run_sequence(list(task_ids), self.flags).exit_code

    def parallel(self, *task_ids: str) -> int:
        return self._executor.run_parallel(list(task_ids), self.flags).exit_code

    def __repr__(self) -> str:
        return f"TaskContext(task_id={self.task_id!r}, flags={self.flags!r})"


class Runnable(Protocol):
    def __call__(self, ctx: TaskContext) -> int | None: ...


@dataclass(frozen=True)
class TaskEntry:
    id: str
    fn: Callable[[TaskContext], int | None]
    description: str | None = None


class RegistryError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnknownTaskError(RegistryError, KeyError):
    def __init__(self, task_id: str):
        super().__init__(f"Task '{task_id}' is not defined")
        self.task_id = task_id

    def __str__(self) -> str:
        return self.args[0]
