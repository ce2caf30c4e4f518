from __future__ import annotations

import logging
from typing import Callable, Iterable, overload

from rich.markup import escape

from .types import RegistryError, Runnable, TaskEntry, UnknownTaskError

logger = logging.getLogger(__name__)


def normalize_task_id(task_id: object) -> str:
    if not isinstance(task_id, str):
        raise RegistryError(f"Task id must be a string, got {type(task_id)}")

    task_id_norm = task_id.strip()

    if len(task_id_norm) < 1:
        raise RegistryError("A task id can't be empty")

    # Dash-prefixed arguments are flags on the command line
    if task_id_norm.startswith("-"):
        raise RegistryError(f"A task id can't start with '-': {task_id_norm}")

    return task_id_norm


class Registry:
    """Maps task ids to runnables for the lifetime of the process."""

    def __init__(self) -> None:
        self._tasks: dict[str, TaskEntry] = {}

    def register(
        self, task_id: str, fn: Runnable, *, description: str | None = None
    ) -> TaskEntry:
        task_id_norm = normalize_task_id(task_id)

        if not callable(fn):
            raise RegistryError(f"{task_id_norm}: task body must be callable")

        if task_id_norm in self._tasks:
            raise RegistryError(f"Duplicate task id: {task_id_norm}")

        entry = TaskEntry(task_id_norm, fn, description)
        self._tasks[task_id_norm] = entry
        logger.debug("Registered task %s", escape(task_id_norm))
        return entry

    @overload
    def task(self, name: Callable) -> Callable: ...

    @overload
    def task(self, name: str | None = None) -> Callable[[Callable], Callable]: ...

    def task(self, name=None):
        """Register the decorated function as a task.

        Usable bare (``@registry.task``, the id is the function name) or with
        an explicit id (``@registry.task("build:docs")``).
        """
        if callable(name):
            fn = name
            self.register(fn.__name__, fn, description=_first_doc_line(fn))
            return fn

        def decorator(fn: Callable) -> Callable:
            self.register(name or fn.__name__, fn, description=_first_doc_line(fn))
            return fn

        return decorator

    def list_tasks(self) -> list[str]:
        return sorted(self._tasks)

    def is_defined(self, task_id: str) -> bool:
        return task_id in self._tasks

    def are_defined(self, task_ids: Iterable[str]) -> bool:
        return all(self.is_defined(tid) for tid in task_ids)

    def check_defined(self, task_ids: Iterable[str]) -> None:
        """Raise UnknownTaskError for the first id that is not registered."""
        for tid in task_ids:
            if not self.is_defined(tid):
                logger.error("[red]Task '%s' is not defined![/red]", escape(tid))
                raise UnknownTaskError(tid)

    def get(self, task_id: str) -> TaskEntry:
        if not self.is_defined(task_id):
            raise UnknownTaskError(task_id)

        return self._tasks[task_id]

    def show_tasks(self) -> None:
        logger.info("Available tasks:")
        task_ids = self.list_tasks()
        if not task_ids:
            logger.info("  [bright_black]<none>[/bright_black]")
            return

        for tid in task_ids:
            entry = self._tasks[tid]
            if entry.description:
                logger.info(
                    "  [cyan]%s[/cyan]  [bright_black]%s[/bright_black]",
                    escape(tid),
                    escape(entry.description),
                )
            else:
                logger.info("  [cyan]%s[/cyan]", escape(tid))


def _first_doc_line(fn: Callable) -> str | None:
    doc = getattr(fn, "__doc__", None)
    if not doc or not doc.strip():
        return None
    return doc.strip().splitlines()[0]
