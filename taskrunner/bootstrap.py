"""Deciding what to run for one process invocation."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum, auto
from typing import Sequence

from taskrunner.executor import Executor
from taskrunner.output import configure_logging
from taskrunner.registry import Registry, UnknownTaskError

logger = logging.getLogger(__name__)

DEFAULT_TASK = "default"
MISSING_TASK_EXIT_CODE = 1


@dataclass(frozen=True)
class RunnerConfig:
    tasks: tuple[str, ...] = ()
    flags: tuple[str, ...] = ()
    default_task: str = DEFAULT_TASK


def parse_args(argv: Sequence[str], *, default_task: str = DEFAULT_TASK) -> RunnerConfig:
    """Split arguments into task ids and flags forwarded to every task.

    ``build --production test`` runs ``build`` then ``test``, both receiving
    ``("--production",)``.
    """
    tasks: list[str] = []
    flags: list[str] = []
    for arg in argv:
        if arg.startswith("-"):
            flags.append(arg)
        elif arg.strip():
            tasks.append(arg.strip())

    return RunnerConfig(tuple(tasks), tuple(flags), default_task)


def to_process_exit_code(status: int) -> int:
    """Map a task status onto what a process can exit with.

    Only the low 8 bits survive exit(), so a failing status such as 256 would
    read as success; any status outside 0-255 becomes 1.
    """
    if 0 <= status <= 255:
        return status
    return 1


class BootstrapState(Enum):
    IDLE = auto()
    RESOLVING = auto()
    RUNNING = auto()
    DONE = auto()


class Bootstrapper:
    def __init__(self, executor: Executor, config: RunnerConfig):
        self.executor = executor
        self.config = config
        self.state = BootstrapState.IDLE
        self.exit_code: int | None = None

    @property
    def registry(self) -> Registry:
        return self.executor.registry

    def bootstrap(self) -> int:
        """Run the requested tasks, or the default one, exactly once."""
        if self.state is not BootstrapState.IDLE:
            logger.debug("Bootstrap already triggered (state=%s)", self.state.name)
            # None here means the first run raised
            return self.exit_code if self.exit_code is not None else 1

        self.state = BootstrapState.RESOLVING
        try:
            self.exit_code = to_process_exit_code(self._resolve_and_run())
        except UnknownTaskError:
            # Already logged by the registry check
            self.exit_code = MISSING_TASK_EXIT_CODE
        finally:
            self.state = BootstrapState.DONE

        return self.exit_code

    def _resolve_and_run(self) -> int:
        cfg = self.config

        if cfg.tasks:
            self.state = BootstrapState.RUNNING
            return self.executor.run_sequence(cfg.tasks, cfg.flags).exit_code

        if self.registry.are_defined([cfg.default_task]):
            self.state = BootstrapState.RUNNING
            return self.executor.run_task(cfg.default_task, cfg.flags).exit_code

        logger.info("Nothing to run.")
        self.registry.show_tasks()
        return 0


def main(
    registry: Registry,
    argv: Sequence[str] | None = None,
    default_task: str = DEFAULT_TASK,
    *,
    configure: bool = True,
) -> int:
    """Entry point for scripts that define their own tasks.

    Typical use at the bottom of a task script::

        raise SystemExit(main(registry))
    """
    if argv is None:
        argv = sys.argv[1:]

    if configure:
        configure_logging()

    config = parse_args(argv, default_task=default_task)
    return Bootstrapper(Executor(registry), config).bootstrap()
