from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

from rich.markup import escape

from taskrunner.output import format_duration
from taskrunner.registry import Registry, TaskContext

from .types import AggregateOutcome, ExecutionResult, ParallelResult, SequenceResult

logger = logging.getLogger(__name__)


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class Executor:
    def __init__(self, registry: Registry, *, clock: Callable[[], int] = monotonic_ms):
        self.registry = registry
        self.clock = clock

    def run_task(self, task_id: str, flags: Sequence[str] = ()) -> ExecutionResult:
        """Run one task and report its exit status as data.

        Raises UnknownTaskError when nothing is registered under ``task_id``.
        Exceptions other than SystemExit raised by the task body propagate.
        """
        entry = self.registry.get(task_id)
        flags = tuple(flags)
        label = escape(task_id)

        logger.info("Starting '[cyan]%s[/cyan]'...", label)
        start = self.clock()
        try:
            status = entry.fn(TaskContext(task_id, flags, self))
        except SystemExit as exc:
            status = _exit_status(exc.code)
        exit_code = _exit_status(status)
        elapsed = max(0, self.clock() - start)

        duration = format_duration(elapsed)
        if exit_code != 0:
            logger.error("Task '%s' failed after %s (%d)", label, duration, exit_code)
        else:
            logger.info(
                "Finished '[cyan]%s[/cyan]' after [magenta]%s[/magenta]", label, duration
            )

        return ExecutionResult(task_id, exit_code, elapsed)

    def run_sequence(
        self, task_ids: Sequence[str], flags: Sequence[str] = ()
    ) -> SequenceResult:
        task_ids = list(task_ids)
        self.registry.check_defined(task_ids)

        results: list[ExecutionResult] = []
        for tid in task_ids:
            result = self.run_task(tid, flags)
            results.append(result)
            if not result.ok:
                return SequenceResult(results, failed=result)

        return SequenceResult(results)

    def run_parallel(
        self, task_ids: Sequence[str], flags: Sequence[str] = ()
    ) -> ParallelResult:
        task_ids = list(task_ids)
        self.registry.check_defined(task_ids)

        if not task_ids:
            return ParallelResult([], AggregateOutcome.ALL_SUCCEEDED)

        flags = tuple(flags)
        with ThreadPoolExecutor(
            max_workers=len(task_ids), thread_name_prefix="taskrunner"
        ) as pool:
            futures = [pool.submit(self.run_task, tid, flags) for tid in task_ids]
        # Leaving the pool joins every worker, failed or not

        errors = [f.exception() for f in futures if f.exception() is not None]
        if errors:
            raise errors[0]

        results = [f.result() for f in futures]
        failures = sum(1 for r in results if not r.ok)
        return ParallelResult(results, AggregateOutcome.classify(failures, len(results)))


def _exit_status(value: object) -> int:
    match value:
        case None:
            return 0
        case bool():
            return int(value)
        case int():
            return value
        case _:
            # sys.exit("message") convention
            logger.warning("%s", escape(str(value)))
            return 1
