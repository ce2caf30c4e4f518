# tests/test_executor.py
from __future__ import annotations

import logging
import sys
import threading
import time

import pytest

from taskrunner.executor import (
    ALL_FAILED_EXIT_CODE,
    PARTIAL_FAILURE_EXIT_CODE,
    AggregateOutcome,
    Executor,
)
from taskrunner.registry import Registry, UnknownTaskError


def _registry(codes: dict[str, int], calls: list[str]) -> Registry:
    """
    codes: task id -> exit status the task returns
    Every invocation appends the task id to `calls`.
    """
    reg = Registry()
    for tid, code in codes.items():

        def fn(ctx, code=code):
            calls.append(ctx.task_id)
            return code

        reg.register(tid, fn)
    return reg


def _clock(*values: int):
    it = iter(values)
    return lambda: next(it)


# -------------------------
# run_task
# -------------------------


def test_run_task_reports_status_and_duration() -> None:
    calls: list[str] = []
    ex = Executor(_registry({"a": 3}, calls), clock=_clock(1000, 2500))

    result = ex.run_task("a")

    assert calls == ["a"]
    assert result.task_id == "a"
    assert result.exit_code == 3
    assert result.elapsed_ms == 1500
    assert not result.ok


def test_elapsed_is_clamped_to_zero() -> None:
    ex = Executor(_registry({"a": 0}, []), clock=_clock(500, 200))

    assert ex.run_task("a").elapsed_ms == 0


def test_run_task_passes_flags() -> None:
    seen = []
    reg = Registry()
    reg.register("a", lambda ctx: seen.append(ctx.flags))

    Executor(reg).run_task("a", ["--prod", "-v"])

    assert seen == [("--prod", "-v")]


@pytest.mark.parametrize(
    "body, expected",
    [
        (lambda ctx: None, 0),
        (lambda ctx: 0, 0),
        (lambda ctx: 7, 7),
        (lambda ctx: sys.exit(4), 4),
        (lambda ctx: sys.exit(), 0),
        (lambda ctx: sys.exit("boom"), 1),
    ],
)
def test_exit_status_conventions(body, expected: int) -> None:
    reg = Registry()
    reg.register("a", body)

    assert Executor(reg).run_task("a").exit_code == expected


def test_unknown_task_raises() -> None:
    with pytest.raises(UnknownTaskError):
        Executor(Registry()).run_task("nope")


def test_task_exception_propagates() -> None:
    reg = Registry()

    def broken(ctx):
        raise RuntimeError("broken")

    reg.register("a", broken)

    with pytest.raises(RuntimeError, match="broken"):
        Executor(reg).run_task("a")


def test_run_task_logs_start_and_finish(caplog: pytest.LogCaptureFixture) -> None:
    ex = Executor(_registry({"ok": 0, "bad": 2}, []), clock=_clock(0, 5, 0, 1200))

    with caplog.at_level(logging.INFO, logger="taskrunner"):
        ex.run_task("ok")
        ex.run_task("bad")

    messages = [r.getMessage() for r in caplog.records]
    assert "Starting '[cyan]ok[/cyan]'..." == messages[0]
    assert "Finished" in messages[1] and "5 ms" in messages[1]
    assert "Starting" in messages[2]
    assert caplog.records[3].levelno == logging.ERROR
    assert messages[3] == "Task 'bad' failed after 1.20 s (2)"


# -------------------------
# run_sequence
# -------------------------


def test_sequence_runs_each_task_once_in_order() -> None:
    calls: list[str] = []
    ex = Executor(_registry({"a": 0, "b": 0, "c": 0}, calls))

    sr = ex.run_sequence(["c", "a", "b"])

    assert sr.ok
    assert sr.exit_code == 0
    assert sr.failed is None
    assert calls == ["c", "a", "b"]
    assert [r.task_id for r in sr.results] == ["c", "a", "b"]


def test_sequence_stops_at_first_failure() -> None:
    calls: list[str] = []
    ex = Executor(_registry({"a": 0, "b": 3, "c": 0}, calls))

    sr = ex.run_sequence(["a", "b", "c"])

    assert calls == ["a", "b"]
    assert not sr.ok
    assert sr.exit_code == 3
    assert sr.failed is not None and sr.failed.task_id == "b"
    assert [r.task_id for r in sr.results] == ["a", "b"]


@pytest.mark.parametrize("position", [0, 1, 2])
def test_sequence_with_undefined_task_runs_nothing(position: int) -> None:
    calls: list[str] = []
    ex = Executor(_registry({"a": 0, "b": 0}, calls))
    ids = ["a", "b"]
    ids.insert(position, "missing")

    with pytest.raises(UnknownTaskError) as exc_info:
        ex.run_sequence(ids)

    assert exc_info.value.task_id == "missing"
    assert calls == []


def test_empty_sequence_succeeds() -> None:
    sr = Executor(Registry()).run_sequence([])
    assert sr.ok
    assert sr.results == []


# -------------------------
# run_parallel
# -------------------------


def test_parallel_all_succeed() -> None:
    calls: list[str] = []
    ex = Executor(_registry({"a": 0, "b": 0, "c": 0}, calls))

    pr = ex.run_parallel(["a", "b", "c"])

    assert sorted(calls) == ["a", "b", "c"]
    assert pr.outcome is AggregateOutcome.ALL_SUCCEEDED
    assert pr.ok
    assert pr.exit_code == 0
    assert [r.task_id for r in pr.results] == ["a", "b", "c"]


def test_parallel_partial_failure() -> None:
    calls: list[str] = []
    ex = Executor(_registry({"a": 0, "b": 1}, calls))

    pr = ex.run_parallel(["a", "b"])

    assert sorted(calls) == ["a", "b"]
    assert pr.outcome is AggregateOutcome.PARTIAL_FAILURE
    assert pr.exit_code == PARTIAL_FAILURE_EXIT_CODE == 41
    assert [r.task_id for r in pr.failed] == ["b"]


def test_parallel_all_failed() -> None:
    calls: list[str] = []
    ex = Executor(_registry({"a": 1, "b": 1, "c": 5}, calls))

    pr = ex.run_parallel(["a", "b", "c"])

    assert sorted(calls) == ["a", "b", "c"]
    assert pr.outcome is AggregateOutcome.ALL_FAILED
    assert pr.exit_code == ALL_FAILED_EXIT_CODE == 42


def test_parallel_with_undefined_task_launches_nothing() -> None:
    calls: list[str] = []
    ex = Executor(_registry({"a": 0}, calls))

    with pytest.raises(UnknownTaskError):
        ex.run_parallel(["a", "missing"])

    assert calls == []


def test_parallel_tasks_run_concurrently() -> None:
    # Each task waits for the other two; a serial run would break the barrier.
    barrier = threading.Barrier(3, timeout=5)
    reg = Registry()
    for tid in ["a", "b", "c"]:
        reg.register(tid, lambda ctx: barrier.wait() and 0)

    pr = Executor(reg).run_parallel(["a", "b", "c"])

    assert pr.ok


def test_parallel_waits_for_siblings_after_failure() -> None:
    calls: list[str] = []
    reg = Registry()
    reg.register("fast_fail", lambda ctx: 1)

    def slow(ctx):
        time.sleep(0.2)
        calls.append("slow")
        return 0

    reg.register("slow", slow)

    pr = Executor(reg).run_parallel(["fast_fail", "slow"])

    assert calls == ["slow"]
    assert pr.outcome is AggregateOutcome.PARTIAL_FAILURE


def test_parallel_reraises_task_exception_after_join() -> None:
    calls: list[str] = []
    reg = Registry()

    def broken(ctx):
        raise RuntimeError("broken")

    def slow(ctx):
        time.sleep(0.2)
        calls.append("slow")

    reg.register("broken", broken)
    reg.register("slow", slow)

    with pytest.raises(RuntimeError, match="broken"):
        Executor(reg).run_parallel(["broken", "slow"])

    assert calls == ["slow"]


def test_empty_parallel_batch_succeeds() -> None:
    pr = Executor(Registry()).run_parallel([])
    assert pr.outcome is AggregateOutcome.ALL_SUCCEEDED
    assert pr.results == []


@pytest.mark.parametrize(
    "failures, total, outcome",
    [
        (0, 3, AggregateOutcome.ALL_SUCCEEDED),
        (1, 3, AggregateOutcome.PARTIAL_FAILURE),
        (2, 3, AggregateOutcome.PARTIAL_FAILURE),
        (3, 3, AggregateOutcome.ALL_FAILED),
        (1, 1, AggregateOutcome.ALL_FAILED),
    ],
)
def test_classify(failures: int, total: int, outcome: AggregateOutcome) -> None:
    assert AggregateOutcome.classify(failures, total) is outcome


# -------------------------
# Composition from task bodies
# -------------------------


def test_task_body_can_compose_sequence_and_parallel() -> None:
    calls: list[str] = []
    reg = _registry({"lint": 0, "test": 0, "build": 0}, calls)
    flags_seen = []

    @reg.task
    def checks(ctx):
        return ctx.parallel("lint", "test")

    @reg.task
    def ci(ctx):
        flags_seen.append(ctx.flags)
        return ctx.sequence("checks", "build")

    result = Executor(reg).run_task("ci", ["--fast"])

    assert result.exit_code == 0
    assert sorted(calls[:2]) == ["lint", "test"]
    assert calls[2] == "build"
    assert flags_seen == [("--fast",)]


def test_nested_parallel_failure_code_propagates() -> None:
    calls: list[str] = []
    reg = _registry({"a": 0, "b": 1, "after": 0}, calls)

    @reg.task
    def checks(ctx):
        return ctx.parallel("a", "b")

    sr = Executor(reg).run_sequence(["checks", "after"])

    assert sr.exit_code == PARTIAL_FAILURE_EXIT_CODE
    assert sr.failed.task_id == "checks"
    assert "after" not in calls
