from .executor import Executor, monotonic_ms
from .types import (
    ALL_FAILED_EXIT_CODE,
    PARTIAL_FAILURE_EXIT_CODE,
    AggregateOutcome,
    ExecutionResult,
    ParallelResult,
    SequenceResult,
)

__all__ = [
    "Executor",
    "monotonic_ms",
    "ExecutionResult",
    "SequenceResult",
    "ParallelResult",
    "AggregateOutcome",
    "PARTIAL_FAILURE_EXIT_CODE",
    "ALL_FAILED_EXIT_CODE",
]
