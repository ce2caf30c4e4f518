from dataclasses import dataclass
from enum import Enum

PARTIAL_FAILURE_EXIT_CODE = 41
ALL_FAILED_EXIT_CODE = 42


@dataclass(frozen=True)
class ExecutionResult:
    task_id: str
    exit_code: int
    elapsed_ms: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class SequenceResult:
    results: list[ExecutionResult]
    failed: ExecutionResult | None = None

    @property
    def ok(self) -> bool:
        return self.failed is None

    @property
    def exit_code(self) -> int:
        return 0 if self.failed is None else self.failed.exit_code


class AggregateOutcome(Enum):
    ALL_SUCCEEDED = 0
    PARTIAL_FAILURE = PARTIAL_FAILURE_EXIT_CODE
    ALL_FAILED = ALL_FAILED_EXIT_CODE

    @classmethod
    def classify(cls, failures: int, total: int) -> "AggregateOutcome":
        if failures == 0:
            return cls.ALL_SUCCEEDED
        if failures < total:
            return cls.PARTIAL_FAILURE
        return cls.ALL_FAILED


@dataclass(frozen=True)
class ParallelResult:
    results: list[ExecutionResult]
    outcome: AggregateOutcome

    @property
    def ok(self) -> bool:
        return self.outcome is AggregateOutcome.ALL_SUCCEEDED

    @property
    def failed(self) -> list[ExecutionResult]:
        return [r for r in self.results if not r.ok]

    @property
    def exit_code(self) -> int:
        return self.outcome.value
