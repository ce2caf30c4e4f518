"""taskrunner - run named tasks in sequence or in parallel from a script or a task file."""

__version__ = "0.2.0"

from .bootstrap import (  # noqa: E402
    DEFAULT_TASK,
    MISSING_TASK_EXIT_CODE,
    Bootstrapper,
    BootstrapState,
    RunnerConfig,
    main,
    parse_args,
)
from .executor import (  # noqa: E402
    ALL_FAILED_EXIT_CODE,
    PARTIAL_FAILURE_EXIT_CODE,
    AggregateOutcome,
    ExecutionResult,
    Executor,
    ParallelResult,
    SequenceResult,
)
from .registry import Registry, RegistryError, TaskContext, UnknownTaskError  # noqa: E402

__all__ = [
    "__version__",
    "main",
    "parse_args",
    "Bootstrapper",
    "BootstrapState",
    "RunnerConfig",
    "DEFAULT_TASK",
    "MISSING_TASK_EXIT_CODE",
    "Executor",
    "ExecutionResult",
    "SequenceResult",
    "ParallelResult",
    "AggregateOutcome",
    "PARTIAL_FAILURE_EXIT_CODE",
    "ALL_FAILED_EXIT_CODE",
    "Registry",
    "RegistryError",
    "TaskContext",
    "UnknownTaskError",
]
