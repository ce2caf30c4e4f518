from .loader import DEFAULT_TASKFILES, find_taskfile, load_project
from .tasks import CommandTask, CompositeTask, register_project
from .types import ConfigError, ProjectConfig, TaskConfig, TaskKind, UnsupportedConfigFormatError

__all__ = [
    "load_project",
    "find_taskfile",
    "register_project",
    "DEFAULT_TASKFILES",
    "CommandTask",
    "CompositeTask",
    "ProjectConfig",
    "TaskConfig",
    "TaskKind",
    "ConfigError",
    "UnsupportedConfigFormatError",
]
