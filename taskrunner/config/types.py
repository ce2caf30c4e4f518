from dataclasses import dataclass, field
from enum import Enum


class TaskKind(Enum):
    COMMAND = "command"
    SEQUENCE = "sequence"
    PARALLEL = "parallel"


@dataclass
class TaskConfig:
    id: str
    kind: TaskKind
    command: str | None = None
    tasks: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    working_dir: str | None = None


@dataclass
class ProjectConfig:
    tasks: dict[str, TaskConfig]
    default_task: str | None = None

    def __iter__(self):
        for tasks_id in sorted(self.tasks):
            yield self.tasks[tasks_id]


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
