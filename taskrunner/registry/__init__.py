from .registry import Registry, normalize_task_id
from .types import RegistryError, Runnable, TaskContext, TaskEntry, UnknownTaskError

__all__ = [
    "Registry",
    "normalize_task_id",
    "Runnable",
    "TaskContext",
    "TaskEntry",
    "RegistryError",
    "UnknownTaskError",
]
