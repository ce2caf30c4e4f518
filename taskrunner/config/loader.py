import json
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from .cycles import find_cycle
from .types import (
    ConfigError,
    ProjectConfig,
    TaskConfig,
    TaskKind,
    UnsupportedConfigFormatError,
)

DEFAULT_TASKFILES = ("taskrunner.yml", "taskrunner.yaml", "taskrunner.toml", "taskrunner.json")


def find_taskfile(directory: str | Path = ".") -> Path | None:
    base = Path(directory)
    for name in DEFAULT_TASKFILES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_project(path: str | Path) -> ProjectConfig:
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Task file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Task file path is not a file: {pure_path}")

    fmt = _detect_format(pure_path)
    raw_file = _parse_file(pure_path, fmt)
    project = _build_project_config(raw_file)
    return project


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    match fmt:
        case "yaml":
            return _parse_yaml(path)
        case "toml":
            return _parse_toml(path)
        case "json":
            return _parse_json(path)
        case _:
            raise AssertionError("Unreachable")


def _parse_yaml(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML") from exc

    return _ensure_mapping(path, "YAML", raw_file)


def _parse_toml(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: invalid TOML") from exc

    return _ensure_mapping(path, "TOML", raw_file)


def _parse_json(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON") from exc

    return _ensure_mapping(path, "JSON", raw_file)


def _ensure_mapping(path: Path, fmt: str, raw_file: Any) -> Mapping[str, Any]:
    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: {fmt} parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _build_project_config(raw: Mapping[str, Any]) -> ProjectConfig:
    tasks = {}

    unknown = set(raw.keys()) - {"tasks", "default"}
    if unknown:
        raise ConfigError(f"Can't process top-level field(s): {', '.join(sorted(map(str, unknown)))}")

    if "tasks" not in raw:
        raise ConfigError("Missing 'tasks' field")

    if not isinstance(raw["tasks"], Mapping):
        raise ConfigError(f"'tasks' must be a mapping, got {type(raw['tasks'])}")

    if len(raw["tasks"]) < 1:
        raise ConfigError("There must be at least one task in the task file")

    for task_id, fields in raw["tasks"].items():
        if not isinstance(fields, Mapping):
            raise ConfigError(f"{task_id} must be a mapping")

        task_id_norm = _normalize_id(task_id, "Task id")

        if task_id_norm in tasks:
            raise ConfigError(f"Duplicate task id after normalization: {task_id_norm}")

        task_config = _build_task_config(task_id_norm, fields)
        tasks[task_id_norm] = task_config

    for task in tasks.values():
        for ref in task.tasks:
            if ref not in tasks:
                raise ConfigError(f"Task '{task.id}' refers to unknown task '{ref}'")

    cycle = find_cycle({tid: t.tasks for tid, t in tasks.items() if t.tasks})
    if cycle:
        raise ConfigError("Cycle detected: " + " -> ".join(cycle))

    default_task = None
    if "default" in raw:
        default_task = _normalize_id(raw["default"], "'default'")

    return ProjectConfig(tasks=tasks, default_task=default_task)


def _normalize_id(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{what} must be a string, got {type(value)}")

    norm = value.strip()

    if len(norm) < 1:
        raise ConfigError(f"{what} can't be empty")

    if norm.startswith("-"):
        raise ConfigError(f"{what} can't start with '-': {norm}")

    return norm


def _build_task_config(task_id: str, fields: Mapping[str, Any]) -> TaskConfig:
    keys = {"command", "sequence", "parallel", "env", "working_dir"}

    for field in fields.keys():
        if field not in keys:
            raise ConfigError(f"{task_id}: Can't process: {field}")

    kinds = [kind for kind in TaskKind if kind.value in fields]

    if len(kinds) != 1:
        raise ConfigError(
            f"{task_id}: exactly one of 'command', 'sequence' or 'parallel' is required"
        )

    kind = kinds[0]

    if kind is not TaskKind.COMMAND:
        for field in ("env", "working_dir"):
            if field in fields:
                raise ConfigError(f"{task_id}: '{field}' is only allowed with 'command'")

        refs = _build_task_list(task_id, kind.value, fields[kind.value])
        return TaskConfig(task_id, kind, tasks=refs)

    if not isinstance(fields["command"], str):
        raise ConfigError(f"{task_id}: The command should be a string")

    if len(fields["command"].strip()) < 1:
        raise ConfigError(f"{task_id}: Command missing")

    command = fields["command"].strip()
    env = {}
    working_dir = None

    if "env" in fields:
        if not isinstance(fields["env"], Mapping):
            raise ConfigError(f"{task_id}: Env should be a mapping")

        for key, item in fields["env"].items():
            if not isinstance(key, str):
                raise ConfigError(f"{task_id}: {key} should be a string")

            if len(key.strip()) < 1:
                raise ConfigError(f"{task_id}: A key can't be empty")

            if not isinstance(item, str):
                raise ConfigError(f"{task_id}: {item} should be a string")

            env[key.strip()] = item

    if "working_dir" in fields:
        if not isinstance(fields["working_dir"], str):
            raise ConfigError(f"{task_id}: The working_dir should be a string")

        if len(fields["working_dir"].strip()) < 1:
            raise ConfigError(
                f"{task_id}: Please provide a string or remove this field"
            )

        working_dir = fields["working_dir"].strip()

    return TaskConfig(task_id, kind, command=command, env=env, working_dir=working_dir)


def _build_task_list(task_id: str, field: str, value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ConfigError(f"{task_id}: '{field}' should be a list of task ids")

    if len(value) < 1:
        raise ConfigError(f"{task_id}: '{field}' can't be empty")

    refs = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{task_id}: {item} should be a string in '{field}'")

        ref = item.strip()

        if len(ref) < 1:
            raise ConfigError(f"{task_id}: A task id in '{field}' is empty")

        if ref == task_id:
            raise ConfigError(f"{task_id}: A task cannot run itself")

        # Duplicates are kept: running a task twice in a sequence is allowed
        refs.append(ref)

    return refs
