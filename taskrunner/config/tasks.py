from __future__ import annotations

import logging
import os
import shlex
import subprocess

from rich.markup import escape

from taskrunner.registry import Registry, TaskContext

from .types import ProjectConfig, TaskConfig, TaskKind

logger = logging.getLogger(__name__)


class CommandTask:
    """Run a shell command with the forwarded flags appended."""

    def __init__(self, config: TaskConfig):
        self.config = config

    def build_command(self, flags: tuple[str, ...]) -> str:
        if not flags:
            return self.config.command
        return " ".join([self.config.command, *(shlex.quote(f) for f in flags)])

    def __call__(self, ctx: TaskContext) -> int:
        command = self.build_command(ctx.flags)
        logger.debug("%s: %s", escape(ctx.task_id), escape(command))
        result = subprocess.run(
            command,
            shell=True,
            cwd=self.config.working_dir or None,
            env={**os.environ, **self.config.env},
        )
        return result.returncode


class CompositeTask:
    """Run other tasks from the same file, one after another or all at once."""

    def __init__(self, config: TaskConfig):
        self.config = config

    def __call__(self, ctx: TaskContext) -> int:
        if self.config.kind is TaskKind.PARALLEL:
            return ctx.parallel(*self.config.tasks)
        return ctx.sequence(*self.config.tasks)


def build_task(config: TaskConfig) -> CommandTask | CompositeTask:
    if config.kind is TaskKind.COMMAND:
        return CommandTask(config)
    return CompositeTask(config)


def register_project(project: ProjectConfig, registry: Registry | None = None) -> Registry:
    registry = registry if registry is not None else Registry()
    for task in project:
        if task.kind is TaskKind.COMMAND:
            description = task.command
        else:
            description = f"{task.kind.value}: {' '.join(task.tasks)}"
        registry.register(task.id, build_task(task), description=description)
    return registry
