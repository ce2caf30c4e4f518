from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from taskrunner.bootstrap import DEFAULT_TASK, Bootstrapper, parse_args
from taskrunner.config import ConfigError, find_taskfile, load_project, register_project
from taskrunner.executor import Executor
from taskrunner.output import configure_logging
from taskrunner.registry import Registry, RegistryError

from .args import build_parser


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args, rest = parser.parse_known_args(argv)
        configure_logging(
            logging.DEBUG if args.verbose else logging.INFO,
            color=False if args.no_color else None,
        )

        if args.list:
            return cmd_list(args)
        return cmd_run(args, rest)

    except (ConfigError, RegistryError) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def cmd_run(args: argparse.Namespace, rest: list[str]) -> int:
    registry, default_task = _load(args)
    config = parse_args(rest, default_task=default_task)
    return Bootstrapper(Executor(registry), config).bootstrap()


def cmd_list(args: argparse.Namespace) -> int:
    registry, _ = _load(args)
    for tid in registry.list_tasks():
        print(tid)
    return 0


def _load(args: argparse.Namespace) -> tuple[Registry, str]:
    path = Path(args.taskfile) if args.taskfile else find_taskfile()
    if path is None:
        raise ConfigError("No task file found (looked for taskrunner.yml/.yaml/.toml/.json)")

    project = load_project(path)
    registry = register_project(project)
    default_task = args.default_task or project.default_task or DEFAULT_TASK
    return registry, default_task
