from __future__ import annotations

import argparse

from taskrunner import __version__


def build_parser() -> argparse.ArgumentParser:
    # Only the runner's own long options are declared; everything else
    # (task ids and flags for the tasks) is left in the extras.
    parser = argparse.ArgumentParser(
        prog="taskrunner",
        usage="taskrunner [options] [TASK ...] [-FLAG ...]",
        description="Run tasks from a task file. Dash-prefixed arguments are passed to every task.",
        allow_abbrev=False,
        add_help=False,
    )

    parser.add_argument("--help", action="help", help="Show this message and exit")

    parser.add_argument(
        "--taskfile",
        default=None,
        help="Path to task file (default: taskrunner.yml/.yaml/.toml/.json in the current directory)",
    )
    parser.add_argument(
        "--default",
        dest="default_task",
        default=None,
        help="Task to run when none is given (overrides the task file's 'default')",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List tasks and exit",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser
