"""Console output: duration formatting and the log handler.

Nothing in here affects which tasks run or what exit code the process ends
with; it only decides how lines look on the terminal.
"""

from __future__ import annotations

import logging
import os
import time

from rich.console import Console
from rich.markup import escape

LEVEL_STYLES = {
    logging.DEBUG: "bright_black",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60 * _MS_PER_SECOND
_MS_PER_HOUR = 60 * _MS_PER_MINUTE
_MS_PER_DAY = 24 * _MS_PER_HOUR


def format_duration(ms: int | None) -> str:
    """Human readable duration.

    >>> format_duration(0)
    '0 ms'
    >>> format_duration(1050)
    '1.05 s'
    >>> format_duration(3_602_000)
    '1 h 2 s'
    """
    if not ms or ms < 1:
        return "0 ms"

    if ms < _MS_PER_SECOND:
        return f"{ms} ms"

    if ms < _MS_PER_MINUTE:
        # Truncated, not rounded: 12345 ms -> "12.3 s"
        return f"{ms / _MS_PER_SECOND:.3f}"[:4] + " s"

    parts = []
    for unit_ms, suffix, modulo in (
        (_MS_PER_DAY, "d", None),
        (_MS_PER_HOUR, "h", 24),
        (_MS_PER_MINUTE, "m", 60),
        (_MS_PER_SECOND, "s", 60),
    ):
        value = ms // unit_ms
        if modulo is not None:
            value %= modulo
        if value > 0:
            parts.append(f"{value} {suffix}")

    return " ".join(parts)


class ConsoleHandler(logging.Handler):
    """Render log records as ``[HH:MM:SS] message`` on a rich console.

    Messages may contain rich markup; the level picks the style of the whole
    line for warnings and errors.
    """

    def __init__(self, console: Console | None = None, level: int = logging.NOTSET):
        super().__init__(level)
        self.console = console or Console(stderr=True, highlight=False)

    def format_line(self, record: logging.LogRecord) -> str:
        stamp = time.strftime("%H:%M:%S", time.localtime(record.created))
        message = record.getMessage()
        style = LEVEL_STYLES.get(record.levelno)
        if style:
            message = f"[{style}]{message}[/{style}]"
        line = f"\\[[bright_black]{stamp}[/bright_black]] {message}"
        if record.exc_info:
            line += "\n" + escape(logging.Formatter().formatException(record.exc_info))
        return line

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.console.print(
                self.format_line(record), highlight=False, emoji=False, soft_wrap=True
            )
        except Exception:
            self.handleError(record)


def configure_logging(
    level: int = logging.INFO,
    *,
    color: bool | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Attach a single ConsoleHandler to the ``taskrunner`` logger."""
    if color is None:
        color = "NO_COLOR" not in os.environ

    if console is None:
        console = Console(
            stderr=True,
            highlight=False,
            no_color=not color,
            color_system="auto" if color else None,
        )

    root = logging.getLogger("taskrunner")
    for handler in list(root.handlers):
        if isinstance(handler, ConsoleHandler):
            root.removeHandler(handler)

    root.addHandler(ConsoleHandler(console))
    root.setLevel(level)
    return root
