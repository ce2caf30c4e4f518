from __future__ import annotations

import logging

import pytest

from taskrunner.output import ConsoleHandler


@pytest.fixture(autouse=True)
def _reset_taskrunner_logger():
    """run_cli() installs a console handler; keep tests independent."""
    logger = logging.getLogger("taskrunner")
    yield
    for handler in list(logger.handlers):
        if isinstance(handler, ConsoleHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
