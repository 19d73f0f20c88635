"""Logging setup for the conseq command line.

The library itself only creates module loggers; ``setup_logging`` is called
by the CLI. Adds a TRACE level below DEBUG, used for per-member codec output.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Final

from yachalk import chalk

TRACE_LEVEL: Final[int] = logging.DEBUG - 5

if logging.getLevelName(TRACE_LEVEL) != "TRACE":
    logging.addLevelName(TRACE_LEVEL, "TRACE")

LOG_FORMAT = "[%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT = "[%(levelname)s] [%(name)s:%(lineno)d] %(message)s"

ENV_LOG_LEVEL = "CONSEQ_LOG_LEVEL"

_LEVEL_NAMES: dict[str, int] = {
    "TRACE": TRACE_LEVEL,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class ChalkFormatter(logging.Formatter):
    """Formatter that colors each record by severity."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        level = record.levelno
        if level >= logging.ERROR:
            return chalk.red(message)
        elif level >= logging.WARNING:
            return chalk.yellow(message)
        elif level >= logging.INFO:
            return chalk.green(message)
        elif level >= logging.DEBUG:
            return chalk.gray(message)
        return chalk.blue(message)


def resolve_env_log_level() -> int | None:
    """Return the level named by CONSEQ_LOG_LEVEL ("DEBUG", "TRACE", "10", ...) or None."""
    val = os.environ.get(ENV_LOG_LEVEL, "").strip().upper()
    if not val:
        return None
    if val.isdigit():
        return int(val)
    return _LEVEL_NAMES.get(val)


def level_from_verbosity(verbosity: int) -> int:
    """Map a count of -v flags to a level: 0 WARNING, 1 INFO, 2 DEBUG, 3+ TRACE."""
    levels = [logging.WARNING, logging.INFO, logging.DEBUG]
    if verbosity < len(levels):
        return levels[verbosity]
    return TRACE_LEVEL


def setup_logging(level: int | None = None) -> None:
    """Configure the root logger with colored output on stderr.

    When ``level`` is None, CONSEQ_LOG_LEVEL is consulted; the default is WARNING.
    """
    if level is None:
        level = resolve_env_log_level() or logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplicate messages on repeated setup
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ChalkFormatter(LOG_FORMAT if level >= logging.INFO else DEBUG_LOG_FORMAT))
    root_logger.addHandler(handler)
