"""Logger construction from a textual log level."""

from __future__ import annotations

import logging
import re
import sys
from datetime import datetime, timedelta

__all__ = [
    "LOG_LEVEL_DEBUG",
    "LOG_LEVEL_INFO",
    "LOG_LEVEL_WARN",
    "LOG_LEVEL_ERROR",
    "resolve_level",
    "new_logger",
]

LOG_LEVEL_DEBUG = "debug"
LOG_LEVEL_INFO = "info"
LOG_LEVEL_WARN = "warn"
LOG_LEVEL_ERROR = "error"

_NAMED_LEVELS = {
    LOG_LEVEL_DEBUG: logging.DEBUG,
    LOG_LEVEL_INFO: logging.INFO,
    LOG_LEVEL_WARN: logging.WARNING,
    LOG_LEVEL_ERROR: logging.ERROR,
}

_INTEGER = re.compile(r"[+-]?[0-9]+")


def resolve_level(log_level: str) -> int:
    """Translate a level name or signed number into a ``logging`` level.

    Numbers follow the convention where -1 is debug, 0 info, 1 warn and
    2 error; -2, -3 and so on are ever more verbose debug levels.
    """
    if log_level in _NAMED_LEVELS:
        return _NAMED_LEVELS[log_level]

    if not _INTEGER.fullmatch(log_level):
        raise ValueError(f"Failed to parse --log-level={log_level}: invalid syntax")
    number = int(log_level)
    if not -128 <= number <= 127:
        raise ValueError(f"Failed to parse --log-level={log_level}: value out of range")

    if number >= 0:
        return logging.INFO + 10 * number
    return max(1, logging.DEBUG + 1 + number)


class _RFC3339Formatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):  # noqa: N802 - logging API
        moment = datetime.fromtimestamp(record.created).astimezone()
        text = moment.replace(microsecond=0).isoformat()
        if moment.utcoffset() == timedelta(0):
            text = text[: -len("+00:00")] + "Z"
        return text


class _ManagedHandler(logging.StreamHandler):
    """Handler installed by new_logger, replaced on reconfiguration."""


def new_logger(log_level: str, name: str = "runnerfleet") -> logging.Logger:
    """Return the named logger configured for ``log_level``.

    Raises ValueError when the level cannot be parsed.  The debug level also
    adds the source location of every record.
    """
    level = resolve_level(log_level)

    if log_level == LOG_LEVEL_DEBUG:
        fmt = "%(asctime)s\t%(levelname)s\t%(name)s\t%(filename)s:%(lineno)d\t%(message)s"
    else:
        fmt = "%(asctime)s\t%(levelname)s\t%(name)s\t%(message)s"

    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        if isinstance(handler, _ManagedHandler):
            logger.removeHandler(handler)

    handler = _ManagedHandler(sys.stderr)
    handler.setFormatter(_RFC3339Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger