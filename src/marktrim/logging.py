"""Logging setup for marktrim.

Library modules log through ``logging.getLogger(__name__)`` and never add
handlers themselves. ``configure_logger`` attaches an optional file handler to
the ``marktrim`` logger and avoids duplicate handlers across repeated calls.
"""

from __future__ import annotations

import logging
from pathlib import Path

from marktrim.config import LogLevel
from marktrim.paths import get_marktrim_home

LOGGER_NAME = "marktrim"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def default_log_path(base_dir: Path | None = None) -> Path:
    directory = base_dir or get_marktrim_home()
    return directory / "log.txt"


def configure_logger(
    *,
    log_level: LogLevel | str = LogLevel.INFO,
    log_file: Path | str | None = None,
) -> logging.Logger:
    """Configure and return the package logger.

    With ``log_file`` records go to that file only (no propagation); calling
    again with the same file does not add a second handler.
    """

    logger = logging.getLogger(LOGGER_NAME)

    level_value = _to_logging_level(log_level)
    logger.setLevel(level_value)

    if log_file is None:
        logger.propagate = True
        return logger

    path = Path(log_file).expanduser()
    logger.propagate = False
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == path.absolute():
            handler.setLevel(level_value)
            return logger

    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level_value)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def _to_logging_level(value: LogLevel | str) -> int:
    mapping = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
    }
    if isinstance(value, LogLevel):
        return mapping[value]
    if isinstance(value, str):
        try:
            return mapping[LogLevel(value)]
        except ValueError:
            return logging.WARNING
    return logging.WARNING


__all__ = [
    "LOGGER_NAME",
    "configure_logger",
    "default_log_path",
    "_to_logging_level",
]
