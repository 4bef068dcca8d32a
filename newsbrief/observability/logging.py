"""Process-wide logging setup: one stream handler on the root logger."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def _level_from_env() -> int:
    name = os.getenv("NEWSBRIEF_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _configure_root(level: int) -> None:
    global _configured
    root = logging.getLogger()
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
        _configured = True
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a newsbrief module.

    NEWSBRIEF_LOG_LEVEL is re-read on every call, so a level change applies
    to loggers created afterwards.
    """
    level = _level_from_env()
    _configure_root(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
