"""
Logging setup for PocketSQL.
"""

from __future__ import annotations

import logging
import sys

ROOT_LOGGER = "pocketsql"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Return a logger under the package namespace.

    The package logger gets a single stderr handler the first time it is
    requested; module loggers ("pocketsql.catalog", ...) propagate to it.
    stdout is left to the shell's result output.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        root.setLevel(logging.WARNING)
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(level: str | int) -> logging.Logger:
    """Set the package log level (name like "INFO" or a logging constant)."""
    root = get_logger()
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    root.setLevel(level)
    return root
