"""Logging setup for the `chrono_accuracy` package.

Modules log through children of a single package logger. One stderr handler is
attached to that package logger the first time any module asks for a logger,
so sweep output keeps one format however many modules are imported.
"""

from __future__ import annotations

import logging
import os
from typing import Final

PACKAGE_LOGGER: Final[str] = "chrono_accuracy"

_LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LEVELS: Final[dict[str, int]] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_handler: logging.Handler | None = None


def _parse_level(level_str: str | None, default: int) -> int:
    if not level_str:
        return default
    return _LEVELS.get(level_str.strip().upper(), default)


def configure_logging(level: int | None = None) -> logging.Logger:
    """Attach the package stderr handler (once) and set the package level.

    `level` takes precedence; otherwise the `LOG_LEVEL` environment variable is
    consulted, falling back to INFO. Calling again only changes the level.
    """
    global _handler
    chosen_level = level if level is not None else _parse_level(os.environ.get("LOG_LEVEL"), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None or _handler not in logger.handlers:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(_handler)
    logger.setLevel(chosen_level)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a package module, configuring the package on first use.

    Names outside the package namespace are nested under it, so every sweep
    message goes through the one package handler.
    """
    if _handler is None:
        configure_logging()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
