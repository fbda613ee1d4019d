"""Logging utilities for tabby commands."""

from __future__ import annotations

import logging
import sys

_LOGGER_NAME = "tabby"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the tabby hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, debug: bool = False) -> logging.Logger:
    """Configure the tabby logger with a single console handler on stdout."""
    level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI runs more than once.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(levelname)s\t%(message)s"))
    logger.addHandler(handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
