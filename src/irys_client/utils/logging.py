"""
Logging helpers for the Irys client.

All modules obtain their logger through `get_logger(__name__)` so that the
whole package lives under the "irys_client" logger hierarchy. Library code
never configures handlers on import; applications call
`configure_logging()` (or configure the stdlib `logging` module themselves).

Example:
    >>> from irys_client.utils.logging import configure_logging, get_logger
    >>> configure_logging("DEBUG")
    >>> get_logger(__name__).debug("upload started", extra={"size": 1024})
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union

ROOT_LOGGER_NAME = "irys_client"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger inside the package hierarchy.

    Args:
        name: Logger name (typically __name__). Names outside the package
            are nested under the package root logger.

    Returns:
        Logger instance
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    fmt: str = DEFAULT_FORMAT,
    stream=None,
) -> logging.Logger:
    """
    Attach a stream handler to the package root logger.

    Calling this more than once replaces the previously installed handler.

    Args:
        level: Log level name or number
        fmt: Log record format
        stream: Output stream (defaults to stderr)

    Returns:
        The package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_irys_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DEFAULT_DATE_FORMAT))
    handler._irys_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)

    set_level(level)
    return logger


def set_level(level: Union[int, str]) -> None:
    """Set the level of the package root logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)


def enable_debug() -> None:
    """Shortcut for `set_level(logging.DEBUG)`."""
    set_level(logging.DEBUG)


def disable_logging() -> None:
    """Silence every logger in the package."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.CRITICAL + 1)
