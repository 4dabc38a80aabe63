"""Logging helpers for the puzzle engine.

Library modules only fetch loggers under the ``numberplace`` namespace; output
is enabled explicitly through :func:`configure_logging` (the CLI does this).
"""

from __future__ import annotations

import logging
from typing import IO, Optional


PACKAGE_LOGGER = "numberplace"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

_installed: Optional[logging.Handler] = None


def configure_logging(level: int = logging.INFO, stream: Optional[IO[str]] = None) -> logging.Handler:
    """Send package log records to ``stream`` (stderr by default) at ``level``.

    Search and digging run thousands of tentative steps, so those are only
    reported at DEBUG; INFO carries one line per generation milestone. Calling
    this again replaces the handler installed by the previous call.
    """

    global _installed

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _installed is not None:
        logger.removeHandler(_installed)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    _installed = handler
    logger.setLevel(level)
    logger.propagate = False
    return handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger in the package namespace without touching handlers."""

    return logging.getLogger(name or PACKAGE_LOGGER)
