"""Logging configuration for the crunner CLI."""

from __future__ import annotations

import logging
import sys

DEFAULT_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# third-party loggers that are too chatty at DEBUG
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = DEFAULT_LEVEL) -> None:
    """Send log records to stderr at ``level``; unknown names fall back to WARNING."""
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        resolved = logging.getLevelName(DEFAULT_LEVEL)

    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
