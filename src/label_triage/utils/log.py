"""
Logging for label_triage.

Library modules only ask for a logger:

    from label_triage.utils.log import get_logger
    logger = get_logger(__name__)
    logger.info("Checking label %s", label_name)

Nothing is emitted until an entry point (the CLI, or an embedding
application) calls setup_logging or set_level.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "label_triage"

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Handlers attached by setup_logging, so a second call replaces them.
_handlers: list[logging.Handler] = []


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    stream: bool = True,
) -> None:
    """
    Attach stderr and/or file handlers to the package logger.

    Safe to call more than once: handlers from an earlier call are
    closed and replaced, never stacked.
    """
    reset_logging()
    set_level(level)

    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)
    if stream:
        _handlers.append(logging.StreamHandler(sys.stderr))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _handlers.append(logging.FileHandler(str(log_file), encoding="utf-8"))

    root = logging.getLogger(PACKAGE_LOGGER)
    for handler in _handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)


def reset_logging() -> None:
    """Detach and close every handler added by setup_logging."""
    root = logging.getLogger(PACKAGE_LOGGER)
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()


def set_level(level: str) -> None:
    """Set the package log level without attaching handlers."""
    logging.getLogger(PACKAGE_LOGGER).setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> logging.Logger:
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
