"""Logging setup for the dependents CLI."""

from __future__ import annotations

import logging

_LOGGER_NAME = "dependents"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the dependents hierarchy."""
    if not name:
        return logging.getLogger(_LOGGER_NAME)
    if name.startswith("dependents_engine."):
        name = name[len("dependents_engine."):]
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send dependents log records to stderr, DEBUG when verbose."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated main() calls (tests) must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[dependents] %(levelname)s %(message)s"))
    logger.addHandler(handler)
    return logger
