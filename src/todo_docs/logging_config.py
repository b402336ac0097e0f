"""Logging configuration for todo-docs."""

import os
import sys

from loguru import logger

from todo_docs.config import LOG_LEVEL_ENV

_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def resolve_log_level(*, verbose: bool = False) -> str:
    """DEBUG when verbose, else the level named in the environment, else INFO."""
    if verbose:
        return "DEBUG"
    level = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    return level if level in _LEVELS else "INFO"


def configure_logging(*, verbose: bool = False) -> None:
    """Configure loguru to write to stderr at the resolved level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=resolve_log_level(verbose=verbose),
        format="{level.icon} {message}",
    )
