"""Logging configuration for git-next-tag.

stdout carries only the computed version, so every log record goes to
stderr.
"""

import os
import sys

from loguru import logger

from git_next_tag.config import ConfigError

DEFAULT_LOG_LEVEL = "WARNING"

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> - <level>{message}</level>"


def resolve_log_level(log_level: str | None = None, verbose: bool = False) -> str:
    """Pick the log level from the command line or LOG_LEVEL.

    Args:
        log_level: Explicit level from the command line
        verbose: Show informational messages when no level is given

    Returns:
        Upper-case loguru level name
    """
    if log_level:
        return log_level.upper()
    if verbose:
        return "INFO"
    return os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def setup_logging(log_level: str = DEFAULT_LOG_LEVEL) -> None:
    """Replace the default loguru sink with a stderr sink.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Raises:
        ConfigError: If loguru has no level with that name
    """
    try:
        logger.level(log_level)
    except ValueError as e:
        raise ConfigError(f"Invalid log level '{log_level}': {e}") from e

    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format=LOG_FORMAT,
    )
