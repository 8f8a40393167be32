# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
Logging setup for the ansible-db client.

The library logs through loguru but stays silent until an application
enables it, as loguru recommends for libraries.
"""

import sys
from typing import Optional, TextIO

from loguru import logger

LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def level_for_verbosity(verbose: int, default: str = "WARNING") -> str:
    """Map -v counts onto loguru levels."""
    if verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return default


def setup_logger(level: str = "WARNING", sink: Optional[TextIO] = None) -> int:
    """
    Route ansible_db log records to stderr at ``level``.

    Args:
        level: loguru level name
        sink: Stream to write to (defaults to stderr)

    Returns:
        The loguru handler id
    """
    level = level.upper()
    if level not in LEVELS:
        raise ValueError(f"invalid log level {level!r}, expected one of {', '.join(LEVELS)}")
    logger.remove()
    logger.enable("ansible_db")
    return logger.add(
        sink if sink is not None else sys.stderr,
        level=level,
        format=CONSOLE_FORMAT,
        colorize=False if sink is not None else None,
    )
