"""Loguru sink configuration for the command line entry point."""

from __future__ import annotations

import sys

from loguru import logger

STDERR_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"


def configure_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """
    Replace loguru's default sink with flashdeck's.

    Library modules only emit through ``logger``; sinks are installed here
    once, by whoever owns the process.

    Args:
        level: Minimum level for the stderr sink
        log_file: Optional path for a rotating file sink (always DEBUG)
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=STDERR_FORMAT)

    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format=FILE_FORMAT,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
