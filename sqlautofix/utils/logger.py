"""
Logging utility with loguru.
Provides console logging and an optional rotating log file.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from sqlautofix.config.settings import settings


def setup_logger(level: Optional[str] = None, log_file: Optional[str] = None):
    """
    Configure loguru logger with console and (optionally) file outputs.

    Args:
        level: Console level (defaults to settings.log_level)
        log_file: Path of a rotating DEBUG log (defaults to settings.log_file;
            empty means console only)
    """
    # Remove default handler
    logger.remove()

    # Console handler with colors
    logger.add(
        sys.stdout,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=(level or settings.log_level).upper(),
    )

    # File handler with rotation
    log_file = settings.log_file if log_file is None else log_file
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
        )

    logger.debug("Logger initialized")
    return logger


# Initialize logger on import
setup_logger()
