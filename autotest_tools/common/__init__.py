"""
================================================================================
Autotest Tools Common Utilities
================================================================================

Shared logging setup for the test runner and the test suites.

Exports:
    - init_logger: Function to initialize loguru logger with standard settings
    - ensure_directory: Create a directory if needed

Usage:
    from autotest_tools.common import init_logger

    init_logger()                      # LOG_LEVEL / LOG_FILE from environment
    init_logger(level="DEBUG", log_file="logs/mobile.log")

================================================================================
"""

import os
import sys
from typing import Optional

from loguru import logger


DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

_logger_initialized = False


def init_logger(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    log_file: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL or INFO.
        format_string: Log format string. Uses default if not provided.
        log_file: Optional file path to write logs to. Defaults to LOG_FILE.
        force: Reconfigure even if already initialized.
    """
    global _logger_initialized

    if _logger_initialized and not force:
        return

    # Remove default handler
    logger.remove()

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    format_string = format_string or DEFAULT_FORMAT

    # Add console handler
    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
    )

    # Add file handler if specified
    log_file = log_file or os.getenv("LOG_FILE")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            ensure_directory(log_dir)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=os.getenv("LOG_ROTATION", "10 MB"),
            retention=os.getenv("LOG_RETENTION", "7 days"),
        )

    _logger_initialized = True
    logger.debug("Logger initialized successfully")


def ensure_directory(path: str) -> str:
    """
    Ensures a directory exists, creating it if necessary.

    Returns:
        The path (for chaining)
    """
    os.makedirs(path, exist_ok=True)
    return path


__all__ = [
    "init_logger",
    "ensure_directory",
]
