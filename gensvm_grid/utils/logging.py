"""
Logging Utilities

This module provides the logging setup used by the grid search tools:
- Colored console logging through colorlog
- Optional file logging with rotation
- Quiet mode that silences every diagnostic of the package
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
import sys
from typing import Optional, Union

import colorlog

PACKAGE_LOGGER = "gensvm_grid"

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper())
    return level


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    use_colors: bool = True,
    quiet: bool = False,
    logger_name: Optional[str] = PACKAGE_LOGGER,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, rotated at ``max_file_size``
        max_file_size: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        use_colors: Whether to color console output (only when stderr is a tty)
        quiet: Disable the logger entirely, errors included
        logger_name: Name of logger to configure (None for root logger)

    Returns:
        Configured logger instance
    """
    level = _resolve_level(level)

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.handlers.clear()

    if quiet:
        logger.addHandler(logging.NullHandler())
        logger.disabled = True
        if logger_name:
            logger.propagate = False
        return logger

    logger.disabled = False

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    if use_colors and sys.stderr.isatty():
        console_formatter: logging.Formatter = colorlog.ColoredFormatter(
            "%(log_color)s[%(asctime)s] %(levelname)-8s%(reset)s %(name)s: %(message)s",
            datefmt=DEFAULT_DATE_FORMAT,
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    else:
        console_formatter = logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=max_file_size, backupCount=backup_count
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
        )
        logger.addHandler(file_handler)

    # Prevent propagation to avoid double logging
    if logger_name:
        logger.propagate = False

    return logger

