"""Centralized logging configuration for the diagram engine."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_LEVEL_ENV = "DIAGRAM_ENGINE_LOG_LEVEL"


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for better readability in terminal."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with a colored level name.

        The record is copied so that other handlers (e.g. the file handler)
        still see the plain level name.
        """
        colored = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, self.RESET)
        colored.levelname = f"{log_color}{record.levelname:8s}{self.RESET}"
        return super().format(colored)


def resolve_level(level: Optional[int | str] = None) -> int:
    """Resolve a logging level from an explicit value or the environment.

    Args:
        level: Level as int or name ("DEBUG", "info", ...). When omitted the
            ``DIAGRAM_ENGINE_LOG_LEVEL`` environment variable is used,
            falling back to INFO.

    Returns:
        Numeric logging level
    """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str,
    level: Optional[int | str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__)
        level: Logging level; defaults to ``DIAGRAM_ENGINE_LOG_LEVEL`` or INFO
        log_file: Optional file path to write logs to

    Returns:
        Configured logger instance
    """
    numeric_level = resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_format = "%(levelname)s | %(name)s | %(message)s"
    console_handler.setFormatter(ColoredFormatter(console_format))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        file_handler.setFormatter(logging.Formatter(file_format))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get or create a logger with the standard configuration.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name)
    return logger
