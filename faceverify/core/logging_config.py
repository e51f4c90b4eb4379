"""Logging configuration for the face verification pipeline.

Log records go to stderr so the verification summary printed on stdout
stays machine-readable.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name when writing to a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors if stderr is a terminal."""
        if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
            # Work on a copy so other handlers see the plain record
            record = logging.makeLogRecord(record.__dict__)
            levelname = record.levelname
            if levelname in self.COLORS:
                record.levelname = (
                    f"{self.COLORS[levelname]}{self.BOLD}{levelname}{self.RESET}"
                )
                record.name = f"{self.BOLD}{record.name}{self.RESET}"

        return super().format(record)


def setup_logging(
    name: str = "faceverify",
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Setup and configure logger with consistent formatting.

    Args:
        name: Logger name (usually module name or 'faceverify' for root)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, reads LOG_LEVEL from the environment.
        log_file: Optional file path to also log to a file.

    Returns:
        Configured logger instance.

    Example:
        >>> logger = setup_logging(__name__)
        >>> logger.info("Verification started")
    """
    logger = logging.getLogger(name)

    # Already configured, avoid duplicate handlers
    if logger.handlers:
        return logger

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logger.level)

    # Format: 2025-11-04 15:30:45 | INFO | module.name | Message
    fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_fmt = "%Y-%m-%d %H:%M:%S"

    console_handler.setFormatter(ColoredFormatter(fmt, datefmt=date_fmt))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logger.level)
        file_handler.setFormatter(logging.Formatter(fmt, datefmt=date_fmt))
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def set_level(level: str) -> None:
    """Change the level of every logger configured by this module.

    Args:
        level: New log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Raises:
        ValueError: If level is not a valid level name.
    """
    level = level.upper()
    if level not in VALID_LEVELS:
        raise ValueError(f"Log level must be one of {VALID_LEVELS}, got {level}")

    numeric = getattr(logging, level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if not isinstance(logger, logging.Logger):
            continue
        if name == "faceverify" or name.startswith("faceverify.") or name == "__main__":
            logger.setLevel(numeric)
            for handler in logger.handlers:
                handler.setLevel(numeric)


def get_logger(name: str) -> logging.Logger:
    """Get logger for a specific module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance.

    Example:
        >>> from faceverify.core.logging_config import get_logger
        >>> logger = get_logger(__name__)
    """
    return setup_logging(name)
