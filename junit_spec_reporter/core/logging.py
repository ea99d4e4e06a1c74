"""
Logging configuration for the JUnit spec reporter.

Diagnostics always go to stderr: standard output may be carrying the XML
report itself.
"""

import logging
import sys
from typing import Optional
from pathlib import Path

LOGGER_NAME = "junit_spec_reporter"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Level-coloured formatter for the stderr handler."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[94m',      # Blue
        'WARNING': '\033[93m',   # Yellow
        'ERROR': '\033[91m',     # Red
        'CRITICAL': '\033[95m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers of the same record must see the plain name
            record.levelname = levelname


def level_for_verbosity(verbosity: int) -> int:
    """0=warnings, 1=progress, 2=details, 3=debug."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity <= 2:
        return logging.INFO
    return logging.DEBUG


def setup_logger(
    name: str = LOGGER_NAME,
    level: Optional[int] = None,
    log_file: Optional[Path] = None,
    verbosity: int = 0
) -> logging.Logger:
    """
    Set up the reporter's logger.

    Args:
        name: Logger name
        level: Logging level (overrides verbosity if provided)
        log_file: Also write a full DEBUG trace of the run to this file
        verbosity: Verbosity level (0=warnings, 1=progress, 2=details, 3=debug)

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_level = level if level is not None else level_for_verbosity(verbosity)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ColoredFormatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(console_level)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get logger instance."""
    return logging.getLogger(name)
