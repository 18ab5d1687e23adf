"""Logging for ledgertree.

All application code logs through the ``ledgertree`` logger. The CLI
attaches a console handler and a per-day log file once at startup.
"""

import logging
from datetime import date
from pathlib import Path

from config import Config

LOGGER_NAME = "ledgertree"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def log_file_for(log_dir: Path, day: date) -> Path:
    """Path of the log file that records a given day."""
    return log_dir / f"{LOGGER_NAME}-{day.isoformat()}.log"


def setup_logging(config: Config) -> logging.Logger:
    """Route the application logger to today's log file and the console.

    Safe to call more than once: handlers from a previous call are closed
    and replaced.

    Args:
        config: Application configuration with the log level and directory.

    Returns:
        The configured application logger.
    """
    logger = get_logger()
    logger.setLevel(config.log_level)
    _remove_handlers(logger)

    config.log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file_for(config.log_dir, date.today()))
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    for handler in (file_handler, console_handler):
        handler.setLevel(config.log_level)
        logger.addHandler(handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger(LOGGER_NAME)


def _remove_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
