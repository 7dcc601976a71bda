"""
Centralized logging configuration for the tilemap generator.

All loggers live below the "tilemap_generator" namespace. Engine modules get their logger via
get_logger(__name__) and stay silent until setup_logging() is called once at startup.

Usage:
    from logging_config import setup_logging
    setup_logging("./logs")  # DEBUG to logs/generator.log, WARNING+ to the console
"""

from __future__ import annotations

from datetime import datetime
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

import constants

_logging_initialized = False


def setup_logging(
    log_dir: Path | str | None = None,
    log_level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
) -> Path | None:
    """
    Configure the logging system for the tilemap generator.

    Calling it again replaces the previously installed handlers.

    Args:
        log_dir: Directory for the rotating log file. No file is written if None.
        log_level: Level for file logging (default: DEBUG)
        console_level: Level for console output (default: WARNING)

    Returns:
        Path to the log file, or None if no file logging was configured
    """
    global _logging_initialized

    root_logger = logging.getLogger(constants.LOGGER_NAMESPACE)
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers (for re-initialization)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    log_path = None
    if log_dir is not None:
        log_dir_path = Path(log_dir)
        log_dir_path.mkdir(parents=True, exist_ok=True)
        log_path = log_dir_path / constants.LOG_FILE_NAME

        file_formatter = logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-40s | %(funcName)-22s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=constants.MAX_LOG_SIZE,
            backupCount=constants.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(fmt="%(levelname)-8s | %(name)-30s | %(message)s"))
    root_logger.addHandler(console_handler)

    if not _logging_initialized:
        root_logger.info(f"Tilemap generator logging initialized at {datetime.now().isoformat()}")
        if log_path is not None:
            root_logger.info(f"Log file: {log_path.absolute()}")
        _logging_initialized = True

    return log_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger configured as child of the tilemap_generator logger
    """
    if name.startswith(f"{constants.LOGGER_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{constants.LOGGER_NAMESPACE}.{name}")


def log_generation(
    logger: logging.Logger,
    stage: str,
    details: str | None = None,
    level: int = logging.DEBUG,
) -> None:
    """Log a stage of a generation run (learn, start, finish, contradiction)."""
    details_str = f" | {details}" if details else ""
    logger.log(level, f"WFC | {stage}{details_str}")
