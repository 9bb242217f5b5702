"""Logging configuration for the bot."""
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from polbot.config import settings


def setup_logging(first_message: str = "", level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Configure logging for the entire application.

    Args:
        first_message: Banner written right after the handlers are installed.
        level: Optional logging level. If None, the configured LOG_LEVEL is used.
    """
    if level is None:
        level = settings.logging.level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter(settings.logging.format)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    root_logger.info("================================================")
    if first_message:
        root_logger.info(first_message)
    root_logger.info("Logging configured with level: %s", logging.getLevelName(level))

    log_dir = settings.logging.dir
    if log_dir is not None:
        try:
            path = Path(log_dir)
            path.mkdir(parents=True, exist_ok=True)

            log_file = path / "polbot.log"
            file_handler = TimedRotatingFileHandler(
                log_file,
                when=settings.logging.rotation,
                interval=settings.logging.interval,
                backupCount=settings.logging.backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            root_logger.info(
                "Log file: %s (rotation: %s, interval: %d, backup_count: %d)",
                log_file,
                settings.logging.rotation,
                settings.logging.interval,
                settings.logging.backup_count,
            )
        except OSError as e:
            root_logger.warning("Could not set up file logging: %s", e)

    # Set logging levels for third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("telegram").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    return root_logger
