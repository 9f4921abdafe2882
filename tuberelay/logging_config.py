"""
Logging setup for the relay process.

Console output is kept at INFO so operators see cycles and notifications;
the rotating file receives everything down to DEBUG.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("aiogram", "aiogram.event", "aiohttp", "httpx", "httpcore")


def _rotating_file_handler(path: Path, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: str = "logs",
    log_file: str = "tuberelay.log",
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> logging.Logger:
    """
    Configure the root logger with a console handler and a rotating file.

    Args:
        log_level: Root level name (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for the log file, created if missing
        log_file: Log file name inside log_dir
        max_bytes: Size at which the file is rotated
        backup_count: Rotated files to keep
        quiet: Logger names pinned to WARNING

    Returns:
        The configured root logger
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root_logger.addHandler(console)
    root_logger.addHandler(_rotating_file_handler(log_path / log_file, max_bytes, backup_count))

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"Logging initialized: level={log_level}, file={log_path / log_file}")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)
