"""Logging setup for the lyric engine."""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    max_size: int = 10485760,
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure the "islandlyrics" logger hierarchy.

    Args:
        log_level: Level name, e.g. "DEBUG"
        log_file: Optional path of a rotating log file
        max_size: Maximum size of one log file in bytes
        backup_count: Number of rotated files to keep

    Returns:
        The configured root logger of the package
    """
    logger = logging.getLogger("islandlyrics")
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    logger.setLevel(level)

    # 重复调用时替换旧的处理器
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
