"""Logging setup for the cider CLI: colored console output and an optional rotating log file."""

import logging
import os
from logging.handlers import RotatingFileHandler

import colorlog


def setup_logging() -> None:
    """Configure the centralised logging settings."""
    log_level = os.getenv('CIDER_LOG_LEVEL', 'INFO').upper()
    log_file = os.getenv('CIDER_LOG_FILE')
    max_bytes = int(os.getenv('LOG_FILE_MAX_BYTES', '10485760'))  # 10 MB
    backup_count = int(os.getenv('LOG_FILE_BACKUP_COUNT', '5'))

    logger = logging.getLogger()
    logger.setLevel(log_level)

    if logger.hasHandlers():
        return

    console_handler = logging.StreamHandler()
    console_formatter = colorlog.ColoredFormatter(
        "%(log_color)s%(levelname)s:%(name)s:%(message)s",
        log_colors={
            'DEBUG': 'bold_blue',
            'INFO': 'bold_green',
            'WARNING': 'bold_yellow',
            'ERROR': 'bold_red',
            'CRITICAL': 'bold_purple'
        }
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s - (%(filename)s:%(lineno)d)'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)
