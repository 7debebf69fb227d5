"""Module: logger_setup.py

Author: Michael Economou
Date: 2026-02-10

This module provides the ConfigureLogger class for setting up application-wide
logging. INFO and higher go to the console, ERROR and higher to a rotating
session log, and DEBUG+ to an optional debug log.
"""

import contextlib
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler

from modkeep.config import (
    LOG_CONSOLE_LEVEL,
    LOG_DEBUG_FILE_BACKUP_COUNT,
    LOG_DEBUG_FILE_ENABLED,
    LOG_DEBUG_FILE_MAX_BYTES,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_LEVEL,
    LOG_FILE_MAX_BYTES,
    LOG_TO_CONSOLE,
    LOG_TO_FILE,
)
from modkeep.utils.logging.logger_file_helper import (
    FILE_LOG_DATEFMT,
    FILE_LOG_FORMAT,
    add_file_handler,
)
from modkeep.utils.logging.logger_helper import DevOnlyFilter


class ConfigureLogger:
    """Configures application-wide logging on the root logger.

    Handlers are only installed once; a second instance leaves an already
    configured root logger untouched.
    """

    def __init__(self, log_name: str = "modkeep", log_dir: str = "logs") -> None:
        self.logger = logging.getLogger()
        self.logger.setLevel(logging.DEBUG)  # Accept everything; handlers filter levels

        if self.logger.hasHandlers():
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        if LOG_TO_CONSOLE:
            self._setup_console_handler(getattr(logging, LOG_CONSOLE_LEVEL, logging.INFO))

        if LOG_TO_FILE:
            os.makedirs(log_dir, exist_ok=True)
            log_file_path = os.path.join(log_dir, f"{log_name}_{timestamp}.log")
            self._setup_file_handler(
                log_file_path,
                getattr(logging, LOG_FILE_LEVEL, logging.ERROR),
                LOG_FILE_MAX_BYTES,
                LOG_FILE_BACKUP_COUNT,
            )

        if LOG_DEBUG_FILE_ENABLED:
            add_file_handler(
                logger=self.logger,
                log_path=os.path.join(log_dir, f"{log_name}_debug_{timestamp}.log"),
                level=logging.DEBUG,
                max_bytes=LOG_DEBUG_FILE_MAX_BYTES,
                backup_count=LOG_DEBUG_FILE_BACKUP_COUNT,
            )

    def _setup_console_handler(self, level: int) -> None:
        """Set up a UTF-8 console handler that hides dev-only records."""
        console_handler = logging.StreamHandler(sys.stdout)

        with contextlib.suppress(AttributeError, ValueError):
            console_handler.stream.reconfigure(encoding="utf-8")

        console_handler.setLevel(level)
        console_handler.addFilter(DevOnlyFilter())
        console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        self.logger.addHandler(console_handler)

    def _setup_file_handler(self, path: str, level: int, max_bytes: int, backup_count: int) -> None:
        file_handler = RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_LOG_DATEFMT))
        self.logger.addHandler(file_handler)
