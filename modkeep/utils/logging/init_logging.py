"""Module: init_logging.py

Author: Michael Economou
Date: 2026-02-10

Single entry point to initialize the logging system with app-specific log
file names.
"""

import logging
import os

from modkeep.config import LOG_DIR, LOG_LEVEL
from modkeep.utils.logging.logger_factory import get_cached_logger
from modkeep.utils.logging.logger_file_helper import add_file_handler
from modkeep.utils.logging.logger_setup import ConfigureLogger


def init_logging(app_name: str = "modkeep", log_dir: str = LOG_DIR) -> logging.Logger:
    """Initialize logging, adding activity and error log files for ``app_name``.

    Args:
        app_name: The base name for log files (e.g., 'modkeep').
        log_dir: Directory that receives the log files.

    Returns:
        The logger for the modkeep package.
    """
    ConfigureLogger(log_name=app_name, log_dir=log_dir)
    logger = get_cached_logger("modkeep")

    activity_level = getattr(logging, LOG_LEVEL, logging.INFO)
    activity_log = os.path.join(log_dir, f"{app_name}_activity.log")
    add_file_handler(logger, activity_log, level=activity_level)
    add_file_handler(logger, os.path.join(log_dir, f"{app_name}_errors.log"), level=logging.ERROR)

    return logger
