"""Logging setup for the punch clock."""
from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from punchclock import config


def setup_logger(name: str, log_file: Optional[str] = None, level: int = logging.WARNING) -> logging.Logger:
    """
    Configure and return a logger writing to stderr and, optionally, a file.

    stdout is left to command output.  Calling this again for a logger that
    already has handlers only updates its level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid stacking duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(config.LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
