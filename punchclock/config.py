"""Runtime settings for the punch clock.

Everything here is read from the environment when called rather than at
import time, so tests and the ``--data-file`` flag can point the tool at a
different sheet without reloading modules.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Optional

APP_NAME = "punchclock"
DATA_FILE_NAME = "sheet.json"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LOG_LEVEL = "WARNING"

# Environment overrides
ENV_DATA_FILE = "PUNCHCLOCK_DATA_FILE"
ENV_LOG_LEVEL = "PUNCHCLOCK_LOG_LEVEL"
ENV_LOG_FILE = "PUNCHCLOCK_LOG_FILE"


def log_level() -> int:
    """Numeric logging level from ``PUNCHCLOCK_LOG_LEVEL`` (default WARNING)."""
    name = os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    return logging.WARNING


def log_file() -> Optional[str]:
    return os.environ.get(ENV_LOG_FILE) or None


def data_dir() -> str:
    """
    Platform-appropriate directory for the sheet file.

    + Linux: ``$XDG_DATA_HOME/punchclock`` (``~/.local/share/punchclock``)
    + macOS: ``~/Library/Application Support/punchclock``
    + Windows: ``%APPDATA%\\punchclock``
    """
    home = os.path.expanduser("~")
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA") or os.path.join(home, "AppData", "Roaming")
    elif sys.platform == "darwin":
        base = os.path.join(home, "Library", "Application Support")
    else:
        base = os.environ.get("XDG_DATA_HOME") or os.path.join(home, ".local", "share")
    return os.path.join(base, APP_NAME)


def data_file() -> str:
    """Path of the sheet file, honouring ``PUNCHCLOCK_DATA_FILE``."""
    override = os.environ.get(ENV_DATA_FILE)
    if override:
        return os.path.abspath(os.path.expanduser(override))
    return os.path.join(data_dir(), DATA_FILE_NAME)
