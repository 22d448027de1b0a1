"""Exceptions raised by the punch clock core.

Usage errors are mistakes the user can fix (punching in twice, punching out
with nothing running).  Storage errors come from the environment (an
unreadable or unparseable sheet file).  The CLI maps each family to its own
exit code so scripts can tell them apart.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

EXIT_USAGE = 1
EXIT_STORAGE = 3


class PunchError(Exception):
    """Base class for every error the core raises on purpose."""

    exit_code = EXIT_USAGE


# --- Usage errors ---


class UsageError(PunchError):
    exit_code = EXIT_USAGE


class AlreadyPunchedIn(UsageError):
    def __init__(self, label: str, started_at: datetime) -> None:
        self.label = label
        self.started_at = started_at
        super().__init__(
            f"already punched in to '{label}' since {started_at.isoformat()}; "
            "punch out or cancel first"
        )


class NotPunchedIn(UsageError):
    def __init__(self, last_ended_at: Optional[datetime] = None) -> None:
        self.last_ended_at = last_ended_at
        if last_ended_at is None:
            message = "not punched in, no punch-ins recorded"
        else:
            message = f"not punched in, last punched out at {last_ended_at.isoformat()}"
        super().__init__(message)


class InvalidLabel(UsageError):
    def __init__(self, label: object) -> None:
        self.label = label
        super().__init__(f"invalid label {label!r}: a non-empty label is required")


class NegativeDuration(UsageError):
    def __init__(self, started_at: datetime, ended_at: datetime) -> None:
        self.started_at = started_at
        self.ended_at = ended_at
        super().__init__(
            f"cannot punch out at {ended_at.isoformat()}, "
            f"before the session started at {started_at.isoformat()}"
        )


# --- Storage errors ---


class StoreError(PunchError):
    exit_code = EXIT_STORAGE

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")


class StoreIoError(StoreError):
    """The sheet file could not be read or written."""


class StoreCorruptError(StoreError):
    """The sheet file exists but does not hold a valid log."""
