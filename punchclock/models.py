"""Record model for the punch clock.

An entry is either open (still being timed) or closed (finished).  The two
states are separate types so that an entry with an end time can never be
mistaken for the running session.  A ``Log`` is the ordered collection of
entries that gets persisted between invocations.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, Optional, Tuple, Union


def require_aware(value: datetime, name: str) -> None:
    if not isinstance(value, datetime):
        raise TypeError(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware: {value.isoformat()}")


@dataclass(frozen=True)
class OpenEntry:
    """A session that has been punched in but not yet punched out."""

    label: str
    started_at: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.label, str) or not self.label.strip():
            raise ValueError("label must be a non-empty string")
        require_aware(self.started_at, "started_at")

    @property
    def ended_at(self) -> None:
        return None

    def elapsed(self, now: datetime) -> timedelta:
        """Time spent so far, measured against ``now``."""
        return now - self.started_at

    def close(self, ended_at: datetime) -> "ClosedEntry":
        return ClosedEntry(self.label, self.started_at, ended_at)


@dataclass(frozen=True)
class ClosedEntry:
    """A finished session.  Closed entries are never modified."""

    label: str
    started_at: datetime
    ended_at: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.label, str) or not self.label.strip():
            raise ValueError("label must be a non-empty string")
        require_aware(self.started_at, "started_at")
        require_aware(self.ended_at, "ended_at")
        if self.ended_at < self.started_at:
            raise ValueError(
                f"ended_at {self.ended_at.isoformat()} is before "
                f"started_at {self.started_at.isoformat()}"
            )

    @property
    def duration(self) -> timedelta:
        return self.ended_at - self.started_at


Entry = Union[OpenEntry, ClosedEntry]


@dataclass(frozen=True)
class Log:
    """
    Ordered, immutable sequence of entries.

    At most one entry may be open; building a ``Log`` that breaks this rule
    raises ``ValueError``, so every ``Log`` value in the program is valid.
    """

    entries: Tuple[Entry, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable but always store a tuple.
        object.__setattr__(self, "entries", tuple(self.entries))
        open_count = sum(1 for e in self.entries if isinstance(e, OpenEntry))
        if open_count > 1:
            raise ValueError(f"log has {open_count} open entries, at most one is allowed")

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def open_entry(self) -> Optional[OpenEntry]:
        for entry in self.entries:
            if isinstance(entry, OpenEntry):
                return entry
        return None

    @property
    def closed_entries(self) -> Tuple[ClosedEntry, ...]:
        return tuple(e for e in self.entries if isinstance(e, ClosedEntry))


# --- Results returned by the session engine ---


@dataclass(frozen=True)
class PunchedIn:
    """Status while a session is running."""

    entry: OpenEntry
    elapsed: timedelta


@dataclass(frozen=True)
class PunchedOut:
    """
    Status while nothing is running.

    ``last_ended_at`` is when the most recent session finished, or ``None``
    if nothing has ever been recorded.
    """

    last_ended_at: Optional[datetime] = None


Status = Union[PunchedIn, PunchedOut]


@dataclass(frozen=True)
class ListedEntry:
    """An entry paired with its duration (ongoing entries measure up to now)."""

    entry: Entry
    duration: timedelta

    @property
    def ongoing(self) -> bool:
        return isinstance(self.entry, OpenEntry)

    @property
    def label(self) -> str:
        return self.entry.label

    @property
    def started_at(self) -> datetime:
        return self.entry.started_at

    @property
    def ended_at(self) -> Optional[datetime]:
        return self.entry.ended_at
