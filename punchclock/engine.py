"""Session state transitions.

Every function here takes the current ``Log`` plus the requested action and
returns a new ``Log`` (and whatever the caller needs to report), or raises a
``UsageError``.  Nothing is stored between calls and the input log is never
modified, so a failed operation leaves the caller's log exactly as it was.

Entry lifecycle::

    OpenEntry --punch_out--> ClosedEntry   (terminal)
    OpenEntry --cancel-----> removed       (terminal)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, Optional, Tuple

from punchclock.errors import AlreadyPunchedIn, InvalidLabel, NegativeDuration, NotPunchedIn
from punchclock.models import (
    ClosedEntry,
    Entry,
    ListedEntry,
    Log,
    OpenEntry,
    PunchedIn,
    PunchedOut,
    Status,
    require_aware,
)


@dataclass(frozen=True)
class EntryFilter:
    """
    Selects entries for listing and totals.

    ``label`` matches as a case-insensitive substring.  ``since`` is
    inclusive and ``until`` exclusive, both compared with ``started_at``.
    """

    label: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.since is not None:
            require_aware(self.since, "since")
        if self.until is not None:
            require_aware(self.until, "until")

    def matches(self, entry: Entry) -> bool:
        if self.label and self.label.casefold() not in entry.label.casefold():
            return False
        if self.since is not None and entry.started_at < self.since:
            return False
        if self.until is not None and entry.started_at >= self.until:
            return False
        return True


ALL = EntryFilter()


def _last_ended_at(log: Log) -> Optional[datetime]:
    closed = log.closed_entries
    if not closed:
        return None
    return max(e.ended_at for e in closed)


def punch_in(log: Log, label: str, at: datetime) -> Tuple[Log, OpenEntry]:
    """Start a new session called ``label`` at ``at``."""
    if not isinstance(label, str) or not label.strip():
        raise InvalidLabel(label)
    require_aware(at, "at")
    current = log.open_entry
    if current is not None:
        raise AlreadyPunchedIn(current.label, current.started_at)
    entry = OpenEntry(label, at)
    return Log(log.entries + (entry,)), entry


def punch_out(log: Log, at: datetime) -> Tuple[Log, ClosedEntry]:
    """Finish the running session at ``at``."""
    require_aware(at, "at")
    current = log.open_entry
    if current is None:
        raise NotPunchedIn(_last_ended_at(log))
    if at < current.started_at:
        raise NegativeDuration(current.started_at, at)
    closed = current.close(at)
    entries = tuple(closed if e is current else e for e in log.entries)
    return Log(entries), closed


def cancel(log: Log) -> Tuple[Log, OpenEntry]:
    """Drop the running session as though it was never started."""
    current = log.open_entry
    if current is None:
        raise NotPunchedIn(_last_ended_at(log))
    entries = tuple(e for e in log.entries if e is not current)
    return Log(entries), current


def status(log: Log, now: datetime) -> Status:
    require_aware(now, "now")
    current = log.open_entry
    if current is not None:
        return PunchedIn(current, current.elapsed(now))
    return PunchedOut(_last_ended_at(log))


class EntryListing:
    """
    Filtered view over a log.

    Iterating yields closed entries by start time, then the running entry
    (if it passes the filter) timed against ``now``.  Each iteration starts
    afresh, so the listing can be walked more than once.
    """

    def __init__(self, log: Log, entry_filter: EntryFilter, now: datetime) -> None:
        self.log = log
        self.entry_filter = entry_filter
        self.now = now

    def __iter__(self) -> Iterator[ListedEntry]:
        # sorted() is stable, so entries sharing a start time keep log order
        closed = sorted(
            (e for e in self.log.closed_entries if self.entry_filter.matches(e)),
            key=lambda e: e.started_at,
        )
        for entry in closed:
            yield ListedEntry(entry, entry.duration)
        current = self.log.open_entry
        if current is not None and self.entry_filter.matches(current):
            yield ListedEntry(current, current.elapsed(self.now))

    def total(self) -> timedelta:
        return sum((item.duration for item in self), timedelta())


def list_entries(log: Log, entry_filter: EntryFilter, now: datetime) -> EntryListing:
    require_aware(now, "now")
    return EntryListing(log, entry_filter, now)


def total_duration(log: Log, entry_filter: EntryFilter, now: datetime) -> timedelta:
    """Sum of durations over the same entries ``list_entries`` yields."""
    return list_entries(log, entry_filter, now).total()


def count_range(log: Log, begin: datetime, end: datetime, now: datetime) -> timedelta:
    """
    Time recorded between ``begin`` and ``end``.

    Entries straddling either edge only count the part inside the window;
    the running entry counts up to ``now``.
    """
    require_aware(begin, "begin")
    require_aware(end, "end")
    require_aware(now, "now")
    total = timedelta()
    for entry in log:
        stop = entry.ended_at if entry.ended_at is not None else now
        real_begin = max(begin, entry.started_at)
        real_end = min(end, stop)
        if real_end > real_begin:
            total += real_end - real_begin
    return total
