"""High-level session management for the punch clock.

The ``SessionManager`` runs one load → transition → save cycle per call
against a ``RecordStore``.  The transitions themselves live in
``punchclock.engine``; this class only supplies the current time, persists
successful changes and logs what happened.  It keeps no log of its own
between calls, so two managers on the same sheet always agree.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from punchclock import engine
from punchclock.data import RecordStore
from punchclock.engine import EntryFilter, EntryListing
from punchclock.models import ClosedEntry, OpenEntry, Status
from punchclock.utils import local_now

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Punch in, punch out and query sessions stored in a sheet file.
    Store errors and usage errors propagate unchanged; nothing is saved
    unless the transition succeeds.
    """

    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = local_now) -> None:
        self.store = store
        self.clock = clock

    # --- Transitions ---

    def punch_in(self, label: str, at: Optional[datetime] = None) -> OpenEntry:
        log = self.store.load()
        new_log, entry = engine.punch_in(log, label, at or self.clock())
        self.store.save(new_log)
        logger.info("Punched in to '%s' at %s", entry.label, entry.started_at.isoformat())
        return entry

    def punch_out(self, at: Optional[datetime] = None) -> ClosedEntry:
        log = self.store.load()
        new_log, entry = engine.punch_out(log, at or self.clock())
        self.store.save(new_log)
        logger.info(
            "Punched out of '%s' at %s after %s",
            entry.label,
            entry.ended_at.isoformat(),
            entry.duration,
        )
        return entry

    def cancel(self) -> OpenEntry:
        log = self.store.load()
        new_log, entry = engine.cancel(log)
        self.store.save(new_log)
        logger.info("Cancelled '%s' started at %s", entry.label, entry.started_at.isoformat())
        return entry

    # --- Queries (never write) ---

    def status(self) -> Status:
        log = self.store.load()
        result = engine.status(log, self.clock())
        logger.debug("Status: %s", result)
        return result

    def list_entries(self, entry_filter: EntryFilter = engine.ALL) -> EntryListing:
        log = self.store.load()
        return engine.list_entries(log, entry_filter, self.clock())

    def total_duration(self, entry_filter: EntryFilter = engine.ALL) -> timedelta:
        log = self.store.load()
        return engine.total_duration(log, entry_filter, self.clock())

    def count_range(self, begin: datetime, end: datetime) -> timedelta:
        log = self.store.load()
        return engine.count_range(log, begin, end, self.clock())
