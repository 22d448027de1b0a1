from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import pytest

from punchclock.data import RecordStore
from punchclock.session_manager import SessionManager

T0 = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def sheet_path(tmp_path) -> str:
    return os.path.join(str(tmp_path), "data", "sheet.json")


@pytest.fixture
def store(sheet_path) -> RecordStore:
    return RecordStore(sheet_path)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(store, clock) -> SessionManager:
    return SessionManager(store, clock=clock)
