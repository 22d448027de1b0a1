"""
Utility functions for the punch clock CLI.

Parsing of the dates and times users type on the command line, and the
``HH:MM:SS`` duration format used in every listing.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta


def format_duration(duration: timedelta) -> str:
    """Format a duration as ``HH:MM:SS``; hours are not wrapped at 24."""
    seconds = duration.total_seconds()
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"


def local_now() -> datetime:
    return datetime.now().astimezone()


def parse_date(text: str, today: date | None = None) -> date:
    """
    Parse ``YYYY-MM-DD``, ``today`` or ``yesterday``.

    :raises ValueError: for anything else.
    """
    value = text.strip().lower()
    if today is None:
        today = local_now().date()
    if value == "today":
        return today
    if value == "yesterday":
        return today - timedelta(days=1)
    return datetime.strptime(value, "%Y-%m-%d").date()


def day_start(day: date) -> datetime:
    """Local midnight at the start of ``day``, timezone-aware."""
    return datetime.combine(day, time.min).astimezone()


def parse_timestamp(text: str) -> datetime:
    """
    Parse an ISO-8601 timestamp.  Without an offset it is taken as local time.

    :raises ValueError: if the text is not a timestamp.
    """
    value = datetime.fromisoformat(text.strip())
    if value.tzinfo is None:
        value = value.astimezone()
    return value
