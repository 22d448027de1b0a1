"""Plain-text views of the punch clock state.

These helpers turn engine results into the lines the CLI prints: the
current status, the history listing for ``punch list`` and the grouped
totals for ``punch summary``.  They never touch the sheet.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List

import pandas as pd

from punchclock.models import ListedEntry, PunchedIn, Status
from punchclock.utils import format_duration

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _when(value: datetime) -> str:
    return value.astimezone().strftime(TIME_FORMAT)


def render_status(result: Status) -> str:
    if isinstance(result, PunchedIn):
        return (
            f"Punched in to '{result.entry.label}' since {_when(result.entry.started_at)} "
            f"({format_duration(result.elapsed)} elapsed)"
        )
    if result.last_ended_at is None:
        return "Not punched in; nothing recorded yet"
    return f"Not punched in; last punched out at {_when(result.last_ended_at)}"


def render_listing(listing: Iterable[ListedEntry]) -> str:
    """One line per entry; the running entry is marked as ongoing."""
    lines: List[str] = []
    total = timedelta()
    for item in listing:
        end = "(ongoing)" if item.ongoing else _when(item.ended_at)
        marker = "*" if item.ongoing else " "
        lines.append(
            f"{marker} {_when(item.started_at)}  {end:<19}  "
            f"{format_duration(item.duration)}  {item.label}"
        )
        total += item.duration
    if not lines:
        return "No entries"
    lines.append(f"Total: {format_duration(total)}")
    return "\n".join(lines)


def render_summary(frame: pd.DataFrame) -> str:
    if frame.empty:
        return "No entries"
    lines = [
        f"{format_duration(timedelta(seconds=float(row.seconds)))}  "
        f"{int(row.entries):>3}x  {row.key}"
        for row in frame.itertuples(index=False)
    ]
    return "\n".join(lines)
