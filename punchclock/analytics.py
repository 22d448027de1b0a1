"""Duration summaries for the punch clock.

``summarize`` groups a listing by label or by day and adds up the time
spent in each group.  The running session, if it is part of the listing,
contributes its time so far.
"""
from __future__ import annotations

from typing import Iterable

import pandas as pd

from punchclock.models import ListedEntry

COLUMNS = ["key", "entries", "seconds"]
GROUPINGS = ("label", "day")


def to_frame(listing: Iterable[ListedEntry]) -> pd.DataFrame:
    """One row per listed entry: label, local start day, seconds, ongoing."""
    rows = [
        {
            "label": item.label,
            "day": item.started_at.astimezone().date(),
            "seconds": item.duration.total_seconds(),
            "ongoing": item.ongoing,
        }
        for item in listing
    ]
    return pd.DataFrame(rows, columns=["label", "day", "seconds", "ongoing"])


def summarize(listing: Iterable[ListedEntry], by: str = "label") -> pd.DataFrame:
    """
    Total seconds per label or per day.

    Labels are ordered by most time spent, days chronologically.

    :raises ValueError: if ``by`` is not ``"label"`` or ``"day"``.
    """
    if by not in GROUPINGS:
        raise ValueError(f"cannot group by {by!r}; choose one of {', '.join(GROUPINGS)}")
    df = to_frame(listing)
    if df.empty:
        return pd.DataFrame(columns=COLUMNS)
    grouped = (
        df.groupby(by)
        .agg(entries=("seconds", "size"), seconds=("seconds", "sum"))
        .reset_index()
        .rename(columns={by: "key"})
    )
    if by == "label":
        grouped = grouped.sort_values(["seconds", "key"], ascending=[False, True], kind="mergesort")
    else:
        grouped = grouped.sort_values("key", kind="mergesort")
    return grouped[COLUMNS].reset_index(drop=True)
