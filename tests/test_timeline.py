from datetime import datetime, timedelta, timezone

import pandas as pd

from punchclock import engine
from punchclock.models import ClosedEntry, Log, OpenEntry, PunchedIn, PunchedOut
from punchclock.timeline import render_listing, render_status, render_summary

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def test_render_status_variants():
    running = render_status(PunchedIn(OpenEntry("writing", T0), timedelta(minutes=5)))
    assert "'writing'" in running and "00:05:00 elapsed" in running
    assert render_status(PunchedOut(None)) == "Not punched in; nothing recorded yet"
    assert render_status(PunchedOut(T0)).startswith("Not punched in; last punched out at ")


def test_render_listing_marks_ongoing_and_totals():
    log = Log([ClosedEntry("writing", T0, T0 + timedelta(hours=1)), OpenEntry("reading", T0 + timedelta(hours=2))])
    text = render_listing(engine.list_entries(log, engine.ALL, T0 + timedelta(hours=2, minutes=15)))
    lines = text.splitlines()
    assert len(lines) == 3
    assert lines[0].startswith(" ") and lines[0].endswith("01:00:00  writing")
    assert lines[1].startswith("*") and "(ongoing)" in lines[1]
    assert lines[1].endswith("00:15:00  reading")
    assert lines[2] == "Total: 01:15:00"


def test_render_empty():
    assert render_listing([]) == "No entries"
    assert render_summary(pd.DataFrame(columns=["key", "entries", "seconds"])) == "No entries"


def test_render_summary():
    frame = pd.DataFrame({"key": ["writing"], "entries": [2], "seconds": [5400.0]})
    assert render_summary(frame) == "01:30:00    2x  writing"
