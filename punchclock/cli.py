"""
Command-line entry point for the punch clock.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta
from typing import List, Optional

from punchclock import config
from punchclock.analytics import summarize
from punchclock.data import RecordStore
from punchclock.engine import EntryFilter
from punchclock.errors import EXIT_STORAGE, EXIT_USAGE, PunchError
from punchclock.log import setup_logger
from punchclock.session_manager import SessionManager
from punchclock.timeline import render_listing, render_status, render_summary
from punchclock.utils import day_start, format_duration, local_now, parse_date, parse_timestamp

logger = logging.getLogger("punchclock.cli")


def _date_arg(text: str):
    try:
        return parse_date(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {text!r} (expected YYYY-MM-DD, today or yesterday)")


def _timestamp_arg(text: str):
    try:
        return parse_timestamp(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timestamp {text!r} (expected ISO-8601)")


def _add_filter_args(parser: argparse.ArgumentParser, with_label: bool = True) -> None:
    if with_label:
        parser.add_argument("--label", help="only entries whose label contains this text")
    parser.add_argument("--since", type=_date_arg, help="first day to include (YYYY-MM-DD)")
    parser.add_argument("--until", type=_date_arg, help="last day to include (YYYY-MM-DD)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="punch", description="Lightweight terminal time tracking")
    parser.add_argument("--data-file", help="sheet file to use instead of the default location")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")

    sub = parser.add_subparsers(dest="command", metavar="command")
    sub.required = True

    p_in = sub.add_parser("in", help="start timing an activity")
    p_in.add_argument("label", help="name of the activity")
    p_in.add_argument("--at", type=_timestamp_arg, help="start time instead of now (ISO-8601)")

    p_out = sub.add_parser("out", help="stop timing the current activity")
    p_out.add_argument("--at", type=_timestamp_arg, help="stop time instead of now (ISO-8601)")

    sub.add_parser("cancel", help="discard the current activity")
    sub.add_parser("status", help="show whether an activity is being timed")

    p_list = sub.add_parser("list", help="list recorded entries")
    _add_filter_args(p_list)

    p_total = sub.add_parser("total", help="sum the durations of recorded entries")
    _add_filter_args(p_total)

    p_count = sub.add_parser("count", help="time recorded within a date range")
    _add_filter_args(p_count, with_label=False)

    p_summary = sub.add_parser("summary", help="total time per label or per day")
    p_summary.add_argument("--by", choices=["label", "day"], default="label")
    _add_filter_args(p_summary)

    return parser


def _entry_filter(args: argparse.Namespace) -> EntryFilter:
    since = day_start(args.since) if args.since else None
    # --until names the last day included
    until = day_start(args.until + timedelta(days=1)) if args.until else None
    return EntryFilter(label=getattr(args, "label", None), since=since, until=until)


def run(args: argparse.Namespace, manager: SessionManager) -> str:
    """Perform one command and return the text to print."""
    if args.command == "in":
        entry = manager.punch_in(args.label, args.at)
        return f"Punched in to '{entry.label}' at {entry.started_at.astimezone():%Y-%m-%d %H:%M:%S}"
    if args.command == "out":
        entry = manager.punch_out(args.at)
        return (
            f"Punched out of '{entry.label}' at {entry.ended_at.astimezone():%Y-%m-%d %H:%M:%S} "
            f"({format_duration(entry.duration)})"
        )
    if args.command == "cancel":
        entry = manager.cancel()
        return f"Cancelled '{entry.label}' started at {entry.started_at.astimezone():%Y-%m-%d %H:%M:%S}"
    if args.command == "status":
        return render_status(manager.status())
    if args.command == "list":
        return render_listing(manager.list_entries(_entry_filter(args)))
    if args.command == "total":
        return format_duration(manager.total_duration(_entry_filter(args)))
    if args.command == "count":
        window = _entry_filter(args)
        begin = window.since or day_start(local_now().date())
        end = window.until or manager.clock()
        return format_duration(manager.count_range(begin, end))
    if args.command == "summary":
        return render_summary(summarize(manager.list_entries(_entry_filter(args)), by=args.by))
    raise ValueError(f"unknown command {args.command!r}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else config.log_level()
    try:
        setup_logger("punchclock", log_file=config.log_file(), level=level)
    except OSError as e:
        print(f"punch: unable to open log file ({e.strerror or e}): {config.log_file()}", file=sys.stderr)
        return EXIT_STORAGE

    manager = SessionManager(RecordStore(args.data_file))
    logger.debug("Running '%s' against %s", args.command, manager.store.path)

    try:
        output = run(args, manager)
    except PunchError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"punch: {e}", file=sys.stderr)
        return e.exit_code
    except ValueError as e:
        print(f"punch: {e}", file=sys.stderr)
        return EXIT_USAGE

    print(output)
    return 0
