"""
Data layer for the punch clock.

This module owns the sheet file: a small JSON document holding every
recorded entry.  Loading turns it into a validated ``Log``; saving writes a
complete new file next to the old one and swaps it into place, so an
interrupted save never leaves a half-written sheet behind.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from typing import Any, Dict, List, Optional

from punchclock import config
from punchclock.errors import StoreCorruptError, StoreIoError
from punchclock.models import ClosedEntry, Entry, Log, OpenEntry

logger = logging.getLogger(__name__)

# --- Sheet format ---
# A JSON array, one object per entry, in the order entries were started:
#   label        text        -- non-empty activity name
#   started_at   text        -- ISO-8601 timestamp with UTC offset
#   ended_at     text|null   -- same format; null while the entry is open
FIELDS = ("label", "started_at", "ended_at")


def entry_to_record(entry: Entry) -> Dict[str, Any]:
    """Serialise an entry into the dictionary stored in the sheet."""
    ended_at = entry.ended_at
    return {
        "label": entry.label,
        "started_at": entry.started_at.isoformat(),
        "ended_at": ended_at.isoformat() if ended_at is not None else None,
    }


def _parse_timestamp(value: Any, field: str) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string, got {type(value).__name__}")
    return datetime.fromisoformat(value)


def entry_from_record(record: Any) -> Entry:
    """
    Build an entry from one sheet record.

    :raises ValueError: if the record is not a well-formed entry.
    """
    if not isinstance(record, dict):
        raise ValueError(f"expected an object, got {type(record).__name__}")
    unknown = set(record) - set(FIELDS)
    if unknown:
        raise ValueError(f"unexpected fields: {', '.join(sorted(unknown))}")
    if "label" not in record or "started_at" not in record:
        raise ValueError("record needs both label and started_at")
    label = record["label"]
    if not isinstance(label, str):
        raise ValueError(f"label must be a string, got {type(label).__name__}")
    started_at = _parse_timestamp(record["started_at"], "started_at")
    ended_raw = record.get("ended_at")
    if ended_raw is None:
        return OpenEntry(label, started_at)
    return ClosedEntry(label, started_at, _parse_timestamp(ended_raw, "ended_at"))


def dumps(log: Log) -> str:
    """Render a log as sheet text.  Output is deterministic for a given log."""
    records = [entry_to_record(e) for e in log]
    return json.dumps(records, indent=2, ensure_ascii=False) + "\n"


def loads(text: str) -> Log:
    """
    Parse sheet text into a log.  Blank text is an empty log.

    :raises ValueError: on malformed JSON or invalid records.
    """
    if not text.strip():
        return Log()
    records = json.loads(text)
    if not isinstance(records, list):
        raise ValueError(f"expected a JSON array of entries, got {type(records).__name__}")
    entries: List[Entry] = []
    for index, record in enumerate(records):
        try:
            entries.append(entry_from_record(record))
        except (ValueError, TypeError) as exc:
            raise ValueError(f"entry {index}: {exc}") from exc
    return Log(entries)


def _fsync_directory(directory: str) -> None:
    """Flush a rename to disk.  Windows cannot open directories, so skip it there."""
    if os.name != "posix":
        return
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class RecordStore:
    """Loads and saves the log kept in a single sheet file."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or config.data_file()

    def __repr__(self) -> str:
        return f"RecordStore({self.path!r})"

    @property
    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def load(self) -> Log:
        """
        Read the log from disk.

        A missing file is an empty log.  Nothing is ever written here, even
        when the file turns out to be unreadable.

        :raises StoreIoError: if the file exists but cannot be read.
        :raises StoreCorruptError: if the file does not hold a valid log.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError:
            logger.debug("No sheet at %s, starting with an empty log", self.path)
            return Log()
        except UnicodeDecodeError as exc:
            raise StoreCorruptError(self.path, f"unable to decode sheet file ({exc})") from exc
        except OSError as exc:
            raise StoreIoError(self.path, f"unable to read sheet file ({exc.strerror or exc})") from exc

        try:
            log = loads(text)
        except (ValueError, TypeError, RecursionError) as exc:
            # json.JSONDecodeError is a ValueError; deep nesting hits the recursion limit
            raise StoreCorruptError(self.path, f"unable to parse sheet file ({exc})") from exc
        logger.debug("Loaded %d entries from %s", len(log), self.path)
        return log

    def save(self, log: Log) -> None:
        """
        Replace the sheet with ``log``.

        The new content goes to a temporary file in the same directory which
        is then renamed over the sheet, so readers see either the old file or
        the new one.  On failure the old file is left as it was.

        :raises StoreIoError: if the directory or file cannot be written.
        """
        text = dumps(log)
        directory = os.path.dirname(self.path) or "."
        tmp_name: Optional[str] = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=".sheet-",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(text)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
            _fsync_directory(directory)
        except OSError as exc:
            raise StoreIoError(self.path, f"unable to write sheet file ({exc.strerror or exc})") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.remove(tmp_name)
                except OSError:
                    logger.warning("Could not remove temporary file %s", tmp_name)
        logger.debug("Saved %d entries to %s", len(log), self.path)
