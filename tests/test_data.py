import json
import os
from datetime import datetime, timedelta, timezone

import pytest

from punchclock import data
from punchclock.data import RecordStore, dumps, loads
from punchclock.errors import StoreCorruptError, StoreIoError
from punchclock.models import ClosedEntry, Log, OpenEntry

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
PLUS_TWO = timezone(timedelta(hours=2))


def sample_log():
    return Log(
        [
            ClosedEntry("writing", T0, T0 + timedelta(hours=1)),
            ClosedEntry("reading", T0 + timedelta(hours=2), T0 + timedelta(hours=2, seconds=30, microseconds=250)),
            OpenEntry("émails", datetime(2024, 3, 1, 14, 0, tzinfo=PLUS_TWO)),
        ]
    )


def test_missing_file_is_empty_log(store, sheet_path):
    assert store.load() == Log()
    # loading never creates anything
    assert not os.path.exists(os.path.dirname(sheet_path))


def test_blank_file_is_empty_log(store, sheet_path):
    os.makedirs(os.path.dirname(sheet_path))
    with open(sheet_path, "w") as f:
        f.write("  \n")
    assert store.load() == Log()


def test_save_then_load_round_trips(store):
    log = sample_log()
    store.save(log)
    assert store.load() == log


def test_save_creates_directory(store, sheet_path):
    store.save(Log())
    assert os.path.isfile(sheet_path)
    assert store.exists


def test_resave_is_byte_identical(store, sheet_path):
    store.save(sample_log())
    with open(sheet_path, "rb") as f:
        before = f.read()
    store.save(store.load())
    with open(sheet_path, "rb") as f:
        assert f.read() == before


def test_file_format(store, sheet_path):
    store.save(Log([ClosedEntry("writing", T0, T0 + timedelta(hours=1)), OpenEntry("x", T0 + timedelta(hours=2))]))
    with open(sheet_path, encoding="utf-8") as f:
        records = json.load(f)
    assert records == [
        {"label": "writing", "started_at": "2024-03-01T09:00:00+00:00", "ended_at": "2024-03-01T10:00:00+00:00"},
        {"label": "x", "started_at": "2024-03-01T11:00:00+00:00", "ended_at": None},
    ]


def test_offsets_are_preserved():
    log = loads(dumps(sample_log()))
    assert log.open_entry.started_at.utcoffset() == timedelta(hours=2)


def test_missing_ended_at_means_open():
    log = loads('[{"label": "x", "started_at": "2024-03-01T09:00:00+00:00"}]')
    assert log.open_entry == OpenEntry("x", T0)


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        '{"label": "x"}',
        '["x"]',
        '[{"label": "", "started_at": "2024-03-01T09:00:00+00:00", "ended_at": null}]',
        '[{"label": "x", "started_at": "yesterday", "ended_at": null}]',
        '[{"label": "x", "started_at": "2024-03-01T09:00:00", "ended_at": null}]',
        '[{"label": "x", "started_at": "2024-03-01T09:00:00+00:00", "ended_at": "2024-03-01T08:00:00+00:00"}]',
        '[{"label": "x", "started_at": "2024-03-01T09:00:00+00:00", "ended_at": null},'
        ' {"label": "y", "started_at": "2024-03-01T10:00:00+00:00", "ended_at": null}]',
        '[{"label": "x", "started_at": 12, "ended_at": null}]',
        '[{"label": "x", "started_at": "2024-03-01T09:00:00+00:00", "ended_at": null, "extra": 1}]',
        "[" * 200000,
    ],
)
def test_invalid_content_is_corrupt(store, sheet_path, text):
    os.makedirs(os.path.dirname(sheet_path))
    with open(sheet_path, "w", encoding="utf-8") as f:
        f.write(text)
    with pytest.raises(StoreCorruptError) as excinfo:
        store.load()
    assert excinfo.value.path == sheet_path
    assert excinfo.value.__cause__ is not None


def test_failed_load_writes_nothing(store, sheet_path):
    os.makedirs(os.path.dirname(sheet_path))
    with open(sheet_path, "w", encoding="utf-8") as f:
        f.write("{not json")
    with pytest.raises(StoreCorruptError):
        store.load()
    with open(sheet_path, encoding="utf-8") as f:
        assert f.read() == "{not json"
    assert os.listdir(os.path.dirname(sheet_path)) == ["sheet.json"]


def test_unreadable_path_is_io_error(tmp_path):
    # a directory where the sheet should be
    store = RecordStore(str(tmp_path))
    with pytest.raises(StoreIoError):
        store.load()


def test_failed_save_keeps_previous_file(store, sheet_path, monkeypatch):
    store.save(sample_log())
    with open(sheet_path, "rb") as f:
        before = f.read()

    def broken_replace(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(StoreIoError):
        store.save(Log())

    with open(sheet_path, "rb") as f:
        assert f.read() == before
    # temporary file cleaned up
    assert os.listdir(os.path.dirname(sheet_path)) == ["sheet.json"]


def test_save_into_unwritable_location_is_io_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    store = RecordStore(str(blocker / "sheet.json"))
    with pytest.raises(StoreIoError):
        store.save(Log())


def test_default_path_comes_from_config(monkeypatch, tmp_path):
    target = str(tmp_path / "custom.json")
    monkeypatch.setenv("PUNCHCLOCK_DATA_FILE", target)
    assert RecordStore().path == target


def test_save_flushes_the_directory_after_rename(store, sheet_path, monkeypatch):
    flushed = []
    monkeypatch.setattr(data, "_fsync_directory", flushed.append)
    store.save(Log())
    assert flushed == [os.path.dirname(sheet_path)]
    assert store.load() == Log()
