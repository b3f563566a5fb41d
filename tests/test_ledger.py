from __future__ import annotations

import json
import os
from datetime import UTC, datetime
from pathlib import Path

import pytest

from toolgate.errors import PersistenceError
from toolgate.ledger import Ledger, format_timestamp

TS = datetime(2024, 5, 1, 8, 30, 0, 123000, tzinfo=UTC)


def test_timestamp_format() -> None:
    assert format_timestamp(TS) == "2024-05-01T08:30:00.123Z"


def test_append_names_and_writes_record(tmp_path: Path) -> None:
    ledger = Ledger(tmp_path / "results")
    result = {"content": [{"type": "text", "text": "Hello, Ada! 👋"}]}

    filename = ledger.append("hello", {"name": "Ada"}, result, timestamp=TS)

    assert filename == "hello_2024-05-01T08-30-00-123Z.json"
    record = json.loads((tmp_path / "results" / filename).read_text(encoding="utf-8"))
    assert record == {
        "toolName": "hello",
        "args": {"name": "Ada"},
        "result": result,
        "timestamp": "2024-05-01T08:30:00.123Z",
    }


def test_append_same_timestamp_gets_suffix(tmp_path: Path) -> None:
    ledger = Ledger(tmp_path)
    first = ledger.append("hello", {}, {"content": []}, timestamp=TS)
    second = ledger.append("hello", {}, {"content": []}, timestamp=TS)

    assert first != second
    assert second == "hello_2024-05-01T08-30-00-123Z_1.json"
    assert not [p for p in tmp_path.iterdir() if p.name.startswith(".")]


def test_append_unwritable_raises_persistence_error(tmp_path: Path) -> None:
    blocker = tmp_path / "results"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(PersistenceError):
        Ledger(blocker).append("hello", {}, {}, timestamp=TS)


def test_list_newest_first(tmp_path: Path) -> None:
    ledger = Ledger(tmp_path / "results")
    older = ledger.append("hello", {"name": "a"}, {}, timestamp=TS)
    newer = ledger.append("list_directory", {"path": "/"}, {}, timestamp=TS)
    os.utime(tmp_path / "results" / older, (1_700_000_000, 1_700_000_000))
    (tmp_path / "results" / "notes.txt").write_text("ignored", encoding="utf-8")

    entries = ledger.list()

    assert [e.filename for e in entries] == [newer, older]
    assert entries[0].path == f"results/{newer}"
    assert entries[0].size.endswith(" KB")


def test_list_equal_mtimes_orders_by_record_timestamp(tmp_path: Path) -> None:
    ledger = Ledger(tmp_path)
    older = ledger.append("list_directory", {}, {}, timestamp=datetime(2024, 1, 1, tzinfo=UTC))
    newer = ledger.append("analyze_volume", {}, {}, timestamp=datetime(2024, 1, 1, 0, 0, 1, tzinfo=UTC))
    newest = ledger.append("analyze_volume", {}, {}, timestamp=datetime(2024, 1, 1, 0, 0, 1, tzinfo=UTC))
    for name in (older, newer, newest):
        os.utime(tmp_path / name, (1_700_000_000, 1_700_000_000))

    assert [e.filename for e in ledger.list()] == [newest, newer, older]
    assert newest == "analyze_volume_2024-01-01T00-00-01-000Z_1.json"


def test_list_missing_directory_is_empty(tmp_path: Path) -> None:
    assert Ledger(tmp_path / "missing").list() == []


def test_read_rejects_escaping_names(tmp_path: Path) -> None:
    ledger = Ledger(tmp_path)
    with pytest.raises(ValueError):
        ledger.read("../secrets.json")
    with pytest.raises(ValueError):
        ledger.read("record.txt")
