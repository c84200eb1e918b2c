"""Tests for HistoryStore: loading, appending and failure handling."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from zhanzhuang.exceptions import StorageError
from zhanzhuang.models.session import SessionRecord
from zhanzhuang.models.stats import compute_streak
from zhanzhuang.storage.history import HISTORY_KEY, HistoryStore
from zhanzhuang.storage.kv import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore


def _record(record_id: str, day: str = "2026-03-15", duration: int = 600) -> SessionRecord:
    return SessionRecord(id=record_id, duration_seconds=duration, date=day)


class FailingWriteStore(MemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        raise StorageError(key, "disk full")


class FailingReadStore(KeyValueStore):
    def get(self, key: str) -> str | None:
        raise StorageError(key, "permission denied")

    def set(self, key: str, value: str) -> None:
        pass


class TestLoad:
    def test_absent_key_gives_empty_ledger(self, kv):
        assert HistoryStore(kv).load() == []

    def test_reads_existing_ledger_in_stored_order(self):
        data = [
            {"id": "2", "duration": 600, "date": "2026-03-15"},
            {"id": "1", "duration": 300, "date": "2026-03-14"},
        ]
        kv = MemoryKeyValueStore({HISTORY_KEY: json.dumps(data)})
        records = HistoryStore(kv).load()
        assert [r.id for r in records] == ["2", "1"]
        assert records[1].duration_seconds == 300

    @pytest.mark.parametrize("raw", ["not json", "{\"id\": 1}", "42", "null", ""])
    def test_malformed_data_gives_empty_ledger(self, raw, caplog):
        kv = MemoryKeyValueStore({HISTORY_KEY: raw})
        with caplog.at_level(logging.WARNING, logger="zhanzhuang"):
            assert HistoryStore(kv).load() == []
        assert caplog.records

    def test_bad_entries_skipped_good_entries_kept(self):
        data = [
            {"id": "ok", "duration": 60, "date": "2026-03-15"},
            "garbage",
            {"id": "nodate", "duration": 60},
            {"duration": 120, "date": "2026-03-14", "extra": True},
        ]
        kv = MemoryKeyValueStore({HISTORY_KEY: json.dumps(data)})
        records = HistoryStore(kv).load()
        assert [r.id for r in records] == ["ok", "legacy-3"]

    def test_unreadable_store_gives_empty_ledger(self):
        assert HistoryStore(FailingReadStore()).load() == []

    def test_permission_denied_file_gives_empty_ledger(self, tmp_path, mocker, caplog):
        mocker.patch.object(Path, "read_text", side_effect=PermissionError(13, "Permission denied"))
        with caplog.at_level(logging.WARNING, logger="zhanzhuang"):
            assert HistoryStore(FileKeyValueStore(tmp_path)).load() == []
        assert any("unreadable" in r.getMessage() for r in caplog.records)

    @pytest.mark.parametrize("bad_date", ["20260101", "2026-W01-1", "2026-001"])
    def test_non_canonical_dates_skipped(self, today, bad_date):
        data = [
            {"id": "2", "duration": 600, "date": "2026-03-15"},
            {"id": "1", "duration": 600, "date": "2026-03-14"},
            {"id": "x", "duration": 600, "date": bad_date},
        ]
        kv = MemoryKeyValueStore({HISTORY_KEY: json.dumps(data)})
        records = HistoryStore(kv).load()

        assert [r.id for r in records] == ["2", "1"]
        assert compute_streak(records, today) == 2

    def test_load_replaces_in_memory_copy(self, kv):
        store = HistoryStore(kv)
        store.append(_record("a"))
        other = HistoryStore(kv)
        other.load()
        other.append(_record("b"))

        store.load()
        assert [r.id for r in store.records] == ["b", "a"]


class TestAppend:
    def test_newest_first(self, history):
        history.append(_record("1"))
        history.append(_record("2"))
        assert [r.id for r in history.records] == ["2", "1"]

    def test_persists_whole_ledger(self, kv, history):
        history.append(_record("1", day="2026-03-14"))
        history.append(_record("2"))
        stored = json.loads(kv.get(HISTORY_KEY))
        assert stored == [
            {"id": "2", "duration": 600, "date": "2026-03-15"},
            {"id": "1", "duration": 600, "date": "2026-03-14"},
        ]

    def test_round_trip_through_fresh_store(self, tmp_path):
        record = _record("1700000000000", duration=1234)
        first = HistoryStore(FileKeyValueStore(tmp_path))
        first.load()
        first.append(_record("older", day="2026-03-10"))
        result = first.append(record)
        assert result.persisted

        restarted = HistoryStore(FileKeyValueStore(tmp_path))
        loaded = restarted.load()
        assert loaded[0] == record
        assert len(loaded) == 2

    def test_write_failure_keeps_record_in_memory(self, caplog):
        store = HistoryStore(FailingWriteStore())
        record = _record("1")
        with caplog.at_level(logging.WARNING, logger="zhanzhuang"):
            result = store.append(record)

        assert result.persisted is False
        assert "disk full" in result.error
        assert store.records[0] == record
        assert any("kept in memory" in r.getMessage() for r in caplog.records)

    def test_success_result(self, history):
        record = _record("1")
        result = history.append(record)
        assert result.record == record
        assert result.persisted is True
        assert result.error is None


class TestViews:
    def test_records_is_read_only_copy(self, history):
        history.append(_record("1"))
        assert isinstance(history.records, tuple)

    def test_recent_limits(self, history):
        for i in range(7):
            history.append(_record(str(i)))
        assert [r.id for r in history.recent()] == ["6", "5", "4", "3", "2"]
        assert [r.id for r in history.recent(2)] == ["6", "5"]
        assert history.recent(0) == []
        assert len(history) == 7
