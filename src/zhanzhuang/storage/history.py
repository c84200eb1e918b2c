"""Append-only ledger of completed sessions."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass

from zhanzhuang.exceptions import StorageError
from zhanzhuang.models.session import SessionRecord
from zhanzhuang.utils.logger import get_logger

from .kv import KeyValueStore

logger = get_logger("history")

HISTORY_KEY = "zhanzhuang_history_v2"


@dataclass(frozen=True)
class AppendResult:
    """Outcome of ``HistoryStore.append``.

    The record is in the in-memory ledger either way; ``persisted`` says
    whether it will survive a restart.
    """

    record: SessionRecord
    persisted: bool
    error: str | None = None


class HistoryStore:
    """Session ledger, newest first, written whole on every append."""

    def __init__(self, store: KeyValueStore, key: str = HISTORY_KEY):
        self.store = store
        self.key = key
        self._records: list[SessionRecord] = []

    @property
    def records(self) -> Sequence[SessionRecord]:
        """Current ledger, most recent first."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def recent(self, limit: int = 5) -> list[SessionRecord]:
        """The *limit* most recent sessions."""
        return list(self._records[: max(0, limit)])

    def load(self) -> list[SessionRecord]:
        """
        Read the ledger from storage, replacing the in-memory copy.

        Absent, unreadable or malformed data yields an empty ledger. Single
        bad entries are dropped and the rest kept.
        """
        self._records = self._read()
        return list(self._records)

    def append(self, record: SessionRecord) -> AppendResult:
        """Prepend *record* and persist the whole ledger."""
        self._records.insert(0, record)

        payload = json.dumps(
            [r.to_dict() for r in self._records], ensure_ascii=False
        )
        try:
            self.store.set(self.key, payload)
        except StorageError as e:
            logger.warning(
                "Session %s kept in memory only, ledger not saved: %s", record.id, e
            )
            return AppendResult(record=record, persisted=False, error=str(e))

        return AppendResult(record=record, persisted=True)

    def _read(self) -> list[SessionRecord]:
        try:
            raw = self.store.get(self.key)
        except StorageError as e:
            logger.warning("Ledger unreadable, starting empty: %s", e)
            return []

        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ledger is not valid JSON, starting empty: %s", e)
            return []

        if not isinstance(data, list):
            logger.warning(
                "Ledger has unexpected type %s, starting empty", type(data).__name__
            )
            return []

        records = []
        for position, entry in enumerate(data):
            if not isinstance(entry, dict):
                logger.warning("Skipping ledger entry %d: not an object", position)
                continue
            try:
                records.append(
                    SessionRecord.from_dict(entry, fallback_id=f"legacy-{position}")
                )
            except ValueError as e:
                logger.warning("Skipping ledger entry %d: %s", position, e)
        return records
