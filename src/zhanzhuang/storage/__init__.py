"""Persistent storage for the session ledger."""

from .history import AppendResult, HistoryStore, HISTORY_KEY
from .kv import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = [
    "AppendResult",
    "FileKeyValueStore",
    "HISTORY_KEY",
    "HistoryStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
]
