"""String key-value stores backing the history ledger."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path

from zhanzhuang.exceptions import StorageError

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(ABC):
    """Minimal persistent map of string keys to string values."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent.

        Raises:
            StorageError: the value exists but cannot be read
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value.

        Raises:
            StorageError: the value could not be written
        """


class MemoryKeyValueStore(KeyValueStore):
    """In-process store; contents vanish with the object."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class FileKeyValueStore(KeyValueStore):
    """One file per key, ``<directory>/<key>.json``."""

    def __init__(self, directory: Path | None = None):
        if directory is None:
            from platformdirs import user_data_dir

            directory = Path(user_data_dir("zhanzhuang"))

        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(key, f"read failed: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, encoding="utf-8")
            tmp.chmod(0o600)
            # Readers never see a half-written ledger.
            tmp.replace(path)
        except OSError as e:
            raise StorageError(key, f"write failed: {e}") from e
