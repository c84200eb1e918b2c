"""Wiring of long-lived application objects.

The command layer builds one ``AppContext`` and passes it down; nothing in
the core reaches for module-level singletons.
"""

from __future__ import annotations

from dataclasses import dataclass

from zhanzhuang.services.config_service import ConfigService, get_config_service
from zhanzhuang.services.wisdom import WisdomProvider
from zhanzhuang.storage.history import HistoryStore
from zhanzhuang.storage.kv import FileKeyValueStore


@dataclass
class AppContext:
    config_service: ConfigService
    history: HistoryStore
    wisdom: WisdomProvider

    @property
    def default_minutes(self) -> int:
        return self.config_service.config.timer.default_minutes


def build_app_context(config_service: ConfigService | None = None) -> AppContext:
    """Create the config, loaded history ledger and wisdom client."""
    config_service = config_service or get_config_service()
    history = HistoryStore(FileKeyValueStore(config_service.data_dir))
    history.load()
    return AppContext(
        config_service=config_service,
        history=history,
        wisdom=WisdomProvider.from_config(config_service),
    )
