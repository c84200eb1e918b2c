"""Shared test fixtures and configuration.

Every test runs with platform directories redirected into *tmp_path* and
without a Gemini key in the environment, so nothing touches the real user
profile or the network.
"""

from __future__ import annotations

import logging
from datetime import date
from unittest.mock import patch

import pytest

from zhanzhuang.models.session import SessionRecord
from zhanzhuang.models.timer import ManualTickScheduler, TimerEngine
from zhanzhuang.services.wisdom import WisdomProvider
from zhanzhuang.storage.history import HistoryStore
from zhanzhuang.storage.kv import MemoryKeyValueStore

TODAY = date(2026, 3, 15)  # a Sunday


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Redirect config/data/log dirs and clear API key variables."""
    import zhanzhuang.utils.logger as logger_mod
    from zhanzhuang.services.config_service import get_config_service

    for var in ("GEMINI_API_KEY", "API_KEY"):
        monkeypatch.delenv(var, raising=False)

    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    log_dir = tmp_path / "logs"

    get_config_service.cache_clear()
    original_logger = logger_mod._logger
    logger_mod._logger = None

    with patch("zhanzhuang.services.config_service.user_config_dir", return_value=str(config_dir)), \
            patch("zhanzhuang.services.config_service.user_data_dir", return_value=str(data_dir)), \
            patch("zhanzhuang.utils.logger.user_log_dir", return_value=str(log_dir)), \
            patch("platformdirs.user_data_dir", return_value=str(data_dir)):
        yield tmp_path

    get_config_service.cache_clear()
    app_logger = logging.getLogger("zhanzhuang")
    for handler in list(app_logger.handlers):
        handler.close()
        app_logger.removeHandler(handler)
    app_logger.propagate = True
    logger_mod._logger = original_logger


# ---------------------------------------------------------------------------
# Core objects
# ---------------------------------------------------------------------------


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def scheduler() -> ManualTickScheduler:
    return ManualTickScheduler()


@pytest.fixture()
def engine(scheduler) -> TimerEngine:
    return TimerEngine(scheduler, duration_seconds=5)


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def history(kv) -> HistoryStore:
    store = HistoryStore(kv)
    store.load()
    return store


@pytest.fixture()
def offline_wisdom() -> WisdomProvider:
    """Provider without a key: always answers with the static texts."""
    return WisdomProvider(api_key=None)


def make_record(day: str, duration: int = 600, record_id: str | None = None) -> SessionRecord:
    return SessionRecord(id=record_id or f"id-{day}", duration_seconds=duration, date=day)
