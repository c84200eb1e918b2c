"""Tests for the application logger utility."""

from __future__ import annotations

import logging

from zhanzhuang.utils.logger import get_logger, log_file_path


def test_get_logger_creates_log_file(isolated_dirs):
    """Logger creates the log file inside user_log_dir."""
    logger = get_logger()

    log_file = isolated_dirs / "logs" / "zhanzhuang.log"
    assert log_file.exists(), "Log file should be created on first use"
    assert isinstance(logger, logging.Logger)


def test_get_logger_returns_singleton():
    """Repeated calls return the same logger instance."""
    assert get_logger() is get_logger()
    assert len(get_logger().handlers) == 1


def test_named_logger_is_child_and_touches_no_files(isolated_dirs):
    child = get_logger("wisdom")
    assert child.name == "zhanzhuang.wisdom"
    assert not (isolated_dirs / "logs").exists()


def test_child_records_reach_the_file(isolated_dirs):
    """Messages from module loggers end up in the rotating file."""
    root = get_logger()
    get_logger("session").warning("hello from test")

    for handler in root.handlers:
        handler.flush()

    content = (isolated_dirs / "logs" / "zhanzhuang.log").read_text(encoding="utf-8")
    assert "hello from test" in content
    assert "[zhanzhuang.session]" in content


def test_app_logger_does_not_propagate():
    assert get_logger().propagate is False


def test_log_file_path_does_not_create_anything(isolated_dirs):
    assert log_file_path() == isolated_dirs / "logs" / "zhanzhuang.log"
    assert not (isolated_dirs / "logs").exists()
