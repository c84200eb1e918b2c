"""Logging for zhanzhuang.

Modules take a child logger with ``get_logger("history")`` and the like;
that call is free of side effects. The CLI callback calls ``get_logger()``
once, which attaches a rotating file handler under ``user_log_dir``. Until
then records follow the standard logging defaults, which is what tests see.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

APP_LOGGER = "zhanzhuang"
LOG_FILE = "zhanzhuang.log"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

_logger: logging.Logger | None = None


def log_file_path() -> Path:
    """Where the rotating log lives (not created by this call)."""
    return Path(user_log_dir(APP_LOGGER)) / LOG_FILE


def get_logger(name: str | None = None) -> logging.Logger:
    """``zhanzhuang.<name>`` for modules; the configured app logger without a name."""
    if name:
        return logging.getLogger(f"{APP_LOGGER}.{name}")

    global _logger
    if _logger is None:
        _logger = _configure(log_file_path())
    return _logger


def _configure(path: Path) -> logging.Logger:
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(logging.DEBUG)
    if not logger.handlers:
        logger.addHandler(handler)
    # The live timer owns the terminal; nothing may reach stderr.
    logger.propagate = False
    return logger
