"""Configuration service for zhanzhuang.

ConfigService is the single owner of ``config.json``. It handles:

- Loading and saving the file (created with defaults on first run)
- The Gemini credential, with environment variables taking precedence
- Small mutations used by the ``config`` commands
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError

from zhanzhuang.exceptions import ConfigError
from zhanzhuang.models.config_models import AppConfig, clamp_minutes

# Checked in order; API_KEY is the variable older builds read.
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


class ConfigService:
    """Service for loading, saving and editing the application configuration."""

    def __init__(self):
        self.config_dir = Path(user_config_dir("zhanzhuang"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("zhanzhuang"))

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, creating the default file if missing."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Expected on first run
            self._config = AppConfig()
            self.save_config()
        except (OSError, ValidationError) as e:
            raise ConfigError(f"Failed to load config {self.config_path}: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Write the current configuration to disk."""
        if self._config is None:
            raise ConfigError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))
            self.config_path.chmod(0o600)
        except OSError as e:
            raise ConfigError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Replace the configuration with defaults."""
        self._config = AppConfig()
        self.save_config()
        return self._config

    def get_api_key(self) -> str | None:
        """Gemini API key from the environment, else from the config file."""
        for var in API_KEY_ENV_VARS:
            value = os.environ.get(var, "").strip()
            if value:
                return value
        return self.config.gemini.api_key

    def set_api_key(self, api_key: str | None) -> None:
        self.config.gemini.api_key = (api_key or "").strip() or None
        self.save_config()

    def set_default_minutes(self, minutes: int) -> int:
        """Store the default session length, clamped to 1..120. Returns the stored value."""
        minutes = clamp_minutes(minutes)
        self.config.timer.default_minutes = minutes
        self.save_config()
        return minutes

    def set_audio_enabled(self, enabled: bool) -> None:
        self.config.audio_enabled = bool(enabled)
        self.save_config()


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
