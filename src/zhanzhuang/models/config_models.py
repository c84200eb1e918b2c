"""Configuration models for zhanzhuang."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

MIN_MINUTES = 1
MAX_MINUTES = 120


class TimerConfig(BaseModel):
    """Timer configuration."""

    default_minutes: int = Field(default=10, ge=MIN_MINUTES, le=MAX_MINUTES)


class GeminiConfig(BaseModel):
    """Generative-language API configuration."""

    api_key: str | None = Field(default=None, description="Gemini API key")
    model: str = Field(default="gemini-3-flash-preview")
    endpoint: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta"
    )
    timeout: float | None = Field(
        default=None, description="Request timeout in seconds (transport default if unset)"
    )

    @field_validator("api_key")
    @classmethod
    def blank_key_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("endpoint cannot be empty")
        return v.strip().rstrip("/")

    @property
    def has_key(self) -> bool:
        return self.api_key is not None


class AppConfig(BaseModel):
    """Main zhanzhuang configuration."""

    timer: TimerConfig = Field(default_factory=TimerConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    audio_enabled: bool = Field(default=False)


def clamp_minutes(minutes: int) -> int:
    """Clamp a minute count into the supported slider range."""
    return max(MIN_MINUTES, min(MAX_MINUTES, int(minutes)))
