"""Text payloads returned by the wisdom provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field


class Quote(BaseModel):
    """Ambient quote shown at startup."""

    quote: str = Field(..., description="The Zen quote")
    author: str = Field(..., description="Attributed author or '佚名'")
    advice: str = Field(..., description="One-sentence posture/breathing tip")


class Blessing(BaseModel):
    """Congratulation shown after a completed session."""

    title: str = Field(..., description="Four-character poetic title")
    message: str = Field(..., description="Short Zen-style blessing")


T = TypeVar("T", Quote, Blessing)

WisdomSource = Literal["remote", "fallback"]


@dataclass(frozen=True)
class WisdomResult(Generic[T]):
    """Outcome of a fetch-or-fallback call.

    ``value`` is always usable. ``error`` describes why the fallback was
    used; it is None both on success and when no credential is configured.
    """

    value: T
    source: WisdomSource
    error: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


def response_schema(model: type[BaseModel]) -> dict:
    """Build a Gemini ``responseSchema`` for a flat all-string model."""
    properties = {}
    for name, field in model.model_fields.items():
        prop = {"type": "STRING"}
        if field.description:
            prop["description"] = field.description
        properties[name] = prop
    return {
        "type": "OBJECT",
        "properties": properties,
        "required": list(model.model_fields),
    }
