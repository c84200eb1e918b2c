"""Quotes and blessings from the Gemini API, with static fallbacks.

Both fetches make a single request and always produce a value: any failure
(no key, network error, bad status, unparseable or off-schema reply) turns
into the fallback text plus an error string in the returned ``WisdomResult``.
Logging that error is left to the caller.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from zhanzhuang.models.wisdom import (
    Blessing,
    Quote,
    T,
    WisdomResult,
    response_schema,
)
from zhanzhuang.services.config_service import ConfigService
from zhanzhuang.utils.logger import get_logger

logger = get_logger("wisdom")

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"

FALLBACK_QUOTE = Quote(
    quote="静心站立，感受天地的律动。",
    author="古德",
    advice="虚灵顶劲，沉肩坠肘，让气息自然流动。",
)

FALLBACK_BLESSING = Blessing(
    title="功德圆满",
    message="每一次静立都是对灵魂的洗涤，愿您气血充盈，神清气爽。",
)

AMBIENT_PROMPT = (
    "Generate a short Zen quote in Chinese related to standing meditation "
    "(Zhan Zhuang), internal energy, or mindfulness. Also provide a "
    "one-sentence tip for posture or breathing during Zhan Zhuang."
)

BLESSING_PROMPT = (
    "The user just finished {minutes} minutes of Zhan Zhuang (standing "
    "meditation). Generate a 4-character poetic title (e.g. 功德圆满, 气定神闲) "
    "and a short, encouraging Zen-style blessing in Chinese (max 30 words)."
)


class WisdomResponseError(ValueError):
    """The API answered, but not with usable text."""


class WisdomProvider:
    """Client for the two text-generation calls the timer makes."""

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = (api_key or "").strip() or None
        self.model = model
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config_service: ConfigService) -> WisdomProvider:
        gemini = config_service.config.gemini
        return cls(
            api_key=config_service.get_api_key(),
            model=gemini.model,
            endpoint=gemini.endpoint,
            timeout=gemini.timeout,
        )

    async def __aenter__(self) -> WisdomProvider:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def has_credential(self) -> bool:
        return self.api_key is not None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            kwargs: dict[str, Any] = {"base_url": self.endpoint}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ----- Public API -----
    async def fetch_ambient_wisdom(self) -> WisdomResult[Quote]:
        """Startup quote and posture tip."""
        return await self._fetch(AMBIENT_PROMPT, Quote, FALLBACK_QUOTE)

    async def fetch_completion_blessing(self, minutes: int) -> WisdomResult[Blessing]:
        """Blessing for a session of *minutes* whole minutes."""
        prompt = BLESSING_PROMPT.format(minutes=int(minutes))
        return await self._fetch(prompt, Blessing, FALLBACK_BLESSING)

    # ----- Internals -----
    async def _fetch(
        self, prompt: str, model_cls: type[T], fallback: T
    ) -> WisdomResult[T]:
        if not self.has_credential:
            # Running without a key is a supported mode, not a failure.
            logger.debug("No API key configured, using fallback %s", model_cls.__name__)
            return WisdomResult(value=fallback, source="fallback")

        try:
            text = await self._generate(prompt, response_schema(model_cls))
            value = model_cls.model_validate(json.loads(text))
        except Exception as e:
            return WisdomResult(
                value=fallback,
                source="fallback",
                error=f"{type(e).__name__}: {e}",
            )

        return WisdomResult(value=value, source="remote")

    async def _generate(self, prompt: str, schema: dict) -> str:
        """POST generateContent and return the concatenated reply text."""
        client = await self._get_client()
        response = await client.post(
            f"/models/{self.model}:generateContent",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.api_key or "",
            },
            json={
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": {
                    "responseMimeType": "application/json",
                    "responseSchema": schema,
                },
            },
        )
        response.raise_for_status()
        return extract_text(response.json())


def extract_text(payload: Any) -> str:
    """Pull the reply text out of a generateContent response body."""
    if not isinstance(payload, dict):
        raise WisdomResponseError("response body is not an object")

    candidates = payload.get("candidates") or []
    if not candidates:
        reason = (payload.get("promptFeedback") or {}).get("blockReason")
        raise WisdomResponseError(
            f"no candidates in response{f' (blocked: {reason})' if reason else ''}"
        )

    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
    if not text.strip():
        raise WisdomResponseError("empty response text")
    return text
