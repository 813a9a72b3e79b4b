"""Gemini ``generateContent`` client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from fantasytoolbox.settings import DEFAULT_GEMINI_BASE, DEFAULT_GEMINI_MODEL, DEFAULT_TIMEOUT


logger = logging.getLogger(__name__)

RATE_LIMIT_RETRY_SECONDS = 60

EMPTY_RESPONSE_MESSAGE = "Unable to generate recommendations at this time."
GENERIC_FAILURE_MESSAGE = "Sorry, I'm unable to provide recommendations right now. Please try again later."
NOT_CONFIGURED_MESSAGE = "AI recommendations are not configured. Set GEMINI_API_KEY to enable them."

_STATUS_MESSAGES: Mapping[int, str] = {
    400: "The AI service could not process this request.",
    401: "The AI service rejected our credentials. Please contact support.",
    429: (
        "The AI service is busy right now. Please retry in about "
        f"{RATE_LIMIT_RETRY_SECONDS} seconds."
    ),
}
_UNAVAILABLE_MESSAGE = "The AI service is temporarily unavailable. Please try again later."


@dataclass(frozen=True)
class GenerationResult:
    text: str
    ok: bool = True
    status_code: Optional[int] = None
    retry_after: Optional[int] = None

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


def status_message(status_code: int) -> str:
    return _STATUS_MESSAGES.get(status_code, _UNAVAILABLE_MESSAGE)


def extract_text(payload: Any) -> Optional[str]:
    """Return ``candidates[0].content.parts[0].text`` or None when any level is absent."""

    if not isinstance(payload, Mapping):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], Mapping):
        return None
    content = candidates[0].get("content")
    if not isinstance(content, Mapping):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], Mapping):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None


class GeminiClient:
    """Single-turn text generation. ``generate`` never raises."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = DEFAULT_GEMINI_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _request_body(self, prompt: str, max_output_tokens: int) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": 0.7,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": max_output_tokens,
            },
        }

    async def generate(self, prompt: str, *, max_output_tokens: int = 2048) -> GenerationResult:
        if not self.configured:
            logger.warning("Gemini API key missing; skipping generation")
            return GenerationResult(text=NOT_CONFIGURED_MESSAGE, ok=False)

        url = f"{self._base_url}/v1beta/models/{self._model}:generateContent"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    params={"key": self._api_key},
                    json=self._request_body(prompt, max_output_tokens),
                )
                if not response.is_success:
                    logger.error("Gemini API error: %s - %s", response.status_code, response.text[:300])
                    retry_after = RATE_LIMIT_RETRY_SECONDS if response.status_code == 429 else None
                    return GenerationResult(
                        text=status_message(response.status_code),
                        ok=False,
                        status_code=response.status_code,
                        retry_after=retry_after,
                    )
                payload = response.json()
        except Exception:
            logger.exception("Gemini request failed")
            return GenerationResult(text=GENERIC_FAILURE_MESSAGE, ok=False)

        logger.info("Gemini response length: %d characters", len(response.content))
        text = extract_text(payload)
        if text is None or not text.strip():
            logger.warning("Gemini returned no usable text")
            return GenerationResult(text=EMPTY_RESPONSE_MESSAGE, ok=False, status_code=response.status_code)
        return GenerationResult(text=text, status_code=response.status_code)


__all__ = [
    "EMPTY_RESPONSE_MESSAGE",
    "GENERIC_FAILURE_MESSAGE",
    "GeminiClient",
    "GenerationResult",
    "NOT_CONFIGURED_MESSAGE",
    "RATE_LIMIT_RETRY_SECONDS",
    "extract_text",
    "status_message",
]
