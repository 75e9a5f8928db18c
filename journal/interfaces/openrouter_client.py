"""Client for an OpenAI-compatible chat completions endpoint (OpenRouter)."""

from __future__ import annotations

import json
import os
from typing import Any, Final, Mapping, Sequence

import httpx

DEFAULT_BASE_URL: Final = "https://openrouter.ai/api/v1"
APP_REFERER: Final = "https://contact-journal.app"
APP_TITLE: Final = "Contact Journal"


class LLMClientError(RuntimeError):
    """Raised when the completion endpoint errors or returns an unexpected payload."""


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    return value if value else default


def get_api_key() -> str:
    return os.getenv("OPENROUTER_API_KEY", "")


async def call_chat_completion(
    messages: Sequence[Mapping[str, str]],
    *,
    model: str,
    temperature: float,
    max_tokens: int,
) -> str:
    """
    Request a JSON-object completion and return the message content.

    Raises
    ------
    LLMClientError
        If the key is missing, an HTTP error occurs, or the response cannot be parsed.
    """

    api_key = get_api_key()
    if not api_key:
        raise LLMClientError("OPENROUTER_API_KEY is not configured")

    base_url = _get_env("OPENROUTER_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
    payload: dict[str, Any] = {
        "model": _get_env("OPENROUTER_MODEL", model),
        "messages": [dict(message) for message in messages],
        "temperature": temperature,
        "max_tokens": max_tokens,
        "response_format": {"type": "json_object"},
    }
    headers = {
        "Authorization": f"Bearer {api_key}",
        "HTTP-Referer": APP_REFERER,
        "X-Title": APP_TITLE,
        "Content-Type": "application/json",
    }

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(f"{base_url}/chat/completions", json=payload, headers=headers)
    except httpx.HTTPError as exc:  # pragma: no cover - network failure handling
        raise LLMClientError(f"Failed to contact completion endpoint: {exc}") from exc

    if response.status_code != 200:
        raise LLMClientError(
            f"Completion endpoint returned status {response.status_code}: {response.text}"
        )

    try:
        data = response.json()
    except json.JSONDecodeError as exc:
        raise LLMClientError("Failed to parse completion response as JSON") from exc

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise LLMClientError("Completion response missing 'choices[0].message.content'") from exc
    if not isinstance(content, str):
        raise LLMClientError("Completion content must be a string")

    return content
