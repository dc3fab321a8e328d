from __future__ import annotations

import logging
import os
from typing import Any, Optional

from dotenv import load_dotenv
from groq import Groq

from h5inspector.errors import ExternalServiceError


LOGGER = logging.getLogger(__name__)


def get_client() -> Groq:
    load_dotenv()
    key = os.getenv("GROQ_API_KEY", "api_key")
    if not key or key.strip() in {"", "api_key"}:
        raise ExternalServiceError("GROQ_API_KEY missing or still placeholder. Update .env with your real key.")
    return Groq(api_key=key)


def chat_completion(
    messages: list[dict[str, Any]],
    model: str = "llama-3.3-70b-versatile",
    temperature: float = 0.7,
    max_tokens: int = 600,
    tools: Optional[list[dict[str, Any]]] = None,
    json_mode: bool = False,
    client: Any = None,
) -> Any:
    """Single Groq chat completion; returns the first choice's message.

    No retries: any transport, auth or API error surfaces as ExternalServiceError.
    """
    client = client or get_client()
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_completion_tokens": max_tokens,
    }
    if tools:
        kwargs["tools"] = tools
        kwargs["tool_choice"] = "auto"
    elif json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    try:
        resp = client.chat.completions.create(**kwargs)
    except Exception as exc:
        status = getattr(exc, "status_code", None)
        LOGGER.error("Groq chat completion failed (status=%s): %s", status, exc)
        raise ExternalServiceError(f"Groq chat completion failed: {exc}") from exc

    if not getattr(resp, "choices", None):
        raise ExternalServiceError("Groq returned no choices.")
    return resp.choices[0].message
