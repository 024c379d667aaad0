# onward_app/integrations/llm.py

import logging
from typing import Optional

import requests

from onward_app.config.constants import CHAT_SYSTEM_PROMPT
from onward_app.config.settings import settings

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class LLMError(Exception):
    """Base class for chat‑assistant upstream failures."""


class LLMClientError(LLMError):
    """The request never produced a usable HTTP response (transport, timeout, non‑2xx)."""


class LLMResponseFormatError(LLMError):
    """The upstream answered, but not in the expected Messages API shape."""


def generate_response(message: str, timeout: Optional[float] = None) -> str:
    """
    Sends one user message to the Anthropic Messages API and returns the
    assistant's text.
    """
    headers = {
        "Content-Type": "application/json",
        "anthropic-version": settings.llm_api_version,
        "x-api-key": settings.llm_api_key,
    }
    payload = {
        "model": settings.llm_model_name,
        "max_tokens": settings.llm_max_tokens,
        "system": CHAT_SYSTEM_PROMPT,
        "messages": [{"role": "user", "content": message}],
    }

    try:
        response = requests.post(
            settings.llm_api_endpoint,
            json=payload,
            headers=headers,
            timeout=timeout or settings.llm_timeout_sec,
        )
    except requests.exceptions.RequestException as e:
        logger.error("Chat upstream request failed: %s", e)
        raise LLMClientError(f"Chat upstream request failed: {e}") from e

    if not response.ok:
        logger.error("Chat upstream error: %s %s", response.status_code, response.reason)
        raise LLMClientError(f"Chat upstream returned HTTP {response.status_code}")

    try:
        data = response.json()
        text = data["content"][0]["text"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.error("Unexpected chat upstream response format: %s", e)
        raise LLMResponseFormatError("Invalid response from AI service") from e

    if not isinstance(text, str) or not text:
        raise LLMResponseFormatError("Invalid response from AI service")
    return text
