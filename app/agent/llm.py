"""
Agent LLM: one OpenAI chat completion call.

Maps openai SDK failures onto the app error taxonomy so the lookup client can
decide what to retry. The SDK's own retries are disabled; retry policy lives in
app.services.lookup_client.
"""

import logging
from dataclasses import dataclass
from typing import Any

import openai
from openai import AsyncOpenAI

from app.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Completion:
    """Text of the first choice plus the model identifier the service reported."""

    content: str
    model: str


def build_client(api_key: str, timeout: float) -> AsyncOpenAI:
    """Create the async OpenAI client. max_retries=0: retries are handled by the caller."""
    return AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)


def _is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


async def chat_completion(
    client: Any,
    messages: list[dict[str, str]],
    model: str,
    max_tokens: int,
    timeout: float,
) -> Completion:
    """
    Call chat completions once. Returns the first choice's content (may be empty).
    Raises ExternalServiceError; retryable is set for timeouts, connection errors, 429 and 5xx.
    asyncio.CancelledError is not caught.
    """
    logger.info("[llm:openai] IN  model=%s messages=%d timeout=%.1f", model, len(messages), timeout)
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            timeout=timeout,
        )
    except openai.APITimeoutError as e:
        raise ExternalServiceError(f"Model request timed out after {timeout} seconds", retryable=True) from e
    except openai.APIConnectionError as e:
        raise ExternalServiceError(f"Network error: {e}", retryable=True) from e
    except openai.APIStatusError as e:
        raise ExternalServiceError(
            f"API error ({e.status_code}): {e.message}",
            retryable=_is_retryable_status(e.status_code),
            status_code=e.status_code,
        ) from e

    choices = getattr(response, "choices", None) or []
    if not choices:
        raise ExternalServiceError("Invalid API response: no choices returned")
    msg = getattr(choices[0], "message", None)
    out = (getattr(msg, "content", None) or "").strip()
    reported_model = getattr(response, "model", None) or model
    logger.info("[llm:openai] OUT model=%s response_len=%d", reported_model, len(out))
    logger.debug("[llm:openai] OUT response_full=%r", out)
    return Completion(content=out, model=reported_model)
