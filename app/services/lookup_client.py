"""
Lookup client: ask the model whether a food is safe during pregnancy.

Responsibility: build the prompt, call the model with timeout and retries, pull
the JSON object out of the reply, validate it into a FoodSafetyRecord and clear
untrusted source URLs. Stateless between calls; caching is the caller's job.
"""

import asyncio
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable

from pydantic import ValidationError as SchemaValidationError

from app.agent.llm import build_client, chat_completion
from app.core.config import (
    ALLOWED_SOURCE_DOMAINS,
    LLM_API_TIMEOUT,
    LLM_MAX_RETRIES,
    LLM_MAX_TOKENS,
    LLM_RETRY_BACKOFF,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
    SOURCE_DOMAIN_LABELS,
)
from app.core.errors import ConfigurationError, ExternalServiceError, ParseError
from app.schemas.food import FoodSafetyRecord, SearchMetadata, SearchResult
from app.services.source_validation import enforce_trusted_source

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*(.*?)\s*```", re.DOTALL)


def build_system_prompt(domains: Iterable[str]) -> str:
    sites = "\n".join(
        f"   - {SOURCE_DOMAIN_LABELS[d]} ({d})" if d in SOURCE_DOMAIN_LABELS else f"   - {d}"
        for d in domains
    )
    return f"""You are a pregnancy food safety expert. You MUST respond with a valid JSON object. Your response should be a single JSON object with the following structure:

{{
  "name": string,
  "isSafe": boolean,
  "confidence": number (0-1),
  "explanation": string,
  "safeQuantity": string (optional),
  "risks": string[] (optional),
  "benefits": string[] (optional),
  "alternatives": string[] (optional),
  "sourceUrl": string
}}

IMPORTANT:
1. Your response MUST be a valid JSON object
2. Do not include any text before or after the JSON object
3. Do not include markdown formatting or code fences
4. ALWAYS include a sourceUrl field with a real, working URL from one of these trusted medical websites:
{sites}
5. The sourceUrl must be a direct link to the specific food safety information
6. If you cannot find a specific URL, use the main website URL of one of these sources"""


def build_user_prompt(query: str) -> str:
    return (
        f"Is {query} safe to eat during pregnancy? Respond with a valid JSON object containing the "
        "safety information. Make sure to include a sourceUrl from one of the trusted medical websites."
    )


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def extract_json_object(content: str) -> dict[str, Any]:
    """
    Parse the model reply: whole text first, then the first fenced code block,
    then the outermost {...} span. Raises ParseError when none yields a JSON object.
    """
    text = (content or "").strip()
    if not text:
        raise ParseError("Empty response from model")

    parsed = _loads_object(text)
    if parsed is not None:
        return parsed

    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        parsed = _loads_object(fenced.group(1))
        if parsed is not None:
            logger.info("[lookup:parse] recovered JSON from fenced block")
            return parsed

    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        parsed = _loads_object(text[start : end + 1])
        if parsed is not None:
            logger.info("[lookup:parse] recovered JSON from surrounding text")
            return parsed

    raise ParseError("Response is not in valid JSON format")


def parse_record(content: str, domains: Iterable[str] = ALLOWED_SOURCE_DOMAINS) -> FoodSafetyRecord:
    """Reply text -> validated FoodSafetyRecord with a trusted (or no) sourceUrl."""
    payload = extract_json_object(content)
    try:
        record = FoodSafetyRecord.model_validate(payload)
    except SchemaValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ParseError(f"Model reply does not match the food safety schema: {', '.join(fields)}") from e
    return enforce_trusted_source(record, domains)


class LookupClient:
    """Food safety lookups against the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        model: str = OPENAI_LLM_MODEL,
        timeout: float = LLM_API_TIMEOUT,
        max_retries: int = LLM_MAX_RETRIES,
        retry_backoff: float = LLM_RETRY_BACKOFF,
        max_tokens: int = LLM_MAX_TOKENS,
        allowed_domains: Iterable[str] = ALLOWED_SOURCE_DOMAINS,
        client: Any = None,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.max_tokens = max_tokens
        self.allowed_domains = tuple(allowed_domains)
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = build_client(self.api_key, self.timeout)
        return self._client

    def build_messages(self, query: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": build_system_prompt(self.allowed_domains)},
            {"role": "user", "content": build_user_prompt(query)},
        ]

    async def lookup(self, query: str) -> SearchResult:
        """
        Look up one food. Raises ConfigurationError (no API key, nothing sent),
        ExternalServiceError (after retries are exhausted or on a non-retryable status)
        or ParseError (never retried).
        """
        if not self.api_key:
            raise ConfigurationError("OpenAI API key is not configured")

        logger.info("[lookup] IN  query=%r", query)
        messages = self.build_messages(query)
        client = self._get_client()
        last_error: ExternalServiceError | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                completion = await chat_completion(
                    client,
                    messages,
                    model=self.model,
                    max_tokens=self.max_tokens,
                    timeout=self.timeout,
                )
            except ExternalServiceError as e:
                last_error = e
                if not e.retryable:
                    logger.warning("[lookup] attempt=%d/%d failed (not retryable): %s", attempt, self.max_retries, e)
                    raise
                logger.warning("[lookup] attempt=%d/%d failed: %s", attempt, self.max_retries, e)
                if attempt < self.max_retries:
                    delay = self.retry_backoff * attempt
                    logger.info("[lookup] backoff %.1fs before retry", delay)
                    await asyncio.sleep(delay)
                continue

            try:
                record = parse_record(completion.content, self.allowed_domains)
            except ParseError:
                logger.error("[lookup] unparseable reply raw=%r", completion.content[:500])
                raise
            result = SearchResult(
                data=record,
                metadata=SearchMetadata(
                    model=completion.model,
                    timestamp=datetime.now(timezone.utc).isoformat(),
                ),
            )
            logger.info("[lookup] OUT name=%r is_safe=%s attempts=%d", record.name, record.is_safe, attempt)
            return result

        raise ExternalServiceError(
            f"Failed to get response after {self.max_retries} attempts: {last_error}",
            retryable=False,
            status_code=last_error.status_code if last_error else None,
        ) from last_error
