"""
HTTP client the Streamlit UI uses to call POST /api/search.

Retries transport errors and 5xx responses with a linearly growing delay;
400 responses are raised at once. The sourceUrl is checked again on this side
so the UI never links to an untrusted site.
"""

import logging
import time
from typing import Any

import requests

from app.core.config import API_BASE, UI_MAX_RETRIES, UI_REQUEST_TIMEOUT, UI_RETRY_DELAY
from app.services.source_validation import is_trusted_source_url

logger = logging.getLogger(__name__)


class FoodSearchClientError(Exception):
    """Raised when the backend cannot answer a search."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Request failed ({response.status_code})"
    if isinstance(body, dict) and body.get("error"):
        details = body.get("details")
        return f"{body['error']}: {details}" if isinstance(details, str) and details else str(body["error"])
    return f"Request failed ({response.status_code})"


def search_food(
    query: str,
    api_base: str = API_BASE,
    timeout: float = UI_REQUEST_TIMEOUT,
    max_retries: int = UI_MAX_RETRIES,
    retry_delay: float = UI_RETRY_DELAY,
    session: Any = None,
) -> dict[str, Any]:
    """Return the {"data": ..., "metadata": ...} payload for query."""
    http = session or requests
    url = f"{api_base.rstrip('/')}/api/search"
    last_error: FoodSearchClientError | None = None

    for attempt in range(1, max_retries + 1):
        try:
            response = http.post(url, json={"query": query}, timeout=timeout)
        except requests.RequestException as e:
            last_error = FoodSearchClientError(f"Backend not reachable: {e}")
        else:
            if response.status_code < 500 and not response.ok:
                raise FoodSearchClientError(_error_message(response), response.status_code)
            if response.ok:
                return _checked_payload(response)
            last_error = FoodSearchClientError(_error_message(response), response.status_code)

        logger.warning("[ui_client] attempt=%d/%d failed: %s", attempt, max_retries, last_error)
        if attempt < max_retries:
            time.sleep(retry_delay * attempt)

    raise last_error or FoodSearchClientError("Failed to fetch food safety information after multiple attempts")


def _checked_payload(response: requests.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as e:
        raise FoodSearchClientError("Invalid response format") from e
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise FoodSearchClientError("Invalid response format")
    data = payload["data"]
    source_url = data.get("sourceUrl")
    if source_url is not None and not is_trusted_source_url(source_url):
        logger.warning("[ui_client] dropping untrusted sourceUrl=%r", source_url)
        data.pop("sourceUrl")
    return payload
