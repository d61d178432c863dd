"""
Integration tests for POST /api/search and GET /health.

The app is built with create_app() around a LookupClient backed by FakeOpenAI,
so tests exercise validation, caching and error mapping without network access.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import openai
import pytest
from fastapi.testclient import TestClient

from app.api.handlers import ClientDisconnected, handle_search
from app.core.cache import RequestCache
from app.core.errors import ValidationError
from app.main import create_app
from app.services.lookup_client import LookupClient
from app.services.search_service import FoodSearchService
from conftest import FakeOpenAI, completion, json_completion, openai_request


def build(fake: FakeOpenAI, api_key: str = "test-api-key", production: bool = False) -> tuple[TestClient, FoodSearchService]:
    client = LookupClient(api_key=api_key, client=fake, retry_backoff=0.0, max_retries=3)
    service = FoodSearchService(client, RequestCache(ttl_seconds=3600))
    return TestClient(create_app(service, production=production)), service


def test_health() -> None:
    client, _ = build(FakeOpenAI(completion("{}")))
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_search_returns_record_and_metadata(salmon_payload) -> None:
    """POST /api/search returns 200 with the model payload unmodified and its model name."""
    client, _ = build(FakeOpenAI(json_completion(salmon_payload, model="gpt-4")))
    response = client.post("/api/search", json={"query": "salmon"})
    assert response.status_code == 200
    body = response.json()
    assert body["data"] == salmon_payload
    assert body["metadata"]["model"] == "gpt-4"
    assert body["metadata"]["timestamp"]


def test_search_is_cached_per_normalized_query(salmon_payload) -> None:
    fake = FakeOpenAI(json_completion(salmon_payload))
    client, _ = build(fake)
    first = client.post("/api/search", json={"query": "Salmon"})
    second = client.post("/api/search", json={"query": "salmon "})
    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()
    assert len(fake.calls) == 1


def test_failed_lookup_is_not_cached(salmon_payload) -> None:
    fake = FakeOpenAI(completion("no json here"), json_completion(salmon_payload))
    client, service = build(fake)
    assert client.post("/api/search", json={"query": "salmon"}).status_code == 500
    assert len(service.cache) == 0
    assert client.post("/api/search", json={"query": "salmon"}).status_code == 200
    assert len(fake.calls) == 2


@pytest.mark.parametrize(
    "query, reason",
    [
        ("a", "Query must be between 2 and 100 characters"),
        ("x" * 101, "Query must be between 2 and 100 characters"),
        ("salmon<script>", "Query contains invalid characters"),
    ],
)
def test_invalid_query_returns_400_without_lookup(query: str, reason: str) -> None:
    fake = FakeOpenAI(completion("{}"))
    client, _ = build(fake)
    response = client.post("/api/search", json={"query": query})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid input", "details": reason}
    assert fake.calls == []


@pytest.mark.parametrize("body", [{}, {"query": 123}, {"q": "salmon"}])
def test_malformed_body_returns_400_error_shape(body: dict) -> None:
    fake = FakeOpenAI(completion("{}"))
    client, _ = build(fake)
    response = client.post("/api/search", json=body)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid input"
    assert fake.calls == []


def test_non_json_body_returns_400() -> None:
    client, _ = build(FakeOpenAI(completion("{}")))
    response = client.post("/api/search", content=b"not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert set(response.json()) == {"error", "details"}


def test_missing_api_key_returns_500() -> None:
    fake = FakeOpenAI(completion("{}"))
    client, _ = build(fake, api_key="")
    response = client.post("/api/search", json={"query": "salmon"})
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to fetch food safety information"
    assert fake.calls == []


def test_persistent_transport_failure_returns_500_after_retries() -> None:
    fake = FakeOpenAI(openai.APIConnectionError(request=openai_request()))
    client, _ = build(fake)
    response = client.post("/api/search", json={"query": "salmon"})
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to fetch food safety information"
    assert len(fake.calls) == 3


def test_production_mode_hides_internal_details() -> None:
    fake = FakeOpenAI(openai.APIConnectionError(message="secret upstream detail", request=openai_request()))
    client, _ = build(fake, production=True)
    response = client.post("/api/search", json={"query": "salmon"})
    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to fetch food safety information",
        "details": "An unexpected error occurred",
    }


def test_production_mode_still_reports_validation_reason() -> None:
    client, _ = build(FakeOpenAI(completion("{}")), production=True)
    response = client.post("/api/search", json={"query": "?!"})
    assert response.status_code == 400
    assert response.json()["details"] == "Query contains invalid characters"


def test_unexpected_error_returns_500_shape() -> None:
    client, service = build(FakeOpenAI(completion("{}")))
    service.search = AsyncMock(side_effect=RuntimeError("boom"))
    client = TestClient(client.app, raise_server_exceptions=False)
    response = client.post("/api/search", json={"query": "salmon"})
    assert response.status_code == 500
    assert response.json()["error"] == "Internal Server Error"


def test_service_validation_error_maps_to_400() -> None:
    client, service = build(FakeOpenAI(completion("{}")))
    service.search = AsyncMock(side_effect=ValidationError("Query contains invalid characters"))
    response = client.post("/api/search", json={"query": "salmon"})
    assert response.status_code == 400


class _SlowService:
    """search() never finishes on its own; records whether it was cancelled."""

    def __init__(self) -> None:
        self.cancelled = False

    async def search(self, query: object):
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class _Request:
    def __init__(self, disconnected: bool) -> None:
        self.disconnected = disconnected

    async def is_disconnected(self) -> bool:
        return self.disconnected


def test_client_disconnect_cancels_lookup() -> None:
    service = _SlowService()
    with patch("app.api.handlers.DISCONNECT_POLL_INTERVAL", 0.01):
        with pytest.raises(ClientDisconnected):
            asyncio.run(handle_search(_Request(disconnected=True), service, "salmon"))
    assert service.cancelled


def test_connected_client_gets_result(salmon_payload) -> None:
    fake = FakeOpenAI(json_completion(salmon_payload))
    service = FoodSearchService(LookupClient(api_key="k", client=fake), RequestCache(ttl_seconds=60))
    result = asyncio.run(handle_search(_Request(disconnected=False), service, "salmon"))
    assert result.data.name == "Salmon"
