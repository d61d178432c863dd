"""
Shared fixtures: a stand-in for the AsyncOpenAI client so no test touches the network.
"""

import json
from types import SimpleNamespace
from typing import Any

import httpx
import pytest

OPENAI_URL = "https://api.openai.com/v1/chat/completions"

SALMON = {
    "name": "Salmon",
    "isSafe": True,
    "confidence": 0.95,
    "explanation": "Salmon is safe to eat during pregnancy when properly cooked.",
    "sourceUrl": "https://www.mayoclinic.org/pregnancy/food-safety",
}


def completion(content: str, model: str = "gpt-4") -> SimpleNamespace:
    """Shape of an openai ChatCompletion, limited to what the app reads."""
    return SimpleNamespace(
        model=model,
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
    )


def json_completion(payload: dict[str, Any], model: str = "gpt-4") -> SimpleNamespace:
    return completion(json.dumps(payload), model=model)


def openai_request() -> httpx.Request:
    return httpx.Request("POST", OPENAI_URL)


class FakeCompletions:
    """Replays outcomes in order (the last one repeats). Exceptions are raised."""

    def __init__(self, outcomes: list[Any]) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeOpenAI:
    def __init__(self, *outcomes: Any) -> None:
        self.completions = FakeCompletions(list(outcomes))
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.completions.calls


@pytest.fixture
def salmon_payload() -> dict[str, Any]:
    return dict(SALMON)
