"""Schemas for the food safety search endpoint and the model reply."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FoodSafetyRecord(BaseModel):
    """
    Safety answer for one food. Field aliases match the JSON the model and the UI use.
    Strict: a reply with "isSafe": "no" or a string confidence is rejected, not coerced.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, strict=True)

    name: str = Field(..., description="Food name as understood by the model.")
    is_safe: bool = Field(..., alias="isSafe")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Model confidence between 0 and 1.")
    explanation: str
    safe_quantity: str | None = Field(None, alias="safeQuantity")
    risks: list[str] | None = None
    benefits: list[str] | None = None
    alternatives: list[str] | None = None
    source_url: str | None = Field(None, alias="sourceUrl")

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys; absent optional fields are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SearchMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str = Field(..., description="Model identifier reported by the service.")
    timestamp: str = Field(..., description="ISO-8601 response time (UTC).")


class SearchResult(BaseModel):
    """One successful lookup: the record plus response metadata. Immutable."""

    model_config = ConfigDict(frozen=True)

    data: FoodSafetyRecord
    metadata: SearchMetadata

    def to_payload(self) -> dict[str, Any]:
        return {"data": self.data.to_payload(), "metadata": self.metadata.model_dump()}


class SearchRequest(BaseModel):
    """Request body for POST /api/search. Shape and characters are checked by the query validator."""

    query: str = Field(..., description="Food name, e.g. 'salmon'.")


class ErrorResponse(BaseModel):
    """Stable error shape returned for 400 and 500 responses."""

    error: str
    details: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [{"error": "Invalid input", "details": "Query contains invalid characters"}]
        }
    }
