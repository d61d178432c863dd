"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import logging

from fastapi import APIRouter, Request, Response

from app.api.handlers import ClientDisconnected, handle_search
from app.schemas.food import ErrorResponse, SearchRequest
from app.services.search_service import FoodSearchService

logger = logging.getLogger(__name__)
router = APIRouter()

# nginx convention for "client closed request"; nobody reads it
CLIENT_CLOSED_REQUEST = 499


def get_search_service(request: Request) -> FoodSearchService:
    return request.app.state.search_service


# --- System ---

@router.get("/health", tags=["system"])
def health() -> dict:
    return {"status": "ok"}


# --- Search ---

@router.post(
    "/api/search",
    tags=["search"],
    summary="Is this food safe during pregnancy?",
    description="Validate the query, answer from cache or the model. 400 on invalid input, 500 on lookup failure.",
    response_model=None,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def post_search(body: SearchRequest, request: Request) -> Response | dict:
    logger.info("[api:post_search] IN  query=%r", body.query[:100])
    service = get_search_service(request)
    try:
        result = await handle_search(request, service, body.query)
    except ClientDisconnected:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    logger.info("[api:post_search] OUT name=%r model=%s", result.data.name, result.metadata.model)
    return result.to_payload()
