"""
Food search: validate the query, serve from cache, else look it up and cache the result.

Called by the API layer; no HTTP here. Failed lookups are never cached.
"""

import logging

from app.core.cache import RequestCache
from app.schemas.food import SearchResult
from app.services.lookup_client import LookupClient
from app.services.query_validator import validate_query

logger = logging.getLogger(__name__)


class FoodSearchService:
    """Composes the query validator, the request cache and the lookup client."""

    def __init__(self, client: LookupClient, cache: RequestCache[SearchResult]) -> None:
        self.client = client
        self.cache = cache

    async def search(self, raw_query: object) -> SearchResult:
        query = validate_query(raw_query)
        cached = self.cache.get(query)
        if cached is not None:
            logger.info("[search] OUT cache hit query=%r", query)
            return cached
        result = await self.client.lookup(query)
        self.cache.put(query, result)
        return result
