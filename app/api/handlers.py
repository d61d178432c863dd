"""
API handlers: call the search service, cancel work the client no longer waits for.

Responsibility: Bridge HTTP types and services. Lives in the API layer so
services stay free of FastAPI/HTTP types. Errors propagate to the handlers in
app.api.exception_handlers.
"""

import asyncio
import contextlib
import logging

from fastapi import Request

from app.schemas.food import SearchResult
from app.services.search_service import FoodSearchService

logger = logging.getLogger(__name__)

DISCONNECT_POLL_INTERVAL = 0.5


class ClientDisconnected(Exception):
    """The HTTP client went away before the lookup finished."""


async def handle_search(request: Request, service: FoodSearchService, query: object) -> SearchResult:
    """
    Run service.search as a task. If the client disconnects first, cancel the task
    (the in-flight model call is abandoned and not retried) and raise ClientDisconnected.
    """
    task = asyncio.create_task(service.search(query))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_INTERVAL)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("[api:handle_search] client disconnected; cancelling lookup")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()
