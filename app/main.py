# Run from project root: uvicorn app.main:app --reload

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.exception_handlers import setup_exception_handlers
from app.api.routes import router
from app.core.cache import RequestCache
from app.core.config import APP_ENV, CACHE_TTL, FRONTEND_URL
from app.schemas.food import SearchResult
from app.services.lookup_client import LookupClient
from app.services.search_service import FoodSearchService

logging.basicConfig(level=logging.INFO)


def create_app(
    search_service: FoodSearchService | None = None,
    production: bool = APP_ENV == "production",
) -> FastAPI:
    """Build the API. The cache and lookup client are created once here and shared by all requests."""
    app = FastAPI(title="Pregnancy Food Safety API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[FRONTEND_URL],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    if search_service is None:
        search_service = FoodSearchService(LookupClient(), RequestCache[SearchResult](CACHE_TTL))
    app.state.search_service = search_service
    setup_exception_handlers(app, production=production)
    app.include_router(router)
    return app


app = create_app()
