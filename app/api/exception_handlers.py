"""
Exception handlers: map app errors and malformed requests to the standard error shape.

Every error response is {"error": str, "details": str | null}. In production
mode 500 responses carry a generic details message instead of internal error text.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import APP_ENV
from app.core.errors import FoodLookupError, ValidationError

logger = logging.getLogger(__name__)

INVALID_INPUT = "Invalid input"
LOOKUP_FAILED = "Failed to fetch food safety information"
INTERNAL_ERROR = "Internal Server Error"
GENERIC_DETAILS = "An unexpected error occurred"


def error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "details": details})


def _public_details(message: str, production: bool) -> str:
    return GENERIC_DETAILS if production else message


def lookup_error_response(exc: FoodLookupError, production: bool = APP_ENV == "production") -> JSONResponse:
    """400 for ValidationError (reason always shown); 500 for every other lookup failure."""
    if isinstance(exc, ValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_INPUT, exc.message)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        LOOKUP_FAILED,
        _public_details(exc.message, production),
    )


def _describe_request_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts) or "Malformed request body"


def setup_exception_handlers(app: FastAPI, production: bool = APP_ENV == "production") -> None:
    """Register handlers on the app. Call once in create_app()."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Missing or non-string query, or a body that is not JSON at all
        logger.info("Malformed request on %s %s", request.method, request.url.path)
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_INPUT, _describe_request_error(exc))

    @app.exception_handler(FoodLookupError)
    async def lookup_error_handler(request: Request, exc: FoodLookupError) -> JSONResponse:
        if isinstance(exc, ValidationError):
            logger.info("Rejected query on %s %s: %s", request.method, request.url.path, exc.message)
        else:
            logger.error(
                "Lookup failed on %s %s: %s: %s",
                request.method,
                request.url.path,
                type(exc).__name__,
                exc.message,
            )
        return lookup_error_response(exc, production)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            INTERNAL_ERROR,
            _public_details(str(exc), production),
        )
