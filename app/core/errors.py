"""
Application errors for clean API error handling.

ValidationError maps to 400; ConfigurationError, ExternalServiceError and
ParseError map to 500. Only ExternalServiceError may be retried, and only when
``retryable`` is set.
"""


class FoodLookupError(Exception):
    """Base class for errors raised while answering a food safety query."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(FoodLookupError):
    """Raised when a query fails boundary validation (length or character set)."""


class ConfigurationError(FoodLookupError):
    """Raised when a required setting (e.g. the OpenAI API key) is missing."""


class ExternalServiceError(FoodLookupError):
    """Raised when the model call fails or returns a non-success status."""

    def __init__(self, message: str, *, retryable: bool = False, status_code: int | None = None) -> None:
        self.retryable = retryable
        self.status_code = status_code
        super().__init__(message)


class ParseError(FoodLookupError):
    """Raised when the model reply holds no usable FoodSafetyRecord JSON."""
