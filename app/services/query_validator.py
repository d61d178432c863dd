"""
Boundary validation for food search queries.

Runs before the cache or the model is touched: a rejected query never costs an
external call.
"""

import logging
import re

from app.core.config import QUERY_MAX_LENGTH, QUERY_MIN_LENGTH
from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

# Letters, digits, whitespace, hyphen, period, comma
_ALLOWED_QUERY = re.compile(r"[a-zA-Z0-9\s\-.,]+")

LENGTH_REASON = f"Query must be between {QUERY_MIN_LENGTH} and {QUERY_MAX_LENGTH} characters"
CHARSET_REASON = "Query contains invalid characters"
TYPE_REASON = "Query must be a string"


def validate_query(raw_query: object) -> str:
    """Return the trimmed query, or raise ValidationError with a human-readable reason."""
    if not isinstance(raw_query, str):
        raise ValidationError(TYPE_REASON)
    query = raw_query.strip()
    if not QUERY_MIN_LENGTH <= len(query) <= QUERY_MAX_LENGTH:
        logger.info("[validator] REJECT length=%d", len(query))
        raise ValidationError(LENGTH_REASON)
    if not _ALLOWED_QUERY.fullmatch(query):
        logger.info("[validator] REJECT charset query=%r", query[:40])
        raise ValidationError(CHARSET_REASON)
    return query
