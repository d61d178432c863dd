"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Values are read once at import and treated as read-only afterwards.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _env_positive_float(name: str, default: float) -> float:
    value = _env_float(name, default)
    if value <= 0:
        raise ValueError(f"{name} must be a positive number of seconds, got {value!r}")
    return value


# Runtime mode: "production" hides internal error details from API responses
APP_ENV: str = os.getenv("APP_ENV", "development").strip().lower() or "development"

# OpenAI (food safety lookups)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)
LLM_MAX_TOKENS: int = _env_int("LLM_MAX_TOKENS", 500)

# API timeouts (seconds) and retry policy. Backoff grows linearly: unit * attempt.
LLM_API_TIMEOUT: float = _env_float("LLM_API_TIMEOUT", 30.0)
LLM_MAX_RETRIES: int = _env_int("LLM_MAX_RETRIES", 3)
LLM_RETRY_BACKOFF: float = _env_float("LLM_RETRY_BACKOFF", 1.0)

# Request cache entry lifetime (seconds, must be positive)
CACHE_TTL: float = _env_positive_float("CACHE_TTL", 3600.0)

# Query validation
QUERY_MIN_LENGTH: int = 2
QUERY_MAX_LENGTH: int = 100

# Trusted medical websites allowed in sourceUrl
SOURCE_DOMAIN_LABELS: dict[str, str] = {
    "mayoclinic.org": "Mayo Clinic",
    "webmd.com": "WebMD",
    "nhs.uk": "NHS",
    "americanpregnancy.org": "American Pregnancy Association",
    "cdc.gov": "CDC",
    "healthline.com": "Healthline",
    "whattoexpect.com": "What to Expect",
    "babycenter.com": "BabyCenter",
    "parents.com": "Parents",
    "verywellfamily.com": "Verywell Family",
}
DEFAULT_SOURCE_DOMAINS: tuple[str, ...] = tuple(SOURCE_DOMAIN_LABELS)
ALLOWED_SOURCE_DOMAINS: tuple[str, ...] = tuple(
    d.strip().lower()
    for d in os.getenv("ALLOWED_SOURCE_DOMAINS", ",".join(DEFAULT_SOURCE_DOMAINS)).split(",")
    if d.strip()
) or DEFAULT_SOURCE_DOMAINS

# CORS origin for the UI
FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:8501").strip()

# Backend base URL used by the Streamlit UI
API_BASE: str = os.getenv("API_BASE", "http://localhost:8000").strip()
UI_REQUEST_TIMEOUT: float = 10.0
UI_MAX_RETRIES: int = 3
UI_RETRY_DELAY: float = 1.0
