"""
Source URL checks against the trusted medical domain allow-list.

Repair policy: an untrusted or malformed sourceUrl is cleared. The record stays
usable; the UI simply shows no source link.
"""

import logging
from typing import Iterable
from urllib.parse import urlparse

from app.core.config import ALLOWED_SOURCE_DOMAINS
from app.schemas.food import FoodSafetyRecord

logger = logging.getLogger(__name__)


def _has_unsafe_chars(url: str) -> bool:
    # Browsers treat "\" as "/" and drop tabs/newlines, so the host they open can differ from urlparse's
    return any(ch == "\\" or ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url)


def is_trusted_source_url(url: str, domains: Iterable[str] = ALLOWED_SOURCE_DOMAINS) -> bool:
    """
    True when url is http(s) and its hostname is a trusted domain or a subdomain of one.
    "www.mayoclinic.org" matches "mayoclinic.org"; "notmayoclinic.org" does not.
    URLs with backslashes, whitespace, control characters or userinfo are never trusted.
    """
    if not url or not isinstance(url, str):
        return False
    url = url.strip()
    if _has_unsafe_chars(url):
        return False
    try:
        parsed = urlparse(url)
        host = parsed.hostname
        has_userinfo = "@" in parsed.netloc or parsed.username is not None or parsed.password is not None
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not host or has_userinfo:
        return False
    host = host.rstrip(".")
    for domain in domains:
        domain = domain.lower()
        if host == domain or host.endswith("." + domain):
            return True
    return False


def enforce_trusted_source(
    record: FoodSafetyRecord,
    domains: Iterable[str] = ALLOWED_SOURCE_DOMAINS,
) -> FoodSafetyRecord:
    """Return the record unchanged if its sourceUrl is absent or trusted, else a copy without it."""
    if record.source_url is None or is_trusted_source_url(record.source_url, domains):
        return record
    logger.warning("[source_validation] clearing untrusted sourceUrl=%r for name=%r", record.source_url, record.name)
    return record.model_copy(update={"source_url": None})
