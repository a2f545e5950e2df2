"""
Rate Limiter Configuration for manual scrape triggers

Enforces a minimum interval between manual ingestion triggers so callers
cannot hammer the third-party sources through our endpoints.

Key decisions:
- Keyed by route + client address (limits are per endpoint)
- Memory storage unless RATELIMIT_STORAGE_URI points at Redis
- Limits come from app config so deployments can tune them
"""

import logging

from flask import current_app, request
from flask_limiter import Limiter

logger = logging.getLogger(__name__)


def client_address() -> str:
    """Client address, honoring the first X-Forwarded-For hop."""
    forwarded = request.headers.get('X-Forwarded-For', '')
    address = forwarded.split(',')[0].strip() if forwarded else request.remote_addr
    return address or 'unknown'


def get_rate_limit_key():
    return f"ip:{client_address()}"


# Per-endpoint rate limits, resolved from app config at request time
RATE_LIMITS = {
    "scrape_trigger": lambda: current_app.config.get("SCRAPE_TRIGGER_LIMIT", "1 per 30 seconds"),
    "cache_clear": lambda: current_app.config.get("CACHE_CLEAR_LIMIT", "1 per 10 seconds"),
}

# Routes declare their limits with @limiter.limit(RATE_LIMITS[...])
limiter = Limiter(
    key_func=get_rate_limit_key,
    key_prefix="rate_limit",
)


def init_limiter(app):
    """
    Initialize Flask-Limiter with the app.

    Call this in app.py after creating the Flask app:
        from utils.rate_limiter import init_limiter
        limiter = init_limiter(app)

    Storage and header settings are read from app.config
    (RATELIMIT_STORAGE_URI, RATELIMIT_HEADERS_ENABLED).

    Returns the limiter instance for decorator use.
    """
    limiter.init_app(app)
    logger.info(f"Rate limiter initialized with storage: {app.config.get('RATELIMIT_STORAGE_URI')}")
    return limiter
