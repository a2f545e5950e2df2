import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse, parse_qs
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "CollegeLacrosseScheduleBot/1.0 (+https://collegelacrosseschedule.com)"
DEFAULT_SOURCES_PATH = str(Path(__file__).parent / "scrapers" / "scrape_sources.yaml")

# Upstash serves the Redis protocol over TLS on the same host as its REST API
UPSTASH_TLS_PORT = 6379


def _redis_url_from_rest(rest_url: str, token: str) -> Optional[str]:
    """
    Convert an HTTPS REST endpoint + token into a rediss:// connection URL.

    Returns None when the URL cannot be parsed.
    """
    parsed = urlparse(rest_url)
    if not parsed.hostname:
        return None
    return f"rediss://default:{token}@{parsed.hostname}:{UPSTASH_TLS_PORT}"


def resolve_cache_credentials() -> Optional[Tuple[str, Optional[str]]]:
    """
    Resolve the remote cache endpoint and credential from the environment.

    Checked in order:
    - REDIS_URL + REDIS_TOKEN
    - KV_REST_API_URL + KV_REST_API_TOKEN
    - REDIS_URL alone (credential embedded as password or ?token=)
    - UPSTASH_REDIS_REST_URL + UPSTASH_REDIS_REST_TOKEN

    Returns:
        (redis_url, password) or None when no remote store is configured.
    """
    redis_url = os.getenv('REDIS_URL')
    redis_token = os.getenv('REDIS_TOKEN')

    if redis_url and redis_token:
        parsed = urlparse(redis_url)
        if parsed.scheme in ('http', 'https'):
            converted = _redis_url_from_rest(redis_url, redis_token)
            if converted:
                return converted, None
        elif parsed.scheme in ('redis', 'rediss'):
            return redis_url, redis_token

    kv_url = os.getenv('KV_REST_API_URL')
    kv_token = os.getenv('KV_REST_API_TOKEN')
    if kv_url and kv_token:
        converted = _redis_url_from_rest(kv_url, kv_token)
        if converted:
            return converted, None

    if redis_url and not redis_token:
        parsed = urlparse(redis_url)
        if parsed.scheme in ('redis', 'rediss'):
            return redis_url, None
        if parsed.scheme in ('http', 'https'):
            token = parse_qs(parsed.query).get('token', [None])[0] or parsed.password
            if token:
                converted = _redis_url_from_rest(redis_url, token)
                if converted:
                    return converted, None

    upstash_url = os.getenv('UPSTASH_REDIS_REST_URL')
    upstash_token = os.getenv('UPSTASH_REDIS_REST_TOKEN')
    if upstash_url and upstash_token:
        converted = _redis_url_from_rest(upstash_url, upstash_token)
        if converted:
            return converted, None

    return None


def _get_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        logger.warning(f"Invalid {name}, using default {default}")
        return default


@dataclass(frozen=True)
class ScraperSettings:
    """Settings shared by every outbound fetch and the cache factory."""
    user_agent: str
    http_timeout: float
    connect_timeout: float
    odds_api_key: Optional[str]
    sources_path: str
    cache_url: Optional[str] = None
    cache_password: Optional[str] = None

    @property
    def has_remote_cache(self) -> bool:
        return bool(self.cache_url)


def load_scraper_settings() -> ScraperSettings:
    """Build ScraperSettings from the current environment."""
    credentials = resolve_cache_credentials()
    cache_url, cache_password = credentials if credentials else (None, None)

    return ScraperSettings(
        user_agent=os.getenv('SCRAPER_USER_AGENT', DEFAULT_USER_AGENT),
        http_timeout=_get_float('SCRAPER_HTTP_TIMEOUT', 20.0),
        connect_timeout=_get_float('SCRAPER_CONNECT_TIMEOUT', 10.0),
        odds_api_key=os.getenv('ODDS_API_KEY') or None,
        sources_path=os.getenv('SCRAPE_SOURCES_PATH', DEFAULT_SOURCES_PATH),
        cache_url=cache_url,
        cache_password=cache_password,
    )


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')
    DEBUG = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Minimum interval between manual triggers, per route and client address
    SCRAPE_TRIGGER_LIMIT = os.getenv('SCRAPE_TRIGGER_LIMIT', '1 per 30 seconds')
    CACHE_CLEAR_LIMIT = os.getenv('CACHE_CLEAR_LIMIT', '1 per 10 seconds')

    # Flask-Limiter storage; counters live in memory unless a redis:// URL is given
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True
