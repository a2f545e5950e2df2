"""
Process-wide ingestion wiring.

One IngestionRuntime is built per process (app factory or CLI) and passed
explicitly to whatever needs it; nothing reaches for a global client.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from config import ScraperSettings, load_scraper_settings
from scrapers.adapters.game_detail import GameDetailExtractor
from scrapers.adapters.livesportsontv import ScheduleExtractor
from scrapers.adapters.ncaa_rankings import RankingsExtractor, load_source_config
from scrapers.adapters.odds_api import OddsEnricher
from scrapers.http_client import HttpClient
from scrapers.orchestrator import ScrapeCoordinator
from scrapers.policy_gate import PolicyGate
from scrapers.tier_system import best_effort_overrides
from services.cache_store import CacheStore, create_cache_store
from services.click_tracker import ClickTracker
from services.feed_service import FeedService

logger = logging.getLogger(__name__)


@dataclass
class IngestionRuntime:
    settings: ScraperSettings
    cache: CacheStore
    http: HttpClient
    policy_gate: PolicyGate
    coordinator: ScrapeCoordinator
    feed: FeedService
    clicks: ClickTracker


def build_runtime(
    settings: Optional[ScraperSettings] = None,
    cache: Optional[CacheStore] = None,
    http: Optional[HttpClient] = None,
) -> IngestionRuntime:
    """
    Construct every component once.

    Args:
        settings: Defaults to load_scraper_settings()
        cache: Pre-built store (tests); otherwise chosen from settings
        http: Pre-built HTTP client (tests)
    """
    settings = settings or load_scraper_settings()
    cache = cache or create_cache_store(settings.cache_url, settings.cache_password)
    http = http or HttpClient(
        user_agent=settings.user_agent,
        timeout=settings.http_timeout,
        connect_timeout=settings.connect_timeout,
    )

    sources, best_effort_domains = load_source_config(settings.sources_path)
    policy_gate = PolicyGate(
        http,
        settings.user_agent,
        best_effort_domains=best_effort_overrides(best_effort_domains),
    )

    odds = OddsEnricher(http, settings.odds_api_key)
    if not odds.enabled:
        logger.info("ODDS_API_KEY not set; odds enrichment disabled")

    coordinator = ScrapeCoordinator(
        cache=cache,
        schedule=ScheduleExtractor(http, policy_gate),
        rankings=RankingsExtractor(http, policy_gate, sources=sources),
        odds=odds,
    )

    return IngestionRuntime(
        settings=settings,
        cache=cache,
        http=http,
        policy_gate=policy_gate,
        coordinator=coordinator,
        feed=FeedService(cache, coordinator, GameDetailExtractor(http, policy_gate)),
        clicks=ClickTracker(cache),
    )


RUNTIME_EXTENSION = "ingestion_runtime"


def current_runtime() -> IngestionRuntime:
    """The runtime attached to the active Flask app by create_app()."""
    from flask import current_app
    return current_app.extensions[RUNTIME_EXTENSION]
