"""
Read-side feed service.

Cache first; scrape when the snapshot is empty or a refresh is forced.
"""
import logging
from typing import Any, Dict

from scrapers.adapters.game_detail import GameDetailExtractor, is_livesportsontv_url
from scrapers.adapters.livesportsontv import BASE_URL
from scrapers.models.game import GameDetail
from scrapers.orchestrator import ScrapeCoordinator
from scrapers.utils.text import game_id_from_detail_url, to_absolute_url, to_iso, utcnow
from services.cache_store import CacheBackendError, CacheStore
from utils import cache_key

logger = logging.getLogger(__name__)


class FeedService:
    def __init__(self, cache: CacheStore, coordinator: ScrapeCoordinator, detail_extractor: GameDetailExtractor):
        self.cache = cache
        self.coordinator = coordinator
        self.detail_extractor = detail_extractor

    async def get_games(self, force_refresh: bool = False) -> Dict[str, Any]:
        """
        Returns:
            {"games": [...], "lastUpdated": iso | None, "stale": bool}
        """
        if not force_refresh:
            games = self.coordinator.get_cached_games()
            if games:
                now = utcnow()
                last_updated = self.coordinator.get_games_last_updated()
                return {
                    # snapshot may be hours old
                    "games": [game.live_at(now).to_dict() for game in games],
                    "lastUpdated": to_iso(last_updated) if last_updated else None,
                    "stale": False,
                }

        outcome = await self.coordinator.scrape_games()
        return {
            "games": [game.to_dict() for game in outcome.data],
            "lastUpdated": to_iso(outcome.ran_at),
            "stale": outcome.stale,
        }

    async def get_rankings(self, force_refresh: bool = False) -> Dict[str, Any]:
        """
        Returns:
            {"mens": [...], "womens": [...], "lastUpdated": iso | None, "stale": bool}
        """
        if not force_refresh:
            cached = self.coordinator.get_cached_rankings()
            if cached is not None:
                return {
                    "mens": [e.to_dict() for e in cached.mens],
                    "womens": [e.to_dict() for e in cached.womens],
                    "lastUpdated": to_iso(cached.updated_at),
                    "stale": False,
                }

        outcome = await self.coordinator.scrape_rankings()
        payload = outcome.data
        return {
            "mens": [e.to_dict() for e in payload.mens] if payload else [],
            "womens": [e.to_dict() for e in payload.womens] if payload else [],
            "lastUpdated": to_iso(payload.updated_at) if payload else None,
            "stale": outcome.stale,
        }

    async def get_game_detail(self, detail_url: str) -> GameDetail:
        """
        Cached detail for a match page, scraped on a miss.

        Raises:
            ValueError: not a livesportsontv.com URL
            ScrapeError: the page could not be fetched or parsed
        """
        detail_url = to_absolute_url(detail_url, BASE_URL)
        if not is_livesportsontv_url(detail_url):
            raise ValueError("Invalid detail URL domain")

        key = cache_key.build_game_detail_key(game_id_from_detail_url(detail_url))
        try:
            cached = self.cache.get(key)
        except CacheBackendError as e:
            logger.error(f"Detail cache read failed: {e}")
            cached = None
        if isinstance(cached, dict) and cached.get("gameId"):
            return GameDetail.from_dict(cached)

        detail = await self.detail_extractor.extract(detail_url)
        self.cache.set(cache_key.build_game_detail_key(detail.game_id), detail.to_dict(), ttl=cache_key.TTL_GAME_DETAIL)
        return detail
