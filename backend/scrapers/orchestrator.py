"""
Scrape Coordinator - Runs the ingestion workflows end to end.

Responsibilities:
1. Runs an extractor through the shared RetryOrchestrator
2. Enriches games with odds (best effort)
3. Writes snapshots and the status record to the cache store
4. On any unrecoverable failure, serves the last good snapshot marked stale

Extractors never touch the cache; this is the only writer of scrape results.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional

from services.cache_store import CacheBackendError, CacheStore
from utils import cache_key

from .adapters.livesportsontv import ScheduleExtractor
from .adapters.ncaa_rankings import RankingsExtractor
from .adapters.odds_api import OddsEnricher
from .models.game import Game, GameDetail
from .models.rankings import RankingEntry, RankingsPayload
from .models.status import ScrapeStatus
from .retry import RetryOrchestrator
from .utils.text import parse_datetime, to_iso, utcnow

logger = logging.getLogger(__name__)


@dataclass
class ScrapeOutcome:
    """Result handed back to the trigger. Never an exception."""
    data: Any
    stale: bool
    ran_at: datetime
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.stale


def _error_message(error: BaseException) -> str:
    return str(error) or error.__class__.__name__


class ScrapeCoordinator:
    """
    Orchestrates the games and rankings workflows.

    Coordinates:
    - Extraction with retries
    - Odds enrichment
    - Snapshot + status persistence
    - Stale fallback
    """

    def __init__(
        self,
        cache: CacheStore,
        schedule: ScheduleExtractor,
        rankings: RankingsExtractor,
        odds: OddsEnricher,
        retry: Optional[RetryOrchestrator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.cache = cache
        self.schedule = schedule
        self.rankings = rankings
        self.odds = odds
        self.retry = retry or RetryOrchestrator()
        self._clock = clock

    # =========================================================================
    # Workflows
    # =========================================================================

    async def scrape_games(self) -> ScrapeOutcome:
        ran_at = self._clock()
        try:
            games = await self.retry.run(
                lambda: self.schedule.extract(now=ran_at),
                require_nonempty=True,
                label="games scrape",
            )
            games = await self.odds.enrich(games)
            games = [game.refreshed(ran_at) for game in games]
            self._write_games(games, ran_at)
        except Exception as e:
            message = _error_message(e)
            logger.error(f"Games scrape failed, serving last snapshot: {message}")
            self._record_status(lambda s: s.record_failure("games", message))
            return ScrapeOutcome(data=self.get_cached_games(), stale=True, ran_at=ran_at, error=message)

        self._record_status(lambda s: s.record_success("games", ran_at))
        logger.info(f"Games scrape stored {len(games)} games")
        return ScrapeOutcome(data=games, stale=False, ran_at=ran_at)

    async def scrape_rankings(self) -> ScrapeOutcome:
        ran_at = self._clock()
        try:
            payload = await self.retry.run(
                self.rankings.extract,
                require_nonempty=False,
                label="rankings scrape",
            )
            payload = RankingsPayload(mens=payload.mens, womens=payload.womens, updated_at=ran_at)
            self._write_rankings(payload)
        except Exception as e:
            message = _error_message(e)
            logger.error(f"Rankings scrape failed, serving last snapshot: {message}")
            self._record_status(lambda s: s.record_failure("rankings", message))
            return ScrapeOutcome(data=self.get_cached_rankings(), stale=True, ran_at=ran_at, error=message)

        self._record_status(lambda s: s.record_success("rankings", ran_at))
        logger.info(
            f"Rankings scrape stored {len(payload.mens)} mens / {len(payload.womens)} womens entries"
        )
        return ScrapeOutcome(data=payload, stale=False, ran_at=ran_at)

    # =========================================================================
    # Persistence
    # =========================================================================

    def _write_games(self, games: List[Game], ran_at: datetime):
        self.cache.set(cache_key.GAMES, [game.to_dict() for game in games], ttl=cache_key.TTL_GAMES)
        self.cache.set(cache_key.GAMES_LAST_UPDATED, to_iso(ran_at), ttl=cache_key.TTL_GAMES)
        for game in games:
            detail = GameDetail.from_game(game, scraped_at=ran_at)
            self.cache.set(
                cache_key.build_game_detail_key(game.id),
                detail.to_dict(),
                ttl=cache_key.TTL_GAME_DETAIL,
            )

    def _write_rankings(self, payload: RankingsPayload):
        if not payload.is_complete:
            raise ValueError("Refusing to cache a partial rankings payload")
        for category, key in cache_key.RANKINGS_BY_CATEGORY.items():
            entries = getattr(payload, category)
            self.cache.set(key, [e.to_dict() for e in entries], ttl=cache_key.TTL_RANKINGS)
        self.cache.set(cache_key.RANKINGS_LAST_UPDATED, to_iso(payload.updated_at), ttl=cache_key.TTL_RANKINGS)

    def _record_status(self, update: Callable[[ScrapeStatus], ScrapeStatus]):
        try:
            status = update(self.get_status())
            self.cache.set(cache_key.SCRAPE_STATUS, status.to_dict(), ttl=cache_key.TTL_STATUS)
        except CacheBackendError as e:
            logger.error(f"Could not persist scrape status: {e}")

    # =========================================================================
    # Read side
    # =========================================================================

    def _read(self, key: str) -> Any:
        try:
            return self.cache.get(key)
        except CacheBackendError as e:
            logger.error(f"Cache read failed for {key}: {e}")
            return None

    def get_cached_games(self) -> List[Game]:
        raw = self._read(cache_key.GAMES)
        if not isinstance(raw, list):
            return []
        return [Game.from_dict(item) for item in raw if isinstance(item, dict) and item.get("id")]

    def get_games_last_updated(self) -> Optional[datetime]:
        return parse_datetime(self._read(cache_key.GAMES_LAST_UPDATED))

    def get_cached_rankings(self) -> Optional[RankingsPayload]:
        """Last complete rankings snapshot, or None."""
        mens = self._read(cache_key.RANKINGS_MENS)
        womens = self._read(cache_key.RANKINGS_WOMENS)
        if not mens or not womens:
            return None
        return RankingsPayload(
            mens=[RankingEntry.from_dict(item) for item in mens],
            womens=[RankingEntry.from_dict(item) for item in womens],
            updated_at=parse_datetime(self._read(cache_key.RANKINGS_LAST_UPDATED)) or utcnow(),
        )

    def get_status(self) -> ScrapeStatus:
        return ScrapeStatus.from_dict(self._read(cache_key.SCRAPE_STATUS))
