"""
Affiliate click tracking.

Per-platform/per-game counters (7-day TTL set by the first increment) plus a
rolling list of the 50 most recent clicks, newest first.
"""
import logging
from typing import List

from scrapers.models.status import ClickEvent
from scrapers.utils.text import safe_game_id, sanitize_external_url
from services.cache_store import CacheStore
from utils import cache_key

logger = logging.getLogger(__name__)


class InvalidClickError(ValueError):
    """Click payload lacks a usable game id or target URL."""
    pass


def normalize_click(event: ClickEvent) -> ClickEvent:
    """
    Slug ids and keep only http(s) targets.

    Raises:
        InvalidClickError: game id or target URL is unusable after cleaning
    """
    game_id = safe_game_id(event.game_id)
    platform = safe_game_id(event.platform or "other") or "other"
    target_url = sanitize_external_url(event.target_url)
    if not game_id or not target_url:
        raise InvalidClickError("Invalid payload")
    return ClickEvent(
        game_id=game_id,
        platform=platform,
        target_url=target_url,
        timestamp=event.timestamp,
        user_agent=event.user_agent or "unknown",
        ip=event.ip or "unknown",
    )


class ClickTracker:
    def __init__(self, cache: CacheStore):
        self.cache = cache

    def track_click(self, event: ClickEvent) -> int:
        """Record a click and return the new counter value."""
        event = normalize_click(event)
        count = self.cache.incr(cache_key.build_click_key(event.platform, event.game_id))

        recent = [event.to_dict()] + self._recent_raw()
        self.cache.set(
            cache_key.CLICK_RECENT,
            recent[:cache_key.RECENT_CLICKS_LIMIT],
            ttl=cache_key.TTL_CLICKS,
        )
        logger.info(f"Click {event.platform}:{event.game_id} -> {count}")
        return count

    def _recent_raw(self) -> list:
        raw = self.cache.get(cache_key.CLICK_RECENT)
        return [item for item in raw if isinstance(item, dict)] if isinstance(raw, list) else []

    def recent_clicks(self) -> List[ClickEvent]:
        return [ClickEvent.from_dict(item) for item in self._recent_raw()]

    def counter_key_count(self) -> int:
        return len([
            key for key in self.cache.keys_with_prefix(cache_key.CLICK_PREFIX)
            if key != cache_key.CLICK_RECENT
        ])
