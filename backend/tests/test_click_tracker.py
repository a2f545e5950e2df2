"""
Tests for affiliate click tracking
"""

import pytest

from scrapers.models.status import ClickEvent
from services.click_tracker import ClickTracker, InvalidClickError, normalize_click
from services.cache_store import INCR_TTL
from utils import cache_key


def click(game_id="Duke vs UNC 1", platform="ESPN+", target="https://plus.espn.com/lacrosse", **kwargs):
    return ClickEvent(game_id=game_id, platform=platform, target_url=target, **kwargs)


class TestNormalizeClick:
    def test_ids_are_slugged(self):
        event = normalize_click(click())
        assert event.game_id == "duke-vs-unc-1"
        assert event.platform == "espn"
        assert event.user_agent == "unknown"
        assert event.ip == "unknown"

    def test_blank_platform_is_other(self):
        assert normalize_click(click(platform="")).platform == "other"
        assert normalize_click(click(platform="+++")).platform == "other"

    @pytest.mark.parametrize("target", ["javascript:alert(1)", "/relative", ""])
    def test_non_http_target_rejected(self, target):
        with pytest.raises(InvalidClickError):
            normalize_click(click(target=target))

    def test_unusable_game_id_rejected(self):
        with pytest.raises(InvalidClickError):
            normalize_click(click(game_id="!!!"))


class TestClickTracker:
    def test_counter_increments(self, memory_cache):
        tracker = ClickTracker(memory_cache)

        assert tracker.track_click(click()) == 1
        assert tracker.track_click(click()) == 2
        assert memory_cache.get("clicks:espn:duke-vs-unc-1") == 2

    def test_counter_expires_after_seven_days(self, memory_cache, fake_clock):
        tracker = ClickTracker(memory_cache)
        tracker.track_click(click())

        fake_clock.advance(INCR_TTL)
        assert tracker.track_click(click()) == 1

    def test_recent_clicks_newest_first_and_capped(self, memory_cache):
        tracker = ClickTracker(memory_cache)
        for i in range(cache_key.RECENT_CLICKS_LIMIT + 5):
            tracker.track_click(click(game_id=f"game-{i}", user_agent="Mozilla/5.0", ip="203.0.113.9"))

        recent = tracker.recent_clicks()
        assert len(recent) == cache_key.RECENT_CLICKS_LIMIT
        assert recent[0].game_id == f"game-{cache_key.RECENT_CLICKS_LIMIT + 4}"
        assert recent[0].ip == "203.0.113.9"

    def test_counter_key_count_excludes_recent_list(self, memory_cache):
        tracker = ClickTracker(memory_cache)
        tracker.track_click(click(platform="fubo"))
        tracker.track_click(click(platform="hulu"))

        assert tracker.counter_key_count() == 2
        assert memory_cache.get(cache_key.CLICK_RECENT) is not None

    def test_counters_survive_snapshot_clear(self, memory_cache):
        tracker = ClickTracker(memory_cache)
        tracker.track_click(click())
        memory_cache.set(cache_key.GAMES, [])

        for prefix in cache_key.CLEARABLE_PREFIXES:
            memory_cache.clear_prefix(prefix)

        assert tracker.counter_key_count() == 1
