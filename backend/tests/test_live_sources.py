"""
Live smoke tests against the real sources.

Skipped unless pytest runs with --run-integration.
"""

import asyncio

import pytest

from config import load_scraper_settings
from services.cache_store import MemoryCacheStore
from services.runtime import build_runtime


@pytest.fixture
def live_runtime():
    runtime = build_runtime(settings=load_scraper_settings(), cache=MemoryCacheStore())
    yield runtime
    runtime.http.close()


@pytest.mark.integration
def test_live_schedule(live_runtime):
    outcome = asyncio.run(live_runtime.coordinator.scrape_games())
    assert not outcome.stale, outcome.error
    assert all(game.id for game in outcome.data)


@pytest.mark.integration
def test_live_rankings(live_runtime):
    outcome = asyncio.run(live_runtime.coordinator.scrape_rankings())
    assert not outcome.stale, outcome.error
    assert 0 < len(outcome.data.mens) <= 25
    assert 0 < len(outcome.data.womens) <= 25
