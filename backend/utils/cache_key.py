"""
Cache key helpers.

Provides stable, normalized cache key construction to avoid drift between callers.
"""

GAMES = "games:schedule"
GAMES_LAST_UPDATED = "games:lastUpdated"
GAME_DETAIL_PREFIX = "games:detail:"
RANKINGS_MENS = "rankings:mens"
RANKINGS_WOMENS = "rankings:womens"
RANKINGS_LAST_UPDATED = "rankings:lastUpdated"
SCRAPE_STATUS = "scrape:status"
CLICK_PREFIX = "clicks:"
CLICK_RECENT = "clicks:recent"

RANKINGS_BY_CATEGORY = {"mens": RANKINGS_MENS, "womens": RANKINGS_WOMENS}

# Prefixes removed by the admin cache clear; click counters are kept
CLEARABLE_PREFIXES = ("games:", "rankings:", "scrape:")

HOUR = 60 * 60
TTL_GAMES = 24 * HOUR
TTL_GAME_DETAIL = 12 * HOUR
TTL_RANKINGS = 48 * HOUR
TTL_STATUS = 48 * HOUR
TTL_CLICKS = 7 * 24 * HOUR

RECENT_CLICKS_LIMIT = 50


def build_game_detail_key(game_id: str) -> str:
    return f"{GAME_DETAIL_PREFIX}{game_id}"


def build_click_key(platform: str, game_id: str) -> str:
    """Counter key for clicks on one platform for one game (parts pre-slugged)."""
    return f"{CLICK_PREFIX}{platform}:{game_id}"
