"""
LiveSportsOnTV schedule extractor.

The league page is server-rendered; fixtures live in the embedded payload
(streamed flight rows or JSON script blocks), not in stable markup. The
extractor locates the fixture list, maps each record to a Game and
post-processes the set:
- games starting more than 3 hours ago are dropped
- duplicates (same id) are collapsed, first wins
- sorted by start time
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from ..base import BaseExtractor
from ..errors import ExtractionEmptyError
from ..models.game import Game, StreamingPlatform, dedupe_platforms
from ..utils.payload import TEAM_KEY_PAIRS, START_KEYS, TITLE_KEYS, extract_payload_roots, find_fixture_list
from ..utils.platforms import detect_platform
from ..utils.text import (
    extract_affiliate_target,
    game_id_from_detail_url,
    normalize_whitespace,
    parse_datetime,
    parse_teams,
    sanitize_external_url,
    to_absolute_url,
    utcnow,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://www.livesportsontv.com"
SCHEDULE_URL = f"{BASE_URL}/league/college-lacrosse"

ID_KEYS = ("id", "event_id", "eventId", "fixture_id")
URL_KEYS = ("url", "href", "link")
CHANNEL_KEYS = ("channels", "broadcasts", "tv")
DEEP_LINK_KEYS = ("deep_links", "deepLinks", "streams")
NAME_KEYS = ("name", "title", "channel_name", "provider", "platform", "label")

START_FALLBACK = timedelta(hours=6)
PAST_CUTOFF = timedelta(hours=3)


def _first(record: Dict[str, Any], keys) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def _team_name(value: Any) -> str:
    if isinstance(value, dict):
        value = _first(value, ("name", "displayName", "shortName", "title"))
    return normalize_whitespace(value) if isinstance(value, str) else ""


def _resolve_teams(fixture: Dict[str, Any]) -> Tuple[str, str]:
    """(away, home) from explicit team fields, else from the title."""
    for home_key, away_key in TEAM_KEY_PAIRS:
        home = _team_name(fixture.get(home_key))
        away = _team_name(fixture.get(away_key))
        if home and away:
            return away, home
    title = _first(fixture, TITLE_KEYS)
    return parse_teams(title if isinstance(title, str) else "")


def build_detail_url(fixture: Dict[str, Any]) -> Optional[str]:
    """
    Canonical detail URL: explicit link, else /match/<slug>-<numeric id>.

    Returns None when the fixture carries neither a link nor a slug.
    """
    link = _first(fixture, URL_KEYS)
    if isinstance(link, str) and link.strip():
        return to_absolute_url(link.strip(), BASE_URL)

    slug = fixture.get("slug")
    if not isinstance(slug, str) or not slug.strip():
        return None
    slug = slug.strip().strip("/")

    numeric_id = _first(fixture, ID_KEYS)
    numeric_id = str(numeric_id).strip() if numeric_id is not None else ""
    if numeric_id and not slug.endswith(f"-{numeric_id}"):
        slug = f"{slug}-{numeric_id}"
    return f"{BASE_URL}/match/{slug}"


def _clean_link(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        return ""
    return sanitize_external_url(extract_affiliate_target(to_absolute_url(raw.strip(), BASE_URL)))


def _entries(fixture: Dict[str, Any], keys) -> List[Tuple[str, str]]:
    """(name, url) pairs from a channel or deep-link array."""
    value = _first(fixture, keys)
    if not isinstance(value, list):
        return []
    pairs = []
    for item in value:
        if isinstance(item, str):
            pairs.append((normalize_whitespace(item), ""))
        elif isinstance(item, dict):
            name = _first(item, NAME_KEYS)
            name = normalize_whitespace(name) if isinstance(name, str) else ""
            pairs.append((name, _clean_link(_first(item, URL_KEYS))))
    return [(name, url) for name, url in pairs if name or url]


def build_platforms(fixture: Dict[str, Any], detail_url: str) -> List[StreamingPlatform]:
    """
    Watch options for a fixture.

    Affiliate URL priority: deep link for the same platform, then the
    channel's own URL, then the detail page.
    """
    deep_links = _entries(fixture, DEEP_LINK_KEYS)
    deep_by_slug: Dict[str, str] = {}
    for name, url in deep_links:
        slug = detect_platform(name).slug
        if url and slug not in deep_by_slug:
            deep_by_slug[slug] = url

    platforms = []
    for name, url in _entries(fixture, CHANNEL_KEYS):
        detected = detect_platform(name)
        platforms.append(StreamingPlatform(
            name=detected.name,
            slug=detected.slug,
            logo=detected.logo,
            affiliate_url=deep_by_slug.get(detected.slug) or url or detail_url,
        ))

    for name, url in deep_links:
        if not url:
            continue
        detected = detect_platform(name)
        platforms.append(StreamingPlatform(
            name=detected.name,
            slug=detected.slug,
            logo=detected.logo,
            affiliate_url=url,
        ))

    return dedupe_platforms(platforms)


def map_fixture(fixture: Dict[str, Any], now: datetime) -> Optional[Game]:
    """Map one payload record to a Game; None when it has no usable identity."""
    detail_url = build_detail_url(fixture)
    if not detail_url:
        return None
    game_id = game_id_from_detail_url(detail_url)
    if not game_id:
        return None

    away, home = _resolve_teams(fixture)
    start_time = parse_datetime(_first(fixture, START_KEYS)) or now + START_FALLBACK

    return Game(
        id=game_id,
        start_time=start_time,
        home_team=home,
        away_team=away,
        detail_url=detail_url,
        platforms=build_platforms(fixture, detail_url),
        last_updated=now,
    )


def postprocess_games(games: List[Game], now: datetime) -> List[Game]:
    """Drop stale games, dedupe by id and sort by start time."""
    cutoff = now - PAST_CUTOFF
    seen = set()
    kept = []
    for game in games:
        if game.start_time < cutoff or game.id in seen:
            continue
        seen.add(game.id)
        kept.append(game)
    return sorted(kept, key=lambda g: g.start_time)


class ScheduleExtractor(BaseExtractor):
    """College Lacrosse schedule from livesportsontv.com."""

    SCRAPER_NAME = "livesportsontv_schedule"
    SOURCE_DOMAIN = "livesportsontv.com"

    def parse_page(self, url: str, html: str, now: Optional[datetime] = None) -> List[Game]:
        """
        Raises:
            ExtractionEmptyError: no embedded fixture list was found
        """
        now = now or utcnow()
        fixtures = find_fixture_list(extract_payload_roots(html))
        if not fixtures:
            raise ExtractionEmptyError(f"No fixture payload found at {url}")

        games = [game for game in (map_fixture(f, now) for f in fixtures) if game is not None]
        skipped = len(fixtures) - len(games)
        if skipped:
            logger.info(f"Skipped {skipped} fixtures without slug or link")

        result = postprocess_games(games, now)
        self.increment_stat("items_extracted", len(result))
        return result

    async def extract(self, now: Optional[datetime] = None) -> List[Game]:
        response = await self.fetch_page(SCHEDULE_URL)
        games = self.parse_page(SCHEDULE_URL, response.text, now=now)
        logger.info(f"Extracted {len(games)} games from {SCHEDULE_URL} (stats: {self.stats})")
        return games
