"""
The Odds API enrichment.

Best effort by contract: a missing key, an unavailable provider, or an
unmatched game leaves games without odds. enrich() never raises.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..http_client import HttpClient
from ..models.game import Game, GameOdds
from ..utils.text import parse_datetime, utcnow

logger = logging.getLogger(__name__)

ODDS_BASE_URL = "https://api.the-odds-api.com/v4"
ODDS_PARAMS = {"regions": "us", "markets": "h2h,spreads,totals", "oddsFormat": "american"}

MAX_SPORT_KEYS = 3
MAX_CONCURRENT_FETCHES = 2
MATCH_WINDOW = timedelta(hours=12)
MISSING = "--"

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_LACROSSE = re.compile(r"lacrosse", re.IGNORECASE)


def normalize_team_name(team: str) -> str:
    return _NON_ALNUM.sub("", (team or "").casefold())


@dataclass(frozen=True)
class OddsEvent:
    home_team: str
    away_team: str
    commence_time: Optional[datetime]
    bookmakers: List[Dict[str, Any]]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OddsEvent":
        return cls(
            home_team=data.get("home_team") or "",
            away_team=data.get("away_team") or "",
            commence_time=parse_datetime(data.get("commence_time")),
            bookmakers=[b for b in data.get("bookmakers") or [] if isinstance(b, dict)],
        )

    def matches(self, game: Game) -> bool:
        """Same normalized teams and kick-off within 12 hours."""
        if self.commence_time is None:
            return False
        same_teams = (
            normalize_team_name(self.home_team) == normalize_team_name(game.home_team)
            and normalize_team_name(self.away_team) == normalize_team_name(game.away_team)
        )
        return same_teams and abs(self.commence_time - game.start_time) < MATCH_WINDOW


def _value(value: Any) -> str:
    return MISSING if value is None else str(value)


def _market(bookmaker: Dict[str, Any], key: str) -> Optional[List[Dict[str, Any]]]:
    for market in bookmaker.get("markets") or []:
        if market.get("key") == key:
            return [o for o in market.get("outcomes") or [] if isinstance(o, dict)]
    return None


def format_moneyline(outcomes: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    if not outcomes:
        return None
    return " | ".join(f"{o.get('name')}: {_value(o.get('price'))}" for o in outcomes)


def format_points(outcomes: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    """'Name: point (price)' for spreads and totals."""
    if not outcomes:
        return None
    return " | ".join(
        f"{o.get('name')}: {_value(o.get('point'))} ({_value(o.get('price'))})" for o in outcomes
    )


def odds_from_event(event: OddsEvent, now: Optional[datetime] = None) -> Optional[GameOdds]:
    """Lines from the first listed bookmaker; None when there is none."""
    if not event.bookmakers:
        return None
    bookmaker = event.bookmakers[0]
    return GameOdds(
        provider=bookmaker.get("title") or bookmaker.get("key") or "Unknown",
        moneyline=format_moneyline(_market(bookmaker, "h2h")),
        spread=format_points(_market(bookmaker, "spreads")),
        over_under=format_points(_market(bookmaker, "totals")),
        updated_at=now or utcnow(),
    )


class OddsEnricher:
    """Attach betting lines to games."""

    def __init__(self, http: HttpClient, api_key: Optional[str], base_url: str = ODDS_BASE_URL):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def discover_sport_keys(self) -> List[str]:
        sports = await self.http.get_json(f"{self.base_url}/sports/", params={"apiKey": self.api_key})
        keys = [
            sport["key"]
            for sport in sports or []
            if isinstance(sport, dict) and sport.get("key")
            and (_LACROSSE.search(sport.get("key", "")) or _LACROSSE.search(sport.get("title") or ""))
        ]
        return keys[:MAX_SPORT_KEYS]

    async def fetch_events(self, sport_keys: List[str]) -> List[OddsEvent]:
        """Odds for each sport key, two at a time; failed keys are skipped."""
        semaphore = asyncio.Semaphore(MAX_CONCURRENT_FETCHES)

        async def fetch_one(sport_key: str) -> List[OddsEvent]:
            async with semaphore:
                try:
                    payload = await self.http.get_json(
                        f"{self.base_url}/sports/{sport_key}/odds/",
                        params={"apiKey": self.api_key, **ODDS_PARAMS},
                    )
                except Exception as e:
                    logger.warning(f"Odds fetch for {sport_key} failed: {e}")
                    return []
            return [OddsEvent.from_dict(item) for item in payload or [] if isinstance(item, dict)]

        batches = await asyncio.gather(*(fetch_one(key) for key in sport_keys))
        return [event for batch in batches for event in batch]

    async def fetch_odds(self, games: List[Game]) -> Dict[str, GameOdds]:
        """game id -> odds for every game with a matching event."""
        if not self.enabled or not games:
            return {}

        sport_keys = await self.discover_sport_keys()
        if not sport_keys:
            logger.info("No lacrosse markets listed by the odds provider")
            return {}

        events = await self.fetch_events(sport_keys)
        now = utcnow()
        results: Dict[str, GameOdds] = {}
        for game in games:
            match = next((event for event in events if event.matches(game)), None)
            odds = odds_from_event(match, now) if match else None
            if odds:
                results[game.id] = odds
        return results

    async def enrich(self, games: List[Game]) -> List[Game]:
        """Games with odds attached where available; input order preserved."""
        try:
            odds_by_id = await self.fetch_odds(games)
        except Exception as e:
            logger.warning(f"Odds enrichment skipped: {e}")
            return list(games)

        if odds_by_id:
            logger.info(f"Attached odds to {len(odds_by_id)}/{len(games)} games")
        return [game.with_odds(odds_by_id[game.id]) if game.id in odds_by_id else game for game in games]
