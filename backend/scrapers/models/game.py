"""
Game Models - Normalized schedule records.

Snapshots are detached from any network/DOM resource and serialize to the
camelCase wire format consumed by the front end.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..utils.text import parse_datetime, to_eastern_label, to_iso, utcnow

LEAGUE = "College Lacrosse"
LIVE_WINDOW = timedelta(hours=2)


@dataclass(frozen=True)
class StreamingPlatform:
    name: str
    slug: str
    logo: str
    affiliate_url: str

    @property
    def dedupe_key(self):
        return (self.slug, self.affiliate_url)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "slug": self.slug,
            "logo": self.logo,
            "affiliateUrl": self.affiliate_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StreamingPlatform":
        return cls(
            name=data.get("name") or "Streaming Platform",
            slug=data.get("slug") or "other",
            logo=data.get("logo") or "",
            affiliate_url=data.get("affiliateUrl") or "",
        )


def dedupe_platforms(platforms: List[StreamingPlatform]) -> List[StreamingPlatform]:
    """Drop repeated (slug, affiliate_url) pairs, keeping first-seen order."""
    seen = set()
    unique = []
    for platform in platforms:
        if platform.dedupe_key in seen:
            continue
        seen.add(platform.dedupe_key)
        unique.append(platform)
    return unique


@dataclass(frozen=True)
class GameOdds:
    provider: str
    updated_at: datetime
    moneyline: Optional[str] = None
    spread: Optional[str] = None
    over_under: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"provider": self.provider, "updatedAt": to_iso(self.updated_at)}
        if self.moneyline:
            data["moneyline"] = self.moneyline
        if self.spread:
            data["spread"] = self.spread
        if self.over_under:
            data["overUnder"] = self.over_under
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameOdds":
        return cls(
            provider=data.get("provider") or "",
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
            moneyline=data.get("moneyline"),
            spread=data.get("spread"),
            over_under=data.get("overUnder"),
        )


@dataclass(frozen=True)
class Game:
    """A single scheduled game."""
    id: str
    start_time: datetime
    home_team: str
    away_team: str
    detail_url: str
    platforms: List[StreamingPlatform] = field(default_factory=list)
    odds: Optional[GameOdds] = None
    last_updated: datetime = field(default_factory=utcnow)
    is_live: bool = False

    @property
    def matchup(self) -> str:
        return f"{self.away_team} vs {self.home_team}"

    def with_odds(self, odds: Optional[GameOdds]) -> "Game":
        return replace(self, odds=odds)

    def live_at(self, now: datetime) -> "Game":
        """Copy with the live flag (start <= now < start + 2h) recomputed."""
        return replace(self, is_live=self.start_time <= now < self.start_time + LIVE_WINDOW)

    def refreshed(self, now: datetime) -> "Game":
        """Copy stamped with lastUpdated = now and a fresh live flag."""
        return replace(self.live_at(now), last_updated=now)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "date": self.start_time.date().isoformat(),
            "timeEST": to_eastern_label(self.start_time),
            "startTimeISO": to_iso(self.start_time),
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "platforms": [p.to_dict() for p in self.platforms],
            "detailUrl": self.detail_url,
            "league": LEAGUE,
            "isLive": self.is_live,
            "oddsAvailable": self.odds is not None,
            "lastUpdated": to_iso(self.last_updated),
        }
        if self.odds is not None:
            data["odds"] = self.odds.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        odds = data.get("odds")
        return cls(
            id=data["id"],
            start_time=parse_datetime(data.get("startTimeISO")) or utcnow(),
            home_team=data.get("homeTeam") or "TBD",
            away_team=data.get("awayTeam") or "TBD",
            detail_url=data.get("detailUrl") or "",
            platforms=[StreamingPlatform.from_dict(p) for p in data.get("platforms") or []],
            odds=GameOdds.from_dict(odds) if odds else None,
            last_updated=parse_datetime(data.get("lastUpdated")) or utcnow(),
            is_live=bool(data.get("isLive", False)),
        )


def default_description(matchup: str) -> str:
    return (
        f"This page provides full broadcast information for {matchup}. "
        "Here you can see the confirmed start time, TV channel listings, "
        "and live streaming options available for this event."
    )


@dataclass(frozen=True)
class GameDetail:
    """Per-game detail snapshot, cached at games:detail:<id>."""
    game_id: str
    matchup: str
    description: str
    watch_options: List[StreamingPlatform]
    detail_url: str
    scraped_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_game(cls, game: Game, scraped_at: Optional[datetime] = None) -> "GameDetail":
        return cls(
            game_id=game.id,
            matchup=game.matchup,
            description=default_description(game.matchup),
            watch_options=list(game.platforms),
            detail_url=game.detail_url,
            scraped_at=scraped_at or utcnow(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "matchup": self.matchup,
            "description": self.description,
            "watchOptions": [p.to_dict() for p in self.watch_options],
            "detailUrl": self.detail_url,
            "scrapedAt": to_iso(self.scraped_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameDetail":
        return cls(
            game_id=data["gameId"],
            matchup=data.get("matchup") or "",
            description=data.get("description") or "",
            watch_options=[StreamingPlatform.from_dict(p) for p in data.get("watchOptions") or []],
            detail_url=data.get("detailUrl") or "",
            scraped_at=parse_datetime(data.get("scrapedAt")) or utcnow(),
        )
