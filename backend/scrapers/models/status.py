"""Run bookkeeping and click events."""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional

from ..utils.text import parse_datetime, to_iso, utcnow

DOMAINS = ("games", "rankings")


@dataclass(frozen=True)
class ScrapeStatus:
    """
    Last run / last error per domain, tracked independently.

    A failure records the error but keeps the prior success time so the
    front end can show how old the served data is.
    """
    games_last_run: Optional[datetime] = None
    games_last_error: Optional[str] = None
    rankings_last_run: Optional[datetime] = None
    rankings_last_error: Optional[str] = None

    def record_success(self, domain: str, ran_at: datetime) -> "ScrapeStatus":
        return replace(self, **{f"{domain}_last_run": ran_at, f"{domain}_last_error": None})

    def record_failure(self, domain: str, message: str) -> "ScrapeStatus":
        return replace(self, **{f"{domain}_last_error": message})

    def to_dict(self) -> Dict[str, Any]:
        def iso(value):
            return to_iso(value) if value else None

        return {
            "gamesLastRun": iso(self.games_last_run),
            "gamesLastError": self.games_last_error,
            "rankingsLastRun": iso(self.rankings_last_run),
            "rankingsLastError": self.rankings_last_error,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScrapeStatus":
        data = data or {}
        return cls(
            games_last_run=parse_datetime(data.get("gamesLastRun")),
            games_last_error=data.get("gamesLastError"),
            rankings_last_run=parse_datetime(data.get("rankingsLastRun")),
            rankings_last_error=data.get("rankingsLastError"),
        )


@dataclass(frozen=True)
class ClickEvent:
    game_id: str
    platform: str
    target_url: str
    timestamp: datetime = field(default_factory=utcnow)
    user_agent: str = ""
    ip: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "platform": self.platform,
            "targetUrl": self.target_url,
            "timestamp": to_iso(self.timestamp),
            "userAgent": self.user_agent,
            "ip": self.ip,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClickEvent":
        return cls(
            game_id=data.get("gameId") or "",
            platform=data.get("platform") or "",
            target_url=data.get("targetUrl") or "",
            timestamp=parse_datetime(data.get("timestamp")) or utcnow(),
            user_agent=data.get("userAgent") or "",
            ip=data.get("ip") or "",
        )
