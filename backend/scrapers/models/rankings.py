"""Ranking Models - Poll table rows and the two-category payload."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from ..utils.text import parse_datetime, to_iso, utcnow

TOP_N = 25


@dataclass(frozen=True)
class RankingEntry:
    rank: int
    team: str
    record: str = "--"
    points_votes: str = "--"
    change: str = "0"  # "+N", "-N", "0" or "NEW"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "team": self.team,
            "record": self.record,
            "pointsVotes": self.points_votes,
            "change": self.change,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankingEntry":
        return cls(
            rank=int(data["rank"]),
            team=data.get("team") or "",
            record=data.get("record") or "--",
            points_votes=data.get("pointsVotes") or "--",
            change=str(data.get("change") or "0"),
        )


def finalize_entries(entries: List[RankingEntry], top_n: int = TOP_N) -> List[RankingEntry]:
    """Dedupe by rank (first occurrence wins), sort ascending, keep top N."""
    by_rank: Dict[int, RankingEntry] = {}
    for entry in entries:
        if entry.rank > 0 and entry.rank not in by_rank:
            by_rank[entry.rank] = entry
    return [by_rank[rank] for rank in sorted(by_rank)][:top_n]


@dataclass(frozen=True)
class RankingsPayload:
    mens: List[RankingEntry]
    womens: List[RankingEntry]
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_complete(self) -> bool:
        return bool(self.mens) and bool(self.womens)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mens": [e.to_dict() for e in self.mens],
            "womens": [e.to_dict() for e in self.womens],
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankingsPayload":
        return cls(
            mens=[RankingEntry.from_dict(e) for e in data.get("mens") or []],
            womens=[RankingEntry.from_dict(e) for e in data.get("womens") or []],
            updated_at=parse_datetime(data.get("updatedAt")) or utcnow(),
        )
