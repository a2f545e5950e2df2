"""Normalized ingestion records (detached, JSON-serializable snapshots)."""

from .game import Game, GameDetail, GameOdds, StreamingPlatform, dedupe_platforms
from .rankings import RankingEntry, RankingsPayload, finalize_entries
from .status import ClickEvent, ScrapeStatus

__all__ = [
    "Game",
    "GameDetail",
    "GameOdds",
    "StreamingPlatform",
    "dedupe_platforms",
    "RankingEntry",
    "RankingsPayload",
    "finalize_entries",
    "ClickEvent",
    "ScrapeStatus",
]
