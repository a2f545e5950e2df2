"""
Pydantic models for the read endpoints.

Endpoints:
- games
- rankings
- game-detail
"""

from pydantic import Field

from .base import BaseParamsModel
from .types import RefreshFlag


class GamesParams(BaseParamsModel):
    """Params for /games."""

    refresh: RefreshFlag = Field(
        default=False,
        description="Scrape now instead of serving the cached schedule"
    )


class RankingsParams(BaseParamsModel):
    """Params for /rankings."""

    refresh: RefreshFlag = Field(
        default=False,
        description="Scrape now instead of serving the cached polls"
    )


class GameDetailParams(BaseParamsModel):
    """Params for /game-detail."""

    detail_url: str = Field(
        alias='detailUrl',
        min_length=1,
        description="livesportsontv.com match page (absolute or site-relative)"
    )
