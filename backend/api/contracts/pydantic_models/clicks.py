"""
Pydantic model for /track-click.
"""

from pydantic import Field

from .base import BaseParamsModel


class TrackClickRequest(BaseParamsModel):
    """JSON body for an affiliate click."""

    game_id: str = Field(alias='gameId', min_length=1)
    platform: str = Field(default='other')
    target_url: str = Field(alias='targetUrl', min_length=1)
