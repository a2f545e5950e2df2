"""
Contract package.

Pydantic models that validate query params and JSON bodies before they
reach the services.
"""

from .pydantic_models import (
    BaseParamsModel,
    GameDetailParams,
    GamesParams,
    RankingsParams,
    TrackClickRequest,
)

__all__ = [
    'BaseParamsModel',
    'GameDetailParams',
    'GamesParams',
    'RankingsParams',
    'TrackClickRequest',
]
