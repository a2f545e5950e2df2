"""
Pydantic models for API param validation.

Key features:
- Frozen models (immutable after normalization)
- Auto type coercion with clear error messages

Usage:
    from api.contracts.pydantic_models.feeds import GamesParams

    params = GamesParams(**request.args.to_dict())
"""

from .base import BaseParamsModel
from .clicks import TrackClickRequest
from .feeds import GameDetailParams, GamesParams, RankingsParams

__all__ = [
    'BaseParamsModel',
    'GameDetailParams',
    'GamesParams',
    'RankingsParams',
    'TrackClickRequest',
]
