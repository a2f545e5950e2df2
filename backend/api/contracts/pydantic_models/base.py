"""
Shared base for request params and click payloads.

Query strings (?refresh=1, ?detailUrl=...) and the track-click JSON body
both arrive camelCased from the front end and may carry extra keys
(cache busters, analytics fields) that are dropped here.
"""

from pydantic import BaseModel, ConfigDict


class BaseParamsModel(BaseModel):
    """Validated, read-only view of one request's inputs."""
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        # detailUrl / gameId / targetUrl arrive by alias; snake_case also accepted
        populate_by_name=True,
        extra='ignore',
    )
