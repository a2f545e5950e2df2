"""Scraper utility functions."""

from .payload import extract_payload_roots, find_fixture_list
from .platforms import PlatformMatch, detect_platform
from .tables import derive_change, extract_rankings
from .text import (
    extract_affiliate_target,
    game_id_from_detail_url,
    normalize_whitespace,
    parse_teams,
    safe_game_id,
    sanitize_external_url,
    to_absolute_url,
)

__all__ = [
    "extract_payload_roots",
    "find_fixture_list",
    "PlatformMatch",
    "detect_platform",
    "derive_change",
    "extract_rankings",
    "extract_affiliate_target",
    "game_id_from_detail_url",
    "normalize_whitespace",
    "parse_teams",
    "safe_game_id",
    "sanitize_external_url",
    "to_absolute_url",
]
