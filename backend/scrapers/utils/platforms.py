"""
Streaming platform detection.

Maps free-text channel/provider names to a fixed set of platform slugs.
Specific patterns come before broad ones ('ESPN Select' before 'ESPN').
"""
import re
from typing import NamedTuple

from .text import normalize_whitespace


class PlatformMatch(NamedTuple):
    slug: str
    logo: str
    name: str


DEFAULT_LOGO = "/platform-logos/default.svg"

PLATFORM_MATCHERS = [
    (re.compile(r"fubo", re.I), "fubo", "/platform-logos/fubo.svg", "Fubo Sports"),
    (re.compile(r"espn\s*select", re.I), "espn-select", "/platform-logos/espn.svg", "ESPN Select"),
    (re.compile(r"espn\s*unlimited", re.I), "espn-unlimited", "/platform-logos/espn.svg", "ESPN Unlimited"),
    (re.compile(r"espn", re.I), "espn-plus", "/platform-logos/espn.svg", "ESPN+"),
    (re.compile(r"paramount", re.I), "paramount-plus", "/platform-logos/paramount.svg", "Paramount+"),
    (re.compile(r"nbc|peacock", re.I), "nbc-sports", "/platform-logos/nbc.svg", "NBC Sports"),
    (re.compile(r"fox", re.I), "fox-sports", "/platform-logos/fox.svg", "Fox Sports"),
    (re.compile(r"youtube\s*tv", re.I), "youtube-tv", "/platform-logos/youtube-tv.svg", "YouTube TV"),
    (re.compile(r"hulu", re.I), "hulu-live", "/platform-logos/hulu.svg", "Hulu + Live TV"),
]

PLATFORM_SLUGS = frozenset(slug for _, slug, _, _ in PLATFORM_MATCHERS) | {"other"}


def detect_platform(raw_name: str) -> PlatformMatch:
    """Resolve a display name, logo and slug; unknown names map to 'other'."""
    normalized = normalize_whitespace(raw_name)

    for pattern, slug, logo, display_name in PLATFORM_MATCHERS:
        if pattern.search(normalized):
            return PlatformMatch(slug=slug, logo=logo, name=display_name)

    return PlatformMatch(
        slug="other",
        logo=DEFAULT_LOGO,
        name=normalized or "Streaming Platform",
    )
