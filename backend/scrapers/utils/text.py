"""
Text, URL and time helpers shared by the extractors.

All functions are pure: raw strings in, normalized values out.
"""
import re
from datetime import datetime, timezone
from typing import Any, Optional, Tuple
from urllib.parse import parse_qs, urljoin, urlparse

from dateutil import parser as date_parser
from dateutil import tz

EASTERN = tz.gettz("America/New_York")

# Redirect-style query params that may wrap the real streaming destination
SENSITIVE_QUERY_KEYS = ("url", "redirect", "target", "dest", "destination", "u", "to", "r", "ref")

_MATCHUP_SPLIT = re.compile(r"\s+(?:vs\.?|v\.?|@|at|-)\s+", re.IGNORECASE)
_NON_SLUG = re.compile(r"[^a-z0-9-]+")
_WHITESPACE = re.compile(r"\s+")

MAX_ID_LENGTH = 80


def normalize_whitespace(value: Any) -> str:
    """Collapse runs of whitespace and strip."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value)).strip()


def safe_game_id(value: str) -> str:
    """Lowercase slug: non [a-z0-9-] runs become '-', trimmed, max 80 chars."""
    slug = _NON_SLUG.sub("-", (value or "").lower()).strip("-")
    return slug[:MAX_ID_LENGTH]


def game_id_from_detail_url(detail_url: str) -> str:
    """
    Derive the stable game id from a canonical detail URL.

    '/match/duke-vs-notre-dame/48211' and '/match/duke-vs-notre-dame-48211'
    both yield 'duke-vs-notre-dame-48211'. Query strings and fragments are
    ignored so surface variations of the same event map to the same id.
    """
    path = urlparse(detail_url).path
    if "/match/" in path:
        tail = path.split("/match/", 1)[1]
    else:
        tail = path.rstrip("/").rsplit("/", 1)[-1]
    segments = [segment for segment in tail.split("/") if segment]
    return safe_game_id("-".join(segments))


def parse_teams(matchup: str) -> Tuple[str, str]:
    """
    Split 'Away vs Home' style titles.

    Returns:
        (away_team, home_team); ('TBD', title) when no separator is found.
    """
    normalized = normalize_whitespace(matchup)
    parts = _MATCHUP_SPLIT.split(normalized, maxsplit=1)
    if len(parts) == 2:
        away, home = normalize_whitespace(parts[0]), normalize_whitespace(parts[1])
        if away and home:
            return away, home
    return "TBD", normalized or "TBD"


def to_absolute_url(value: Optional[str], base: str) -> str:
    if not value:
        return base
    try:
        return urljoin(base, value)
    except ValueError:
        return base


def extract_affiliate_target(url: str) -> str:
    """Unwrap redirect links (…?url=https://…) to their destination."""
    try:
        query = parse_qs(urlparse(url).query)
    except ValueError:
        return url

    for key in SENSITIVE_QUERY_KEYS:
        for candidate in query.get(key, []):
            if re.match(r"^https?://", candidate, re.IGNORECASE):
                return candidate
    return url


def sanitize_external_url(raw_url: str) -> str:
    """Return the URL when it is http(s), else an empty string."""
    try:
        parsed = urlparse((raw_url or "").strip())
    except ValueError:
        return ""
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return parsed.geturl()
    return ""


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string or epoch number into an aware UTC datetime.

    Naive values are taken as UTC. Returns None when unparsable.
    """
    if value is None or value == "":
        return None

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 10_000_000_000 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    try:
        parsed = date_parser.isoparse(value.strip())
    except (ValueError, OverflowError):
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """UTC ISO-8601 with a trailing 'Z'."""
    return value.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def to_eastern_label(value: datetime) -> str:
    """'7:00 PM' style start label in US Eastern time."""
    return value.astimezone(EASTERN).strftime("%I:%M %p").lstrip("0")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
