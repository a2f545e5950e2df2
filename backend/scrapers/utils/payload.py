"""
Embedded payload extraction for server-rendered (Next.js) pages.

Schedule pages ship their data inside the HTML rather than in markup:
- streamed flight fragments: self.__next_f.push([1,"..."])
- a __NEXT_DATA__ JSON script
- other <script type="application/json"> blocks

Everything here is pure: HTML in, plain JSON values out.
"""
import json
import logging
import re
from typing import Any, Dict, Iterator, List

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

NEXT_F_PUSH_RE = re.compile(
    r'self\.__next_f\.push\(\[\s*\d+\s*,\s*"((?:\\.|[^"\\])*)"\s*\]\)',
    re.DOTALL,
)
FLIGHT_ROW_RE = re.compile(r"^([0-9a-zA-Z]+):(.*)$")

TEAM_KEY_PAIRS = (
    ("home_team", "away_team"),
    ("homeTeam", "awayTeam"),
    ("home", "away"),
    ("team_home", "team_away"),
)
START_KEYS = ("start_time", "startTime", "start_date", "startDate", "date", "kickoff")
TITLE_KEYS = ("title", "name", "matchup")


def decode_flight_fragments(html: str) -> str:
    """Concatenate every streamed __next_f fragment into one flight string."""
    chunks = []
    for match in NEXT_F_PUSH_RE.finditer(html):
        raw = match.group(1)
        try:
            chunks.append(json.loads(f'"{raw}"'))
        except json.JSONDecodeError:
            logger.debug("Skipping undecodable flight fragment")
    return "".join(chunks)


def parse_flight_rows(flight: str) -> List[Any]:
    """
    Parse 'id:payload' rows of a flight stream.

    Rows whose payload is not JSON (module refs, text chunks) are skipped.
    """
    values = []
    for line in flight.splitlines():
        match = FLIGHT_ROW_RE.match(line.strip())
        if not match:
            continue
        payload = match.group(2)
        if not payload or payload[0] not in "[{":
            continue
        try:
            values.append(json.loads(payload))
        except json.JSONDecodeError:
            continue
    return values


def json_script_blocks(html: str) -> List[Any]:
    """__NEXT_DATA__ and application/json script contents, parsed."""
    soup = BeautifulSoup(html, "html.parser")
    values = []
    for script in soup.find_all("script"):
        is_next_data = script.get("id") == "__NEXT_DATA__"
        is_json = (script.get("type") or "").lower() == "application/json"
        if not (is_next_data or is_json):
            continue
        text = script.string or script.get_text() or ""
        if not text.strip():
            continue
        try:
            values.append(json.loads(text))
        except json.JSONDecodeError:
            logger.debug(f"Skipping malformed JSON script block (id={script.get('id')})")
    return values


def extract_payload_roots(html: str) -> List[Any]:
    """All JSON roots embedded in the page, flight rows first."""
    roots = parse_flight_rows(decode_flight_fragments(html))
    roots.extend(json_script_blocks(html))
    return roots


def is_fixture_like(value: Any) -> bool:
    """A dict with a start time plus either a team pair or a title/slug."""
    if not isinstance(value, dict):
        return False
    if not any(value.get(key) for key in START_KEYS):
        return False
    for home_key, away_key in TEAM_KEY_PAIRS:
        if value.get(home_key) and value.get(away_key):
            return True
    return bool(value.get("slug")) or any(
        isinstance(value.get(key), str) and value.get(key) for key in TITLE_KEYS
    )


def iter_fixtures(root: Any) -> Iterator[Dict[str, Any]]:
    """
    Yield every fixture-shaped dict nested anywhere in a JSON value.

    Document order is kept; a fixture's own children are not searched.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if is_fixture_like(node):
            yield node
        elif isinstance(node, list):
            stack.extend(reversed(node))
        elif isinstance(node, dict):
            stack.extend(reversed(list(node.values())))


def find_fixture_list(roots: List[Any]) -> List[Dict[str, Any]]:
    """
    Choose the payload root holding the most fixture-shaped records.

    Records are collected from the whole root, so schedules grouped by day
    (days -> events) come back as one flat list.

    Returns:
        The fixture dicts of the winning root, or an empty list when no
        root holds any.
    """
    best: List[Dict[str, Any]] = []
    for root in roots:
        fixtures = list(iter_fixtures(root))
        if len(fixtures) > len(best):
            best = fixtures
    return best
