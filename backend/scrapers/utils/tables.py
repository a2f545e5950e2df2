"""
Ranking table parsing.

Poll pages differ in column order and header wording, so columns are
located by header synonyms with a positional fallback:
rank, team, record, points, change.
"""
import re
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from ..models.rankings import RankingEntry, finalize_entries
from .text import normalize_whitespace

HEADER_SYNONYMS = {
    "rank": ("rank", "rk", "#"),
    "previous": ("previous", "prev", "last week"),
    "team": ("team", "school", "institution"),
    "record": ("record", "w-l", "overall"),
    "points": ("points", "votes", "pts"),
    "change": ("change", "+/-", "delta", "chg"),
}

POSITIONAL_COLUMNS = {"rank": 0, "team": 1, "record": 2, "points": 3, "change": 4}

MISSING = "--"

_FIRST_INT = re.compile(r"\d+")
_SIGNED_INT = re.compile(r"^([+-]?)\s*(\d+)$")
_ARROWS = {"▲": "+", "↑": "+", "▼": "-", "↓": "-", "−": "-", "–": "-"}
_NEW_MARKERS = ("NEW", "NR")


def parse_rank(text: str) -> Optional[int]:
    """First integer in the cell; None unless positive."""
    match = _FIRST_INT.search(text or "")
    if not match:
        return None
    rank = int(match.group(0))
    return rank if rank > 0 else None


def map_header(cells: List[str]) -> Dict[str, int]:
    """Field name -> column index for recognizable headers."""
    columns: Dict[str, int] = {}
    for index, cell in enumerate(cells):
        header = normalize_whitespace(cell).lower()
        if not header:
            continue
        for field_name, synonyms in HEADER_SYNONYMS.items():
            if field_name in columns:
                continue
            if any(header == s or header.startswith(s + " ") or header.startswith(s + "(") for s in synonyms):
                columns[field_name] = index
                break
    return columns


def _format_delta(delta: int) -> str:
    if delta > 0:
        return f"+{delta}"
    if delta < 0:
        return str(delta)
    return "0"


def derive_change(raw_change: str, raw_previous: str, rank: int) -> str:
    """
    Normalize the movement column.

    Precedence: explicit signed integer, NEW/NR marker, previous - rank,
    otherwise "0".
    """
    change = normalize_whitespace(raw_change)
    for symbol, sign in _ARROWS.items():
        change = change.replace(symbol, sign)

    if change.upper() in _NEW_MARKERS:
        return "NEW"

    match = _SIGNED_INT.match(change)
    if match:
        magnitude = int(match.group(2))
        return _format_delta(-magnitude if match.group(1) == "-" else magnitude)

    previous = normalize_whitespace(raw_previous)
    if previous.upper() in _NEW_MARKERS:
        return "NEW"
    if previous.isdigit():
        return _format_delta(int(previous) - rank)

    return "0"


def _cell(cells: List[str], columns: Dict[str, int], field_name: str) -> str:
    index = columns.get(field_name)
    if index is None or index >= len(cells):
        return ""
    return cells[index]


def _header_cells(table) -> List[str]:
    head = table.find("thead")
    row = head.find("tr") if head else None
    if row is None:
        row = table.find("tr")
        if row is None or row.find("td") is not None:
            return []
    return [normalize_whitespace(th.get_text(" ")) for th in row.find_all(["th", "td"])]


def _body_rows(table) -> List[List[str]]:
    rows = []
    for tr in table.find_all("tr"):
        cells = tr.find_all("td")
        if not cells:
            continue
        rows.append([normalize_whitespace(td.get_text(" ")) for td in cells])
    return rows


def _rank_column(columns: Dict[str, int]) -> int:
    return columns.get("rank", POSITIONAL_COLUMNS["rank"])


def parse_table(table) -> List[RankingEntry]:
    """Rows of one <table> as normalized entries (deduped, sorted, top 25)."""
    header = _header_cells(table)
    mapped = map_header(header)
    columns = mapped if "rank" in mapped and "team" in mapped else dict(POSITIONAL_COLUMNS)
    if "previous" in mapped:
        columns.setdefault("previous", mapped["previous"])

    entries = []
    for cells in _body_rows(table):
        rank = parse_rank(_cell(cells, columns, "rank"))
        team = _cell(cells, columns, "team")
        if rank is None or not team:
            continue
        entries.append(RankingEntry(
            rank=rank,
            team=team,
            record=_cell(cells, columns, "record") or MISSING,
            points_votes=_cell(cells, columns, "points") or MISSING,
            change=derive_change(
                _cell(cells, columns, "change"),
                _cell(cells, columns, "previous"),
                rank,
            ),
        ))
    return finalize_entries(entries)


def count_ranked_rows(table) -> int:
    """Rows whose rank column parses to a positive integer."""
    column = _rank_column(map_header(_header_cells(table)))
    count = 0
    for cells in _body_rows(table):
        if column < len(cells) and parse_rank(cells[column]) is not None:
            count += 1
    return count


def extract_rankings(html: str) -> List[RankingEntry]:
    """
    Parse the best ranking table on a page.

    Returns:
        Entries from the table with the most ranked rows; empty when the
        page has no usable table.
    """
    soup = BeautifulSoup(html, "html.parser")
    best_table = None
    best_count = 0
    for table in soup.find_all("table"):
        count = count_ranked_rows(table)
        if count > best_count:
            best_table, best_count = table, count
    if best_table is None:
        return []
    return parse_table(best_table)
