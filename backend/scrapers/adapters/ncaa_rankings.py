"""
D1 lacrosse poll extractor (men's and women's).

Each category has an ordered list of candidate sources loaded from
scrape_sources.yaml. Sources are tried in order and the first one that
yields a non-empty table wins. Categories are scraped concurrently, but
the payload is all-or-nothing: if either category fails the whole
extraction fails and nothing partial is returned.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from config import DEFAULT_SOURCES_PATH
from ..base import BaseExtractor
from ..errors import ChallengePageError, ExtractionEmptyError, PartialCategoryError, PolicyDeniedError, ScrapeError
from ..models.rankings import RankingEntry, RankingsPayload
from ..retry import RetryOrchestrator
from ..utils.tables import extract_rankings
from ..utils.text import utcnow

logger = logging.getLogger(__name__)

CATEGORIES = ("mens", "womens")

SOURCE_ATTEMPTS = 2


@dataclass(frozen=True)
class RankingSource:
    label: str
    url: str


DEFAULT_SOURCES: Dict[str, List[RankingSource]] = {
    "mens": [
        RankingSource(
            "NCAA.com Inside Lacrosse Media Poll",
            "https://www.ncaa.com/rankings/lacrosse-men/d1/inside-lacrosse-media",
        ),
    ],
    "womens": [
        RankingSource(
            "NCAA.com Inside Lacrosse Media Poll",
            "https://www.ncaa.com/rankings/lacrosse-women/d1/inside-lacrosse-media",
        ),
    ],
}


def load_source_config(path: Optional[str] = None) -> Tuple[Dict[str, List[RankingSource]], List[str]]:
    """
    Load ranking sources and best-effort domains from YAML.

    Returns:
        (sources by category, best-effort domains). Falls back to the
        built-in NCAA.com sources when the file is missing or malformed.
    """
    path = path or DEFAULT_SOURCES_PATH
    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded scrape sources from {path}")
    except FileNotFoundError:
        logger.warning(f"Scrape source config not found at {path}, using defaults")
        return dict(DEFAULT_SOURCES), []
    except yaml.YAMLError as e:
        logger.warning(f"Invalid scrape source config at {path}: {e}, using defaults")
        return dict(DEFAULT_SOURCES), []

    rankings = config.get("rankings") or {}
    sources: Dict[str, List[RankingSource]] = {}
    for category in CATEGORIES:
        entries = [
            RankingSource(label=str(item.get("label") or item["url"]), url=str(item["url"]))
            for item in rankings.get(category) or []
            if isinstance(item, dict) and item.get("url")
        ]
        sources[category] = entries or list(DEFAULT_SOURCES[category])

    domains = [str(d) for d in config.get("best_effort_domains") or []]
    return sources, domains


class RankingsExtractor(BaseExtractor):
    """Men's and women's D1 polls with per-category source fallback."""

    SCRAPER_NAME = "ncaa_rankings"
    SOURCE_DOMAIN = "ncaa.com"

    def __init__(
        self,
        http,
        policy_gate,
        sources: Optional[Dict[str, List[RankingSource]]] = None,
        source_retry: Optional[RetryOrchestrator] = None,
    ):
        super().__init__(http, policy_gate)
        self.sources = sources or dict(DEFAULT_SOURCES)
        # Challenge pages and policy denials move straight to the next source
        self.source_retry = source_retry or RetryOrchestrator(
            attempts=SOURCE_ATTEMPTS,
            no_retry_on=(PolicyDeniedError, ChallengePageError),
        )

    def parse_page(self, url: str, html: str) -> List[RankingEntry]:
        return extract_rankings(html)

    async def scrape_source(self, source: RankingSource) -> List[RankingEntry]:
        response = await self.fetch_page(source.url, detect_challenge=True)
        entries = self.parse_page(source.url, response.text)
        if not entries:
            raise ExtractionEmptyError(f"No ranking table found at {source.url}")
        self.increment_stat("items_extracted", len(entries))
        return entries

    async def extract_category(self, category: str) -> List[RankingEntry]:
        """
        First non-empty table across the category's sources.

        Raises:
            ExtractionEmptyError: every source failed (chained to the last cause)
        """
        candidates = self.sources.get(category) or []
        last_error: Optional[BaseException] = None

        for source in candidates:
            try:
                entries = await self.source_retry.run(
                    lambda: self.scrape_source(source),
                    require_nonempty=True,
                    label=f"{category} rankings ({source.label})",
                )
                logger.info(f"{category} rankings: {len(entries)} entries from {source.label}")
                return entries
            except ScrapeError as e:
                last_error = e
                logger.warning(f"{category} rankings source '{source.label}' failed: {e}")

        raise ExtractionEmptyError(
            f"All {len(candidates)} {category} ranking sources failed"
            + (f": {last_error}" if last_error else "")
        ) from last_error

    async def extract(self) -> RankingsPayload:
        """
        Raises:
            PartialCategoryError: exactly one category failed
            ExtractionEmptyError: both categories failed
        """
        results = await asyncio.gather(
            *(self.extract_category(category) for category in CATEGORIES),
            return_exceptions=True,
        )
        outcome: Dict[str, Any] = dict(zip(CATEGORIES, results))
        failed = [c for c in CATEGORIES if isinstance(outcome[c], BaseException)]

        if len(failed) == 1:
            category = failed[0]
            raise PartialCategoryError(category, outcome[category]) from outcome[category]
        if failed:
            raise ExtractionEmptyError(
                "Rankings unavailable: "
                + "; ".join(f"{c} ({outcome[c]})" for c in failed)
            ) from outcome[failed[0]]

        logger.info(
            f"Extracted rankings: {len(outcome['mens'])} mens, {len(outcome['womens'])} womens "
            f"(stats: {self.stats})"
        )
        return RankingsPayload(mens=outcome["mens"], womens=outcome["womens"], updated_at=utcnow())
