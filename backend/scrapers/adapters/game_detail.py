"""
LiveSportsOnTV match page extractor.

Reads the matchup heading, a description and the "watch it live" links
from a single match page.
"""
import logging
import re
from typing import List
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..base import BaseExtractor
from ..errors import ExtractionEmptyError
from ..models.game import GameDetail, StreamingPlatform, dedupe_platforms, default_description
from ..utils.platforms import detect_platform
from ..utils.text import (
    extract_affiliate_target,
    game_id_from_detail_url,
    normalize_whitespace,
    sanitize_external_url,
    to_absolute_url,
    utcnow,
)
from .livesportsontv import BASE_URL

logger = logging.getLogger(__name__)

WATCH_TEXT_RE = re.compile(r"watch\s*it\s*live", re.IGNORECASE)
REDIRECT_HREF_RE = re.compile(r"/go/", re.IGNORECASE)
MIN_PARAGRAPH_LENGTH = 100


def is_livesportsontv_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and parsed.hostname in ("livesportsontv.com", "www.livesportsontv.com")


def _watch_options(soup: BeautifulSoup) -> List[StreamingPlatform]:
    options = []
    for link in soup.find_all("a", href=True):
        text = normalize_whitespace(link.get_text(" "))
        href = to_absolute_url(link["href"], BASE_URL)
        if not (WATCH_TEXT_RE.search(text) or REDIRECT_HREF_RE.search(href)):
            continue

        container = link.find_parent(["li", "article", "div"])
        row_text = normalize_whitespace(container.get_text(" ")) if container else text
        target = sanitize_external_url(extract_affiliate_target(href))
        if not target:
            continue

        detected = detect_platform(row_text or "Streaming Platform")
        options.append(StreamingPlatform(
            name=detected.name,
            slug=detected.slug,
            logo=detected.logo,
            affiliate_url=target,
        ))
    return dedupe_platforms(options)


def _description(soup: BeautifulSoup) -> str:
    meta = soup.find("meta", attrs={"name": "description"})
    if meta and normalize_whitespace(meta.get("content")):
        return normalize_whitespace(meta.get("content"))
    for paragraph in soup.find_all("p"):
        text = normalize_whitespace(paragraph.get_text(" "))
        if len(text) > MIN_PARAGRAPH_LENGTH:
            return text
    return ""


class GameDetailExtractor(BaseExtractor):
    """Single match page -> GameDetail."""

    SCRAPER_NAME = "livesportsontv_detail"
    SOURCE_DOMAIN = "livesportsontv.com"

    def parse_page(self, url: str, html: str) -> List[GameDetail]:
        soup = BeautifulSoup(html, "html.parser")
        heading = soup.find("h1")
        matchup = normalize_whitespace(heading.get_text(" ")) if heading else ""
        if not matchup:
            return []

        return [GameDetail(
            game_id=game_id_from_detail_url(url),
            matchup=matchup,
            description=_description(soup) or default_description(matchup),
            watch_options=_watch_options(soup),
            detail_url=url,
            scraped_at=utcnow(),
        )]

    async def extract(self, detail_url: str) -> GameDetail:
        """
        Raises:
            ValueError: URL is not a livesportsontv.com page
            ExtractionEmptyError: page has no matchup heading
        """
        url = to_absolute_url(detail_url, BASE_URL)
        if not is_livesportsontv_url(url):
            raise ValueError(f"Invalid detail URL domain: {detail_url}")

        response = await self.fetch_page(url)
        details = self.parse_page(url, response.text)
        if not details:
            raise ExtractionEmptyError(f"No matchup found at {url}")
        return details[0]
