"""
Scraping Package

Ingestion core for the College Lacrosse schedule and D1 polls:
- robots.txt policy gate with best-effort origins
- Embedded-payload and HTML table extractors
- Best-effort odds enrichment
- Retrying coordinator with stale-snapshot fallback
"""

from .tier_system import CrawlTier, get_tier_for_domain
from .base import BaseExtractor
from .orchestrator import ScrapeCoordinator, ScrapeOutcome

__all__ = [
    "CrawlTier",
    "get_tier_for_domain",
    "BaseExtractor",
    "ScrapeCoordinator",
    "ScrapeOutcome",
]
