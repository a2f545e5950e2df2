"""
Crawl Tier System - Controls how robots.txt denials are treated per origin.

ENFORCED (default):
- A robots.txt denial stops the fetch with PolicyDeniedError
- Applies to every origin not listed below

BEST_EFFORT (secondary rankings mirrors):
- A denial is logged as a warning and the fetch proceeds
- Only sources we fall back to when the primary poll page is unavailable
"""
from enum import Enum
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse


class CrawlTier(Enum):
    """Crawl policy classification."""
    ENFORCED = "enforced"
    BEST_EFFORT = "best_effort"


# Domain to tier mapping
DOMAIN_TIER_MAP: Dict[str, CrawlTier] = {
    # =========================================================================
    # Enforced - primary sources
    # =========================================================================
    "livesportsontv.com": CrawlTier.ENFORCED,
    "ncaa.com": CrawlTier.ENFORCED,
    "the-odds-api.com": CrawlTier.ENFORCED,

    # =========================================================================
    # Best effort - fallback rankings mirrors
    # =========================================================================
    "insidelacrosse.com": CrawlTier.BEST_EFFORT,
}


def normalize_domain(domain: str) -> str:
    domain = (domain or "").lower().strip()
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def get_tier_for_domain(domain: str, overrides: Optional[Dict[str, CrawlTier]] = None) -> CrawlTier:
    """
    Get crawl tier for a domain.

    Args:
        domain: Domain name (e.g., 'www.ncaa.com')
        overrides: Extra domain -> tier entries (from source config)

    Returns:
        CrawlTier: defaults to ENFORCED for unknown domains
    """
    domain = normalize_domain(domain)
    if overrides and domain in overrides:
        return overrides[domain]
    return DOMAIN_TIER_MAP.get(domain, CrawlTier.ENFORCED)


def get_tier_for_url(url: str, overrides: Optional[Dict[str, CrawlTier]] = None) -> CrawlTier:
    return get_tier_for_domain(urlparse(url).hostname or "", overrides)


def best_effort_overrides(domains: Iterable[str]) -> Dict[str, CrawlTier]:
    """Build an override map marking each domain best-effort."""
    return {normalize_domain(domain): CrawlTier.BEST_EFFORT for domain in domains if domain}
