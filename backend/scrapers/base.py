"""
Base Extractor - Abstract template for all page extractors.

Provides common functionality:
- Policy-gated page fetching (robots.txt checked before any content fetch)
- Anti-bot challenge page detection
- Per-run statistics
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .errors import ChallengePageError, FetchFailedError
from .http_client import HttpClient, HttpResponse
from .policy_gate import PolicyGate

logger = logging.getLogger(__name__)

# Lowercased markers of interstitial pages served instead of content
CHALLENGE_SIGNATURES = (
    "just a moment...",
    "cf-browser-verification",
    "cf_chl_opt",
    "attention required! | cloudflare",
    "checking your browser before accessing",
    "px-captcha",
    "please verify you are a human",
    "enable javascript and cookies to continue",
)


def find_challenge_signature(html: str) -> Optional[str]:
    """Return the first challenge marker present in the page, if any."""
    lowered = (html or "").lower()
    for signature in CHALLENGE_SIGNATURES:
        if signature in lowered:
            return signature
    return None


class BaseExtractor(ABC):
    """
    Abstract base class for all extractors.

    Subclasses must implement:
    - parse_page(): Turn fetched HTML into typed records (pure)

    Subclasses should set class attributes:
    - SCRAPER_NAME: Unique extractor identifier
    - SOURCE_DOMAIN: Primary domain being scraped
    """

    # Override in subclass
    SCRAPER_NAME: str = "base"
    SOURCE_DOMAIN: str = ""

    def __init__(self, http: HttpClient, policy_gate: PolicyGate):
        """
        Initialize extractor.

        Args:
            http: Shared outbound HTTP client
            policy_gate: robots.txt gate consulted before every page fetch
        """
        self.http = http
        self.policy_gate = policy_gate
        self._stats = {
            "pages_fetched": 0,
            "items_extracted": 0,
            "errors_count": 0,
        }

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def increment_stat(self, stat_name: str, amount: int = 1):
        """Increment a run statistic."""
        if stat_name in self._stats:
            self._stats[stat_name] += amount

    @abstractmethod
    def parse_page(self, url: str, html: str) -> List[Any]:
        """
        Parse a page and return extracted records.

        Args:
            url: URL that was fetched
            html: Raw HTML content

        Returns:
            List of model instances (empty when nothing matched)
        """
        pass

    async def fetch_page(self, url: str, detect_challenge: bool = False) -> HttpResponse:
        """
        Policy check, then fetch.

        Args:
            url: URL to fetch
            detect_challenge: Raise ChallengePageError on interstitial pages

        Raises:
            PolicyDeniedError, FetchFailedError, ChallengePageError
        """
        await self.policy_gate.ensure_allowed(url)

        try:
            response = await self.http.fetch(url)
        except FetchFailedError:
            self.increment_stat("errors_count")
            raise

        self.increment_stat("pages_fetched")

        # Interstitials are often served with 403, so check before the status
        if detect_challenge:
            signature = find_challenge_signature(response.text)
            if signature:
                self.increment_stat("errors_count")
                raise ChallengePageError(url, signature, status_code=response.status_code)

        if not response.ok:
            self.increment_stat("errors_count")
            raise FetchFailedError(
                url, f"HTTP {response.status_code} from {url}", status_code=response.status_code
            )

        return response
