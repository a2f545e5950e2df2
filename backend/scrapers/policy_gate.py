"""
Policy Gate - robots.txt compliance for every outbound page fetch.

The robots.txt of each origin is fetched once and reused for 12 hours.
Origins classified BEST_EFFORT (see tier_system) log a warning on denial
and proceed; all others raise PolicyDeniedError before any content fetch.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

from protego import Protego

from .errors import FetchFailedError, PolicyDeniedError
from .http_client import HttpClient
from .tier_system import CrawlTier, get_tier_for_url

logger = logging.getLogger(__name__)

POLICY_TTL_SECONDS = 12 * 60 * 60


@dataclass
class CachedPolicy:
    # None means "allow everything" (no robots.txt at the origin)
    parser: Optional[Protego]
    fetched_at: float

    def can_fetch(self, user_agent: str, url: str) -> bool:
        if self.parser is None:
            return True
        return self.parser.can_fetch(url, user_agent)


def parse_robots(url: str, body: str) -> Protego:
    """
    Parse a robots.txt body.

    Rules resolve by longest match (Allow wins ties) with `*` and `$`
    wildcards; lines that cannot be interpreted are ignored.
    """
    parser = Protego.parse(body)
    logger.debug(f"Parsed robots.txt at {url}")
    return parser


class PolicyGate:
    """Per-origin robots.txt cache and allow/deny decision."""

    def __init__(
        self,
        http: HttpClient,
        user_agent: str,
        best_effort_domains: Optional[Dict[str, CrawlTier]] = None,
        ttl_seconds: float = POLICY_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.http = http
        self.user_agent = user_agent
        self.tier_overrides = best_effort_domains or {}
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._policies: Dict[str, CachedPolicy] = {}

    @staticmethod
    def origin_of(url: str) -> str:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}"

    async def _load_policy(self, origin: str) -> CachedPolicy:
        cached = self._policies.get(origin)
        now = self._clock()
        if cached is not None and now - cached.fetched_at < self.ttl_seconds:
            return cached

        robots_url = f"{origin}/robots.txt"
        response = await self.http.fetch(robots_url)

        if response.status_code >= 500:
            raise FetchFailedError(
                robots_url,
                f"robots.txt unavailable at {robots_url} (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        if 400 <= response.status_code < 500:
            logger.info(f"No robots.txt at {origin} (HTTP {response.status_code}), treating as allow-all")
            policy = CachedPolicy(parser=None, fetched_at=now)
        else:
            policy = CachedPolicy(parser=parse_robots(robots_url, response.text), fetched_at=now)

        self._policies[origin] = policy
        return policy

    async def is_allowed(self, url: str) -> bool:
        policy = await self._load_policy(self.origin_of(url))
        return policy.can_fetch(self.user_agent, url)

    async def ensure_allowed(self, url: str) -> None:
        """
        Gate a fetch.

        Raises:
            PolicyDeniedError: disallowed and the origin is not best-effort
            FetchFailedError: robots.txt could not be retrieved (enforced origins)
        """
        best_effort = get_tier_for_url(url, self.tier_overrides) is CrawlTier.BEST_EFFORT

        try:
            allowed = await self.is_allowed(url)
        except FetchFailedError as e:
            if not best_effort:
                raise
            logger.warning(f"robots.txt check failed for {url} ({e}); proceeding (best-effort source)")
            return

        if allowed:
            return

        if best_effort:
            logger.warning(f"robots.txt disallows {url}; proceeding (best-effort source)")
            return

        raise PolicyDeniedError(url, self.user_agent)

    def invalidate(self, url: Optional[str] = None):
        """Drop one origin's cached policy, or all of them."""
        if url is None:
            self._policies.clear()
        else:
            self._policies.pop(self.origin_of(url), None)
