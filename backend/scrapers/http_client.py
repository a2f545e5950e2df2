"""
Outbound HTTP client for all scrapers.

Wraps a requests.Session:
- Identifying User-Agent on every request (pages, robots.txt, odds API)
- Bounded (connect, read) timeouts
- Transport errors, 429 and 5xx retried with exponential backoff
- Blocking calls run in a worker thread so asyncio workflows stay responsive
"""
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from .errors import FetchFailedError

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_BACKOFF_MS = 500
BACKOFF_MULTIPLIER = 2

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class HttpResponse:
    """Detached response snapshot."""
    url: str
    status_code: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.text)


class HttpClient:
    """Async facade over a blocking requests.Session."""

    def __init__(
        self,
        user_agent: str,
        timeout: float = 20.0,
        connect_timeout: float = 5.0,
        attempts: int = MAX_RETRIES,
        backoff_ms: int = INITIAL_BACKOFF_MS,
        session: Optional[requests.Session] = None,
        sleep=asyncio.sleep,
    ):
        """
        Args:
            user_agent: Identifying UA with contact URL
            timeout: Read timeout in seconds
            connect_timeout: Connect timeout in seconds
            attempts: Total attempts per request
            backoff_ms: Initial backoff, doubled per attempt
            session: Optional pre-built session (tests)
            sleep: Awaitable sleep used between attempts
        """
        self.user_agent = user_agent
        self.timeout = (connect_timeout, timeout)
        self.attempts = max(1, attempts)
        self.backoff_ms = backoff_ms
        self._sleep = sleep
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": user_agent,
            "Accept-Language": "en-US,en;q=0.9",
        })

    def _get(self, url: str, params: Optional[Dict[str, Any]], headers: Optional[Dict[str, str]]) -> HttpResponse:
        response = self._session.get(url, params=params, headers=headers, timeout=self.timeout)
        return HttpResponse(
            url=url,
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
        )

    async def fetch(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        """
        GET a URL with retries.

        4xx responses (other than 429) are returned as-is; callers decide
        what they mean. Query params are never logged (they may hold keys).

        Raises:
            FetchFailedError: transport failure or retryable status after
                all attempts.
        """
        last_error: Optional[FetchFailedError] = None

        for attempt in range(self.attempts):
            try:
                response = await asyncio.to_thread(self._get, url, params, headers)
                if response.status_code not in RETRYABLE_STATUS:
                    return response
                last_error = FetchFailedError(
                    url, f"HTTP {response.status_code} from {url}", status_code=response.status_code
                )
            except requests.exceptions.RequestException as e:
                last_error = FetchFailedError(url, f"Request to {url} failed: {e}")

            backoff = self.backoff_ms * (BACKOFF_MULTIPLIER ** attempt)
            logger.warning(
                f"Fetch attempt {attempt + 1}/{self.attempts} for {url} failed: {last_error}. "
                f"Retrying in {backoff}ms"
            )
            if attempt < self.attempts - 1:
                await self._sleep(backoff / 1000)

        raise last_error

    async def get_text(self, url: str, **kwargs) -> HttpResponse:
        """Fetch and require a 2xx status."""
        response = await self.fetch(url, **kwargs)
        if not response.ok:
            raise FetchFailedError(
                url, f"HTTP {response.status_code} from {url}", status_code=response.status_code
            )
        return response

    async def get_json(self, url: str, **kwargs) -> Any:
        response = await self.get_text(url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise FetchFailedError(url, f"Invalid JSON from {url}: {e}", status_code=response.status_code)

    def close(self):
        self._session.close()
