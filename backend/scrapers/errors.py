"""
Scrape error taxonomy.

- PolicyDeniedError: origin's robots.txt disallows the fetch (never retried)
- FetchFailedError: network error, timeout or non-2xx response (retried)
- ChallengePageError: anti-bot interstitial served instead of content
- ExtractionEmptyError: page fetched but no usable records found (retried)
- PartialCategoryError: one rankings category failed; escalated to a full failure
"""
from typing import Optional


class ScrapeError(Exception):
    """Base exception for ingestion errors."""
    pass


class PolicyDeniedError(ScrapeError):
    """Fetching the URL is disallowed by the origin's crawl policy."""

    def __init__(self, url: str, user_agent: str):
        self.url = url
        self.user_agent = user_agent
        super().__init__(f"Scraping is disallowed by robots.txt for {url}")


class FetchFailedError(ScrapeError):
    """Network/timeout failure or unsuccessful HTTP status."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class ChallengePageError(FetchFailedError):
    """An anti-automation interstitial was returned instead of real content."""

    def __init__(self, url: str, signature: str, status_code: Optional[int] = None):
        self.signature = signature
        super().__init__(
            url,
            f"Challenge page detected at {url} (matched '{signature}')",
            status_code=status_code,
        )


class ExtractionEmptyError(ScrapeError):
    """Content was fetched but produced no usable records."""
    pass


class PartialCategoryError(ScrapeError):
    """Rankings: exactly one of the two categories failed."""

    def __init__(self, failed_category: str, cause: BaseException):
        self.failed_category = failed_category
        self.cause = cause
        super().__init__(
            f"Rankings incomplete: {failed_category} failed ({cause})"
        )
