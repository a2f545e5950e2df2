"""
Root pytest configuration for backend tests.

Provides:
- backend/ on sys.path so `from scrapers...` / `from services...` work
- FakeHttp: an HttpClient whose transport is a URL -> response table
- Simulated clocks and a recording sleep
- Shared fixtures (cache, policy gate, app, client)
"""

import json
import sys
from pathlib import Path

# Add backend directory to Python path so imports like
# `from scrapers.errors import ...` and `from utils.cache_key import ...` work
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest

from config import DEFAULT_SOURCES_PATH, ScraperSettings
from scrapers.http_client import HttpClient, HttpResponse
from scrapers.policy_gate import PolicyGate
from services.cache_store import MemoryCacheStore

TEST_USER_AGENT = "CollegeLacrosseScheduleBot/1.0 (+https://collegelacrosseschedule.com)"


class RecordingSleep:
    """Awaitable sleep that returns immediately and records the delay."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


class FakeClock:
    """Monotonic-style clock in seconds, advanced manually."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeHttp(HttpClient):
    """
    HttpClient with a scripted transport.

    Unregistered URLs answer 404, so robots.txt defaults to allow-all.
    Registering several responses for one URL plays them in order; the
    last one repeats.
    """

    def __init__(self, attempts: int = 1):
        self.sleep = RecordingSleep()
        super().__init__(user_agent=TEST_USER_AGENT, attempts=attempts, sleep=self.sleep)
        self.responses = {}
        self.calls = []

    def add(self, url, body="", status=200):
        if not isinstance(body, (str, BaseException)):
            body = json.dumps(body)
        self.responses.setdefault(url, []).append(body if isinstance(body, BaseException) else (status, body))
        return self

    def calls_to(self, url):
        return [call for call in self.calls if call == url]

    def _get(self, url, params, headers):
        self.calls.append(url)
        queue = self.responses.get(url)
        if not queue:
            return HttpResponse(url=url, status_code=404, text="")
        entry = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(entry, BaseException):
            raise entry
        status, body = entry
        return HttpResponse(url=url, status_code=status, text=body)


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def http_factory():
    """FakeHttp class, for tests that need a custom attempt count."""
    return FakeHttp


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def memory_cache(fake_clock):
    return MemoryCacheStore(clock=fake_clock)


@pytest.fixture
def policy_gate(fake_http):
    return PolicyGate(fake_http, TEST_USER_AGENT)


@pytest.fixture
def settings():
    return ScraperSettings(
        user_agent=TEST_USER_AGENT,
        http_timeout=5.0,
        connect_timeout=2.0,
        odds_api_key=None,
        sources_path=DEFAULT_SOURCES_PATH,
    )


@pytest.fixture
def runtime(settings, fake_http):
    from services.runtime import build_runtime

    return build_runtime(settings=settings, cache=MemoryCacheStore(), http=fake_http)


@pytest.fixture
def app(runtime):
    """Create test Flask application."""
    from app import create_app
    from utils.rate_limiter import limiter

    app = create_app(runtime=runtime)
    app.config['TESTING'] = True
    limiter.reset()
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()
