"""
Tests for the LiveSportsOnTV schedule extractor
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest

from scrapers.adapters.livesportsontv import (
    SCHEDULE_URL,
    ScheduleExtractor,
    build_detail_url,
    build_platforms,
    map_fixture,
)
from scrapers.errors import ExtractionEmptyError, PolicyDeniedError

NOW = datetime(2026, 3, 14, 16, 0, tzinfo=timezone.utc)


def iso(dt):
    return dt.isoformat().replace("+00:00", "Z")


def fixture(slug, fid, start, **extra):
    record = {"slug": slug, "id": fid, "start_time": iso(start)}
    record.update(extra)
    return record


def next_data_page(fixtures) -> str:
    data = {"props": {"pageProps": {"league": "College Lacrosse", "fixtures": fixtures}}}
    return (
        "<html><head></head><body><div id='__next'></div>"
        f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(data)}</script>'
        "</body></html>"
    )


@pytest.fixture
def extractor(fake_http, policy_gate):
    return ScheduleExtractor(fake_http, policy_gate)


# =============================================================================
# Record mapping
# =============================================================================

class TestDetailUrl:
    def test_slug_and_numeric_id(self):
        assert build_detail_url({"slug": "duke-vs-notre-dame", "id": 48211}) == \
            "https://www.livesportsontv.com/match/duke-vs-notre-dame-48211"

    def test_slug_already_ending_with_id(self):
        assert build_detail_url({"slug": "duke-vs-notre-dame-48211", "id": 48211}) == \
            "https://www.livesportsontv.com/match/duke-vs-notre-dame-48211"

    def test_explicit_link_wins(self):
        assert build_detail_url({"url": "/match/army-vs-navy-9", "slug": "x"}) == \
            "https://www.livesportsontv.com/match/army-vs-navy-9"

    def test_no_slug_or_link(self):
        assert build_detail_url({"id": 5, "start_time": "2026-03-14T18:00:00Z"}) is None


class TestPlatforms:
    DETAIL = "https://www.livesportsontv.com/match/duke-vs-unc-1"

    def test_deep_link_preferred_for_same_platform(self):
        record = {
            "channels": [{"name": "ESPN+"}, {"name": "Big Ten Network", "url": "https://btn.com/watch"}],
            "deep_links": [{"name": "ESPN+", "url": "https://plus.espn.com/lacrosse"}],
        }
        platforms = build_platforms(record, self.DETAIL)

        assert [(p.slug, p.affiliate_url) for p in platforms] == [
            ("espn-plus", "https://plus.espn.com/lacrosse"),
            ("other", "https://btn.com/watch"),
        ]

    def test_channel_without_link_uses_detail_page(self):
        platforms = build_platforms({"channels": ["Fubo"]}, self.DETAIL)
        assert platforms[0].affiliate_url == self.DETAIL
        assert platforms[0].name == "Fubo Sports"

    def test_redirect_links_unwrapped_and_unsafe_links_dropped(self):
        record = {
            "channels": [{"name": "Paramount+"}],
            "deep_links": [
                {"name": "Paramount+", "url": "/go/paramount?url=https%3A%2F%2Fparamountplus.com%2Flive"},
                {"name": "Peacock", "url": "javascript:void(0)"},
            ],
        }
        platforms = build_platforms(record, self.DETAIL)

        assert [(p.slug, p.affiliate_url) for p in platforms] == [
            ("paramount-plus", "https://paramountplus.com/live"),
        ]


class TestMapFixture:
    def test_teams_from_title(self):
        game = map_fixture(fixture("syracuse-vs-cornell", 7, NOW, title="Syracuse vs Cornell"), NOW)
        assert (game.away_team, game.home_team) == ("Syracuse", "Cornell")
        assert game.id == "syracuse-vs-cornell-7"

    def test_teams_from_structured_fields(self):
        record = fixture("x", 1, NOW, home_team={"name": "Duke"}, away_team={"name": "North Carolina"})
        game = map_fixture(record, NOW)
        assert (game.away_team, game.home_team) == ("North Carolina", "Duke")

    def test_missing_start_defaults_to_six_hours_ahead(self):
        game = map_fixture({"slug": "army-vs-navy", "id": 3, "start_time": "soon"}, NOW)
        assert game.start_time == NOW + timedelta(hours=6)

    def test_unusable_record(self):
        assert map_fixture({"id": 1, "start_time": iso(NOW)}, NOW) is None


# =============================================================================
# Page parsing
# =============================================================================

class TestParsePage:
    def test_filters_dedupes_and_sorts(self, extractor):
        fixtures = [
            fixture("late-game", 3, NOW + timedelta(hours=5), title="Yale vs Brown"),
            fixture("early-game", 2, NOW + timedelta(hours=1), title="Penn vs Princeton"),
            fixture("early-game", 2, NOW + timedelta(hours=2), title="Penn vs Princeton (dup)"),
            fixture("old-game", 1, NOW - timedelta(hours=4), title="Army vs Navy"),
            fixture("recent-game", 4, NOW - timedelta(hours=2), title="Duke vs UNC"),
        ]
        games = extractor.parse_page(SCHEDULE_URL, next_data_page(fixtures), now=NOW)

        assert [g.id for g in games] == ["recent-game-4", "early-game-2", "late-game-3"]
        assert games[1].home_team == "Princeton"
        assert all(game.start_time >= NOW - timedelta(hours=3) for game in games)

    def test_ids_are_deterministic_across_runs(self, extractor):
        html = next_data_page([fixture("duke-vs-unc", 10, NOW, title="Duke vs UNC")])
        first = extractor.parse_page(SCHEDULE_URL, html, now=NOW)
        second = extractor.parse_page(SCHEDULE_URL, html, now=NOW + timedelta(minutes=30))
        assert [g.id for g in first] == [g.id for g in second] == ["duke-vs-unc-10"]

    def test_fixtures_without_slug_are_skipped(self, extractor):
        fixtures = [
            fixture("kept", 1, NOW, title="A vs B"),
            {"title": "C vs D", "start_time": iso(NOW)},
        ]
        games = extractor.parse_page(SCHEDULE_URL, next_data_page(fixtures), now=NOW)
        assert [g.id for g in games] == ["kept-1"]

    def test_no_payload_raises(self, extractor):
        with pytest.raises(ExtractionEmptyError):
            extractor.parse_page(SCHEDULE_URL, "<html><body>Loading...</body></html>", now=NOW)

    def test_flight_payload(self, extractor):
        fixtures = [fixture("duke-vs-unc", 10, NOW, title="Duke vs UNC")]
        flight = "0:[\"$\",\"main\",null]\n5:" + json.dumps({"fixtures": fixtures}) + "\n"
        html = f"<script>self.__next_f.push([1,{json.dumps(flight)}])</script>"

        games = extractor.parse_page(SCHEDULE_URL, html, now=NOW)
        assert [g.id for g in games] == ["duke-vs-unc-10"]

    def test_games_grouped_by_day_are_all_kept(self, extractor):
        day_one = NOW + timedelta(hours=2)
        days = [
            {"date": "2026-03-14", "events": [
                fixture("a-vs-b", 1, day_one, title="A vs B"),
                fixture("c-vs-d", 2, day_one + timedelta(hours=1), title="C vs D"),
            ]},
            {"date": "2026-03-15", "events": [fixture("e-vs-f", 3, day_one + timedelta(days=1), title="E vs F")]},
            {"date": "2026-03-16", "events": [fixture("g-vs-h", 4, day_one + timedelta(days=2), title="G vs H")]},
        ]
        data = {"props": {"pageProps": {"schedule": {"days": days}}}}
        html = f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(data)}</script>'

        games = extractor.parse_page(SCHEDULE_URL, html, now=NOW)

        assert [g.id for g in games] == ["a-vs-b-1", "c-vs-d-2", "e-vs-f-3", "g-vs-h-4"]


# =============================================================================
# Fetching
# =============================================================================

class TestExtract:
    def test_extract_fetches_schedule_page(self, fake_http, extractor):
        fake_http.add(SCHEDULE_URL, next_data_page([fixture("duke-vs-unc", 10, NOW, title="Duke vs UNC")]))

        games = asyncio.run(extractor.extract(now=NOW))

        assert len(games) == 1
        assert fake_http.calls == ["https://www.livesportsontv.com/robots.txt", SCHEDULE_URL]
        assert extractor.stats["pages_fetched"] == 1
        assert extractor.stats["items_extracted"] == 1

    def test_robots_denial_stops_before_page_fetch(self, fake_http, extractor):
        fake_http.add("https://www.livesportsontv.com/robots.txt", "User-agent: *\nDisallow: /league/\n")

        with pytest.raises(PolicyDeniedError):
            asyncio.run(extractor.extract(now=NOW))

        assert SCHEDULE_URL not in fake_http.calls
