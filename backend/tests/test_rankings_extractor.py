"""
Tests for the D1 rankings extractor: source fallback, challenge pages,
all-or-nothing categories and the YAML source config.
"""

import asyncio

import pytest

from scrapers.adapters.ncaa_rankings import (
    DEFAULT_SOURCES,
    RankingSource,
    RankingsExtractor,
    load_source_config,
)
from scrapers.errors import ChallengePageError, ExtractionEmptyError, PartialCategoryError, PolicyDeniedError
from scrapers.retry import RetryOrchestrator

MENS_PRIMARY = "https://www.ncaa.com/rankings/lacrosse-men/d1/inside-lacrosse-media"
MENS_MIRROR = "https://www.insidelacrosse.com/rankings/men/d1/media-poll"
WOMENS_PRIMARY = "https://www.ncaa.com/rankings/lacrosse-women/d1/inside-lacrosse-media"

SOURCES = {
    "mens": [RankingSource("primary", MENS_PRIMARY), RankingSource("mirror", MENS_MIRROR)],
    "womens": [RankingSource("primary", WOMENS_PRIMARY)],
}

CHALLENGE_HTML = "<html><title>Just a moment...</title><div id='cf-browser-verification'></div></html>"


def poll_html(teams) -> str:
    rows = "".join(
        f"<tr><td>{rank}</td><td>{team}</td><td>8-1</td><td>{500 - rank}</td><td>{rank}</td></tr>"
        for rank, team in enumerate(teams, start=1)
    )
    return (
        "<table><thead><tr><th>Rank</th><th>Team</th><th>Record</th><th>Points</th>"
        f"<th>Previous</th></tr></thead><tbody>{rows}</tbody></table>"
    )


@pytest.fixture
def extractor(fake_http, policy_gate, recording_sleep):
    return RankingsExtractor(
        fake_http,
        policy_gate,
        sources=SOURCES,
        source_retry=RetryOrchestrator(
            attempts=2,
            sleep=recording_sleep,
            no_retry_on=(PolicyDeniedError, ChallengePageError),
        ),
    )


# =============================================================================
# Per-category fallback
# =============================================================================

class TestExtractCategory:
    def test_primary_source_wins(self, fake_http, extractor):
        fake_http.add(MENS_PRIMARY, poll_html(["Notre Dame", "Duke"]))

        entries = asyncio.run(extractor.extract_category("mens"))

        assert [e.team for e in entries] == ["Notre Dame", "Duke"]
        assert MENS_MIRROR not in fake_http.calls

    def test_falls_back_when_primary_table_is_empty(self, fake_http, extractor, recording_sleep):
        fake_http.add(MENS_PRIMARY, "<html><p>No poll this week</p></html>")
        fake_http.add(MENS_MIRROR, poll_html(["Maryland"]))

        entries = asyncio.run(extractor.extract_category("mens"))

        assert [e.team for e in entries] == ["Maryland"]
        # Empty primary was retried once before moving on
        assert len(fake_http.calls_to(MENS_PRIMARY)) == 2
        assert recording_sleep.delays == pytest.approx([1.4])

    def test_challenge_page_moves_to_next_source_without_retry(self, fake_http, extractor, recording_sleep):
        fake_http.add(MENS_PRIMARY, CHALLENGE_HTML, status=403)
        fake_http.add(MENS_MIRROR, poll_html(["Virginia"]))

        entries = asyncio.run(extractor.extract_category("mens"))

        assert [e.team for e in entries] == ["Virginia"]
        assert len(fake_http.calls_to(MENS_PRIMARY)) == 1
        assert recording_sleep.delays == []

    def test_policy_denied_source_is_skipped(self, fake_http, extractor):
        fake_http.add("https://www.ncaa.com/robots.txt", "User-agent: *\nDisallow: /rankings/\n")
        fake_http.add(MENS_MIRROR, poll_html(["Virginia"]))

        entries = asyncio.run(extractor.extract_category("mens"))

        assert [e.team for e in entries] == ["Virginia"]
        assert MENS_PRIMARY not in fake_http.calls

    def test_all_sources_failing_raises_empty(self, fake_http, extractor):
        fake_http.add(MENS_PRIMARY, CHALLENGE_HTML)
        fake_http.add(MENS_MIRROR, "", status=404)

        with pytest.raises(ExtractionEmptyError, match="All 2 mens ranking sources failed"):
            asyncio.run(extractor.extract_category("mens"))

    def test_challenge_error_carries_signature(self, fake_http, extractor):
        fake_http.add(MENS_PRIMARY, CHALLENGE_HTML)

        with pytest.raises(ChallengePageError) as exc_info:
            asyncio.run(extractor.scrape_source(SOURCES["mens"][0]))

        assert exc_info.value.signature == "just a moment..."


# =============================================================================
# Both categories
# =============================================================================

class TestExtract:
    def test_both_categories(self, fake_http, extractor):
        fake_http.add(MENS_PRIMARY, poll_html(["Notre Dame", "Duke"]))
        fake_http.add(WOMENS_PRIMARY, poll_html(["Northwestern", "Boston College", "North Carolina"]))

        payload = asyncio.run(extractor.extract())

        assert payload.is_complete
        assert len(payload.mens) == 2
        assert len(payload.womens) == 3
        assert payload.womens[1].change == "0"
        assert extractor.stats["items_extracted"] == 5

    def test_one_category_failing_fails_the_whole_payload(self, fake_http, extractor):
        fake_http.add(MENS_PRIMARY, poll_html(["Notre Dame"]))
        fake_http.add(WOMENS_PRIMARY, CHALLENGE_HTML, status=403)

        with pytest.raises(PartialCategoryError) as exc_info:
            asyncio.run(extractor.extract())

        assert exc_info.value.failed_category == "womens"

    def test_both_categories_failing(self, fake_http, extractor):
        with pytest.raises(ExtractionEmptyError, match="Rankings unavailable"):
            asyncio.run(extractor.extract())


# =============================================================================
# Source config
# =============================================================================

class TestLoadSourceConfig:
    def test_bundled_config(self):
        sources, best_effort = load_source_config()

        assert sources["mens"][0].url == MENS_PRIMARY
        assert len(sources["womens"]) == 3
        assert best_effort == ["insidelacrosse.com"]

    def test_missing_file_uses_defaults(self, tmp_path):
        sources, best_effort = load_source_config(str(tmp_path / "missing.yaml"))
        assert sources == DEFAULT_SOURCES
        assert best_effort == []

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "sources.yaml"
        path.write_text("rankings: [unclosed\n")

        sources, _ = load_source_config(str(path))
        assert sources == DEFAULT_SOURCES

    def test_category_without_entries_uses_default(self, tmp_path):
        path = tmp_path / "sources.yaml"
        path.write_text(
            "rankings:\n"
            "  mens:\n"
            "    - label: Custom\n"
            "      url: https://example.com/poll\n"
            "best_effort_domains:\n"
            "  - example.com\n"
        )

        sources, best_effort = load_source_config(str(path))

        assert sources["mens"] == [RankingSource("Custom", "https://example.com/poll")]
        assert sources["womens"] == DEFAULT_SOURCES["womens"]
        assert best_effort == ["example.com"]
