"""
Manual Ingestion Trigger Routes

Both triggers are gated per client address (SCRAPE_TRIGGER_LIMIT). A run
never fails the request: on failure the last snapshot is kept and the
response reports stale=true.
"""
import asyncio
import logging

from flask import Blueprint, jsonify

from scrapers.utils.text import to_iso
from services.runtime import current_runtime
from utils.rate_limiter import RATE_LIMITS, limiter

logger = logging.getLogger(__name__)

scrape_bp = Blueprint('scrape', __name__)


def _outcome_fields(outcome) -> dict:
    fields = {"ok": True, "stale": outcome.stale, "ranAt": to_iso(outcome.ran_at)}
    if outcome.error:
        fields["error"] = outcome.error
    return fields


@scrape_bp.route("/scrape-games", methods=["GET", "POST"])
@limiter.limit(RATE_LIMITS["scrape_trigger"])
def scrape_games():
    """Returns {ok, stale, count, ranAt}."""
    outcome = asyncio.run(current_runtime().coordinator.scrape_games())
    return jsonify({**_outcome_fields(outcome), "count": len(outcome.data)})


@scrape_bp.route("/scrape-rankings", methods=["GET", "POST"])
@limiter.limit(RATE_LIMITS["scrape_trigger"])
def scrape_rankings():
    """Returns {ok, stale, mensCount, womensCount, ranAt}."""
    outcome = asyncio.run(current_runtime().coordinator.scrape_rankings())
    payload = outcome.data
    return jsonify({
        **_outcome_fields(outcome),
        "mensCount": len(payload.mens) if payload else 0,
        "womensCount": len(payload.womens) if payload else 0,
    })
