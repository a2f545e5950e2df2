"""
Feed API Routes

Provides endpoints for:
- Health check
- Cached schedule (scraped on demand when empty or refresh=1)
- Cached D1 polls (same policy)
- Per-game broadcast detail
"""
import asyncio
import logging

from flask import Blueprint, jsonify, request

from api.contracts import GameDetailParams, GamesParams, RankingsParams
from api.middleware import make_error_response
from scrapers.errors import ScrapeError
from services.runtime import current_runtime

logger = logging.getLogger(__name__)

feeds_bp = Blueprint('feeds', __name__)


@feeds_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@feeds_bp.route("/games", methods=["GET"])
def get_games():
    """
    Upcoming games.

    Query params:
        - refresh: 1 to scrape now instead of serving the snapshot

    Returns:
        {games, lastUpdated, stale}
    """
    params = GamesParams(**request.args.to_dict())
    payload = asyncio.run(current_runtime().feed.get_games(force_refresh=params.refresh))
    return jsonify(payload)


@feeds_bp.route("/rankings", methods=["GET"])
def get_rankings():
    """
    Men's and women's D1 polls.

    Query params:
        - refresh: 1 to scrape now instead of serving the snapshot

    Returns:
        {mens, womens, lastUpdated, stale}
    """
    params = RankingsParams(**request.args.to_dict())
    payload = asyncio.run(current_runtime().feed.get_rankings(force_refresh=params.refresh))
    return jsonify(payload)


@feeds_bp.route("/game-detail", methods=["GET"])
def get_game_detail():
    """
    Broadcast detail for one match page.

    Query params:
        - detailUrl: livesportsontv.com match URL (required)
    """
    if not request.args.get("detailUrl"):
        return make_error_response("BAD_REQUEST", "detailUrl is required")
    params = GameDetailParams(**request.args.to_dict())

    try:
        detail = asyncio.run(current_runtime().feed.get_game_detail(params.detail_url))
    except ValueError as e:
        return make_error_response("BAD_REQUEST", str(e))
    except ScrapeError as e:
        logger.warning(f"Game detail failed for {params.detail_url}: {e}")
        return make_error_response(
            "UPSTREAM_FAILED",
            "Unable to fetch game detail",
            details={"reason": str(e)},
        )

    return jsonify({"detail": detail.to_dict()})
