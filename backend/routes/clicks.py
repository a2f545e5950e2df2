"""
Click Tracking API Routes
"""
import logging

from flask import Blueprint, jsonify, request

from api.contracts import TrackClickRequest
from api.middleware import make_error_response
from scrapers.models.status import ClickEvent
from services.click_tracker import InvalidClickError
from services.runtime import current_runtime
from utils.rate_limiter import client_address

logger = logging.getLogger(__name__)

clicks_bp = Blueprint('clicks', __name__)


@clicks_bp.route("/track-click", methods=["POST"])
def track_click():
    """
    Record an affiliate click.

    Body:
        {gameId, platform, targetUrl}

    Returns:
        {ok, count}
    """
    body = TrackClickRequest.model_validate(request.get_json(silent=True) or {})
    event = ClickEvent(
        game_id=body.game_id,
        platform=body.platform,
        target_url=body.target_url,
        user_agent=request.headers.get("User-Agent", "unknown"),
        ip=client_address(),
    )

    try:
        count = current_runtime().clicks.track_click(event)
    except InvalidClickError as e:
        return make_error_response("INVALID_PARAMS", str(e))

    return jsonify({"ok": True, "count": count})
