"""
Admin API Routes

Provides endpoints for:
- Scrape status, cache mode and recent clicks
- Clearing scraped snapshots (click counters are kept)
"""
import logging

from flask import Blueprint, jsonify

from services.runtime import current_runtime
from utils import cache_key
from utils.rate_limiter import RATE_LIMITS, limiter

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)


@admin_bp.route("/status", methods=["GET"])
def status():
    runtime = current_runtime()
    return jsonify({
        "status": runtime.coordinator.get_status().to_dict(),
        "redis": {
            **runtime.cache.status(),
            "clickKeyCount": runtime.clicks.counter_key_count(),
        },
        "clicks": [event.to_dict() for event in runtime.clicks.recent_clicks()],
    })


@admin_bp.route("/cache-clear", methods=["POST"])
@limiter.limit(RATE_LIMITS["cache_clear"])
def cache_clear():
    """Returns {ok, removed}."""
    cache = current_runtime().cache
    removed = sum(cache.clear_prefix(prefix) for prefix in cache_key.CLEARABLE_PREFIXES)
    logger.info(f"Cache clear removed {removed} keys")
    return jsonify({"ok": True, "removed": removed})
