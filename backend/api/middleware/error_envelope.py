"""
Error envelope middleware - Standardize all error responses.

Provides consistent error response format:
{
    "error": {
        "code": "UPSTREAM_FAILED",
        "message": "Unable to fetch game detail",
        "requestId": "uuid"
    }
}
"""

import logging

from flask import Flask, g, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from scrapers.errors import PolicyDeniedError, ScrapeError
from services.cache_store import CacheBackendError

logger = logging.getLogger('api.middleware.error')


# Error codes reference
ERROR_CODES = {
    # Client errors (4xx)
    "BAD_REQUEST": 400,
    "NOT_FOUND": 404,
    "METHOD_NOT_ALLOWED": 405,
    "TOO_MANY_REQUESTS": 429,
    "INVALID_PARAMS": 400,

    # Ingestion errors
    "POLICY_DENIED": 403,
    "UPSTREAM_FAILED": 502,

    # Server errors (5xx)
    "INTERNAL_ERROR": 500,
    "SERVICE_UNAVAILABLE": 503,
}


def make_error_response(
    code: str,
    message: str,
    status_code: int = None,
    details: dict = None,
):
    """
    Create a standardized error response.

    Args:
        code: Error code (e.g., "INVALID_PARAMS")
        message: Human-readable error message
        status_code: HTTP status code (defaults based on error code)
        details: Optional additional details dict

    Returns:
        Tuple of (response, status_code)
    """
    request_id = getattr(g, 'request_id', None)

    if status_code is None:
        status_code = ERROR_CODES.get(code, 500)

    error = {
        "error": {
            "code": code,
            "message": message,
            "requestId": request_id,
        }
    }
    if details:
        error["error"]["details"] = details

    response = jsonify(error)
    if request_id:
        response.headers['X-Request-ID'] = request_id

    return response, status_code


def setup_error_handlers(app: Flask) -> None:
    """
    Set up standardized error handlers on Flask app.

    Handles:
    - HTTP exceptions (400, 404, 429, etc.)
    - Pydantic validation errors (400)
    - Ingestion errors that escape a route (403 / 502)
    - Cache backend outages (503)
    - Unhandled Python exceptions

    Args:
        app: Flask application instance
    """

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        """Handle Flask/Werkzeug HTTP exceptions."""
        # "Too Many Requests" -> "TOO_MANY_REQUESTS"
        code = error.name.upper().replace(' ', '_')
        response, status = make_error_response(code, error.description, status_code=error.code)
        retry_after = getattr(error, 'retry_after', None)
        if error.code == 429 and retry_after:
            response.headers['Retry-After'] = str(retry_after)
        return response, status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        fields = [".".join(str(p) for p in e.get("loc", ())) for e in error.errors()]
        return make_error_response(
            "INVALID_PARAMS",
            "Invalid payload",
            details={"fields": fields},
        )

    @app.errorhandler(PolicyDeniedError)
    def handle_policy_denied(error):
        return make_error_response("POLICY_DENIED", str(error))

    @app.errorhandler(ScrapeError)
    def handle_scrape_error(error):
        logger.warning(f"Upstream failure: {error}")
        return make_error_response("UPSTREAM_FAILED", str(error))

    @app.errorhandler(CacheBackendError)
    def handle_cache_error(error):
        logger.error(f"Cache backend failure: {error}")
        return make_error_response("SERVICE_UNAVAILABLE", "Cache backend unavailable")

    @app.errorhandler(Exception)
    def handle_generic_error(error):
        """Handle unhandled Python exceptions."""
        logger.exception(
            f"Unhandled error: {error}",
            extra={
                "event": "unhandled_error",
                "error_type": type(error).__name__,
            }
        )

        return make_error_response("INTERNAL_ERROR", "An unexpected error occurred")
