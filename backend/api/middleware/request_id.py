"""
Request ID middleware - Inject X-Request-ID for request correlation.

Provides:
- Request ID injection on every request (caller-supplied IDs are capped)
- Response header addition
- A logging filter that stamps records with the current request ID
"""

import logging
import uuid

from flask import Flask, g, has_request_context, request

MAX_REQUEST_ID_LENGTH = 64


def setup_request_id_middleware(app: Flask) -> None:
    """
    Set up request ID middleware on Flask app.

    Injects X-Request-ID into:
    - Flask's g object (g.request_id)
    - Response headers (X-Request-ID)

    Args:
        app: Flask application instance
    """

    @app.before_request
    def inject_request_id():
        """Inject request ID before each request."""
        request_id = (request.headers.get('X-Request-ID') or '').strip()
        if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
            request_id = str(uuid.uuid4())
        g.request_id = request_id

    @app.after_request
    def add_request_id_header(response):
        """Add request ID to response headers."""
        if hasattr(g, 'request_id'):
            response.headers['X-Request-ID'] = g.request_id
        return response


def get_request_id() -> str:
    """
    Get current request ID from Flask context.

    Returns:
        Request ID string, or '-' outside a request
    """
    if has_request_context() and hasattr(g, 'request_id'):
        return g.request_id
    return '-'


class RequestIdLogFilter(logging.Filter):
    """Adds `request_id` to every record so formats can include it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True
