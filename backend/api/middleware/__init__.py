"""
Global middleware for API requests.

Provides:
- Request ID injection (X-Request-ID) and log correlation
- Error envelope standardization
"""

from .request_id import RequestIdLogFilter, get_request_id, setup_request_id_middleware
from .error_envelope import make_error_response, setup_error_handlers

__all__ = [
    'RequestIdLogFilter',
    'get_request_id',
    'setup_request_id_middleware',
    'make_error_response',
    'setup_error_handlers',
]
