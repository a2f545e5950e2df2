"""
Utility modules for the backend.
"""
from .rate_limiter import (
    limiter,
    init_limiter,
    get_rate_limit_key,
    client_address,
    RATE_LIMITS,
)

__all__ = [
    'limiter',
    'init_limiter',
    'get_rate_limit_key',
    'client_address',
    'RATE_LIMITS',
]
