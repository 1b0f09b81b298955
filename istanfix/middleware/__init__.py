"""
Middleware Package
==================

Security headers and Redis-backed rate limiting.
"""

from .rate_limit import RateLimitMiddleware, RateLimiter, client_key
from .security import SecurityHeadersMiddleware

__all__ = [
    "RateLimitMiddleware",
    "RateLimiter",
    "SecurityHeadersMiddleware",
    "client_key",
]
