"""
Rate Limiting Middleware
========================

Redis-based rate limiting for write endpoints (signup, login, reports,
comments). Reads are never limited.
"""

import time
import logging
import secrets
from typing import Callable, Optional, Tuple

import redis
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

LIMITED_METHODS = ("POST", "PUT", "DELETE")


class RateLimiter:
    """
    Redis-based rate limiter using sliding window algorithm.
    """

    def __init__(self, redis_url: str, client: Optional["redis.Redis"] = None):
        self.redis_url = redis_url
        self._client = client

    @property
    def client(self) -> Optional["redis.Redis"]:
        """Lazy-load Redis client"""
        if self._client is None:
            try:
                self._client = redis.from_url(self.redis_url, decode_responses=True)
                self._client.ping()  # Test connection
            except redis.RedisError as e:
                logger.warning(f"Redis connection failed: {e}")
                self._client = None

        return self._client

    def is_allowed(self, key: str, limit: int, window_seconds: int = 60) -> Tuple[bool, int, int]:
        """
        Check if request is allowed under rate limit.

        Args:
            key: Rate limit key (e.g., "ratelimit:ip:10.0.0.1")
            limit: Maximum requests allowed
            window_seconds: Time window in seconds

        Returns:
            (is_allowed, remaining, reset_time)
        """
        client = self.client
        if not client:
            # No Redis - allow all
            return (True, limit, 0)

        now = time.time()
        window_start = now - window_seconds

        try:
            pipe = client.pipeline()
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.zadd(key, {f"{now}:{secrets.token_hex(4)}": now})
            pipe.expire(key, window_seconds)
            results = pipe.execute()
        except redis.RedisError as e:
            logger.warning(f"Rate limit check failed: {e}")
            return (True, limit, 0)

        current_count = results[1]
        reset_time = int(now + window_seconds)

        if current_count >= limit:
            return (False, 0, reset_time)

        return (True, max(0, limit - current_count - 1), reset_time)


def client_key(request: Request) -> str:
    """
    Rate limit bucket for the caller.

    Keyed on the peer address only. X-Forwarded-For is client-controlled;
    behind a proxy, uvicorn rewrites the peer address from it for the hosts
    listed in FORWARDED_ALLOW_IPS.
    """
    ip = request.client.host if request.client else ""
    return f"ratelimit:ip:{ip or 'unknown'}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for rate limiting.
    """

    def __init__(self, app, limiter: RateLimiter, limit: int = 30, window_seconds: int = 60):
        super().__init__(app)
        self.limiter = limiter
        self.limit = limit
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method not in LIMITED_METHODS or not request.url.path.startswith("/api/"):
            return await call_next(request)

        allowed, remaining, reset = self.limiter.is_allowed(
            client_key(request), self.limit, window_seconds=self.window_seconds
        )

        if not allowed:
            retry_after = max(0, reset - int(time.time()))
            logger.warning(f"Rate limit exceeded for {client_key(request)} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"error": f"Rate limit exceeded: {self.limit} requests per minute"},
                headers={
                    "X-RateLimit-Limit": str(self.limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset),
                    "Retry-After": str(retry_after),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
