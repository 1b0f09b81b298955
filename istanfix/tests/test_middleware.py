"""
Middleware Tests
================

Security headers and Redis-backed rate limiting (Redis mocked).
"""

from unittest.mock import MagicMock

import pytest
import redis
from fastapi import FastAPI
from fastapi.testclient import TestClient

from istanfix.middleware import RateLimitMiddleware, RateLimiter, SecurityHeadersMiddleware


def _pipeline_returning(count):
    pipe = MagicMock()
    pipe.execute.return_value = [0, count, 1, True]
    client = MagicMock()
    client.pipeline.return_value = pipe
    return client


def _app_with(limiter, limit=2):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limiter=limiter, limit=limit)

    @app.get("/api/reports")
    async def read():
        return {"data": []}

    @app.post("/api/reports")
    async def write():
        return {"data": {}}

    return app


class TestRateLimiter:

    def test_allows_under_limit(self):
        limiter = RateLimiter("redis://unused", client=_pipeline_returning(0))
        allowed, remaining, _ = limiter.is_allowed("k", limit=3)
        assert allowed
        assert remaining == 2

    def test_blocks_at_limit(self):
        limiter = RateLimiter("redis://unused", client=_pipeline_returning(3))
        allowed, remaining, _ = limiter.is_allowed("k", limit=3)
        assert not allowed
        assert remaining == 0

    def test_fails_open_when_redis_errors(self):
        client = MagicMock()
        client.pipeline.return_value.execute.side_effect = redis.ConnectionError("down")
        limiter = RateLimiter("redis://unused", client=client)
        assert limiter.is_allowed("k", limit=3)[0]


class TestRateLimitMiddleware:

    def test_write_blocked_with_json_error(self):
        client = TestClient(_app_with(RateLimiter("redis://unused", client=_pipeline_returning(5))))
        resp = client.post("/api/reports")
        assert resp.status_code == 429
        assert "error" in resp.json()
        assert resp.headers["X-RateLimit-Remaining"] == "0"

    def test_reads_never_limited(self):
        redis_client = _pipeline_returning(5)
        client = TestClient(_app_with(RateLimiter("redis://unused", client=redis_client)))
        resp = client.get("/api/reports")
        assert resp.status_code == 200
        redis_client.pipeline.assert_not_called()

    def test_write_allowed_sets_headers(self):
        client = TestClient(_app_with(RateLimiter("redis://unused", client=_pipeline_returning(0)), limit=2))
        resp = client.post("/api/reports")
        assert resp.status_code == 200
        assert resp.headers["X-RateLimit-Limit"] == "2"

    def test_forwarded_for_header_does_not_split_buckets(self):
        counts = {}

        def count_per_key(key, limit, window_seconds=60):
            counts[key] = counts.get(key, 0) + 1
            return (counts[key] <= limit, max(0, limit - counts[key]), 0)

        limiter = MagicMock()
        limiter.is_allowed.side_effect = count_per_key
        client = TestClient(_app_with(limiter, limit=2))

        statuses = [
            client.post("/api/reports", headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code
            for i in range(5)
        ]
        assert statuses == [200, 200, 429, 429, 429]
        assert list(counts) == ["ratelimit:ip:testclient"]


class TestSecurityHeaders:

    @pytest.fixture
    def app(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware, enforce_https=False, hsts_max_age=100)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        return app

    def test_headers_present(self, app):
        resp = TestClient(app).get("/ping")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert "default-src 'self'" in resp.headers["Content-Security-Policy"]
        assert "Strict-Transport-Security" not in resp.headers

    def test_hsts_behind_https_proxy(self, app):
        resp = TestClient(app).get("/ping", headers={"X-Forwarded-Proto": "https"})
        assert resp.headers["Strict-Transport-Security"] == "max-age=100; includeSubDomains"

    def test_https_enforced(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware, enforce_https=True)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        resp = TestClient(app).get("/ping", follow_redirects=False)
        assert resp.status_code == 301
        assert resp.headers["location"].startswith("https://")
