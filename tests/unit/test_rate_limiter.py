"""
Unit tests for the sliding-window rate limiter dependency.
"""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from api.middleware.rate_limiter import RateLimiter


def _request(host="10.0.0.1", forwarded=None):
    request = MagicMock()
    request.headers = {"X-Forwarded-For": forwarded} if forwarded else {}
    request.client.host = host
    return request


class TestRateLimiter:

    def test_allows_up_to_limit(self):
        limiter = RateLimiter(window_seconds=60, max_requests=3)
        results = [limiter.check("c", now=100.0 + i) for i in range(3)]
        assert results == [None, None, None]

    def test_rejects_over_limit_with_retry_after(self):
        limiter = RateLimiter(window_seconds=60, max_requests=2)
        limiter.check("c", now=100.0)
        limiter.check("c", now=110.0)
        assert limiter.check("c", now=120.0) == 41

    def test_window_slides(self):
        limiter = RateLimiter(window_seconds=60, max_requests=1)
        limiter.check("c", now=100.0)
        assert limiter.check("c", now=161.0) is None

    def test_clients_are_independent(self):
        limiter = RateLimiter(window_seconds=60, max_requests=1)
        assert limiter.check("a", now=100.0) is None
        assert limiter.check("b", now=100.0) is None

    def test_reset(self):
        limiter = RateLimiter(window_seconds=60, max_requests=1)
        limiter.check("c", now=100.0)
        limiter.reset()
        assert limiter.check("c", now=101.0) is None

    async def test_dependency_raises_429(self):
        limiter = RateLimiter(window_seconds=60, max_requests=1)
        await limiter(_request())
        with pytest.raises(HTTPException) as excinfo:
            await limiter(_request())
        assert excinfo.value.status_code == 429
        assert "Retry-After" in excinfo.value.headers

    async def test_forwarded_header_identifies_client(self):
        limiter = RateLimiter(window_seconds=60, max_requests=1)
        await limiter(_request(forwarded="1.1.1.1, 10.0.0.1"))
        await limiter(_request(forwarded="2.2.2.2, 10.0.0.1"))
        assert set(limiter.client_requests) == {"1.1.1.1", "2.2.2.2"}
