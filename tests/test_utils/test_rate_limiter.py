"""Tests for the request RateLimiter."""

import asyncio

import pytest

from src.parsers.rate_limiter import RateLimiter


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_disabled_when_zero(self) -> None:
        limiter = RateLimiter(0)
        assert limiter.enabled is False
        await limiter.acquire()

    @pytest.mark.asyncio
    async def test_spaces_requests(self) -> None:
        limiter = RateLimiter(50.0)  # 20ms interval
        loop = asyncio.get_running_loop()
        start = loop.time()
        for _ in range(3):
            await limiter.acquire()
        assert loop.time() - start >= 0.035
