"""Tests for the API rate limiter."""

import asyncio
import time

import pytest

from transit_providers.adapters.api_rate_limiter import ApiRateLimiter


class TestApiRateLimiter:
    """Tests for ApiRateLimiter class."""

    @pytest.fixture(autouse=True)
    def reset_instances(self) -> None:
        """Reset the shared instances before each test."""
        ApiRateLimiter._instances.clear()
        ApiRateLimiter._registry_lock = None

    def test_negative_delay_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            ApiRateLimiter("example.org", min_delay_seconds=-1.0)

    @pytest.mark.asyncio
    async def test_first_request_is_immediate(self) -> None:
        """First request should not wait."""
        limiter = ApiRateLimiter("example.org", min_delay_seconds=1.0)

        start = time.monotonic()
        await limiter.acquire()
        elapsed = time.monotonic() - start

        assert elapsed < 0.05

    @pytest.mark.asyncio
    async def test_second_request_waits_for_delay(self) -> None:
        """Second request should wait for the minimum delay."""
        delay = 0.2
        limiter = ApiRateLimiter("example.org", min_delay_seconds=delay)

        await limiter.acquire()

        start = time.monotonic()
        await limiter.acquire()
        elapsed = time.monotonic() - start

        assert elapsed >= delay * 0.9  # Allow 10% tolerance

    @pytest.mark.asyncio
    async def test_zero_delay_never_waits(self) -> None:
        limiter = ApiRateLimiter("example.org")

        start = time.monotonic()
        for _ in range(5):
            await limiter.acquire()
        elapsed = time.monotonic() - start

        assert elapsed < 0.05

    @pytest.mark.asyncio
    async def test_request_after_delay_is_immediate(self) -> None:
        """Request after the delay period should not wait."""
        delay = 0.1
        limiter = ApiRateLimiter("example.org", min_delay_seconds=delay)

        await limiter.acquire()
        await asyncio.sleep(delay * 1.5)

        start = time.monotonic()
        await limiter.acquire()
        elapsed = time.monotonic() - start

        assert elapsed < 0.05

    @pytest.mark.asyncio
    async def test_same_host_shares_limiter(self) -> None:
        """Endpoints on the same host should share one limiter."""
        limiter1 = await ApiRateLimiter.for_endpoint("https://v6.db.transport.rest", 1.0)
        limiter2 = await ApiRateLimiter.for_endpoint("https://v6.db.transport.rest/journeys", 1.0)

        assert limiter1 is limiter2
        assert limiter1.host == "v6.db.transport.rest"

    @pytest.mark.asyncio
    async def test_different_hosts_get_different_limiters(self) -> None:
        limiter1 = await ApiRateLimiter.for_endpoint("https://v6.db.transport.rest", 1.0)
        limiter2 = await ApiRateLimiter.for_endpoint("https://v6.bvg.transport.rest", 1.0)

        assert limiter1 is not limiter2

    @pytest.mark.asyncio
    async def test_longer_delay_wins_for_shared_host(self) -> None:
        """Given two callers with different delays, the shared limiter keeps the longer one."""
        await ApiRateLimiter.for_endpoint("https://example.org", 0.5)
        limiter = await ApiRateLimiter.for_endpoint("https://example.org", 2.0)
        again = await ApiRateLimiter.for_endpoint("https://example.org", 0.1)

        assert limiter is again
        assert again.min_delay_seconds == 2.0

    @pytest.mark.asyncio
    async def test_context_manager_acquires_on_enter(self) -> None:
        """Context manager should acquire on entry."""
        delay = 0.15
        limiter = ApiRateLimiter("example.org", min_delay_seconds=delay)

        async with limiter:
            pass

        start = time.monotonic()
        async with limiter:
            elapsed = time.monotonic() - start

        assert elapsed >= delay * 0.9

    @pytest.mark.asyncio
    async def test_concurrent_requests_are_serialized(self) -> None:
        """Concurrent requests should be serialized by the lock."""
        delay = 0.1
        limiter = ApiRateLimiter("example.org", min_delay_seconds=delay)

        results: list[float] = []
        start = time.monotonic()

        async def make_request() -> None:
            await limiter.acquire()
            results.append(time.monotonic() - start)

        await asyncio.gather(make_request(), make_request(), make_request())

        assert len(results) == 3
        results.sort()
        assert results[0] < 0.05
        assert results[1] >= delay * 0.8
        assert results[2] >= delay * 1.6

    @pytest.mark.asyncio
    async def test_different_hosts_dont_block_each_other(self) -> None:
        """Different hosts should have independent rate limits."""
        delay = 0.2
        limiter_a = await ApiRateLimiter.for_endpoint("https://a.example.org", delay)
        limiter_b = await ApiRateLimiter.for_endpoint("https://b.example.org", delay)

        await limiter_a.acquire()

        start = time.monotonic()
        await limiter_b.acquire()
        elapsed = time.monotonic() - start

        assert elapsed < 0.05
