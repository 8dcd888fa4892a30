"""Request spacing for public transit APIs.

Public backends such as transport.rest ask clients to stay below a request
rate. Every provider talking to the same host shares one limiter, so two
providers for the same backend do not double the rate.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import ClassVar
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


class ApiRateLimiter:
    """Enforces a minimum delay between requests to one host.

    Async-safe through an asyncio.Lock. A delay of zero disables waiting.
    """

    _instances: ClassVar[dict[str, ApiRateLimiter]] = {}
    _registry_lock: ClassVar[asyncio.Lock | None] = None

    def __init__(self, host: str, min_delay_seconds: float = 0.0) -> None:
        """Initialize the rate limiter.

        Args:
            host: Host the limiter guards (for logging).
            min_delay_seconds: Minimum delay between requests in seconds.
        """
        if min_delay_seconds < 0:
            raise ValueError(f"min_delay_seconds cannot be negative: {min_delay_seconds}")
        self.host = host
        self.min_delay_seconds = min_delay_seconds
        self._last_request_time: float | None = None
        self._lock = asyncio.Lock()

    @classmethod
    async def for_endpoint(cls, base_url: str, min_delay_seconds: float = 0.0) -> ApiRateLimiter:
        """Get the shared limiter for the host of ``base_url``.

        If the limiter exists with a shorter delay, the longer delay wins.

        Args:
            base_url: Endpoint URL; only its host is used as key.
            min_delay_seconds: Minimum delay between requests in seconds.

        Returns:
            Shared ApiRateLimiter instance for the host.
        """
        host = urlsplit(base_url).netloc or base_url
        if cls._registry_lock is None:
            cls._registry_lock = asyncio.Lock()

        async with cls._registry_lock:
            limiter = cls._instances.get(host)
            if limiter is None:
                limiter = cls(host, min_delay_seconds)
                cls._instances[host] = limiter
                logger.debug(f"Created rate limiter for {host} with {min_delay_seconds}s delay")
            elif min_delay_seconds > limiter.min_delay_seconds:
                logger.debug(f"Raising delay for {host} to {min_delay_seconds}s")
                limiter.min_delay_seconds = min_delay_seconds
            return limiter

    async def acquire(self) -> None:
        """Wait until the minimum delay since the previous request has passed."""
        if self.min_delay_seconds <= 0:
            return
        async with self._lock:
            if self._last_request_time is not None:
                wait_time = self.min_delay_seconds - (time.monotonic() - self._last_request_time)
                if wait_time > 0:
                    logger.debug(f"{self.host}: waiting {wait_time:.2f}s before next request")
                    await asyncio.sleep(wait_time)
            self._last_request_time = time.monotonic()

    async def __aenter__(self) -> ApiRateLimiter:
        await self.acquire()
        return self

    async def __aexit__(
        self, _exc_type: type | None, _exc_val: Exception | None, _exc_tb: object
    ) -> None:
        """Nothing to release."""
