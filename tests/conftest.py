"""Shared pytest fixtures."""

import pytest

from transit_providers.adapters.api_rate_limiter import ApiRateLimiter


@pytest.fixture(autouse=True)
def reset_rate_limiters() -> None:
    """Each test gets fresh per-host limiters bound to its own event loop."""
    ApiRateLimiter._instances.clear()
    ApiRateLimiter._registry_lock = None
