"""HTTP client for transport.rest v6 APIs."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp

from transit_providers.adapters.api_rate_limiter import ApiRateLimiter
from transit_providers.adapters.api_request_logger import log_api_request
from transit_providers.adapters.config.provider_config import ProviderConfig
from transit_providers.adapters.transport_rest.constants import DEFAULT_HEADERS
from transit_providers.domain.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)


class TransportRestHttpError(ServiceUnavailableError):
    """Non-success HTTP answer; keeps the decoded error body for status mapping."""

    def __init__(self, reason: str, status_code: int, body: dict[str, Any] | None = None) -> None:
        super().__init__(reason, status_code)
        self.body = body or {}

    @property
    def hafas_code(self) -> str | None:
        code = self.body.get("hafasCode") or self.body.get("code")
        return str(code) if code else None


def _stringify(params: dict[str, Any]) -> dict[str, str]:
    """Drop unset parameters and render booleans the way the API expects."""
    result = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            result[key] = "true" if value else "false"
        else:
            result[key] = str(value)
    return result


class TransportRestHttpClient:
    """GETs JSON from one transport.rest instance.

    Uses the injected aiohttp session if there is one; otherwise opens a
    short-lived session per request.
    """

    def __init__(
        self,
        base_url: str,
        config: ProviderConfig,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._config = config
        self._session = session

    @property
    def headers(self) -> dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        headers["User-Agent"] = self._config.user_agent
        if self._config.authorization_header:
            headers["Authorization"] = self._config.authorization_header
        return headers

    @asynccontextmanager
    async def _open_session(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self._session is not None:
            yield self._session
            return
        async with aiohttp.ClientSession() as session:
            yield session

    async def _log_error_response(self, response: aiohttp.ClientResponse, url: str) -> str:
        error_text = await response.text(errors="replace")
        error_body = error_text[:500] if error_text else "(empty response body)"
        retry_after = response.headers.get("Retry-After")
        extra = f" [Retry-After: {retry_after}]" if retry_after else ""
        logger.warning(f"{url} returned status {response.status}: {error_body}{extra}")
        return error_text

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``base_url + path`` and return the decoded JSON body.

        Raises:
            TransportRestHttpError: On a non-2xx status.
            ServiceUnavailableError: If the body is not JSON.
            aiohttp.ClientError: On connection problems.
            asyncio.TimeoutError: When the configured timeout expires.
        """
        url = f"{self.base_url}{path}"
        query = _stringify(params or {})
        headers = self.headers
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout_seconds)

        limiter = await ApiRateLimiter.for_endpoint(
            self.base_url, self._config.min_request_delay_seconds
        )
        log_api_request("GET", url, params=query, headers=headers)

        async with limiter, self._open_session() as session:
            async with session.get(url, params=query, headers=headers, timeout=timeout) as response:
                if response.status >= 400:
                    error_text = await self._log_error_response(response, url)
                    body = None
                    try:
                        body = await response.json(content_type=None)
                    except ValueError:
                        pass
                    message = body.get("message") if isinstance(body, dict) else None
                    raise TransportRestHttpError(
                        message or error_text[:200] or f"HTTP {response.status}",
                        response.status,
                        body if isinstance(body, dict) else None,
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ServiceUnavailableError(f"Invalid JSON from {url}: {e}") from e
