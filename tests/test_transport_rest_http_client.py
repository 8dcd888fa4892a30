"""Tests for the transport.rest HTTP client."""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from transit_providers.adapters.config import ProviderConfig
from transit_providers.adapters.transport_rest.http_client import (
    TransportRestHttpClient,
    TransportRestHttpError,
)
from transit_providers.domain.exceptions import ServiceUnavailableError


def create_session(status: int, json_body: object = None, text: str = "") -> MagicMock:
    """aiohttp session stub whose get() answers with one canned response."""
    response = MagicMock()
    response.status = status
    response.headers = {}
    response.text = AsyncMock(return_value=text)
    if isinstance(json_body, Exception):
        response.json = AsyncMock(side_effect=json_body)
    else:
        response.json = AsyncMock(return_value=json_body)

    session = MagicMock()
    session.get.return_value.__aenter__ = AsyncMock(return_value=response)
    session.get.return_value.__aexit__ = AsyncMock(return_value=False)
    return session


class TestTransportRestHttpClient:
    @pytest.mark.asyncio
    async def test_get_json_returns_decoded_body(self) -> None:
        session = create_session(200, [{"type": "stop", "id": "1"}])
        client = TransportRestHttpClient("https://v6.bvg.transport.rest/", ProviderConfig(), session)

        data = await client.get_json("/locations", {"query": "Alex", "fuzzy": True, "poi": None})

        assert data == [{"type": "stop", "id": "1"}]
        url = session.get.call_args.args[0]
        kwargs = session.get.call_args.kwargs
        assert url == "https://v6.bvg.transport.rest/locations"
        assert kwargs["params"] == {"query": "Alex", "fuzzy": "true"}
        assert kwargs["headers"]["User-Agent"] == "transit-providers"
        assert "Authorization" not in kwargs["headers"]
        assert isinstance(kwargs["timeout"], aiohttp.ClientTimeout)
        assert kwargs["timeout"].total == 15.0

    @pytest.mark.asyncio
    async def test_authorization_header_is_sent_when_configured(self) -> None:
        session = create_session(200, {})
        config = ProviderConfig(api_authorization="Bearer token", user_agent="my-app")
        client = TransportRestHttpClient("https://example.org", config, session)

        await client.get_json("/journeys")

        headers = session.get.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer token"
        assert headers["User-Agent"] == "my-app"

    @pytest.mark.asyncio
    async def test_error_status_raises_with_body(self) -> None:
        """Given a HAFAS error answer, then the error carries status and hafas code."""
        body = {"message": "location not found", "hafasCode": "LOCATION", "isHafasError": True}
        session = create_session(500, body, text='{"message": "location not found"}')
        client = TransportRestHttpClient("https://example.org", ProviderConfig(), session)

        with pytest.raises(TransportRestHttpError) as exc_info:
            await client.get_json("/stops/123/departures")

        assert exc_info.value.status_code == 500
        assert exc_info.value.reason == "location not found"
        assert exc_info.value.hafas_code == "LOCATION"

    @pytest.mark.asyncio
    async def test_error_status_with_non_json_body(self) -> None:
        session = create_session(502, ValueError("not json"), text="<html>Bad Gateway</html>")
        client = TransportRestHttpClient("https://example.org", ProviderConfig(), session)

        with pytest.raises(TransportRestHttpError) as exc_info:
            await client.get_json("/locations")

        assert exc_info.value.status_code == 502
        assert exc_info.value.reason == "<html>Bad Gateway</html>"
        assert exc_info.value.hafas_code is None

    @pytest.mark.asyncio
    async def test_error_body_with_broken_encoding(self) -> None:
        """Given an error body that is not valid UTF-8, then the HTTP error is still raised."""
        raw = b"Gateway \xff timeout"
        session = create_session(504, ValueError("not json"))
        response = session.get.return_value.__aenter__.return_value
        response.text = AsyncMock(side_effect=lambda errors="strict": raw.decode("utf-8", errors))
        client = TransportRestHttpClient("https://example.org", ProviderConfig(), session)

        with pytest.raises(TransportRestHttpError) as exc_info:
            await client.get_json("/journeys")

        assert exc_info.value.status_code == 504
        assert exc_info.value.reason == "Gateway � timeout"

    @pytest.mark.asyncio
    async def test_invalid_json_raises_service_unavailable(self) -> None:
        session = create_session(200, ValueError("Expecting value"))
        client = TransportRestHttpClient("https://example.org", ProviderConfig(), session)

        with pytest.raises(ServiceUnavailableError):
            await client.get_json("/locations")

    @pytest.mark.asyncio
    async def test_request_is_logged(self) -> None:
        session = create_session(200, [])
        client = TransportRestHttpClient("https://example.org", ProviderConfig(), session)

        with patch(
            "transit_providers.adapters.transport_rest.http_client.log_api_request"
        ) as mock_log:
            await client.get_json("/locations", {"query": "Alex"})

        mock_log.assert_called_once()
        assert mock_log.call_args.args[:2] == ("GET", "https://example.org/locations")
