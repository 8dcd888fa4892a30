"""Tests for the provider factory."""

from unittest.mock import MagicMock, patch

import pytest

from transit_providers.adapters import (
    DbProvider,
    HafasProvider,
    MvgProvider,
    ProviderConfig,
    VbbProvider,
    create_provider,
)
from transit_providers.domain.models import NetworkId


@pytest.mark.parametrize(
    "network, expected",
    [
        (NetworkId.DB, DbProvider),
        (NetworkId.VBB, VbbProvider),
        ("mvg", MvgProvider),
    ],
)
def test_http_networks_get_their_driver(network: NetworkId | str, expected: type) -> None:
    provider = create_provider(network, ProviderConfig())

    assert isinstance(provider, expected)


@patch("transit_providers.adapters.hafas_api.hafas_provider.HafasClient")
def test_other_networks_use_pyhafas(mock_client: MagicMock) -> None:
    provider = create_provider("KVB", ProviderConfig())

    assert isinstance(provider, HafasProvider)
    assert provider.network_id == NetworkId.KVB
    assert provider.profile == "kvb"
    mock_client.assert_called_once()


@patch("transit_providers.adapters.hafas_api.hafas_provider.HafasClient")
def test_db_with_hafas_profile_uses_pyhafas(mock_client: MagicMock) -> None:
    provider = create_provider(NetworkId.DB, ProviderConfig(hafas_profile="db"))

    assert isinstance(provider, HafasProvider)
    assert provider.network_id == NetworkId.DB


def test_session_is_passed_to_http_drivers() -> None:
    session = MagicMock()

    provider = create_provider(NetworkId.VBB, ProviderConfig(), session=session)

    assert provider._http._session is session  # type: ignore[attr-defined]


def test_unknown_network_raises() -> None:
    with pytest.raises(ValueError, match="Unknown network"):
        create_provider("atlantis")
