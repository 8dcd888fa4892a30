"""Adapters layer - backend drivers and their infrastructure."""

from transit_providers.adapters.abstract_network_provider import AbstractNetworkProvider
from transit_providers.adapters.config import ProviderConfig
from transit_providers.adapters.hafas_api import HafasProvider
from transit_providers.adapters.mvg_api import MvgProvider
from transit_providers.adapters.provider_factory import create_provider
from transit_providers.adapters.transport_rest import (
    DbProvider,
    TransportRestProvider,
    VbbProvider,
)

__all__ = [
    "AbstractNetworkProvider",
    "DbProvider",
    "HafasProvider",
    "MvgProvider",
    "ProviderConfig",
    "TransportRestProvider",
    "VbbProvider",
    "create_provider",
]
