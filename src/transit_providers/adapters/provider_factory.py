"""Picks the driver that serves a network."""

import logging
from typing import TYPE_CHECKING

from transit_providers.adapters.abstract_network_provider import AbstractNetworkProvider
from transit_providers.adapters.config.provider_config import ProviderConfig
from transit_providers.adapters.hafas_api import HafasProvider
from transit_providers.adapters.mvg_api import MvgProvider
from transit_providers.adapters.transport_rest import DbProvider, VbbProvider
from transit_providers.domain.models.network_id import NetworkId

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientSession


def create_provider(
    network: NetworkId | str,
    config: ProviderConfig | None = None,
    session: "ClientSession | None" = None,
) -> AbstractNetworkProvider:
    """Create the provider for a network.

    DB and VBB use transport.rest, MVG uses the mvg library and the remaining
    networks use pyhafas. Setting ``hafas_profile`` in the configuration
    routes DB through pyhafas instead.

    Args:
        network: Network id or its name, e.g. ``"vbb"``.
        config: Provider configuration; read from the environment if None.
        session: Optional aiohttp session shared by HTTP based drivers.

    Returns:
        A provider for the network.
    """
    network_id = NetworkId.parse(network)
    config = config or ProviderConfig()

    provider: AbstractNetworkProvider
    if network_id == NetworkId.MVG:
        provider = MvgProvider(config=config, session=session)
    elif network_id == NetworkId.VBB:
        provider = VbbProvider(config=config, session=session)
    elif network_id == NetworkId.DB and not config.hafas_profile:
        provider = DbProvider(config=config, session=session)
    else:
        provider = HafasProvider(network_id, config=config)

    logger.debug(f"Using {type(provider).__name__} for {network_id.name}")
    return provider
