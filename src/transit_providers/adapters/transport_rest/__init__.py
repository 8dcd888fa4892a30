"""transport.rest drivers (DB and VBB)."""

from transit_providers.adapters.transport_rest.context import TransportRestContext
from transit_providers.adapters.transport_rest.transport_rest_provider import (
    DbProvider,
    TransportRestProvider,
    VbbProvider,
)

__all__ = ["DbProvider", "TransportRestContext", "TransportRestProvider", "VbbProvider"]
