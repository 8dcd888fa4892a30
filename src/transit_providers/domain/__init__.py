"""Domain layer - transit data contracts and the provider port."""

from transit_providers.domain.contracts import QueryTripsContext, TerminalContext
from transit_providers.domain.models import (
    Location,
    LocationType,
    NetworkId,
    Point,
    QueryTripsResult,
)
from transit_providers.domain.ports import NetworkProvider

__all__ = [
    "Location",
    "LocationType",
    "NetworkId",
    "NetworkProvider",
    "Point",
    "QueryTripsContext",
    "QueryTripsResult",
    "TerminalContext",
]
