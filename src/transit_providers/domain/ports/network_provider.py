"""Network provider port."""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from transit_providers.domain.contracts.query_trips_context import QueryTripsContext
from transit_providers.domain.models.capability import Capability
from transit_providers.domain.models.location import Location, LocationType
from transit_providers.domain.models.nearby_locations_result import NearbyLocationsResult
from transit_providers.domain.models.network_id import NetworkId
from transit_providers.domain.models.product import Product
from transit_providers.domain.models.query_departures_result import QueryDeparturesResult
from transit_providers.domain.models.query_trips_result import QueryTripsResult
from transit_providers.domain.models.suggest_locations_result import SuggestLocationsResult
from transit_providers.domain.models.trip_options import TripOptions


class NetworkProvider(Protocol):
    """Port every public transport backend driver satisfies.

    Operational outcomes are reported through the status of each result.
    Caller errors raise ``InvalidArgumentError``; asking for an operation the
    provider does not offer raises ``UnsupportedCapabilityError``.
    """

    @property
    def network_id(self) -> NetworkId:
        """The network this provider talks to."""
        ...

    def has_capabilities(self, *capabilities: Capability) -> bool:
        """Return True if the provider offers all given capabilities."""
        ...

    @property
    def suggest_location_types(self) -> frozenset[LocationType]:
        """Location types free text can resolve to with this provider."""
        ...

    def default_products(self) -> frozenset[Product]:
        """Products used for trip searches when the caller does not choose."""
        ...

    async def query_nearby_locations(
        self,
        location: Location,
        types: Iterable[LocationType] | None = None,
        max_distance: int = 0,
        max_locations: int = 0,
    ) -> NearbyLocationsResult:
        """Find locations near a location that has an id or a point.

        Args:
            location: Reference location; needs an id or a point.
            types: Location types to include, None for stations only.
            max_distance: Maximum distance in meters, 0 for backend default.
            max_locations: Maximum number of results, 0 for backend default.

        Returns:
            Locations ordered nearest first where the backend ranks them.
        """
        ...

    async def suggest_locations(
        self,
        constraint: str,
        types: Iterable[LocationType] | None = None,
        max_locations: int = 0,
    ) -> SuggestLocationsResult:
        """Suggest locations matching free text."""
        ...

    async def query_departures(
        self,
        station_id: str,
        time: datetime | None = None,
        max_departures: int = 0,
        equivs: bool = False,
    ) -> QueryDeparturesResult:
        """Get departures from a station.

        Args:
            station_id: Backend station id.
            time: Earliest departure time, None for now.
            max_departures: Maximum number of departures, 0 for backend default.
            equivs: Also include departures from equivalent stations.

        Returns:
            Departures ordered by time ascending, or INVALID_STATION.
        """
        ...

    async def query_trips(
        self,
        from_: Location,
        via: Location | None,
        to: Location,
        date: datetime,
        dep: bool = True,
        options: TripOptions | None = None,
    ) -> QueryTripsResult:
        """Search trips; ``dep`` selects whether ``date`` is a departure or arrival time."""
        ...

    async def query_more_trips(self, context: QueryTripsContext, later: bool) -> QueryTripsResult:
        """Get the next page of trips before or after the page ``context`` came from."""
        ...
