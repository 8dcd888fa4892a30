"""Shared behaviour of all network provider drivers.

Drivers subclass ``AbstractNetworkProvider`` and implement the ``_query_*``
hooks. The public coroutines validate arguments, short-circuit trivial
queries, translate transport failures into SERVICE_DOWN results and enforce
the result invariants (limits, ordering, deduplication).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime
from typing import ClassVar, TypeVar

import aiohttp

from transit_providers.adapters.config.provider_config import ProviderConfig
from transit_providers.domain.contracts.query_trips_context import (
    QueryTripsContext,
    TerminalContext,
)
from transit_providers.domain.exceptions import (
    InvalidArgumentError,
    ServiceUnavailableError,
    UnsupportedCapabilityError,
)
from transit_providers.domain.identity import (
    DEFAULT_TYPE_ORDER,
    deduplicate_locations,
    distance_meters,
    rank_suggestions,
    same_place,
)
from transit_providers.domain.models.capability import Capability
from transit_providers.domain.models.error_details import ErrorDetails
from transit_providers.domain.models.location import Location, LocationType
from transit_providers.domain.models.nearby_locations_result import (
    NearbyLocationsResult,
    NearbyLocationsStatus,
)
from transit_providers.domain.models.network_id import NetworkId
from transit_providers.domain.models.product import ALL_EXCEPT_HIGHSPEED, Product
from transit_providers.domain.models.query_departures_result import (
    QueryDeparturesResult,
    QueryDeparturesStatus,
)
from transit_providers.domain.models.query_trips_result import QueryTripsResult, QueryTripsStatus
from transit_providers.domain.models.suggest_locations_result import (
    SuggestLocationsResult,
    SuggestLocationsStatus,
)
from transit_providers.domain.models.trip_options import TripOptions

logger = logging.getLogger(__name__)

# Failures that mean "backend unreachable or unusable" rather than a caller error
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ServiceUnavailableError,
)

ResultT = TypeVar("ResultT")


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _check_limit(name: str, value: int) -> None:
    if value < 0:
        raise InvalidArgumentError(f"{name} cannot be negative: {value}")


class AbstractNetworkProvider:
    """Base class for network provider drivers.

    Subclasses set ``CAPABILITIES`` and ``CONTEXT_TYPE`` and implement the
    hooks for the capabilities they declare.
    """

    CAPABILITIES: ClassVar[frozenset[Capability]] = frozenset()
    SUGGEST_LOCATION_TYPES: ClassVar[frozenset[LocationType]] = frozenset({LocationType.STATION})
    SUGGEST_TYPE_ORDER: ClassVar[tuple[LocationType, ...]] = DEFAULT_TYPE_ORDER
    CONTEXT_TYPE: ClassVar[type[QueryTripsContext]] = QueryTripsContext

    def __init__(self, network: NetworkId, config: ProviderConfig | None = None) -> None:
        self._network = network
        self._config = config or ProviderConfig()

    @property
    def network_id(self) -> NetworkId:
        return self._network

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def suggest_location_types(self) -> frozenset[LocationType]:
        return self.SUGGEST_LOCATION_TYPES

    def has_capabilities(self, *capabilities: Capability) -> bool:
        return all(capability in self.CAPABILITIES for capability in capabilities)

    def default_products(self) -> frozenset[Product]:
        return ALL_EXCEPT_HIGHSPEED

    def _require(self, capability: Capability) -> None:
        if capability not in self.CAPABILITIES:
            raise UnsupportedCapabilityError(
                f"{self._network.name} provider does not support {capability.name}"
            )

    def _terminal_context(self) -> TerminalContext:
        return TerminalContext(self._network)

    async def _guarded(
        self,
        operation: str,
        call: Callable[[], Awaitable[ResultT]],
        on_failure: Callable[[ErrorDetails], ResultT],
    ) -> ResultT:
        """Run a driver hook, turning transport failures into a failure result."""
        try:
            return await call()
        except TRANSPORT_ERRORS as e:
            logger.warning(f"{self._network.name} {operation} failed: {e!r}")
            return on_failure(ErrorDetails.from_exception(e))

    # Nearby locations

    async def query_nearby_locations(
        self,
        location: Location,
        types: Iterable[LocationType] | None = None,
        max_distance: int = 0,
        max_locations: int = 0,
    ) -> NearbyLocationsResult:
        self._require(Capability.NEARBY_LOCATIONS)
        if location is None or not (location.has_id or location.has_point):
            raise InvalidArgumentError("Nearby query needs a location with an id or a point")
        _check_limit("max_distance", max_distance)
        _check_limit("max_locations", max_locations)
        wanted = frozenset(types) if types else frozenset({LocationType.STATION})

        result = await self._guarded(
            "nearby query",
            lambda: self._query_nearby_locations(location, wanted, max_distance, max_locations),
            lambda error: NearbyLocationsResult.failure(
                NearbyLocationsStatus.SERVICE_DOWN, error=error
            ),
        )
        if result.status != NearbyLocationsStatus.OK:
            return result

        locations = deduplicate_locations(result.locations)
        if location.point is not None:
            origin = location.point
            if max_distance > 0:
                locations = [
                    loc
                    for loc in locations
                    if loc.point is None or distance_meters(origin, loc.point) <= max_distance
                ]
            locations.sort(
                key=lambda loc: distance_meters(origin, loc.point) if loc.point else float("inf")
            )
        if max_locations > 0:
            locations = locations[:max_locations]
        return NearbyLocationsResult(
            status=NearbyLocationsStatus.OK, locations=tuple(locations), header=result.header
        )

    async def _query_nearby_locations(
        self,
        location: Location,
        types: frozenset[LocationType],
        max_distance: int,
        max_locations: int,
    ) -> NearbyLocationsResult:
        raise UnsupportedCapabilityError("Nearby locations not implemented")

    # Suggest locations

    async def suggest_locations(
        self,
        constraint: str,
        types: Iterable[LocationType] | None = None,
        max_locations: int = 0,
    ) -> SuggestLocationsResult:
        self._require(Capability.SUGGEST_LOCATIONS)
        if constraint is None:
            raise InvalidArgumentError("Suggest query cannot be None")
        _check_limit("max_locations", max_locations)
        if not constraint.strip():
            return SuggestLocationsResult(status=SuggestLocationsStatus.OK)
        wanted = frozenset(types) if types else self.SUGGEST_LOCATION_TYPES

        result = await self._guarded(
            "suggest query",
            lambda: self._suggest_locations(constraint.strip(), wanted, max_locations),
            lambda error: SuggestLocationsResult.failure(
                SuggestLocationsStatus.SERVICE_DOWN, error=error
            ),
        )
        if result.status != SuggestLocationsStatus.OK:
            return result

        suggestions = result.suggested_locations
        if LocationType.ANY not in wanted:
            suggestions = tuple(s for s in suggestions if s.location.type in wanted)
        ranked = rank_suggestions(suggestions, self.SUGGEST_TYPE_ORDER)
        if max_locations > 0:
            ranked = ranked[:max_locations]
        return SuggestLocationsResult(
            status=SuggestLocationsStatus.OK, suggested_locations=tuple(ranked), header=result.header
        )

    async def _suggest_locations(
        self, constraint: str, types: frozenset[LocationType], max_locations: int
    ) -> SuggestLocationsResult:
        raise UnsupportedCapabilityError("Suggest locations not implemented")

    # Departures

    async def query_departures(
        self,
        station_id: str,
        time: datetime | None = None,
        max_departures: int = 0,
        equivs: bool = False,
    ) -> QueryDeparturesResult:
        self._require(Capability.DEPARTURES)
        if equivs:
            self._require(Capability.DEPARTURES_EQUIVS)
        if not station_id or not station_id.strip():
            raise InvalidArgumentError("Station id cannot be blank")
        _check_limit("max_departures", max_departures)
        when = ensure_aware(time) if time is not None else None

        result = await self._guarded(
            "departures query",
            lambda: self._query_departures(station_id.strip(), when, max_departures, equivs),
            lambda error: QueryDeparturesResult.failure(
                QueryDeparturesStatus.SERVICE_DOWN, error=error
            ),
        )
        if result.status != QueryDeparturesStatus.OK:
            return result
        return QueryDeparturesResult(
            status=QueryDeparturesStatus.OK,
            station_departures=tuple(s.sorted(max_departures) for s in result.station_departures),
            header=result.header,
        )

    async def _query_departures(
        self, station_id: str, time: datetime | None, max_departures: int, equivs: bool
    ) -> QueryDeparturesResult:
        raise UnsupportedCapabilityError("Departures not implemented")

    # Trips

    async def query_trips(
        self,
        from_: Location,
        via: Location | None,
        to: Location,
        date: datetime,
        dep: bool = True,
        options: TripOptions | None = None,
    ) -> QueryTripsResult:
        self._require(Capability.TRIPS)
        if from_ is None or to is None:
            raise InvalidArgumentError("Trip query needs both from_ and to")
        if via is not None and not self.has_capabilities(Capability.TRIPS_VIA):
            raise InvalidArgumentError(f"{self.network_id.name} does not support via locations")
        if date is None:
            raise InvalidArgumentError("Trip query needs a date")

        if from_ == to or same_place(from_, to):
            logger.debug(f"{from_} and {to} are the same place")
            return QueryTripsResult.failure(QueryTripsStatus.TOO_CLOSE, self._terminal_context())

        return await self._guarded(
            "trips query",
            lambda: self._query_trips(
                from_, via, to, ensure_aware(date), dep, options or TripOptions()
            ),
            lambda error: QueryTripsResult.failure(
                QueryTripsStatus.SERVICE_DOWN, self._terminal_context(), error=error
            ),
        )

    async def _query_trips(
        self,
        from_: Location,
        via: Location | None,
        to: Location,
        date: datetime,
        dep: bool,
        options: TripOptions,
    ) -> QueryTripsResult:
        raise UnsupportedCapabilityError("Trips not implemented")

    async def query_more_trips(self, context: QueryTripsContext, later: bool) -> QueryTripsResult:
        self._require(Capability.TRIPS)
        if context is None:
            raise InvalidArgumentError("Context cannot be None")
        if context.network != self._network:
            raise InvalidArgumentError(
                f"Context of {context.network.name} cannot be used with {self._network.name}"
            )
        if later and not context.can_query_later():
            raise InvalidArgumentError("Context does not allow querying later trips")
        if not later and not context.can_query_earlier():
            raise InvalidArgumentError("Context does not allow querying earlier trips")
        if not isinstance(context, self.CONTEXT_TYPE):
            raise InvalidArgumentError(f"Unexpected context type {type(context).__name__}")

        return await self._guarded(
            "paging",
            lambda: self._query_more_trips(context, later),
            lambda error: QueryTripsResult.failure(
                QueryTripsStatus.SERVICE_DOWN, self._terminal_context(), error=error
            ),
        )

    async def _query_more_trips(self, context: QueryTripsContext, later: bool) -> QueryTripsResult:
        raise UnsupportedCapabilityError("Paging not implemented")
