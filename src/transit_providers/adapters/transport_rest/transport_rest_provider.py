"""Network provider backed by the transport.rest v6 REST APIs.

API Documentation: https://v6.db.transport.rest/api.html
"""

import logging
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

import aiohttp

from transit_providers.adapters.abstract_network_provider import AbstractNetworkProvider
from transit_providers.adapters.config.provider_config import ProviderConfig
from transit_providers.adapters.transport_rest.constants import (
    ACCESSIBILITY,
    BASE_URLS,
    DEFAULT_DEPARTURE_DURATION,
    HAFAS_TRIP_ERRORS,
    INVALID_STATION_CODE,
    PRODUCT_FLAGS,
    SERVER_PRODUCT,
    SERVER_VERSION,
    WALKING_SPEEDS,
)
from transit_providers.adapters.transport_rest.context import TransportRestContext
from transit_providers.adapters.transport_rest.http_client import (
    TransportRestHttpClient,
    TransportRestHttpError,
)
from transit_providers.adapters.transport_rest.parser import TransportRestParser
from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.identity import pick_candidate, same_place
from transit_providers.domain.models.capability import Capability
from transit_providers.domain.models.departure import Departure, StationDepartures
from transit_providers.domain.models.error_details import ErrorDetails
from transit_providers.domain.models.location import Location, LocationType
from transit_providers.domain.models.nearby_locations_result import (
    NearbyLocationsResult,
    NearbyLocationsStatus,
)
from transit_providers.domain.models.network_id import NetworkId
from transit_providers.domain.models.product import Product
from transit_providers.domain.models.query_departures_result import (
    QueryDeparturesResult,
    QueryDeparturesStatus,
)
from transit_providers.domain.models.query_trips_result import QueryTripsResult, QueryTripsStatus
from transit_providers.domain.models.result_header import ResultHeader
from transit_providers.domain.models.suggest_locations_result import (
    SuggestLocationsResult,
    SuggestLocationsStatus,
)
from transit_providers.domain.models.suggested_location import SuggestedLocation
from transit_providers.domain.models.trip_options import TripFlag, TripOptions

logger = logging.getLogger(__name__)

DEFAULT_SUGGEST_RESULTS = 10
DEFAULT_NEARBY_RESULTS = 8
# Candidates fetched when resolving a location given only by name
RESOLVE_RESULTS = 5


class TransportRestProvider(AbstractNetworkProvider):
    """Driver for a HAFAS backend exposed through transport.rest."""

    CAPABILITIES = frozenset(Capability)
    SUGGEST_LOCATION_TYPES = frozenset(
        {LocationType.STATION, LocationType.ADDRESS, LocationType.POI}
    )
    CONTEXT_TYPE = TransportRestContext

    def __init__(
        self,
        network: NetworkId,
        config: ProviderConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize for one of the networks transport.rest serves.

        Args:
            network: DB or VBB.
            config: Provider configuration; ``endpoint_override`` replaces the
                default transport.rest instance.
            session: Optional shared aiohttp session. It is never closed here.
        """
        if network not in BASE_URLS:
            raise InvalidArgumentError(f"transport.rest does not serve {network.name}")
        super().__init__(network, config)
        base_url = self.config.endpoint_override or BASE_URLS[network]
        self._http = TransportRestHttpClient(base_url, self.config, session)
        self._parser = TransportRestParser(PRODUCT_FLAGS[network])

    @property
    def base_url(self) -> str:
        return self._http.base_url

    def _header(self, server_time: datetime | None = None) -> ResultHeader:
        return ResultHeader(
            network=self.network_id,
            server_product=SERVER_PRODUCT,
            server_version=SERVER_VERSION,
            server_name=self._http.base_url,
            server_time=server_time,
        )

    # Locations

    async def _suggest_locations(
        self, constraint: str, types: frozenset[LocationType], max_locations: int
    ) -> SuggestLocationsResult:
        any_type = LocationType.ANY in types
        params = {
            "query": constraint,
            "results": max_locations or DEFAULT_SUGGEST_RESULTS,
            "stops": any_type or LocationType.STATION in types,
            "addresses": any_type or LocationType.ADDRESS in types,
            "poi": any_type or LocationType.POI in types,
            "fuzzy": True,
            "linesOfStops": False,
        }
        data = await self._http.get_json("/locations", params)
        locations = self._parser.parse_locations(data)
        logger.debug(f"Got {len(locations)} suggestions for {constraint!r}")
        # the API returns best matches first
        suggestions = tuple(
            SuggestedLocation(location, priority=len(locations) - index)
            for index, location in enumerate(locations)
        )
        return SuggestLocationsResult(
            status=SuggestLocationsStatus.OK,
            suggested_locations=suggestions,
            header=self._header(),
        )

    async def _fetch_stop(self, station_id: str) -> Location | None:
        try:
            data = await self._http.get_json(f"/stops/{quote(station_id, safe='')}")
        except TransportRestHttpError as e:
            if e.status_code in (400, 404):
                return None
            raise
        return self._parser.parse_location(data)

    async def _query_nearby_locations(
        self,
        location: Location,
        types: frozenset[LocationType],
        max_distance: int,
        max_locations: int,
    ) -> NearbyLocationsResult:
        point = location.point
        if point is None and location.id is not None:
            stop = await self._fetch_stop(location.id)
            point = stop.point if stop else None
        if point is None:
            logger.warning(f"Cannot determine coordinates of {location}")
            return NearbyLocationsResult(status=NearbyLocationsStatus.OK, header=self._header())

        any_type = LocationType.ANY in types
        params = {
            "latitude": f"{point.lat:.6f}",
            "longitude": f"{point.lon:.6f}",
            "results": max_locations or DEFAULT_NEARBY_RESULTS,
            "distance": max_distance or None,
            "stops": any_type or LocationType.STATION in types,
            "poi": any_type or LocationType.POI in types,
            "linesOfStops": False,
        }
        data = await self._http.get_json("/locations/nearby", params)
        locations = self._parser.parse_locations(data)
        return NearbyLocationsResult(
            status=NearbyLocationsStatus.OK, locations=tuple(locations), header=self._header()
        )

    # Departures

    async def _query_departures(
        self, station_id: str, time: datetime | None, max_departures: int, equivs: bool
    ) -> QueryDeparturesResult:
        params = {
            "when": time.isoformat() if time else None,
            "duration": DEFAULT_DEPARTURE_DURATION,
            "results": max_departures or None,
            "includeRelatedStations": equivs,
            "remarks": True,
            "linesOfStops": False,
        }
        try:
            data = await self._http.get_json(
                f"/stops/{quote(station_id, safe='')}/departures", params
            )
        except TransportRestHttpError as e:
            if e.status_code in (400, 404) or e.hafas_code == INVALID_STATION_CODE:
                logger.info(f"Station {station_id} unknown to {self.network_id.name}")
                return QueryDeparturesResult.failure(
                    QueryDeparturesStatus.INVALID_STATION,
                    header=self._header(),
                    error=ErrorDetails.from_exception(e),
                )
            raise

        pairs = self._parser.parse_departures(data)
        logger.debug(f"Got {len(pairs)} departures for station {station_id}")
        server_time = None
        if isinstance(data, dict) and isinstance(data.get("realtimeDataUpdatedAt"), int):
            server_time = datetime.fromtimestamp(data["realtimeDataUpdatedAt"], tz=UTC)

        return QueryDeparturesResult(
            status=QueryDeparturesStatus.OK,
            station_departures=self._group_departures(station_id, pairs, equivs),
            header=self._header(server_time),
        )

    @staticmethod
    def _group_departures(
        station_id: str,
        pairs: list[tuple[Location | None, Departure]],
        equivs: bool,
    ) -> tuple[StationDepartures, ...]:
        """Group departures by stop; without equivs everything belongs to the station."""
        station = next(
            (stop for stop, _ in pairs if stop is not None and stop.id == station_id),
            Location.station(station_id),
        )
        groups: dict[Location, list[Departure]] = {station: []}
        for stop, departure in pairs:
            key = stop if equivs and stop is not None else station
            groups.setdefault(key, []).append(departure)
        return tuple(
            StationDepartures(location=location, departures=tuple(departures))
            for location, departures in groups.items()
        )

    # Trips

    async def _resolve(
        self, location: Location, unknown: QueryTripsStatus
    ) -> Location | QueryTripsStatus:
        """Turn a name-only location into one the backend can route from."""
        if location.has_id or location.has_point:
            return location
        if not location.has_name:
            return unknown

        query = f"{location.place} {location.name}" if location.place else location.name
        data = await self._http.get_json(
            "/locations",
            {
                "query": query,
                "results": RESOLVE_RESULTS,
                "stops": True,
                "addresses": True,
                "poi": True,
            },
        )
        candidates = self._parser.parse_locations(data)
        if not candidates:
            return unknown
        picked = pick_candidate(location, candidates)
        if picked is not None:
            return picked
        logger.info(f"{len(candidates)} candidates for {location}, reporting AMBIGUOUS")
        return QueryTripsStatus.AMBIGUOUS

    @staticmethod
    def _location_params(prefix: str, location: Location) -> list[tuple[str, str]]:
        if location.type == LocationType.STATION and location.id:
            return [(prefix, location.id)]
        point = location.point
        if location.type == LocationType.POI and location.id and point is not None:
            return [
                (f"{prefix}.id", location.id),
                (f"{prefix}.name", location.name or location.id),
                (f"{prefix}.latitude", f"{point.lat:.6f}"),
                (f"{prefix}.longitude", f"{point.lon:.6f}"),
            ]
        if point is not None:
            return [
                (f"{prefix}.address", location.name or str(point)),
                (f"{prefix}.latitude", f"{point.lat:.6f}"),
                (f"{prefix}.longitude", f"{point.lon:.6f}"),
            ]
        if location.id:
            return [(prefix, location.id)]
        raise InvalidArgumentError(f"Cannot route from unresolved location {location}")

    def _options_params(self, options: TripOptions) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if options.products is not None:
            for flag, product in PRODUCT_FLAGS[self.network_id].items():
                params.append((flag, "true" if product in options.products else "false"))
        if options.walk_speed is not None:
            params.append(("walkingSpeed", WALKING_SPEEDS[options.walk_speed]))
        if options.accessibility is not None:
            params.append(("accessibility", ACCESSIBILITY[options.accessibility]))
        if options.flags and TripFlag.BIKE in options.flags:
            params.append(("bike", "true"))
        if options.optimize is not None:
            logger.debug(f"transport.rest ignores optimize={options.optimize.name}")
        return params

    async def _query_trips(
        self,
        from_: Location,
        via: Location | None,
        to: Location,
        date: datetime,
        dep: bool,
        options: TripOptions,
    ) -> QueryTripsResult:
        resolved_from = await self._resolve(from_, QueryTripsStatus.UNKNOWN_FROM)
        resolved_to = await self._resolve(to, QueryTripsStatus.UNKNOWN_TO)
        resolved_via = None
        if via is not None:
            resolved_via = await self._resolve(via, QueryTripsStatus.UNKNOWN_VIA)

        for resolved in (resolved_from, resolved_via, resolved_to):
            if isinstance(resolved, QueryTripsStatus):
                return QueryTripsResult.failure(
                    resolved, self._terminal_context(), header=self._header()
                )
        if not isinstance(resolved_from, Location) or not isinstance(resolved_to, Location):
            raise InvalidArgumentError("Trip endpoints could not be resolved")
        if same_place(resolved_from, resolved_to):
            return QueryTripsResult.failure(
                QueryTripsStatus.TOO_CLOSE, self._terminal_context(), header=self._header()
            )

        query = self._location_params("from", resolved_from)
        if isinstance(resolved_via, Location):
            if not resolved_via.id:
                return QueryTripsResult.failure(
                    QueryTripsStatus.UNKNOWN_VIA, self._terminal_context(), header=self._header()
                )
            query.append(("via", resolved_via.id))
        query += self._location_params("to", resolved_to)
        query += [
            ("departure" if dep else "arrival", date.isoformat()),
            ("results", str(self.config.num_trips_requested)),
            ("stopovers", "true"),
            ("polylines", "true"),
            ("remarks", "false"),
        ]
        query += self._options_params(options)

        context = TransportRestContext(
            network=self.network_id,
            query=tuple(query),
            from_=resolved_from,
            via=resolved_via if isinstance(resolved_via, Location) else None,
            to=resolved_to,
        )
        return await self._fetch_journeys(context, None)

    async def _query_more_trips(
        self, context: TransportRestContext, later: bool  # type: ignore[override]
    ) -> QueryTripsResult:
        if later:
            return await self._fetch_journeys(context, ("laterThan", context.later_ref or ""))
        return await self._fetch_journeys(context, ("earlierThan", context.earlier_ref or ""))

    async def _fetch_journeys(
        self, context: TransportRestContext, ref: tuple[str, str] | None
    ) -> QueryTripsResult:
        """Run the captured query, optionally paged by a cursor ref."""
        params: dict[str, Any] = dict(context.query)
        if ref is not None:
            # a ref replaces the absolute time of the original query
            params.pop("departure", None)
            params.pop("arrival", None)
            params[ref[0]] = ref[1]

        try:
            data = await self._http.get_json("/journeys", params)
        except TransportRestHttpError as e:
            status = HAFAS_TRIP_ERRORS.get(e.hafas_code or "")
            if status is None:
                raise
            logger.info(f"/journeys answered {e.hafas_code}: {e.reason}")
            return QueryTripsResult.failure(
                status,
                self._terminal_context(),
                header=self._header(),
                error=ErrorDetails.from_exception(e),
            )

        trips = self._parser.parse_journeys(data)
        logger.debug(f"Got {len(trips)} trips")
        page_context = TransportRestContext(
            network=self.network_id,
            query=context.query,
            from_=context.from_,
            via=context.via,
            to=context.to,
            earlier_ref=data.get("earlierRef"),
            later_ref=data.get("laterRef"),
        )
        return QueryTripsResult(
            status=QueryTripsStatus.OK,
            context=page_context,
            trips=tuple(trips),
            from_=context.from_,
            via=context.via,
            to=context.to,
            header=self._header(),
        )


class DbProvider(TransportRestProvider):
    """Deutsche Bahn via v6.db.transport.rest."""

    def __init__(
        self,
        config: ProviderConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(NetworkId.DB, config, session)

    def default_products(self) -> frozenset[Product]:
        # long distance trains are part of the regular DB offer
        return frozenset(PRODUCT_FLAGS[NetworkId.DB].values())


class VbbProvider(TransportRestProvider):
    """Berlin/Brandenburg via v6.bvg.transport.rest."""

    def __init__(
        self,
        config: ProviderConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(NetworkId.VBB, config, session)
