"""Network provider backed by HAFAS mgate endpoints through pyhafas."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

import requests
from pyhafas import HafasClient
from pyhafas.profile import (
    DBProfile,
    KVBProfile,
    NASAProfile,
    NVVProfile,
    RKRPProfile,
    VSNProfile,
    VVVProfile,
)
from pyhafas.types.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    GeneralHafasError,
    JourneysArrivalDepartureTooNearError,
    JourneysTooManyTrainsError,
    LocationNotFoundError,
    NoDepartureArrivalDataError,
    ProductNotAvailableError,
    TripDataNotFoundError,
)
from pyhafas.types.fptf import Mode
from pyhafas.types.nearby import LatLng

from transit_providers.adapters.abstract_network_provider import AbstractNetworkProvider
from transit_providers.adapters.api_request_logger import log_api_request
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
from transit_providers.domain.identity import pick_candidate
from transit_providers.domain.models.capability import Capability
from transit_providers.domain.models.departure import Departure, StationDepartures
from transit_providers.domain.models.error_details import ErrorDetails
from transit_providers.domain.models.leg import IndividualLeg, IndividualLegType, Leg, PublicLeg
from transit_providers.domain.models.line import Line
from transit_providers.domain.models.location import Location, LocationType
from transit_providers.domain.models.nearby_locations_result import (
    NearbyLocationsResult,
    NearbyLocationsStatus,
)
from transit_providers.domain.models.network_id import NetworkId
from transit_providers.domain.models.point import Point
from transit_providers.domain.models.position import Position
from transit_providers.domain.models.product import Product
from transit_providers.domain.models.query_departures_result import (
    QueryDeparturesResult,
    QueryDeparturesStatus,
)
from transit_providers.domain.models.query_trips_result import QueryTripsResult, QueryTripsStatus
from transit_providers.domain.models.result_header import ResultHeader
from transit_providers.domain.models.stop import Stop
from transit_providers.domain.models.suggest_locations_result import (
    SuggestLocationsResult,
    SuggestLocationsStatus,
)
from transit_providers.domain.models.suggested_location import SuggestedLocation
from transit_providers.domain.models.trip import Trip
from transit_providers.domain.models.trip_options import TripOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROFILES: dict[str, type] = {
    "db": DBProfile,
    "kvb": KVBProfile,
    "nvv": NVVProfile,
    "vvv": VVVProfile,
    "vsn": VSNProfile,
    "rkrp": RKRPProfile,
    "nasa": NASAProfile,
}

NETWORK_PROFILES: dict[NetworkId, str] = {
    NetworkId.DB: "db",
    NetworkId.KVB: "kvb",
    NetworkId.NVV: "nvv",
    NetworkId.VVV: "vvv",
    NetworkId.VSN: "vsn",
    NetworkId.RKRP: "rkrp",
    NetworkId.NASA: "nasa",
}

# pyhafas product names across profiles
HAFAS_PRODUCTS: dict[str, Product] = {
    "long_distance_express": Product.HIGH_SPEED_TRAIN,
    "long_distance": Product.HIGH_SPEED_TRAIN,
    "regional_express": Product.REGIONAL_TRAIN,
    "regional": Product.REGIONAL_TRAIN,
    "suburban": Product.SUBURBAN_TRAIN,
    "subway": Product.SUBWAY,
    "stadtbahn": Product.SUBWAY,
    "tram": Product.TRAM,
    "bus": Product.BUS,
    "ferry": Product.FERRY,
    "taxi": Product.ON_DEMAND,
    "anruf_sammel_taxi": Product.ON_DEMAND,
}

MODE_PRODUCTS: dict[Mode, Product] = {
    Mode.BUS: Product.BUS,
    Mode.WATERCRAFT: Product.FERRY,
    Mode.GONDOLA: Product.CABLECAR,
    Mode.TAXI: Product.ON_DEMAND,
}

# Train line names start with their category
TRAIN_CATEGORIES: tuple[tuple[str, Product], ...] = (
    ("ICE", Product.HIGH_SPEED_TRAIN),
    ("IC", Product.HIGH_SPEED_TRAIN),
    ("EC", Product.HIGH_SPEED_TRAIN),
    ("RE", Product.REGIONAL_TRAIN),
    ("RB", Product.REGIONAL_TRAIN),
    ("STR", Product.TRAM),
    ("S", Product.SUBURBAN_TRAIN),
    ("U", Product.SUBWAY),
)

# Location type encoded in a HAFAS lid ("A=1@O=...")
LID_TYPES: dict[str, LocationType] = {
    "1": LocationType.STATION,
    "2": LocationType.ADDRESS,
    "4": LocationType.POI,
}

DEFAULT_DEPARTURE_DURATION = 60

# HAFAS answers that mean "nothing found" (H890, SQ005, TI001, LOCATION)
EMPTY_RESULT_ERRORS = (
    LocationNotFoundError,
    JourneysArrivalDepartureTooNearError,
    NoDepartureArrivalDataError,
    TripDataNotFoundError,
)

# HAFAS answers that mean the backend refused or failed the request
BACKEND_ERRORS = (
    GeneralHafasError,
    AuthenticationError,
    AccessDeniedError,
    JourneysTooManyTrainsError,
    ProductNotAvailableError,
)


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _delayed(planned: datetime | None, delay: timedelta | None) -> datetime | None:
    if planned is None or delay is None:
        return None
    return planned + delay


def _position(platform: Any) -> Position | None:
    return Position.parse(str(platform)) if platform else None


class HafasProvider(AbstractNetworkProvider):
    """Driver for HAFAS backends supported by pyhafas.

    pyhafas is synchronous, so every call runs in a worker thread. pyhafas
    offers no paging, so every trips result carries a terminal context.
    """

    CAPABILITIES = frozenset(
        {
            Capability.SUGGEST_LOCATIONS,
            Capability.NEARBY_LOCATIONS,
            Capability.DEPARTURES,
            Capability.TRIPS,
            Capability.TRIPS_VIA,
        }
    )
    SUGGEST_LOCATION_TYPES = frozenset(
        {LocationType.STATION, LocationType.ADDRESS, LocationType.POI}
    )
    CONTEXT_TYPE = TerminalContext

    def __init__(
        self,
        network: NetworkId,
        config: ProviderConfig | None = None,
        client: HafasClient | None = None,
    ) -> None:
        """Initialize with the pyhafas profile of a network.

        Args:
            network: Network to query.
            config: Provider configuration; ``hafas_profile`` overrides the
                profile derived from ``network``.
            client: Optional preconfigured pyhafas client.
        """
        super().__init__(network, config)
        profile = self.config.hafas_profile or NETWORK_PROFILES.get(network)
        if profile not in PROFILES:
            known = ", ".join(sorted(PROFILES))
            raise InvalidArgumentError(f"Unknown HAFAS profile '{profile}'. Known: {known}")
        self._profile = profile
        self._client = client or HafasClient(PROFILES[profile]())

    @property
    def profile(self) -> str:
        return self._profile

    def _header(self) -> ResultHeader:
        return ResultHeader(
            network=self.network_id, server_product="hafas", server_name=self._profile
        )

    async def _call(self, method: Callable[..., T], **kwargs: Any) -> T:
        """Run a pyhafas call in a worker thread.

        Backend and transport failures become ServiceUnavailableError. Errors in
        EMPTY_RESULT_ERRORS are re-raised for the caller to map to a status.
        """
        name = getattr(method, "__name__", "call")
        log_api_request("HAFAS", f"{self._profile}.{name}", params=kwargs)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(method, **kwargs),
                timeout=self.config.request_timeout_seconds,
            )
        except requests.RequestException as e:
            raise ServiceUnavailableError(f"HAFAS request failed: {e}") from e
        except BACKEND_ERRORS as e:
            raise ServiceUnavailableError(f"HAFAS error {type(e).__name__}: {e}") from e

    # Parsing

    @staticmethod
    def _parse_station(station: Any) -> Location | None:
        station_id = str(getattr(station, "id", "") or "").strip()
        name = getattr(station, "name", None) or None
        lid = getattr(station, "lid", None) or ""
        location_type = LocationType.STATION
        if lid.startswith("A="):
            location_type = LID_TYPES.get(lid[2:3], LocationType.STATION)

        coords = getattr(station, "location", None) or station
        point = None
        latitude = getattr(coords, "latitude", None)
        longitude = getattr(coords, "longitude", None)
        if latitude is not None and longitude is not None:
            try:
                point = Point.from_double(float(latitude), float(longitude))
            except (InvalidArgumentError, TypeError, ValueError):
                logger.warning(f"Ignoring invalid coordinates of {name}")

        if location_type == LocationType.ADDRESS:
            if point is None:
                return None
            return Location(type=LocationType.ADDRESS, point=point, name=name)
        if not station_id:
            return None
        return Location(type=location_type, id=station_id, point=point, name=name)

    @staticmethod
    def _product(mode: Any, name: str | None) -> Product | None:
        if mode in MODE_PRODUCTS:
            return MODE_PRODUCTS[mode]
        upper = (name or "").upper().replace(" ", "")
        if upper.startswith("BUS"):
            return Product.BUS
        for prefix, product in TRAIN_CATEGORIES:
            if upper.startswith(prefix):
                return product
        return None

    def _parse_line(self, name: str | None, mode: Any = None) -> Line:
        return Line(
            id=name,
            network=self._profile,
            product=self._product(mode, name),
            label=name,
        )

    def _parse_departure(self, entry: Any) -> Departure | None:
        planned = _aware(getattr(entry, "dateTime", None) or getattr(entry, "when", None))
        if planned is None:
            return None
        predicted = _delayed(planned, getattr(entry, "delay", None))
        direction = getattr(entry, "direction", None)
        return Departure(
            planned_time=planned,
            predicted_time=predicted,
            line=self._parse_line(getattr(entry, "name", None)),
            position=_position(getattr(entry, "platform", None)),
            destination=Location(type=LocationType.ANY, name=direction) if direction else None,
            message="cancelled" if getattr(entry, "cancelled", False) else None,
        )

    def _parse_stopover(self, stopover: Any) -> Stop | None:
        location = self._parse_station(getattr(stopover, "stop", None))
        if location is None:
            return None
        planned_arrival = _aware(getattr(stopover, "arrival", None))
        planned_departure = _aware(getattr(stopover, "departure", None))
        cancelled = bool(getattr(stopover, "cancelled", False))
        return Stop(
            location=location,
            planned_arrival_time=planned_arrival,
            predicted_arrival_time=_delayed(planned_arrival, getattr(stopover, "arrivalDelay", None)),
            planned_arrival_position=_position(getattr(stopover, "arrivalPlatform", None)),
            arrival_cancelled=cancelled,
            planned_departure_time=planned_departure,
            predicted_departure_time=_delayed(
                planned_departure, getattr(stopover, "departureDelay", None)
            ),
            planned_departure_position=_position(getattr(stopover, "departurePlatform", None)),
            departure_cancelled=cancelled,
        )

    def _parse_leg(self, leg: Any) -> Leg:
        origin = self._parse_station(leg.origin)
        destination = self._parse_station(leg.destination)
        if origin is None or destination is None:
            raise ServiceUnavailableError("HAFAS leg without usable origin or destination")
        planned_departure = _aware(leg.departure)
        planned_arrival = _aware(leg.arrival)
        mode = getattr(leg, "mode", None)

        if planned_departure is None or planned_arrival is None:
            raise ServiceUnavailableError("HAFAS leg without times")
        if mode == Mode.WALKING:
            return IndividualLeg(
                type=IndividualLegType.WALK,
                departure=origin,
                departure_time=planned_departure,
                arrival=destination,
                arrival_time=planned_arrival,
                distance=int(getattr(leg, "distance", None) or 0),
            )

        cancelled = bool(getattr(leg, "cancelled", False))
        stopovers = getattr(leg, "stopovers", None)
        intermediate = None
        if stopovers:
            parsed = [self._parse_stopover(s) for s in stopovers[1:-1]]
            intermediate = tuple(s for s in parsed if s is not None)
        try:
            return PublicLeg(
                line=self._parse_line(getattr(leg, "name", None), mode),
                destination=None,
                departure_stop=Stop(
                    location=origin,
                    planned_departure_time=planned_departure,
                    predicted_departure_time=_delayed(
                        planned_departure, getattr(leg, "departureDelay", None)
                    ),
                    planned_departure_position=_position(getattr(leg, "departurePlatform", None)),
                    departure_cancelled=cancelled,
                ),
                arrival_stop=Stop(
                    location=destination,
                    planned_arrival_time=planned_arrival,
                    predicted_arrival_time=_delayed(
                        planned_arrival, getattr(leg, "arrivalDelay", None)
                    ),
                    planned_arrival_position=_position(getattr(leg, "arrivalPlatform", None)),
                    arrival_cancelled=cancelled,
                ),
                intermediate_stops=intermediate,
            )
        except InvalidArgumentError as e:
            raise ServiceUnavailableError(f"Invalid HAFAS leg: {e}") from e

    def _parse_journey(self, journey: Any) -> Trip:
        legs = tuple(self._parse_leg(leg) for leg in journey.legs or [])
        if not legs:
            raise ServiceUnavailableError("HAFAS journey without legs")
        trip = Trip(
            from_=legs[0].departure,
            to=legs[-1].arrival,
            legs=legs,
            id=getattr(journey, "id", None) or None,
        )
        return trip.with_adjusted_individual_legs()

    # Queries

    async def _suggest_locations(
        self, constraint: str, types: frozenset[LocationType], max_locations: int
    ) -> SuggestLocationsResult:
        rtype = "S" if types == {LocationType.STATION} else "ALL"
        try:
            stations = await self._call(self._client.locations, term=constraint, rtype=rtype)
        except EMPTY_RESULT_ERRORS:
            stations = []
        locations = [loc for loc in map(self._parse_station, stations or []) if loc is not None]
        logger.debug(f"Got {len(locations)} HAFAS suggestions for {constraint!r}")
        return SuggestLocationsResult(
            status=SuggestLocationsStatus.OK,
            suggested_locations=tuple(
                SuggestedLocation(location, priority=len(locations) - index)
                for index, location in enumerate(locations)
            ),
            header=self._header(),
        )

    async def _station_point(self, station_id: str) -> Point | None:
        """Look up the coordinates of a station id through the location search."""
        try:
            stations = await self._call(self._client.locations, term=station_id, rtype="S")
        except EMPTY_RESULT_ERRORS:
            return None
        for location in map(self._parse_station, stations or []):
            if location is not None and location.id == station_id:
                return location.point
        return None

    async def _query_nearby_locations(
        self,
        location: Location,
        types: frozenset[LocationType],
        max_distance: int,
        max_locations: int,
    ) -> NearbyLocationsResult:
        point = location.point
        if point is None and location.id:
            point = await self._station_point(location.id)
        get_stops = bool(types & {LocationType.STATION, LocationType.ANY})
        get_pois = bool(types & {LocationType.POI, LocationType.ANY})
        if point is None or not (get_stops or get_pois):
            logger.debug(f"Nothing to look up near {location}")
            return NearbyLocationsResult(status=NearbyLocationsStatus.OK, header=self._header())

        try:
            stations = await self._call(
                self._client.nearby,
                location=LatLng(point.lat, point.lon),
                max_walking_distance=max_distance or -1,
                get_pois=get_pois,
                get_stops=get_stops,
                max_locations=max_locations or -1,
            )
        except EMPTY_RESULT_ERRORS:
            stations = []
        locations = [
            loc
            for loc in map(self._parse_station, stations or [])
            if loc is not None and (loc.type in types or LocationType.ANY in types)
        ]
        logger.debug(f"Got {len(locations)} HAFAS locations near {point}")
        return NearbyLocationsResult(
            status=NearbyLocationsStatus.OK, locations=tuple(locations), header=self._header()
        )

    async def _query_departures(
        self, station_id: str, time: datetime | None, max_departures: int, equivs: bool
    ) -> QueryDeparturesResult:
        try:
            entries = await self._call(
                self._client.departures,
                station=station_id,
                date=time or datetime.now(UTC),
                max_trips=max_departures or -1,
                duration=DEFAULT_DEPARTURE_DURATION,
            )
        except LocationNotFoundError as e:
            logger.info(f"Station {station_id} unknown to HAFAS profile {self._profile}")
            return QueryDeparturesResult.failure(
                QueryDeparturesStatus.INVALID_STATION,
                header=self._header(),
                error=ErrorDetails.from_exception(e),
            )
        except EMPTY_RESULT_ERRORS as e:
            logger.info(f"No departures for station {station_id}: {type(e).__name__}")
            entries = []

        departures = []
        for entry in entries or []:
            try:
                departure = self._parse_departure(entry)
            except InvalidArgumentError as e:
                logger.warning(f"Error processing departure: {e}")
                continue
            if departure is not None:
                departures.append(departure)
        logger.debug(f"Got {len(departures)} departures for station {station_id}")

        station = Location.station(station_id)
        if entries:
            parsed = self._parse_station(getattr(entries[0], "station", None))
            if parsed is not None and parsed.id == station_id:
                station = parsed
        return QueryDeparturesResult(
            status=QueryDeparturesStatus.OK,
            station_departures=(StationDepartures(station, tuple(departures)),),
            header=self._header(),
        )

    async def _resolve_station_id(
        self, location: Location, unknown: QueryTripsStatus
    ) -> str | QueryTripsStatus:
        if location.has_id:
            return location.id  # type: ignore[return-value]
        if not location.has_name:
            # pyhafas routes between stations only
            if location.type in (LocationType.ADDRESS, LocationType.COORD):
                return QueryTripsStatus.UNRESOLVABLE_ADDRESS
            return unknown
        try:
            stations = await self._call(self._client.locations, term=location.name, rtype="S")
        except EMPTY_RESULT_ERRORS:
            return unknown
        candidates = [loc for loc in map(self._parse_station, stations or []) if loc is not None]
        if not candidates:
            return unknown
        picked = pick_candidate(location, candidates)
        if picked is None:
            return QueryTripsStatus.AMBIGUOUS
        return picked.id or unknown

    def _products(self, options: TripOptions) -> dict[str, bool]:
        if options.products is None:
            return {}
        available = getattr(self._client.profile, "availableProducts", None) or HAFAS_PRODUCTS
        return {
            name: HAFAS_PRODUCTS[name] in options.products
            for name in available
            if name in HAFAS_PRODUCTS
        }

    async def _query_trips(
        self,
        from_: Location,
        via: Location | None,
        to: Location,
        date: datetime,
        dep: bool,
        options: TripOptions,
    ) -> QueryTripsResult:
        if not dep:
            raise UnsupportedCapabilityError("pyhafas cannot search by arrival time")

        origin = await self._resolve_station_id(from_, QueryTripsStatus.UNKNOWN_FROM)
        destination = await self._resolve_station_id(to, QueryTripsStatus.UNKNOWN_TO)
        via_ids: list[str] = []
        if via is not None:
            via_id = await self._resolve_station_id(via, QueryTripsStatus.UNKNOWN_VIA)
            if isinstance(via_id, QueryTripsStatus):
                return self._trip_failure(via_id)
            via_ids.append(via_id)
        if isinstance(origin, QueryTripsStatus):
            return self._trip_failure(origin)
        if isinstance(destination, QueryTripsStatus):
            return self._trip_failure(destination)
        if origin == destination:
            return self._trip_failure(QueryTripsStatus.TOO_CLOSE)

        try:
            journeys = await self._call(
                self._client.journeys,
                origin=origin,
                destination=destination,
                via=via_ids,
                date=date,
                products=self._products(options),
                max_journeys=self.config.num_trips_requested,
            )
        except LocationNotFoundError as e:
            return self._trip_failure(QueryTripsStatus.UNKNOWN_FROM, e)
        except EMPTY_RESULT_ERRORS as e:
            # H890 is "no connections found", not a distance check
            return self._trip_failure(QueryTripsStatus.NO_TRIPS, e)

        trips = []
        for journey in journeys or []:
            try:
                trips.append(self._parse_journey(journey))
            except ServiceUnavailableError as e:
                logger.warning(f"Skipping journey: {e.reason}")
        if not trips:
            return self._trip_failure(QueryTripsStatus.NO_TRIPS)
        return QueryTripsResult(
            status=QueryTripsStatus.OK,
            context=self._terminal_context(),
            trips=tuple(trips),
            from_=trips[0].from_,
            via=via,
            to=trips[0].to,
            header=self._header(),
        )

    def _trip_failure(
        self, status: QueryTripsStatus, exc: BaseException | None = None
    ) -> QueryTripsResult:
        return QueryTripsResult.failure(
            status,
            self._terminal_context(),
            header=self._header(),
            error=ErrorDetails.from_exception(exc) if exc else None,
        )

    async def _query_more_trips(self, context: QueryTripsContext, later: bool) -> QueryTripsResult:
        # unreachable: terminal contexts never pass the paging checks
        raise UnsupportedCapabilityError("HAFAS trips cannot be paged")
