"""Network provider for Munich (MVG) backed by the mvg library."""

import logging
import math
import re
from datetime import UTC, datetime
from typing import Any

import aiohttp
from mvg import MvgApi, MvgApiError

from transit_providers.adapters.abstract_network_provider import AbstractNetworkProvider
from transit_providers.adapters.api_request_logger import log_api_request
from transit_providers.adapters.config.provider_config import ProviderConfig
from transit_providers.domain.exceptions import InvalidArgumentError, ServiceUnavailableError
from transit_providers.domain.models.capability import Capability
from transit_providers.domain.models.departure import Departure, StationDepartures
from transit_providers.domain.models.error_details import ErrorDetails
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
from transit_providers.domain.models.result_header import ResultHeader
from transit_providers.domain.models.suggest_locations_result import (
    SuggestLocationsResult,
    SuggestLocationsStatus,
)
from transit_providers.domain.models.suggested_location import SuggestedLocation

logger = logging.getLogger(__name__)

# Global station ids look like "de:09162:6"
STATION_ID_PATTERN = re.compile(r"de:\d{2,5}:\d+")

TRANSPORT_TYPE_PRODUCTS: dict[str, Product] = {
    "U-Bahn": Product.SUBWAY,
    "S-Bahn": Product.SUBURBAN_TRAIN,
    "Tram": Product.TRAM,
    "Bus": Product.BUS,
    "Regionalbus": Product.BUS,
    "Bahn": Product.REGIONAL_TRAIN,
    "Schiff": Product.FERRY,
    "Ruftaxi": Product.ON_DEMAND,
}

DEFAULT_DEPARTURES = 10


class MvgProvider(AbstractNetworkProvider):
    """Driver for the MVG API.

    The MVG API answers station lookups with a single best match and offers
    no trip search, so this provider lacks the TRIPS capabilities.
    """

    CAPABILITIES = frozenset(
        {Capability.SUGGEST_LOCATIONS, Capability.NEARBY_LOCATIONS, Capability.DEPARTURES}
    )

    def __init__(
        self,
        config: ProviderConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize with optional configuration and aiohttp session."""
        super().__init__(NetworkId.MVG, config)
        self._session = session

    def _header(self) -> ResultHeader:
        return ResultHeader(network=self.network_id, server_product="mvg")

    @staticmethod
    def _parse_station(data: dict[str, Any] | None) -> Location | None:
        if not data or not data.get("id"):
            return None
        point = None
        if data.get("latitude") is not None and data.get("longitude") is not None:
            try:
                point = Point.from_double(float(data["latitude"]), float(data["longitude"]))
            except (InvalidArgumentError, TypeError, ValueError):
                logger.warning(f"Ignoring invalid coordinates of {data.get('id')}")
        name = data.get("name") or None
        place = data.get("place") if name else None
        return Location(
            type=LocationType.STATION,
            id=str(data["id"]),
            point=point,
            place=place or None,
            name=name,
        )

    async def _is_known_station(self, station_id: str) -> bool:
        """Check a global station id against the full MVG station id list."""
        log_api_request("MVG", "station_ids")
        try:
            station_ids = await MvgApi.station_ids_async(session=self._session)
        except MvgApiError as e:
            raise ServiceUnavailableError(f"MVG station id lookup failed: {e}") from e
        return station_id in station_ids

    async def _station(self, query: str) -> Location | None:
        log_api_request("MVG", "station", params={"query": query})
        try:
            result = await MvgApi.station_async(query, session=self._session)
        except MvgApiError as e:
            # the MVG API answers unknown station ids with an error status
            if STATION_ID_PATTERN.fullmatch(query) and not await self._is_known_station(query):
                logger.info(f"Station {query} unknown to MVG")
                return None
            raise ServiceUnavailableError(f"MVG station lookup failed: {e}") from e
        return self._parse_station(result)

    async def _suggest_locations(
        self, constraint: str, types: frozenset[LocationType], max_locations: int
    ) -> SuggestLocationsResult:
        station = await self._station(constraint)
        suggestions = (SuggestedLocation(station, priority=1),) if station else ()
        return SuggestLocationsResult(
            status=SuggestLocationsStatus.OK,
            suggested_locations=suggestions,
            header=self._header(),
        )

    async def _query_nearby_locations(
        self,
        location: Location,
        types: frozenset[LocationType],
        max_distance: int,
        max_locations: int,
    ) -> NearbyLocationsResult:
        point = location.point
        if point is None and location.id:
            station = await self._station(location.id)
            point = station.point if station else None
        if point is None or not types & {LocationType.STATION, LocationType.ANY}:
            return NearbyLocationsResult(status=NearbyLocationsStatus.OK, header=self._header())

        log_api_request("MVG", "nearby", params={"latitude": point.lat, "longitude": point.lon})
        try:
            result = await MvgApi.nearby_async(point.lat, point.lon, session=self._session)
        except MvgApiError as e:
            raise ServiceUnavailableError(f"MVG nearby lookup failed: {e}") from e
        entries = result if isinstance(result, list) else [result]
        stations = [s for s in map(self._parse_station, entries) if s is not None]
        return NearbyLocationsResult(
            status=NearbyLocationsStatus.OK,
            locations=tuple(stations),
            header=self._header(),
        )

    @staticmethod
    def _parse_departure(data: dict[str, Any]) -> Departure:
        planned = datetime.fromtimestamp(data["planned"], tz=UTC) if data.get("planned") else None
        predicted = datetime.fromtimestamp(data["time"], tz=UTC) if data.get("time") else None
        line_label = data.get("line") or None
        transport_type = data.get("type") or ""
        destination = data.get("destination")
        messages = [m for m in data.get("messages") or [] if isinstance(m, str)]
        if data.get("cancelled"):
            messages.insert(0, "cancelled")
        platform = data.get("platform")
        return Departure(
            planned_time=planned,
            predicted_time=predicted,
            line=Line(
                id=line_label,
                network="MVG",
                product=TRANSPORT_TYPE_PRODUCTS.get(transport_type),
                label=line_label,
                name=transport_type or None,
            ),
            position=Position.parse(str(platform)) if platform is not None else None,
            destination=Location(type=LocationType.ANY, name=destination) if destination else None,
            message="; ".join(messages) or None,
        )

    async def _query_departures(
        self, station_id: str, time: datetime | None, max_departures: int, equivs: bool
    ) -> QueryDeparturesResult:
        if not STATION_ID_PATTERN.fullmatch(station_id):
            logger.info(f"{station_id!r} is not an MVG station id")
            return QueryDeparturesResult.failure(
                QueryDeparturesStatus.INVALID_STATION, header=self._header()
            )

        offset = 0
        if time is not None:
            offset = max(0, math.ceil((time - datetime.now(UTC)).total_seconds() / 60))
        limit = max_departures or DEFAULT_DEPARTURES

        log_api_request(
            "MVG", "departures", params={"station": station_id, "limit": limit, "offset": offset}
        )
        try:
            results = await MvgApi.departures_async(
                station_id, limit=limit, offset=offset, session=self._session
            )
        except MvgApiError as e:
            if not await self._is_known_station(station_id):
                logger.info(f"Station {station_id} unknown to MVG")
                return QueryDeparturesResult.failure(
                    QueryDeparturesStatus.INVALID_STATION,
                    header=self._header(),
                    error=ErrorDetails.from_exception(e),
                )
            raise ServiceUnavailableError(f"MVG departures failed: {e}") from e

        departures = []
        for result in results or []:
            try:
                departures.append(self._parse_departure(result))
            except (InvalidArgumentError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Error parsing MVG departure: {e}")
        logger.debug(f"Got {len(departures)} departures for station {station_id}")

        return QueryDeparturesResult(
            status=QueryDeparturesStatus.OK,
            station_departures=(
                StationDepartures(Location.station(station_id), tuple(departures)),
            ),
            header=self._header(),
        )
