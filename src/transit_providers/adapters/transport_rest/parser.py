"""Parser for transport.rest v6 responses (hafas-client JSON format)."""

import logging
from datetime import datetime
from typing import Any

from transit_providers.domain.exceptions import InvalidArgumentError, ServiceUnavailableError
from transit_providers.domain.models.departure import Departure
from transit_providers.domain.models.leg import IndividualLeg, IndividualLegType, Leg, PublicLeg
from transit_providers.domain.models.line import Line
from transit_providers.domain.models.location import Location, LocationType
from transit_providers.domain.models.point import Point
from transit_providers.domain.models.position import Position
from transit_providers.domain.models.product import Product
from transit_providers.domain.models.stop import Stop
from transit_providers.domain.models.trip import Trip

logger = logging.getLogger(__name__)

# Line name prefixes used when the line carries no product
LINE_NAME_PRODUCTS: tuple[tuple[str, Product], ...] = (
    ("ICE", Product.HIGH_SPEED_TRAIN),
    ("IC", Product.HIGH_SPEED_TRAIN),
    ("EC", Product.HIGH_SPEED_TRAIN),
    ("RE", Product.REGIONAL_TRAIN),
    ("RB", Product.REGIONAL_TRAIN),
    ("STR", Product.TRAM),
    ("TRAM", Product.TRAM),
    ("S", Product.SUBURBAN_TRAIN),
    ("U", Product.SUBWAY),
    ("BUS", Product.BUS),
)


class TransportRestParser:
    """Turns transport.rest JSON into domain models.

    Args to the public methods are the decoded JSON objects. Malformed
    entries inside lists are skipped with a warning; a malformed top-level
    document raises ServiceUnavailableError.
    """

    def __init__(self, product_flags: dict[str, Product]) -> None:
        self._product_flags = product_flags

    # Times and positions

    @staticmethod
    def parse_time(value: str | None) -> datetime | None:
        """Parse an ISO 8601 time string."""
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unparseable time: {value!r}")
            return None

    @staticmethod
    def parse_position(value: str | int | None) -> Position | None:
        if value is None or str(value).strip() == "":
            return None
        return Position.parse(str(value))

    # Products and lines

    def parse_product(self, name: str | None) -> Product | None:
        if not name:
            return None
        return self._product_flags.get(name)

    def parse_products(self, flags: dict[str, bool] | None) -> frozenset[Product] | None:
        if not flags:
            return None
        return frozenset(p for flag, p in self._product_flags.items() if flags.get(flag))

    @staticmethod
    def _product_from_line_name(name: str) -> Product | None:
        upper = name.upper().replace(" ", "")
        for prefix, product in LINE_NAME_PRODUCTS:
            if upper.startswith(prefix):
                return product
        return None

    def parse_line(self, data: dict[str, Any] | None) -> Line:
        if not data:
            return Line(id=None)
        name = data.get("name") or ""
        product = self.parse_product(data.get("product")) or self._product_from_line_name(name)
        operator = data.get("operator") or {}
        return Line(
            id=data.get("id") or data.get("fahrtNr"),
            network=operator.get("name") if isinstance(operator, dict) else None,
            product=product,
            label=name or None,
            name=data.get("productName"),
        )

    # Locations

    def parse_location(self, data: dict[str, Any] | None) -> Location | None:
        """Parse a stop, station, address or POI object.

        Returns None for unusable entries.
        """
        if not isinstance(data, dict):
            return None

        kind = data.get("type")
        coords = data.get("location") if kind in ("stop", "station") else data
        point = None
        if isinstance(coords, dict) and coords.get("latitude") is not None:
            try:
                point = Point.from_double(float(coords["latitude"]), float(coords["longitude"]))
            except (InvalidArgumentError, TypeError, ValueError, KeyError):
                logger.warning(f"Ignoring invalid coordinates: {coords}")

        if kind in ("stop", "station"):
            station_id = str(data.get("id") or "").strip()
            if not station_id:
                return None
            return Location(
                type=LocationType.STATION,
                id=station_id,
                point=point,
                name=data.get("name") or None,
                products=self.parse_products(data.get("products")),
            )
        if data.get("poi"):
            poi_id = str(data.get("id") or "").strip() or None
            return Location(type=LocationType.POI, id=poi_id, point=point, name=data.get("name"))
        if data.get("address"):
            return Location(type=LocationType.ADDRESS, point=point, name=data["address"])
        if point is not None:
            return Location.from_point(point)
        return None

    def parse_locations(self, data: Any) -> list[Location]:
        if not isinstance(data, list):
            raise ServiceUnavailableError(f"Expected a list of locations, got {type(data).__name__}")
        locations = []
        for entry in data:
            location = self.parse_location(entry)
            if location is None:
                logger.debug(f"Skipping unusable location: {entry}")
                continue
            locations.append(location)
        return locations

    # Departures

    def parse_departure(self, data: dict[str, Any]) -> Departure | None:
        planned = self.parse_time(data.get("plannedWhen"))
        predicted = self.parse_time(data.get("when"))
        if planned is None and predicted is None:
            return None
        destination = self.parse_location(data.get("destination"))
        if destination is None and data.get("direction"):
            destination = Location(type=LocationType.ANY, name=data["direction"])
        remarks = [
            r.get("text") or r.get("summary")
            for r in data.get("remarks") or []
            if isinstance(r, dict) and r.get("type") in ("warning", "status")
        ]
        return Departure(
            planned_time=planned,
            predicted_time=predicted,
            line=self.parse_line(data.get("line")),
            position=self.parse_position(data.get("platform") or data.get("plannedPlatform")),
            destination=destination,
            message="; ".join(r for r in remarks if r) or None,
        )

    def parse_departures(self, data: Any) -> list[tuple[Location | None, Departure]]:
        """Parse a departures response into (stop, departure) pairs."""
        if isinstance(data, dict):
            data = data.get("departures")
        if not isinstance(data, list):
            raise ServiceUnavailableError("Departures response carries no departure list")
        results = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                departure = self.parse_departure(entry)
            except InvalidArgumentError as e:
                logger.warning(f"Error parsing departure: {e}")
                continue
            if departure is not None:
                results.append((self.parse_location(entry.get("stop")), departure))
        return results

    # Trips

    @staticmethod
    def parse_polyline(data: Any) -> tuple[Point, ...] | None:
        """Parse a GeoJSON FeatureCollection of points into a leg path.

        GeoJSON orders coordinates as [longitude, latitude].
        """
        if not isinstance(data, dict) or not isinstance(data.get("features"), list):
            return None
        points = []
        for feature in data["features"]:
            geometry = feature.get("geometry") if isinstance(feature, dict) else None
            coords = geometry.get("coordinates") if isinstance(geometry, dict) else None
            if not isinstance(coords, list) or len(coords) < 2:
                continue
            try:
                points.append(Point.from_double(float(coords[1]), float(coords[0])))
            except (InvalidArgumentError, TypeError, ValueError):
                logger.warning(f"Ignoring invalid polyline point: {coords}")
        return tuple(points) or None

    def parse_stopover(self, data: dict[str, Any]) -> Stop | None:
        location = self.parse_location(data.get("stop"))
        if location is None:
            return None
        cancelled = bool(data.get("cancelled"))
        return Stop(
            location=location,
            planned_arrival_time=self.parse_time(data.get("plannedArrival")),
            predicted_arrival_time=self.parse_time(data.get("arrival")),
            planned_arrival_position=self.parse_position(data.get("plannedArrivalPlatform")),
            predicted_arrival_position=self.parse_position(data.get("arrivalPlatform")),
            arrival_cancelled=cancelled,
            planned_departure_time=self.parse_time(data.get("plannedDeparture")),
            predicted_departure_time=self.parse_time(data.get("departure")),
            planned_departure_position=self.parse_position(data.get("plannedDeparturePlatform")),
            predicted_departure_position=self.parse_position(data.get("departurePlatform")),
            departure_cancelled=cancelled,
        )

    def parse_leg(self, data: dict[str, Any]) -> Leg:
        origin = self.parse_location(data.get("origin"))
        destination = self.parse_location(data.get("destination"))
        if origin is None or destination is None:
            raise ServiceUnavailableError("Leg without usable origin or destination")

        if data.get("walking") or not data.get("line"):
            departure_time = self.parse_time(data.get("departure") or data.get("plannedDeparture"))
            arrival_time = self.parse_time(data.get("arrival") or data.get("plannedArrival"))
            if departure_time is None or arrival_time is None:
                raise ServiceUnavailableError("Individual leg without times")
            return IndividualLeg(
                type=IndividualLegType.TRANSFER if data.get("transfer") else IndividualLegType.WALK,
                departure=origin,
                departure_time=departure_time,
                arrival=destination,
                arrival_time=arrival_time,
                distance=int(data.get("distance") or 0),
                path=self.parse_polyline(data.get("polyline")),
            )

        cancelled = bool(data.get("cancelled"))
        departure_stop = Stop(
            location=origin,
            planned_departure_time=self.parse_time(data.get("plannedDeparture")),
            predicted_departure_time=self.parse_time(data.get("departure")),
            planned_departure_position=self.parse_position(data.get("plannedDeparturePlatform")),
            predicted_departure_position=self.parse_position(data.get("departurePlatform")),
            departure_cancelled=cancelled,
        )
        arrival_stop = Stop(
            location=destination,
            planned_arrival_time=self.parse_time(data.get("plannedArrival")),
            predicted_arrival_time=self.parse_time(data.get("arrival")),
            planned_arrival_position=self.parse_position(data.get("plannedArrivalPlatform")),
            predicted_arrival_position=self.parse_position(data.get("arrivalPlatform")),
            arrival_cancelled=cancelled,
        )
        stopovers = data.get("stopovers")
        intermediate = None
        if isinstance(stopovers, list):
            # stopovers include the leg's first and last stop
            parsed = [self.parse_stopover(s) for s in stopovers[1:-1] if isinstance(s, dict)]
            intermediate = tuple(s for s in parsed if s is not None)
        direction = data.get("direction")
        try:
            return PublicLeg(
                line=self.parse_line(data.get("line")),
                destination=Location(type=LocationType.ANY, name=direction) if direction else None,
                departure_stop=departure_stop,
                arrival_stop=arrival_stop,
                intermediate_stops=intermediate,
                path=self.parse_polyline(data.get("polyline")),
            )
        except InvalidArgumentError as e:
            raise ServiceUnavailableError(f"Invalid public leg: {e}") from e

    def parse_journey(self, data: dict[str, Any]) -> Trip:
        legs = data.get("legs")
        if not isinstance(legs, list) or not legs:
            raise ServiceUnavailableError("Journey without legs")
        parsed = tuple(self.parse_leg(leg) for leg in legs if isinstance(leg, dict))
        if not parsed:
            raise ServiceUnavailableError("Journey without usable legs")
        trip = Trip(from_=parsed[0].departure, to=parsed[-1].arrival, legs=parsed)
        return trip.with_adjusted_individual_legs()

    def parse_journeys(self, data: Any) -> list[Trip]:
        if not isinstance(data, dict) or not isinstance(data.get("journeys"), list):
            raise ServiceUnavailableError("Journeys response carries no journey list")
        trips = []
        for journey in data["journeys"]:
            if not isinstance(journey, dict):
                continue
            try:
                trips.append(self.parse_journey(journey))
            except ServiceUnavailableError as e:
                logger.warning(f"Skipping journey: {e.reason}")
        return trips
