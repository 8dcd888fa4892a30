"""Location domain model."""

from dataclasses import dataclass
from enum import Enum

from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models.point import Point
from transit_providers.domain.models.product import Product

# Names that only identify a place together with the city, e.g. "Hauptbahnhof"
NON_UNIQUE_NAMES = frozenset(
    {
        "Hauptbahnhof",
        "Hbf",
        "Bahnhof",
        "Bf",
        "Busbahnhof",
        "ZOB",
        "Schiffstation",
        "Schiffst.",
        "Zentrum",
        "Markt",
        "Dorf",
        "Kirche",
        "Nord",
        "Ost",
        "Süd",
        "West",
    }
)


class LocationType(Enum):
    """Kind of place a Location refers to."""

    ANY = "any"  # free user input, resolved by the backend
    STATION = "station"
    POI = "poi"
    ADDRESS = "address"
    COORD = "coord"  # plain coordinate, e.g. from GPS


@dataclass(frozen=True, eq=False)
class Location:
    """A place usable in a query.

    Two locations are equal when their type matches and, in order of
    preference, their ids, their points, or their place and name match.
    """

    type: LocationType
    id: str | None = None
    point: Point | None = None
    place: str | None = None
    name: str | None = None
    products: frozenset[Product] | None = None

    def __post_init__(self) -> None:
        if self.id is not None and not self.id.strip():
            raise InvalidArgumentError("Location id cannot be blank")
        if self.type == LocationType.ANY and self.id is not None:
            raise InvalidArgumentError("Location of type ANY cannot have an id")
        if self.place is not None and self.name is None:
            raise InvalidArgumentError("Location place cannot be set without name")
        if self.type == LocationType.COORD:
            if self.point is None:
                raise InvalidArgumentError("Coordinate location requires a point")
            if self.id is not None:
                raise InvalidArgumentError("Coordinate location cannot have an id")
            if self.place is not None or self.name is not None:
                raise InvalidArgumentError("Coordinate location cannot have place or name")

    @classmethod
    def coord(cls, lat_e6: int, lon_e6: int) -> "Location":
        """Create a coordinate-only location from microdegrees."""
        return cls(type=LocationType.COORD, point=Point(lat_e6, lon_e6))

    @classmethod
    def from_point(cls, point: Point) -> "Location":
        return cls(type=LocationType.COORD, point=point)

    @classmethod
    def station(
        cls,
        station_id: str,
        name: str | None = None,
        place: str | None = None,
        point: Point | None = None,
    ) -> "Location":
        return cls(type=LocationType.STATION, id=station_id, point=point, place=place, name=name)

    @property
    def has_id(self) -> bool:
        return bool(self.id)

    @property
    def has_point(self) -> bool:
        return self.point is not None

    @property
    def has_name(self) -> bool:
        return bool(self.name and self.name.strip())

    @property
    def is_identified(self) -> bool:
        """Whether a backend can use this location without resolving it first."""
        if self.type == LocationType.STATION:
            return self.has_id
        if self.type == LocationType.POI:
            return True
        if self.type in (LocationType.ADDRESS, LocationType.COORD):
            return self.has_point
        return False

    @property
    def unique_short_name(self) -> str | None:
        if self.place and self.name and self.name in NON_UNIQUE_NAMES:
            return f"{self.place}, {self.name}"
        if self.name:
            return self.name
        return self.id

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, Location):
            return NotImplemented
        if self.type != other.type:
            return False
        if self.has_id or other.has_id:
            return self.id == other.id
        if self.has_point or other.has_point:
            return self.point == other.point
        # only discriminate by name/place if no ids are given
        return self.place == other.place and self.name == other.name

    def __hash__(self) -> int:
        if self.has_id:
            return hash((self.type, self.id))
        if self.has_point:
            return hash((self.type, self.point))
        return hash((self.type, self.place, self.name))

    def __str__(self) -> str:
        label = self.unique_short_name or (str(self.point) if self.point else "?")
        return f"{self.type.name}<{label}>"
