"""Point domain model."""

from dataclasses import dataclass

from transit_providers.domain.exceptions import InvalidArgumentError

MAX_LAT_E6 = 90_000_000
MAX_LON_E6 = 180_000_000


@dataclass(frozen=True)
class Point:
    """A geographic coordinate in integer microdegrees (1e-6 degree units).

    Integers keep equality and hashing exact; use ``from_double`` when the
    source hands out floating point degrees.
    """

    lat_e6: int
    lon_e6: int

    def __post_init__(self) -> None:
        if not isinstance(self.lat_e6, int) or not isinstance(self.lon_e6, int):
            raise InvalidArgumentError("Point coordinates must be integer microdegrees")
        if not -MAX_LAT_E6 <= self.lat_e6 <= MAX_LAT_E6:
            raise InvalidArgumentError(f"Latitude out of range: {self.lat_e6}")
        if not -MAX_LON_E6 <= self.lon_e6 <= MAX_LON_E6:
            raise InvalidArgumentError(f"Longitude out of range: {self.lon_e6}")

    @classmethod
    def from_double(cls, lat: float, lon: float) -> "Point":
        """Create a point from decimal degrees."""
        return cls(round(lat * 1e6), round(lon * 1e6))

    @classmethod
    def from_e5(cls, lat_e5: int, lon_e5: int) -> "Point":
        """Create a point from 1e-5 degree units (as used by some polyline formats)."""
        return cls(lat_e5 * 10, lon_e5 * 10)

    @property
    def lat(self) -> float:
        return self.lat_e6 / 1e6

    @property
    def lon(self) -> float:
        return self.lon_e6 / 1e6

    def __str__(self) -> str:
        return f"{self.lat:.7f}/{self.lon:.7f}"
