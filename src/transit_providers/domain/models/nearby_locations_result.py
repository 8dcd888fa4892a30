"""Nearby locations result."""

from dataclasses import dataclass
from enum import Enum

from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models.error_details import ErrorDetails
from transit_providers.domain.models.location import Location
from transit_providers.domain.models.result_header import ResultHeader


class NearbyLocationsStatus(Enum):
    OK = "ok"
    SERVICE_DOWN = "service_down"


@dataclass(frozen=True)
class NearbyLocationsResult:
    """Locations near a point, nearest first where the backend ranks them."""

    status: NearbyLocationsStatus
    locations: tuple[Location, ...] = ()
    header: ResultHeader | None = None
    error: ErrorDetails | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "locations", tuple(self.locations))
        if self.status != NearbyLocationsStatus.OK and self.locations:
            raise InvalidArgumentError(f"{self.status.name} result cannot carry locations")

    @classmethod
    def failure(
        cls,
        status: NearbyLocationsStatus,
        header: ResultHeader | None = None,
        error: ErrorDetails | None = None,
    ) -> "NearbyLocationsResult":
        return cls(status=status, header=header, error=error)

    def __str__(self) -> str:
        if self.status == NearbyLocationsStatus.OK:
            return f"{len(self.locations)} locations"
        return self.status.name
