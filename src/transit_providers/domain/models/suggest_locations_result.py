"""Suggest locations result."""

from dataclasses import dataclass
from enum import Enum

from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models.error_details import ErrorDetails
from transit_providers.domain.models.location import Location
from transit_providers.domain.models.result_header import ResultHeader
from transit_providers.domain.models.suggested_location import SuggestedLocation


class SuggestLocationsStatus(Enum):
    OK = "ok"
    SERVICE_DOWN = "service_down"


@dataclass(frozen=True)
class SuggestLocationsResult:
    """Suggestions for a free-text query, best match first."""

    status: SuggestLocationsStatus
    suggested_locations: tuple[SuggestedLocation, ...] = ()
    header: ResultHeader | None = None
    error: ErrorDetails | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "suggested_locations", tuple(self.suggested_locations))
        if self.status != SuggestLocationsStatus.OK and self.suggested_locations:
            raise InvalidArgumentError(f"{self.status.name} result cannot carry suggestions")

    @classmethod
    def failure(
        cls,
        status: SuggestLocationsStatus,
        header: ResultHeader | None = None,
        error: ErrorDetails | None = None,
    ) -> "SuggestLocationsResult":
        return cls(status=status, header=header, error=error)

    @property
    def locations(self) -> tuple[Location, ...]:
        return tuple(s.location for s in self.suggested_locations)

    def __str__(self) -> str:
        if self.status == SuggestLocationsStatus.OK:
            return f"{len(self.suggested_locations)} suggestions"
        return self.status.name
