"""Query departures result."""

from dataclasses import dataclass
from enum import Enum

from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models.departure import StationDepartures
from transit_providers.domain.models.error_details import ErrorDetails
from transit_providers.domain.models.result_header import ResultHeader


class QueryDeparturesStatus(Enum):
    OK = "ok"
    INVALID_STATION = "invalid_station"
    SERVICE_DOWN = "service_down"


@dataclass(frozen=True)
class QueryDeparturesResult:
    """Departure boards for the queried station and, with equivs, its equivalents."""

    status: QueryDeparturesStatus
    station_departures: tuple[StationDepartures, ...] = ()
    header: ResultHeader | None = None
    error: ErrorDetails | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "station_departures", tuple(self.station_departures))
        if self.status != QueryDeparturesStatus.OK and self.station_departures:
            raise InvalidArgumentError(f"{self.status.name} result cannot carry departures")

    @classmethod
    def failure(
        cls,
        status: QueryDeparturesStatus,
        header: ResultHeader | None = None,
        error: ErrorDetails | None = None,
    ) -> "QueryDeparturesResult":
        return cls(status=status, header=header, error=error)

    def find_station_departures(self, station_id: str) -> StationDepartures | None:
        """Return the departure board of a station, if present."""
        for entry in self.station_departures:
            if entry.location.id == station_id:
                return entry
        return None

    def __str__(self) -> str:
        if self.status == QueryDeparturesStatus.OK:
            count = sum(len(s.departures) for s in self.station_departures)
            return f"{count} departures at {len(self.station_departures)} stations"
        return self.status.name
