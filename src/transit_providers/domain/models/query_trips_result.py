"""Query trips result."""

from dataclasses import dataclass
from enum import Enum

from transit_providers.domain.contracts.query_trips_context import QueryTripsContext
from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models.error_details import ErrorDetails
from transit_providers.domain.models.location import Location
from transit_providers.domain.models.result_header import ResultHeader
from transit_providers.domain.models.trip import Trip


class QueryTripsStatus(Enum):
    OK = "ok"
    AMBIGUOUS = "ambiguous"
    TOO_CLOSE = "too_close"
    UNKNOWN_FROM = "unknown_from"
    UNKNOWN_VIA = "unknown_via"
    UNKNOWN_TO = "unknown_to"
    UNRESOLVABLE_ADDRESS = "unresolvable_address"
    NO_TRIPS = "no_trips"
    INVALID_DATE = "invalid_date"
    SERVICE_DOWN = "service_down"


@dataclass(frozen=True)
class QueryTripsResult:
    """Trips found for a search plus the context to page from.

    A non-OK result has no trips and a terminal context. An OK result may
    still be empty when no itinerary exists within the backend's constraints.
    """

    status: QueryTripsStatus
    context: QueryTripsContext
    trips: tuple[Trip, ...] = ()
    from_: Location | None = None
    via: Location | None = None
    to: Location | None = None
    header: ResultHeader | None = None
    error: ErrorDetails | None = None

    def __post_init__(self) -> None:
        if self.context is None:
            raise InvalidArgumentError("Trips result requires a context")
        object.__setattr__(self, "trips", tuple(self.trips))
        if self.status != QueryTripsStatus.OK:
            if self.trips:
                raise InvalidArgumentError(f"{self.status.name} result cannot carry trips")
            if not self.context.is_terminal:
                raise InvalidArgumentError(f"{self.status.name} result requires a terminal context")

    @classmethod
    def failure(
        cls,
        status: QueryTripsStatus,
        context: QueryTripsContext,
        header: ResultHeader | None = None,
        error: ErrorDetails | None = None,
    ) -> "QueryTripsResult":
        """Build a non-OK result; ``context`` must be terminal."""
        if status == QueryTripsStatus.OK:
            raise InvalidArgumentError("failure() requires a non-OK status")
        return cls(status=status, context=context, header=header, error=error)

    def __str__(self) -> str:
        if self.status == QueryTripsStatus.OK:
            return f"{len(self.trips)} trips"
        return self.status.name
