"""Departure domain models."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models.line import Line
from transit_providers.domain.models.location import Location
from transit_providers.domain.models.position import Position


@dataclass(frozen=True)
class Departure:
    """A single departure from a station."""

    planned_time: datetime | None
    predicted_time: datetime | None
    line: Line
    position: Position | None = None  # platform
    destination: Location | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        if self.planned_time is None and self.predicted_time is None:
            raise InvalidArgumentError("Departure needs a planned or predicted time")

    @property
    def time(self) -> datetime:
        """Predicted time if known, planned time otherwise."""
        return self.predicted_time or self.planned_time  # type: ignore[return-value]

    @property
    def delay(self) -> timedelta | None:
        if self.planned_time and self.predicted_time:
            return self.predicted_time - self.planned_time
        return None


@dataclass(frozen=True)
class StationDepartures:
    """Departures of one station, ordered by departure time ascending."""

    location: Location
    departures: tuple[Departure, ...] = ()
    lines: tuple[Line, ...] | None = None

    def sorted(self, max_departures: int = 0) -> "StationDepartures":
        """Return a copy with departures sorted by time and truncated to max_departures."""
        departures = tuple(sorted(self.departures, key=lambda d: d.time))
        if max_departures > 0:
            departures = departures[:max_departures]
        return StationDepartures(location=self.location, departures=departures, lines=self.lines)
