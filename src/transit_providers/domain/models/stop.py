"""Stop domain model."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from transit_providers.domain.models.location import Location
from transit_providers.domain.models.position import Position


@dataclass(frozen=True)
class Stop:
    """A location passed by a leg, with planned and predicted arrival/departure."""

    location: Location
    planned_arrival_time: datetime | None = None
    predicted_arrival_time: datetime | None = None
    planned_arrival_position: Position | None = None
    predicted_arrival_position: Position | None = None
    arrival_cancelled: bool = False

    planned_departure_time: datetime | None = None
    predicted_departure_time: datetime | None = None
    planned_departure_position: Position | None = None
    predicted_departure_position: Position | None = None
    departure_cancelled: bool = False

    def arrival_time(self, prefer_plan_time: bool = False) -> datetime | None:
        if prefer_plan_time and self.planned_arrival_time is not None:
            return self.planned_arrival_time
        return self.predicted_arrival_time or self.planned_arrival_time

    def departure_time(self, prefer_plan_time: bool = False) -> datetime | None:
        if prefer_plan_time and self.planned_departure_time is not None:
            return self.planned_departure_time
        return self.predicted_departure_time or self.planned_departure_time

    @property
    def arrival_position(self) -> Position | None:
        return self.predicted_arrival_position or self.planned_arrival_position

    @property
    def departure_position(self) -> Position | None:
        return self.predicted_departure_position or self.planned_departure_position

    @property
    def arrival_delay(self) -> timedelta | None:
        if self.planned_arrival_time and self.predicted_arrival_time:
            return self.predicted_arrival_time - self.planned_arrival_time
        return None

    @property
    def departure_delay(self) -> timedelta | None:
        if self.planned_departure_time and self.predicted_departure_time:
            return self.predicted_departure_time - self.planned_departure_time
        return None

    @property
    def min_time(self) -> datetime | None:
        """Earliest departure time known for this stop."""
        if self.planned_departure_time is None or (
            self.predicted_departure_time is not None
            and self.predicted_departure_time < self.planned_departure_time
        ):
            return self.predicted_departure_time
        return self.planned_departure_time

    @property
    def max_time(self) -> datetime | None:
        """Latest arrival time known for this stop."""
        if self.planned_arrival_time is None or (
            self.predicted_arrival_time is not None
            and self.predicted_arrival_time > self.planned_arrival_time
        ):
            return self.predicted_arrival_time
        return self.planned_arrival_time
