"""Leg domain models."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models.line import Line
from transit_providers.domain.models.location import Location
from transit_providers.domain.models.point import Point
from transit_providers.domain.models.stop import Stop


class IndividualLegType(Enum):
    WALK = "walk"
    BIKE = "bike"
    CAR = "car"
    TRANSFER = "transfer"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


@dataclass(frozen=True)
class PublicLeg:
    """A leg travelled on a public transport line."""

    line: Line
    destination: Location | None
    departure_stop: Stop
    arrival_stop: Stop
    intermediate_stops: tuple[Stop, ...] | None = None
    path: tuple[Point, ...] | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        if self.departure_stop.departure_time() is None:
            raise InvalidArgumentError("Public leg needs a departure time")
        if self.arrival_stop.arrival_time() is None:
            raise InvalidArgumentError("Public leg needs an arrival time")

    @property
    def departure(self) -> Location:
        return self.departure_stop.location

    @property
    def arrival(self) -> Location:
        return self.arrival_stop.location

    @property
    def departure_time(self) -> datetime:
        return self.departure_stop.departure_time()  # type: ignore[return-value]

    @property
    def arrival_time(self) -> datetime:
        return self.arrival_stop.arrival_time()  # type: ignore[return-value]

    @property
    def min_time(self) -> datetime:
        return self.departure_stop.min_time or self.departure_time

    @property
    def max_time(self) -> datetime:
        return self.arrival_stop.max_time or self.arrival_time


@dataclass(frozen=True)
class IndividualLeg:
    """A leg travelled on foot, by bike or car, or a transfer inside a station."""

    type: IndividualLegType
    departure: Location
    departure_time: datetime
    arrival: Location
    arrival_time: datetime
    distance: int = 0  # meters
    path: tuple[Point, ...] | None = None

    @property
    def min_time(self) -> datetime:
        return self.departure_time

    @property
    def max_time(self) -> datetime:
        return self.arrival_time

    @property
    def duration(self) -> timedelta:
        return self.arrival_time - self.departure_time

    def moved_to(self, departure_time: datetime) -> "IndividualLeg":
        """Return a copy shifted to start at departure_time, keeping its duration."""
        return replace(
            self,
            departure_time=departure_time,
            arrival_time=departure_time + self.duration,
        )


Leg = PublicLeg | IndividualLeg
