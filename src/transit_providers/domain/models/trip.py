"""Trip domain model."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models.leg import IndividualLeg, Leg, PublicLeg
from transit_providers.domain.models.location import Location
from transit_providers.domain.models.product import Product


def _location_key(location: Location) -> str:
    return location.id or str(location.point)


def generate_trip_id(legs: tuple[Leg, ...]) -> str:
    """Build a stable id from the legs' endpoints, planned times and lines."""
    parts = []
    for leg in legs:
        part = f"{_location_key(leg.departure)}-{_location_key(leg.arrival)}-"
        if isinstance(leg, PublicLeg):
            planned_departure = leg.departure_stop.planned_departure_time
            planned_arrival = leg.arrival_stop.planned_arrival_time
            if planned_departure:
                part += f"{int(planned_departure.timestamp())}-"
            if planned_arrival:
                part += f"{int(planned_arrival.timestamp())}-"
            part += f"{leg.line.product_code or ''}{leg.line.label or ''}"
        else:
            part += "individual"
        parts.append(part)
    return "|".join(parts)


@dataclass(frozen=True, eq=False)
class Trip:
    """An ordered sequence of legs from an origin to a destination.

    Trips are equal when their ids are equal. If no id is supplied, one is
    derived from the legs.
    """

    from_: Location
    to: Location
    legs: tuple[Leg, ...]
    id: str | None = None
    changes: int | None = None

    def __post_init__(self) -> None:
        if not self.legs:
            raise InvalidArgumentError("Trip legs cannot be empty")
        object.__setattr__(self, "legs", tuple(self.legs))
        if self.id is None:
            object.__setattr__(self, "id", generate_trip_id(self.legs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Trip):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def first_departure_time(self) -> datetime:
        return self.legs[0].departure_time

    @property
    def last_arrival_time(self) -> datetime:
        return self.legs[-1].arrival_time

    @property
    def duration(self) -> timedelta:
        """Duration including leading and trailing individual legs."""
        return self.last_arrival_time - self.first_departure_time

    @property
    def public_legs(self) -> tuple[PublicLeg, ...]:
        return tuple(leg for leg in self.legs if isinstance(leg, PublicLeg))

    @property
    def first_public_leg(self) -> PublicLeg | None:
        public_legs = self.public_legs
        return public_legs[0] if public_legs else None

    @property
    def last_public_leg(self) -> PublicLeg | None:
        public_legs = self.public_legs
        return public_legs[-1] if public_legs else None

    @property
    def public_duration(self) -> timedelta | None:
        """Duration from first public departure to last public arrival."""
        first, last = self.first_public_leg, self.last_public_leg
        if first is None or last is None:
            return None
        return last.arrival_time - first.departure_time

    @property
    def num_changes(self) -> int | None:
        if self.changes is not None:
            return self.changes
        count = len(self.public_legs)
        return count - 1 if count else None

    @property
    def products(self) -> frozenset[Product]:
        return frozenset(leg.line.product for leg in self.public_legs if leg.line.product)

    @property
    def is_travelable(self) -> bool:
        """False if legs overlap in time or an important stop is cancelled."""
        time: datetime | None = None
        for leg in self.legs:
            if isinstance(leg, PublicLeg) and (
                leg.departure_stop.departure_cancelled or leg.arrival_stop.arrival_cancelled
            ):
                return False
            if time is not None and leg.departure_time < time:
                return False
            time = leg.departure_time
            if leg.arrival_time < time:
                return False
            time = leg.arrival_time
        return True

    def with_adjusted_individual_legs(self) -> "Trip":
        """Shift individual legs that start before the previous leg arrives."""
        legs = list(self.legs)
        for index in range(1, len(legs)):
            leg = legs[index]
            previous_arrival = legs[index - 1].arrival_time
            if isinstance(leg, IndividualLeg) and leg.departure_time < previous_arrival:
                legs[index] = leg.moved_to(previous_arrival)
        return replace(self, legs=tuple(legs))
