"""Tests for trips and legs."""

from datetime import UTC, datetime, timedelta

import pytest

from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models import (
    IndividualLeg,
    IndividualLegType,
    Line,
    Location,
    Product,
    PublicLeg,
    Stop,
    Trip,
)

T0 = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
ALPHA = Location.station("1", name="Alpha")
BETA = Location.station("2", name="Beta")
GAMMA = Location.station("3", name="Gamma")


def public_leg(
    departure: Location,
    arrival: Location,
    start: datetime,
    end: datetime,
    label: str = "U8",
    cancelled: bool = False,
) -> PublicLeg:
    return PublicLeg(
        line=Line(id=label.lower(), product=Product.SUBWAY, label=label),
        destination=None,
        departure_stop=Stop(location=departure, planned_departure_time=start),
        arrival_stop=Stop(location=arrival, planned_arrival_time=end, arrival_cancelled=cancelled),
    )


def walk(departure: Location, arrival: Location, start: datetime, minutes: int) -> IndividualLeg:
    return IndividualLeg(
        type=IndividualLegType.WALK,
        departure=departure,
        departure_time=start,
        arrival=arrival,
        arrival_time=start + timedelta(minutes=minutes),
        distance=300,
    )


class TestTrip:
    def test_trip_requires_legs(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Trip(from_=ALPHA, to=BETA, legs=())

    def test_public_leg_requires_times(self) -> None:
        with pytest.raises(InvalidArgumentError):
            PublicLeg(
                line=Line(id=None),
                destination=None,
                departure_stop=Stop(location=ALPHA),
                arrival_stop=Stop(location=BETA, planned_arrival_time=T0),
            )

    def test_id_is_derived_from_legs_and_decides_equality(self) -> None:
        """Given two trips with the same legs, then they are equal and hash alike."""
        leg = public_leg(ALPHA, BETA, T0, T0 + timedelta(minutes=10))
        a = Trip(from_=ALPHA, to=BETA, legs=(leg,))
        b = Trip(from_=ALPHA, to=BETA, legs=[leg])

        assert a.id
        assert a == b
        assert len({a, b}) == 1

    def test_different_departure_times_give_different_trips(self) -> None:
        a = Trip(from_=ALPHA, to=BETA, legs=(public_leg(ALPHA, BETA, T0, T0 + timedelta(minutes=10)),))
        later = T0 + timedelta(minutes=5)
        b = Trip(from_=ALPHA, to=BETA, legs=(public_leg(ALPHA, BETA, later, later + timedelta(minutes=10)),))

        assert a != b

    def test_durations_and_changes(self) -> None:
        legs = (
            walk(ALPHA, BETA, T0, 5),
            public_leg(BETA, GAMMA, T0 + timedelta(minutes=6), T0 + timedelta(minutes=20)),
            public_leg(GAMMA, ALPHA, T0 + timedelta(minutes=25), T0 + timedelta(minutes=40), "S1"),
        )
        trip = Trip(from_=ALPHA, to=ALPHA, legs=legs)

        assert trip.duration == timedelta(minutes=40)
        assert trip.public_duration == timedelta(minutes=34)
        assert trip.num_changes == 1
        assert trip.products == {Product.SUBWAY}
        assert trip.is_travelable

    def test_cancelled_leg_is_not_travelable(self) -> None:
        leg = public_leg(ALPHA, BETA, T0, T0 + timedelta(minutes=10), cancelled=True)

        assert not Trip(from_=ALPHA, to=BETA, legs=(leg,)).is_travelable

    def test_walk_only_trip_has_no_changes(self) -> None:
        trip = Trip(from_=ALPHA, to=BETA, legs=(walk(ALPHA, BETA, T0, 12),))

        assert trip.num_changes is None
        assert trip.public_duration is None

    def test_individual_legs_are_shifted_after_previous_arrival(self) -> None:
        """Given a walk starting before the previous leg arrives, then it is moved to that arrival."""
        ride = public_leg(ALPHA, BETA, T0, T0 + timedelta(minutes=10))
        early_walk = walk(BETA, GAMMA, T0 + timedelta(minutes=8), 4)
        trip = Trip(from_=ALPHA, to=GAMMA, legs=(ride, early_walk))

        adjusted = trip.with_adjusted_individual_legs()

        moved = adjusted.legs[1]
        assert isinstance(moved, IndividualLeg)
        assert moved.departure_time == T0 + timedelta(minutes=10)
        assert moved.arrival_time == T0 + timedelta(minutes=14)
        assert adjusted.is_travelable
        assert not trip.is_travelable
