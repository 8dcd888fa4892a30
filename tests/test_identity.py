"""Tests for location identity rules."""

import pytest

from transit_providers.domain.identity import (
    deduplicate_locations,
    distance_meters,
    pick_candidate,
    rank_suggestions,
    same_place,
)
from transit_providers.domain.models import Location, LocationType, Point, SuggestedLocation

BERLIN_HBF = Point(52_525_589, 13_369_548)


class TestDistance:
    def test_zero_for_same_point(self) -> None:
        assert distance_meters(BERLIN_HBF, BERLIN_HBF) == 0

    def test_one_microdegree_latitude_is_about_eleven_centimeters(self) -> None:
        other = Point(BERLIN_HBF.lat_e6 + 1, BERLIN_HBF.lon_e6)

        assert distance_meters(BERLIN_HBF, other) == pytest.approx(0.111, abs=0.001)

    def test_berlin_to_munich(self) -> None:
        munich = Point(48_140_229, 11_558_339)

        assert distance_meters(BERLIN_HBF, munich) == pytest.approx(504_000, rel=0.01)


class TestSamePlace:
    def test_station_and_coord_at_same_point_are_different_places(self) -> None:
        """Given a station and a coordinate at the same point, then they are not the same place."""
        station = Location.station("8011160", point=BERLIN_HBF)

        assert not same_place(station, Location.from_point(BERLIN_HBF))

    def test_ids_decide_when_both_present(self) -> None:
        a = Location.station("1", point=BERLIN_HBF)
        b = Location.station("2", point=BERLIN_HBF)

        assert not same_place(a, b)
        assert same_place(a, Location.station("1"))

    def test_points_within_one_meter_are_the_same_place(self) -> None:
        nearby = Point(BERLIN_HBF.lat_e6 + 5, BERLIN_HBF.lon_e6)  # about 55 cm

        assert same_place(Location.from_point(BERLIN_HBF), Location.from_point(nearby))

    def test_points_further_than_one_meter_are_different_places(self) -> None:
        further = Point(BERLIN_HBF.lat_e6 + 20, BERLIN_HBF.lon_e6)  # about 2.2 m

        assert not same_place(Location.from_point(BERLIN_HBF), Location.from_point(further))

    def test_names_decide_without_ids_and_points(self) -> None:
        a = Location(type=LocationType.ANY, name="Alexanderplatz")

        assert same_place(a, Location(type=LocationType.ANY, name="Alexanderplatz"))
        assert not same_place(a, Location(type=LocationType.ANY, name="Zoo"))


class TestDeduplicate:
    def test_keeps_first_occurrence_in_order(self) -> None:
        first = Location.station("1", name="First")
        duplicate = Location.station("1", name="Duplicate")
        other = Location.station("2", name="Other")

        assert deduplicate_locations([first, other, duplicate]) == [first, other]
        assert deduplicate_locations([first, other, duplicate])[0].name == "First"


class TestRankSuggestions:
    def test_orders_by_priority_then_type_then_name_length(self) -> None:
        poi = SuggestedLocation(Location(type=LocationType.POI, id="p", name="Zoo"), priority=5)
        long_station = SuggestedLocation(Location.station("1", name="Zoologischer Garten"), 5)
        short_station = SuggestedLocation(Location.station("2", name="Zoo"), 5)
        low = SuggestedLocation(Location.station("3", name="Z"), 1)

        ranked = rank_suggestions([low, poi, long_station, short_station])

        assert ranked == [short_station, long_station, poi, low]

    def test_duplicate_keeps_higher_priority(self) -> None:
        weak = SuggestedLocation(Location.station("1", name="Alpha"), priority=1)
        strong = SuggestedLocation(Location.station("1", name="Alpha Hbf"), priority=9)

        ranked = rank_suggestions([weak, strong])

        assert ranked == [strong]


class TestPickCandidate:
    def test_single_candidate_wins(self) -> None:
        only = Location.station("1", name="Alpha Nord")

        assert pick_candidate(Location(type=LocationType.ANY, name="Alpha"), [only]) is only

    def test_unique_exact_name_match_wins(self) -> None:
        exact = Location.station("1", name="Alpha")
        other = Location.station("2", name="Alpha Nord")

        assert pick_candidate(Location(type=LocationType.ANY, name="alpha"), [other, exact]) is exact

    def test_ambiguous_returns_none(self) -> None:
        candidates = [Location.station("1", name="Alpha Nord"), Location.station("2", name="Alpha Süd")]

        assert pick_candidate(Location(type=LocationType.ANY, name="Alpha"), candidates) is None

    def test_no_candidates_returns_none(self) -> None:
        assert pick_candidate(Location(type=LocationType.ANY, name="Alpha"), []) is None
