"""Identity rules for locations across suggest, nearby and trip flows."""

import math
from collections.abc import Iterable, Sequence

from transit_providers.domain.models.location import Location, LocationType
from transit_providers.domain.models.point import Point
from transit_providers.domain.models.suggested_location import SuggestedLocation

EARTH_RADIUS_METERS = 6_371_008.8
SAME_PLACE_EPSILON_METERS = 1.0

DEFAULT_TYPE_ORDER: tuple[LocationType, ...] = (
    LocationType.STATION,
    LocationType.ADDRESS,
    LocationType.POI,
    LocationType.COORD,
    LocationType.ANY,
)


def distance_meters(p1: Point, p2: Point) -> float:
    """Great-circle distance between two points (haversine)."""
    lat1, lat2 = math.radians(p1.lat), math.radians(p2.lat)
    d_lat = lat2 - lat1
    d_lon = math.radians(p2.lon - p1.lon)
    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


def same_place(a: Location, b: Location) -> bool:
    """Return True if two locations denote the same place.

    Locations of different types are never the same place. With ids on both
    sides the ids decide; otherwise both points must lie within one meter.
    Without points the regular location equality applies.
    """
    if a.type != b.type:
        return False
    if a.has_id and b.has_id:
        return a.id == b.id
    if a.point is not None and b.point is not None:
        return distance_meters(a.point, b.point) <= SAME_PLACE_EPSILON_METERS
    return a == b


def deduplicate_locations(locations: Iterable[Location]) -> list[Location]:
    """Drop locations denoting a place already seen, keeping the first occurrence."""
    unique: list[Location] = []
    for location in locations:
        if not any(same_place(location, seen) for seen in unique):
            unique.append(location)
    return unique


def _deduplicate_suggestions(suggestions: Iterable[SuggestedLocation]) -> list[SuggestedLocation]:
    unique: list[SuggestedLocation] = []
    for suggestion in suggestions:
        duplicate = next(
            (i for i, seen in enumerate(unique) if same_place(suggestion.location, seen.location)),
            None,
        )
        if duplicate is None:
            unique.append(suggestion)
        elif suggestion.priority > unique[duplicate].priority:
            unique[duplicate] = suggestion
    return unique


def rank_suggestions(
    suggestions: Iterable[SuggestedLocation],
    type_order: Sequence[LocationType] = DEFAULT_TYPE_ORDER,
) -> list[SuggestedLocation]:
    """Deduplicate suggestions and order them best first.

    Ordering is by descending priority, then by position of the location type
    in ``type_order``, then by shorter name. Of duplicates the one with the
    higher priority survives.
    """
    rank = {location_type: index for index, location_type in enumerate(type_order)}

    def sort_key(suggestion: SuggestedLocation) -> tuple[int, int, int]:
        location = suggestion.location
        name = location.name or ""
        return (-suggestion.priority, rank.get(location.type, len(rank)), len(name))

    return sorted(_deduplicate_suggestions(suggestions), key=sort_key)


def pick_candidate(location: Location, candidates: Sequence[Location]) -> Location | None:
    """Pick the backend candidate a name-only location refers to.

    A single candidate wins, as does the only candidate whose name matches
    exactly (case-insensitively). Returns None when the choice is ambiguous
    or there are no candidates.
    """
    if len(candidates) == 1:
        return candidates[0]
    wanted = (location.name or "").casefold()
    exact = [c for c in candidates if (c.name or "").casefold() == wanted]
    return exact[0] if len(exact) == 1 else None
