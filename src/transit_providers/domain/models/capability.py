"""Provider capability flags."""

from enum import Enum


class Capability(Enum):
    """Features a provider may offer; queried once per provider instance."""

    SUGGEST_LOCATIONS = "suggest_locations"
    NEARBY_LOCATIONS = "nearby_locations"
    DEPARTURES = "departures"
    DEPARTURES_EQUIVS = "departures_equivs"  # equivalent-station expansion
    TRIPS = "trips"
    TRIPS_VIA = "trips_via"
