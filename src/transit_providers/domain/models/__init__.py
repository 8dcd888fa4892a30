"""Domain models for transit providers."""

from transit_providers.domain.models.capability import Capability
from transit_providers.domain.models.departure import Departure, StationDepartures
from transit_providers.domain.models.error_details import ErrorDetails
from transit_providers.domain.models.leg import IndividualLeg, IndividualLegType, Leg, PublicLeg
from transit_providers.domain.models.line import Line
from transit_providers.domain.models.location import Location, LocationType
from transit_providers.domain.models.nearby_locations_result import (
    NearbyLocationsResult,
    NearbyLocationsStatus,
)
from transit_providers.domain.models.network_id import NetworkId
from transit_providers.domain.models.point import Point
from transit_providers.domain.models.position import Position
from transit_providers.domain.models.product import ALL_EXCEPT_HIGHSPEED, ALL_PRODUCTS, Product
from transit_providers.domain.models.query_departures_result import (
    QueryDeparturesResult,
    QueryDeparturesStatus,
)
from transit_providers.domain.models.query_trips_result import QueryTripsResult, QueryTripsStatus
from transit_providers.domain.models.result_header import ResultHeader
from transit_providers.domain.models.stop import Stop
from transit_providers.domain.models.suggest_locations_result import (
    SuggestLocationsResult,
    SuggestLocationsStatus,
)
from transit_providers.domain.models.suggested_location import SuggestedLocation
from transit_providers.domain.models.trip import Trip
from transit_providers.domain.models.trip_options import (
    Accessibility,
    Optimize,
    TripFlag,
    TripOptions,
    WalkSpeed,
)

__all__ = [
    "ALL_EXCEPT_HIGHSPEED",
    "ALL_PRODUCTS",
    "Accessibility",
    "Capability",
    "Departure",
    "ErrorDetails",
    "IndividualLeg",
    "IndividualLegType",
    "Leg",
    "Line",
    "Location",
    "LocationType",
    "NearbyLocationsResult",
    "NearbyLocationsStatus",
    "NetworkId",
    "Optimize",
    "Point",
    "Position",
    "Product",
    "PublicLeg",
    "QueryDeparturesResult",
    "QueryDeparturesStatus",
    "QueryTripsResult",
    "QueryTripsStatus",
    "ResultHeader",
    "StationDepartures",
    "Stop",
    "SuggestLocationsResult",
    "SuggestLocationsStatus",
    "SuggestedLocation",
    "Trip",
    "TripFlag",
    "TripOptions",
    "WalkSpeed",
]
