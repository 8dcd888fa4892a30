"""Constants for the transport.rest drivers.

The v6 APIs wrap HAFAS endpoints in a stateless REST interface.
API Documentation: https://v6.db.transport.rest/api.html

Rate limit: 100 requests/minute (burst 200 requests/minute).
No authentication required.
"""

from transit_providers.domain.models.network_id import NetworkId
from transit_providers.domain.models.product import Product
from transit_providers.domain.models.query_trips_result import QueryTripsStatus
from transit_providers.domain.models.trip_options import Accessibility, WalkSpeed

DB_BASE_URL = "https://v6.db.transport.rest"
VBB_BASE_URL = "https://v6.bvg.transport.rest"

BASE_URLS: dict[NetworkId, str] = {
    NetworkId.DB: DB_BASE_URL,
    NetworkId.VBB: VBB_BASE_URL,
}

DEFAULT_HEADERS = {
    "Accept": "application/json",
}

SERVER_PRODUCT = "transport.rest"
SERVER_VERSION = "v6"

# transport.rest product flags per network, in the order the API lists them
DB_PRODUCTS: dict[str, Product] = {
    "nationalExpress": Product.HIGH_SPEED_TRAIN,
    "national": Product.HIGH_SPEED_TRAIN,
    "regionalExpress": Product.REGIONAL_TRAIN,
    "regional": Product.REGIONAL_TRAIN,
    "suburban": Product.SUBURBAN_TRAIN,
    "bus": Product.BUS,
    "ferry": Product.FERRY,
    "subway": Product.SUBWAY,
    "tram": Product.TRAM,
    "taxi": Product.ON_DEMAND,
}

VBB_PRODUCTS: dict[str, Product] = {
    "suburban": Product.SUBURBAN_TRAIN,
    "subway": Product.SUBWAY,
    "tram": Product.TRAM,
    "bus": Product.BUS,
    "ferry": Product.FERRY,
    "express": Product.HIGH_SPEED_TRAIN,
    "regional": Product.REGIONAL_TRAIN,
}

PRODUCT_FLAGS: dict[NetworkId, dict[str, Product]] = {
    NetworkId.DB: DB_PRODUCTS,
    NetworkId.VBB: VBB_PRODUCTS,
}

WALKING_SPEEDS: dict[WalkSpeed, str] = {
    WalkSpeed.SLOW: "slow",
    WalkSpeed.NORMAL: "normal",
    WalkSpeed.FAST: "fast",
}

ACCESSIBILITY: dict[Accessibility, str] = {
    Accessibility.NEUTRAL: "none",
    Accessibility.LIMITED: "partial",
    Accessibility.BARRIER_FREE: "complete",
}

# HAFAS error codes reported by /journeys
HAFAS_TRIP_ERRORS: dict[str, QueryTripsStatus] = {
    "H890": QueryTripsStatus.NO_TRIPS,
    "H891": QueryTripsStatus.NO_TRIPS,
    "H892": QueryTripsStatus.NO_TRIPS,
    "H886": QueryTripsStatus.NO_TRIPS,
    "H895": QueryTripsStatus.TOO_CLOSE,
    "H9380": QueryTripsStatus.TOO_CLOSE,
    "H9360": QueryTripsStatus.INVALID_DATE,
    "H9220": QueryTripsStatus.UNRESOLVABLE_ADDRESS,
    # HAFAS cannot tell which endpoint it failed to locate
    "LOCATION": QueryTripsStatus.UNKNOWN_FROM,
}

# HAFAS error code of a departures query for an unknown station
INVALID_STATION_CODE = "LOCATION"

# Minutes of departures requested when the caller passes no limit
DEFAULT_DEPARTURE_DURATION = 60
