"""Trip search options."""

from dataclasses import dataclass
from enum import Enum

from transit_providers.domain.models.product import Product


class Optimize(Enum):
    LEAST_DURATION = "least_duration"
    LEAST_CHANGES = "least_changes"
    LEAST_WALKING = "least_walking"


class WalkSpeed(Enum):
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"


class Accessibility(Enum):
    NEUTRAL = "neutral"
    LIMITED = "limited"
    BARRIER_FREE = "barrier_free"


class TripFlag(Enum):
    BIKE = "bike"


@dataclass(frozen=True)
class TripOptions:
    """Additional trip search options; None means the provider default."""

    products: frozenset[Product] | None = None
    optimize: Optimize | None = None
    walk_speed: WalkSpeed | None = None
    accessibility: Accessibility | None = None
    flags: frozenset[TripFlag] | None = None
