"""Application services."""

from transit_providers.application.services.trip_pager import (
    ContextState,
    TripPager,
    context_state,
)

__all__ = ["ContextState", "TripPager", "context_state"]
