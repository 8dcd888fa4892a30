"""Suggested location domain model."""

from dataclasses import dataclass

from transit_providers.domain.models.location import Location


@dataclass(frozen=True)
class SuggestedLocation:
    """A location suggestion with a backend-specific confidence score."""

    location: Location
    priority: int = 0  # higher is better
