"""Contracts shared between the domain and the drivers."""

from transit_providers.domain.contracts.query_trips_context import (
    QueryTripsContext,
    TerminalContext,
)

__all__ = ["QueryTripsContext", "TerminalContext"]
