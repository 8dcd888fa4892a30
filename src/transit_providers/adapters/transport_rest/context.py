"""Trip paging context of the transport.rest drivers."""

from dataclasses import dataclass

from transit_providers.domain.contracts.query_trips_context import QueryTripsContext
from transit_providers.domain.models.location import Location


@dataclass(frozen=True)
class TransportRestContext(QueryTripsContext):
    """Captures the original /journeys query plus the cursor refs of one page.

    transport.rest refs are stateless: replaying the same query with the same
    ref yields the same page, so a context can be reused any number of times.
    """

    query: tuple[tuple[str, str], ...] = ()
    from_: Location | None = None
    via: Location | None = None
    to: Location | None = None
    earlier_ref: str | None = None
    later_ref: str | None = None

    def can_query_earlier(self) -> bool:
        return bool(self.earlier_ref)

    def can_query_later(self) -> bool:
        return bool(self.later_ref)
