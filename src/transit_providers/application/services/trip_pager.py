"""Trip paging service."""

import logging
from collections.abc import AsyncIterator
from enum import Enum

from transit_providers.domain.contracts.query_trips_context import QueryTripsContext
from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models.query_trips_result import QueryTripsResult, QueryTripsStatus
from transit_providers.domain.ports.network_provider import NetworkProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 10


class ContextState(Enum):
    """Caller-side view of a context, derived from its two predicates."""

    CAN_EARLIER_AND_LATER = "can_earlier_and_later"
    EARLIER_ONLY = "earlier_only"
    LATER_ONLY = "later_only"
    TERMINAL = "terminal"


def context_state(context: QueryTripsContext) -> ContextState:
    earlier = context.can_query_earlier()
    later = context.can_query_later()
    if earlier and later:
        return ContextState.CAN_EARLIER_AND_LATER
    if earlier:
        return ContextState.EARLIER_ONLY
    if later:
        return ContextState.LATER_ONLY
    return ContextState.TERMINAL


class TripPager:
    """Pages through trip results of a provider."""

    def __init__(self, provider: NetworkProvider) -> None:
        """Initialize with the provider that produced the results to page."""
        self._provider = provider

    async def earlier(self, result: QueryTripsResult) -> QueryTripsResult:
        """Fetch the page before ``result``.

        Raises:
            InvalidArgumentError: If the result's context cannot page earlier.
        """
        if not result.context.can_query_earlier():
            raise InvalidArgumentError("Context does not allow querying earlier trips")
        return await self._provider.query_more_trips(result.context, later=False)

    async def later(self, result: QueryTripsResult) -> QueryTripsResult:
        """Fetch the page after ``result``.

        Raises:
            InvalidArgumentError: If the result's context cannot page later.
        """
        if not result.context.can_query_later():
            raise InvalidArgumentError("Context does not allow querying later trips")
        return await self._provider.query_more_trips(result.context, later=True)

    async def iter_pages(
        self,
        result: QueryTripsResult,
        later: bool = True,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> AsyncIterator[QueryTripsResult]:
        """Yield successive pages chained from ``result`` in one direction.

        Stops when the context can no longer page in that direction, after
        ``max_pages`` pages, or after yielding a non-OK page. The initial
        result itself is not yielded.

        Args:
            result: The result to start paging from.
            later: Page towards later trips if True, earlier otherwise.
            max_pages: Upper bound on the number of pages fetched.
        """
        if max_pages < 0:
            raise InvalidArgumentError(f"max_pages cannot be negative: {max_pages}")

        current = result
        for page in range(max_pages):
            context = current.context
            can_page = context.can_query_later() if later else context.can_query_earlier()
            if not can_page:
                logger.debug(f"Context exhausted after {page} pages")
                return
            current = await self._provider.query_more_trips(context, later=later)
            yield current
            if current.status != QueryTripsStatus.OK:
                logger.warning(f"Stopped paging on {current.status.name}")
                return
