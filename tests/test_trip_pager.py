"""Tests for the trip paging service."""

from dataclasses import dataclass
from unittest.mock import AsyncMock, MagicMock

import pytest

from transit_providers.application.services import ContextState, TripPager, context_state
from transit_providers.domain.contracts import QueryTripsContext, TerminalContext
from transit_providers.domain.exceptions import InvalidArgumentError
from transit_providers.domain.models import NetworkId, QueryTripsResult, QueryTripsStatus


@dataclass(frozen=True)
class PageContext(QueryTripsContext):
    page: int = 0
    last_page: int = 3
    first_page: int = 0

    def can_query_earlier(self) -> bool:
        return self.page > self.first_page

    def can_query_later(self) -> bool:
        return self.page < self.last_page


def ok(page: int, **kwargs: int) -> QueryTripsResult:
    return QueryTripsResult(
        status=QueryTripsStatus.OK, context=PageContext(NetworkId.DB, page=page, **kwargs)
    )


def create_provider() -> MagicMock:
    """Provider stub that moves one page per call in the requested direction."""
    provider = MagicMock()

    async def query_more_trips(context: PageContext, later: bool) -> QueryTripsResult:
        return ok(context.page + (1 if later else -1), last_page=context.last_page)

    provider.query_more_trips = AsyncMock(side_effect=query_more_trips)
    return provider


class TestContextState:
    @pytest.mark.parametrize(
        "context, expected",
        [
            (PageContext(NetworkId.DB, page=1), ContextState.CAN_EARLIER_AND_LATER),
            (PageContext(NetworkId.DB, page=3), ContextState.EARLIER_ONLY),
            (PageContext(NetworkId.DB, page=0), ContextState.LATER_ONLY),
            (TerminalContext(NetworkId.DB), ContextState.TERMINAL),
        ],
    )
    def test_state_follows_predicates(self, context: QueryTripsContext, expected: ContextState) -> None:
        assert context_state(context) is expected


class TestTripPager:
    @pytest.mark.asyncio
    async def test_later_asks_provider_for_next_page(self) -> None:
        provider = create_provider()
        pager = TripPager(provider)

        result = await pager.later(ok(1))

        assert result.context.page == 2
        provider.query_more_trips.assert_awaited_once_with(PageContext(NetworkId.DB, page=1), later=True)

    @pytest.mark.asyncio
    async def test_earlier_from_first_page_is_rejected(self) -> None:
        provider = create_provider()
        pager = TripPager(provider)

        with pytest.raises(InvalidArgumentError):
            await pager.earlier(ok(0))
        provider.query_more_trips.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_terminal_result_cannot_page(self) -> None:
        pager = TripPager(create_provider())
        result = QueryTripsResult.failure(QueryTripsStatus.NO_TRIPS, TerminalContext(NetworkId.DB))

        with pytest.raises(InvalidArgumentError):
            await pager.later(result)

    @pytest.mark.asyncio
    async def test_iter_pages_stops_when_context_is_exhausted(self) -> None:
        """Given a search with three later pages, then iteration yields exactly those."""
        pager = TripPager(create_provider())

        pages = [page async for page in pager.iter_pages(ok(0))]

        assert [p.context.page for p in pages] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_iter_pages_respects_max_pages(self) -> None:
        pager = TripPager(create_provider())

        pages = [page async for page in pager.iter_pages(ok(0, last_page=100), max_pages=2)]

        assert [p.context.page for p in pages] == [1, 2]

    @pytest.mark.asyncio
    async def test_iter_pages_earlier(self) -> None:
        pager = TripPager(create_provider())

        pages = [page async for page in pager.iter_pages(ok(2), later=False)]

        assert [p.context.page for p in pages] == [1, 0]

    @pytest.mark.asyncio
    async def test_iter_pages_stops_after_failed_page(self) -> None:
        provider = MagicMock()
        failure = QueryTripsResult.failure(QueryTripsStatus.SERVICE_DOWN, TerminalContext(NetworkId.DB))
        provider.query_more_trips = AsyncMock(return_value=failure)
        pager = TripPager(provider)

        pages = [page async for page in pager.iter_pages(ok(0))]

        assert pages == [failure]
        provider.query_more_trips.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_iter_pages_rejects_negative_max_pages(self) -> None:
        pager = TripPager(create_provider())

        with pytest.raises(InvalidArgumentError):
            async for _ in pager.iter_pages(ok(0), max_pages=-1):
                pass
