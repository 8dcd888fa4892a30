"""Tests for the MVG provider with a mocked mvg library."""

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from mvg import MvgApiError

from transit_providers.adapters.mvg_api import MvgProvider
from transit_providers.domain.exceptions import UnsupportedCapabilityError
from transit_providers.domain.models import (
    Capability,
    Location,
    LocationType,
    NearbyLocationsStatus,
    Point,
    Position,
    Product,
    QueryDeparturesStatus,
    SuggestLocationsStatus,
)

UNIVERSITAET = {
    "id": "de:09162:70",
    "name": "Universität",
    "place": "München",
    "latitude": 48.15007,
    "longitude": 11.581,
}

NOW = datetime.now(UTC).replace(microsecond=0)


def departure(minutes: int, line: str = "U3", **kwargs: object) -> dict:
    planned = int((NOW + timedelta(minutes=minutes)).timestamp())
    data = {
        "time": planned,
        "planned": planned,
        "line": line,
        "destination": "Fürstenried West",
        "type": "U-Bahn",
        "icon": "mdi-subway",
        "cancelled": False,
        "messages": [],
        "platform": 2,
    }
    data.update(kwargs)
    return data


@pytest.fixture
def mvg_api() -> Iterator[MagicMock]:
    with patch("transit_providers.adapters.mvg_api.mvg_provider.MvgApi") as mock_api:
        mock_api.station_async = AsyncMock(return_value=UNIVERSITAET)
        mock_api.nearby_async = AsyncMock(return_value=UNIVERSITAET)
        mock_api.departures_async = AsyncMock(return_value=[])
        mock_api.station_ids_async = AsyncMock(return_value=["de:09162:6", "de:09162:70"])
        yield mock_api


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def provider(session: MagicMock) -> MvgProvider:
    return MvgProvider(session=session)


class TestMvgProvider:
    def test_capabilities(self, provider: MvgProvider) -> None:
        assert provider.has_capabilities(
            Capability.SUGGEST_LOCATIONS, Capability.NEARBY_LOCATIONS, Capability.DEPARTURES
        )
        assert not provider.has_capabilities(Capability.TRIPS)

    @pytest.mark.asyncio
    async def test_trips_are_unsupported(self, provider: MvgProvider) -> None:
        with pytest.raises(UnsupportedCapabilityError):
            await provider.query_trips(
                Location.station("de:09162:70"), None, Location.station("de:09162:6"), NOW
            )


class TestSuggestAndNearby:
    @pytest.mark.asyncio
    async def test_suggest_returns_best_match(
        self, provider: MvgProvider, mvg_api: MagicMock, session: MagicMock
    ) -> None:
        result = await provider.suggest_locations("Uni")

        assert result.status == SuggestLocationsStatus.OK
        (location,) = result.locations
        assert location.id == "de:09162:70"
        assert location.place == "München"
        assert location.point == Point(48_150_070, 11_581_000)
        mvg_api.station_async.assert_awaited_once_with("Uni", session=session)

    @pytest.mark.asyncio
    async def test_suggest_without_match(self, provider: MvgProvider, mvg_api: MagicMock) -> None:
        mvg_api.station_async.return_value = None

        result = await provider.suggest_locations("Nowhere")

        assert result.status == SuggestLocationsStatus.OK
        assert result.locations == ()

    @pytest.mark.asyncio
    async def test_api_error_is_service_down(self, provider: MvgProvider, mvg_api: MagicMock) -> None:
        mvg_api.station_async.side_effect = MvgApiError("Bad API call")

        result = await provider.suggest_locations("Uni")

        assert result.status == SuggestLocationsStatus.SERVICE_DOWN

    @pytest.mark.asyncio
    async def test_nearby_by_coordinate(self, provider: MvgProvider, mvg_api: MagicMock) -> None:
        result = await provider.query_nearby_locations(Location.coord(48_150_000, 11_580_000))

        assert result.status == NearbyLocationsStatus.OK
        assert [loc.id for loc in result.locations] == ["de:09162:70"]
        args = mvg_api.nearby_async.await_args.args
        assert args == (48.15, 11.58)

    @pytest.mark.asyncio
    async def test_nearby_by_station_id(self, provider: MvgProvider, mvg_api: MagicMock) -> None:
        await provider.query_nearby_locations(Location.station("de:09162:70"))

        mvg_api.station_async.assert_awaited_once()
        assert mvg_api.nearby_async.await_args.args == (48.15007, 11.581)

    @pytest.mark.asyncio
    async def test_nearby_pois_only_is_empty(self, provider: MvgProvider, mvg_api: MagicMock) -> None:
        result = await provider.query_nearby_locations(
            Location.coord(48_150_000, 11_580_000), types=[LocationType.POI]
        )

        assert result.locations == ()
        mvg_api.nearby_async.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nearby_returns_every_listed_station(
        self, provider: MvgProvider, mvg_api: MagicMock
    ) -> None:
        marienplatz = {**UNIVERSITAET, "id": "de:09162:2", "name": "Marienplatz", "latitude": 48.137}
        mvg_api.nearby_async.return_value = [UNIVERSITAET, marienplatz]

        result = await provider.query_nearby_locations(Location.coord(48_150_000, 11_580_000))

        assert [loc.id for loc in result.locations] == ["de:09162:70", "de:09162:2"]

    @pytest.mark.asyncio
    async def test_nearby_unknown_station_id_is_empty(
        self, provider: MvgProvider, mvg_api: MagicMock
    ) -> None:
        """Given a well-formed id the MVG API does not know, then nothing is found."""
        mvg_api.station_async.side_effect = MvgApiError("Bad API call: Got response (404)")

        result = await provider.query_nearby_locations(Location.station("de:09162:999999"))

        assert result.status == NearbyLocationsStatus.OK
        assert result.locations == ()
        mvg_api.station_ids_async.assert_awaited_once()
        mvg_api.nearby_async.assert_not_awaited()


class TestQueryDepartures:
    @pytest.mark.asyncio
    async def test_departures(self, provider: MvgProvider, mvg_api: MagicMock) -> None:
        mvg_api.departures_async.return_value = [
            departure(9, "U6"),
            departure(2, time=int((NOW + timedelta(minutes=4)).timestamp())),
            departure(5, "S1", type="S-Bahn", cancelled=True, messages=["Stellwerksstörung"]),
        ]

        result = await provider.query_departures("de:09162:70", max_departures=3)

        assert result.status == QueryDeparturesStatus.OK
        board = result.find_station_departures("de:09162:70")
        assert board is not None
        first, second, third = board.departures
        assert first.line.label == "U3"
        assert first.delay == timedelta(minutes=2)
        assert first.line.product == Product.SUBWAY
        assert first.position == Position("2")
        assert second.line.product == Product.SUBURBAN_TRAIN
        assert second.message == "cancelled; Stellwerksstörung"
        assert third.line.label == "U6"
        kwargs = mvg_api.departures_async.await_args.kwargs
        assert kwargs["limit"] == 3
        assert kwargs["offset"] == 0

    @pytest.mark.asyncio
    async def test_future_time_becomes_offset(self, provider: MvgProvider, mvg_api: MagicMock) -> None:
        await provider.query_departures("de:09162:70", time=NOW + timedelta(minutes=30, seconds=30))

        assert mvg_api.departures_async.await_args.kwargs["offset"] in (30, 31)

    @pytest.mark.asyncio
    async def test_malformed_station_id_is_invalid(
        self, provider: MvgProvider, mvg_api: MagicMock
    ) -> None:
        result = await provider.query_departures("999999")

        assert result.status == QueryDeparturesStatus.INVALID_STATION
        mvg_api.departures_async.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_broken_entries_are_skipped(self, provider: MvgProvider, mvg_api: MagicMock) -> None:
        mvg_api.departures_async.return_value = [departure(1), {"line": "U3"}]

        result = await provider.query_departures("de:09162:70")

        assert len(result.station_departures[0].departures) == 1

    @pytest.mark.asyncio
    async def test_api_error_is_service_down(self, provider: MvgProvider, mvg_api: MagicMock) -> None:
        mvg_api.departures_async.side_effect = MvgApiError("Bad API call")

        result = await provider.query_departures("de:09162:70")

        assert result.status == QueryDeparturesStatus.SERVICE_DOWN
        assert result.error is not None

    @pytest.mark.asyncio
    async def test_unknown_station_id_is_invalid(
        self, provider: MvgProvider, mvg_api: MagicMock, session: MagicMock
    ) -> None:
        """Given a well-formed id missing from the station list, then the station is invalid."""
        mvg_api.departures_async.side_effect = MvgApiError("Bad API call: Got response (404)")

        result = await provider.query_departures("de:09162:999999")

        assert result.status == QueryDeparturesStatus.INVALID_STATION
        assert result.station_departures == ()
        mvg_api.station_ids_async.assert_awaited_once_with(session=session)

    @pytest.mark.asyncio
    async def test_failing_station_list_is_service_down(
        self, provider: MvgProvider, mvg_api: MagicMock
    ) -> None:
        mvg_api.departures_async.side_effect = MvgApiError("Bad API call")
        mvg_api.station_ids_async.side_effect = MvgApiError("Bad API call")

        result = await provider.query_departures("de:09162:999999")

        assert result.status == QueryDeparturesStatus.SERVICE_DOWN
