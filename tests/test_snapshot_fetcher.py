"""Tests for snapshot fetching, failure isolation and last-good merging."""

from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest

from hospitality_sync.clients import ServerError, SessionExpiredError, TransportError
from hospitality_sync.models import TaskStatus
from hospitality_sync.services import (
    FRONT_DESK_RESOURCES,
    HOUSEKEEPING_RESOURCES,
    ErrorKind,
    ResourceKind,
    SnapshotFetcher,
    SnapshotFilters,
)
from hospitality_sync.services.snapshot import GENERIC_FAILURE_MESSAGE


@pytest.fixture
def mock_client(
    arrivals_response,
    departures_response,
    in_house_response,
    room_availability_response,
    tasks_response,
    room_status_response,
    housekeeping_stats_response,
):
    client = Mock()
    client.get_arrivals = AsyncMock(return_value=arrivals_response)
    client.get_departures = AsyncMock(return_value=departures_response)
    client.get_in_house = AsyncMock(return_value=in_house_response)
    client.get_room_availability = AsyncMock(return_value=room_availability_response)
    client.get_tasks = AsyncMock(return_value=tasks_response)
    client.get_pending_tasks = AsyncMock(return_value={"tasks": []})
    client.get_room_status = AsyncMock(return_value=room_status_response)
    client.get_housekeeping_stats = AsyncMock(return_value=housekeeping_stats_response)
    return client


class TestSnapshotFilters:
    def test_params_per_resource(self):
        filters = SnapshotFilters(
            branch_id="br-1",
            start_date=date(2026, 10, 17),
            end_date=date(2026, 10, 19),
            assigned_to="u-hk-1",
            statuses=(TaskStatus.PENDING, TaskStatus.IN_PROGRESS),
            floor="2",
        )

        assert filters.to_params(ResourceKind.ARRIVALS) == {"branchId": "br-1"}
        assert filters.to_params(ResourceKind.ROOM_AVAILABILITY) == {
            "branchId": "br-1",
            "checkIn": "2026-10-17",
            "checkOut": "2026-10-19",
        }
        assert filters.to_params(ResourceKind.TASKS) == {
            "branchId": "br-1",
            "status": "pending,in_progress",
            "assignedTo": "u-hk-1",
            "date": "2026-10-17",
        }
        assert filters.to_params(ResourceKind.ROOM_STATUS) == {"branchId": "br-1", "floor": "2"}
        assert filters.to_params(ResourceKind.HOUSEKEEPING_STATS) == {
            "branchId": "br-1",
            "startDate": "2026-10-17",
            "endDate": "2026-10-19",
        }

    def test_unset_filters_produce_no_params(self):
        assert SnapshotFilters().to_params(ResourceKind.TASKS) == {}


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_parses_bookings(self, mock_client):
        fetcher = SnapshotFetcher(mock_client)

        result = await fetcher.fetch(ResourceKind.ARRIVALS, SnapshotFilters(branch_id="br-1"))

        assert result.ok
        assert [b.id for b in result.data] == ["bk-arr-1", "2", "bk-arr-3"]
        mock_client.get_arrivals.assert_awaited_once_with({"branchId": "br-1"})

    @pytest.mark.asyncio
    async def test_no_filters_passes_none(self, mock_client):
        await SnapshotFetcher(mock_client).fetch(ResourceKind.ROOM_STATUS)

        mock_client.get_room_status.assert_awaited_once_with(None)

    @pytest.mark.asyncio
    async def test_empty_collection_is_valid(self, mock_client):
        mock_client.get_in_house = AsyncMock(return_value=[])

        result = await SnapshotFetcher(mock_client).fetch(ResourceKind.IN_HOUSE)

        assert result.ok
        assert result.data == []

    @pytest.mark.asyncio
    async def test_transport_failure_is_captured(self, mock_client):
        mock_client.get_tasks = AsyncMock(side_effect=TransportError("Request timeout for /housekeeping/tasks"))

        result = await SnapshotFetcher(mock_client).fetch(ResourceKind.TASKS)

        assert not result.ok
        assert result.data is None
        assert result.error.kind == ErrorKind.TRANSPORT
        assert result.error.message == GENERIC_FAILURE_MESSAGE

    @pytest.mark.asyncio
    async def test_malformed_payload_is_invalid_response(self, mock_client):
        mock_client.get_departures = AsyncMock(return_value=[{"id": "x", "status": "teleported"}])

        result = await SnapshotFetcher(mock_client).fetch(ResourceKind.DEPARTURES)

        assert result.error.kind == ErrorKind.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_unexpected_exception_never_escapes(self, mock_client):
        mock_client.get_room_availability = AsyncMock(side_effect=RuntimeError("boom"))

        result = await SnapshotFetcher(mock_client).fetch(ResourceKind.ROOM_AVAILABILITY)

        assert result.error.kind == ErrorKind.TRANSPORT


class TestFetchMany:
    @pytest.mark.asyncio
    async def test_front_desk_snapshot(self, mock_client):
        snapshot = await SnapshotFetcher(mock_client).fetch_many(FRONT_DESK_RESOURCES, generation=3)

        assert snapshot.generation == 3
        assert not snapshot.has_errors()
        assert set(snapshot.results) == set(FRONT_DESK_RESOURCES)
        assert snapshot.data(ResourceKind.ROOM_AVAILABILITY).total_rooms == 14

    @pytest.mark.asyncio
    async def test_one_failure_does_not_hide_the_others(self, mock_client):
        mock_client.get_room_status = AsyncMock(side_effect=ServerError("Failed", status_code=500))

        snapshot = await SnapshotFetcher(mock_client).fetch_many(HOUSEKEEPING_RESOURCES)

        assert snapshot.has_errors()
        assert not snapshot.is_complete_failure()
        assert list(snapshot.errors) == [ResourceKind.ROOM_STATUS]
        assert len(snapshot.data(ResourceKind.TASKS).tasks) == 5
        assert snapshot.data(ResourceKind.HOUSEKEEPING_STATS).total == 5
        mock_client.get_tasks.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_expiry_is_flagged(self, mock_client):
        mock_client.get_arrivals = AsyncMock(side_effect=SessionExpiredError("Invalid token", status_code=401))

        snapshot = await SnapshotFetcher(mock_client).fetch_many(FRONT_DESK_RESOURCES)

        assert snapshot.session_expired
        assert snapshot.error_for(ResourceKind.ARRIVALS).kind == ErrorKind.SESSION_EXPIRED

    @pytest.mark.asyncio
    async def test_duplicate_resources_fetched_once(self, mock_client):
        await SnapshotFetcher(mock_client).fetch_many([ResourceKind.TASKS, ResourceKind.TASKS])

        mock_client.get_tasks.assert_awaited_once()


class TestMergeLastGood:
    @pytest.mark.asyncio
    async def test_failed_resource_keeps_previous_data(self, mock_client):
        fetcher = SnapshotFetcher(mock_client)
        first = await fetcher.fetch_many(FRONT_DESK_RESOURCES, generation=1)

        mock_client.get_in_house = AsyncMock(side_effect=TransportError("down"))
        second = await fetcher.fetch_many(FRONT_DESK_RESOURCES, generation=2)
        merged = second.merge_last_good(first)

        in_house = merged.results[ResourceKind.IN_HOUSE]
        assert in_house.stale is True
        assert in_house.error.kind == ErrorKind.TRANSPORT
        assert [b.id for b in in_house.data] == ["bk-dep-1", "bk-inh-2"]
        assert merged.results[ResourceKind.ARRIVALS].stale is False
        assert merged.generation == 2

    @pytest.mark.asyncio
    async def test_merge_does_not_modify_inputs(self, mock_client):
        fetcher = SnapshotFetcher(mock_client)
        first = await fetcher.fetch_many([ResourceKind.TASKS], generation=1)
        mock_client.get_tasks = AsyncMock(side_effect=TransportError("down"))
        second = await fetcher.fetch_many([ResourceKind.TASKS], generation=2)

        second.merge_last_good(first)

        assert second.results[ResourceKind.TASKS].data is None
        assert second.results[ResourceKind.TASKS].stale is False

    @pytest.mark.asyncio
    async def test_without_previous_data_the_error_stands(self, mock_client):
        mock_client.get_tasks = AsyncMock(side_effect=TransportError("down"))
        snapshot = await SnapshotFetcher(mock_client).fetch_many([ResourceKind.TASKS])

        merged = snapshot.merge_last_good(None)

        assert merged.data(ResourceKind.TASKS) is None
        assert merged.is_complete_failure()
        assert merged.get_results()["errors"]["tasks"]["kind"] == "transport"
