"""Reads current-state collections from the API with per-resource failure isolation."""

import asyncio
from datetime import date, datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Optional

from pydantic import BaseModel
from structlog import get_logger

from hospitality_sync.clients import HospitalityAPIClient
from hospitality_sync.models import (
    HousekeepingStats,
    PendingTasks,
    RoomAvailabilitySummary,
    RoomStatusBoard,
    TaskPage,
    TaskStatus,
    parse_bookings,
)
from hospitality_sync.services.snapshot import ErrorInfo, FetchResult, ResourceKind, Snapshot

logger = get_logger(__name__)

FRONT_DESK_RESOURCES = (
    ResourceKind.ARRIVALS,
    ResourceKind.DEPARTURES,
    ResourceKind.IN_HOUSE,
    ResourceKind.ROOM_AVAILABILITY,
)

HOUSEKEEPING_RESOURCES = (
    ResourceKind.TASKS,
    ResourceKind.ROOM_STATUS,
    ResourceKind.HOUSEKEEPING_STATS,
)


class SnapshotFilters(BaseModel):
    """Query filters; each resource class uses the subset its endpoint accepts."""

    branch_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    assigned_to: Optional[str] = None
    statuses: Optional[tuple[TaskStatus, ...]] = None
    task_type: Optional[str] = None
    priority: Optional[str] = None
    floor: Optional[str] = None
    page: Optional[int] = None
    limit: Optional[int] = None

    class Config:
        frozen = True

    def to_params(self, resource: ResourceKind) -> dict[str, Any]:
        """Build query parameters for ``resource``, omitting unset filters."""
        params: dict[str, Any] = {}
        if self.branch_id:
            params["branchId"] = self.branch_id

        if resource == ResourceKind.ROOM_AVAILABILITY:
            if self.start_date:
                params["checkIn"] = self.start_date.isoformat()
            if self.end_date:
                params["checkOut"] = self.end_date.isoformat()
        elif resource == ResourceKind.TASKS:
            if self.statuses:
                params["status"] = ",".join(s.value for s in self.statuses)
            if self.assigned_to:
                params["assignedTo"] = self.assigned_to
            if self.task_type:
                params["taskType"] = self.task_type
            if self.priority:
                params["priority"] = self.priority
            if self.start_date:
                params["date"] = self.start_date.isoformat()
            if self.page:
                params["page"] = self.page
            if self.limit:
                params["limit"] = self.limit
        elif resource == ResourceKind.PENDING_TASKS:
            if self.assigned_to:
                params["assignedTo"] = self.assigned_to
        elif resource == ResourceKind.ROOM_STATUS:
            if self.floor:
                params["floor"] = self.floor
        elif resource == ResourceKind.HOUSEKEEPING_STATS:
            if self.start_date:
                params["startDate"] = self.start_date.isoformat()
            if self.end_date:
                params["endDate"] = self.end_date.isoformat()
        return params


def _parse_model(model: type[BaseModel]) -> Callable[[Any], BaseModel]:
    def parse(payload: Any) -> BaseModel:
        return model.model_validate(payload or {})

    return parse


# Client method name and parser per resource class
RESOURCE_READERS: dict[ResourceKind, tuple[str, Callable[[Any], Any]]] = {
    ResourceKind.ARRIVALS: ("get_arrivals", parse_bookings),
    ResourceKind.DEPARTURES: ("get_departures", parse_bookings),
    ResourceKind.IN_HOUSE: ("get_in_house", parse_bookings),
    ResourceKind.ROOM_AVAILABILITY: ("get_room_availability", _parse_model(RoomAvailabilitySummary)),
    ResourceKind.TASKS: ("get_tasks", _parse_model(TaskPage)),
    ResourceKind.PENDING_TASKS: ("get_pending_tasks", _parse_model(PendingTasks)),
    ResourceKind.ROOM_STATUS: ("get_room_status", _parse_model(RoomStatusBoard)),
    ResourceKind.HOUSEKEEPING_STATS: ("get_housekeeping_stats", _parse_model(HousekeepingStats)),
}


class SnapshotFetcher:
    """Fetches resource classes on demand.

    Failures never escape: each call returns a ``FetchResult`` carrying
    either parsed data or a classified error.
    """

    def __init__(self, client: HospitalityAPIClient):
        """Initialize the fetcher.

        Args:
            client: Hospitality API client
        """
        self.client = client

    async def fetch(
        self,
        resource: ResourceKind,
        filters: Optional[SnapshotFilters] = None,
    ) -> FetchResult:
        """Fetch one resource class.

        Args:
            resource: Resource class to read
            filters: Optional filters

        Returns:
            FetchResult with parsed data, or with an error if the read or parse failed
        """
        method, parse = RESOURCE_READERS[resource]
        read: Callable[..., Awaitable[Any]] = getattr(self.client, method)
        params = (filters or SnapshotFilters()).to_params(resource)

        try:
            payload = await read(params or None)
            data = parse(payload)
        except Exception as e:
            error = ErrorInfo.from_exception(e)
            logger.warning(
                "Snapshot fetch failed",
                resource=resource.value,
                error_kind=error.kind.value,
                error=str(e),
            )
            return FetchResult(resource=resource, error=error, fetched_at=datetime.now(timezone.utc))

        logger.debug(
            "Snapshot fetch succeeded",
            resource=resource.value,
            count=len(data) if isinstance(data, list) else None,
        )
        return FetchResult(resource=resource, data=data, fetched_at=datetime.now(timezone.utc))

    async def fetch_many(
        self,
        resources: Iterable[ResourceKind],
        filters: Optional[SnapshotFilters] = None,
        generation: int = 0,
    ) -> Snapshot:
        """Fetch several resource classes concurrently.

        A failure in one resource never cancels or hides the others.

        Args:
            resources: Resource classes to read
            filters: Filters applied to every resource (each uses its own subset)
            generation: Refresh generation to tag the snapshot with

        Returns:
            Snapshot holding one FetchResult per requested resource
        """
        resources = list(dict.fromkeys(resources))
        results = await asyncio.gather(*(self.fetch(r, filters) for r in resources))

        snapshot = Snapshot(generation)
        for result in results:
            snapshot.add_result(result)

        if snapshot.has_errors():
            logger.warning(
                "Snapshot loaded with errors",
                generation=generation,
                failed=[kind.value for kind in snapshot.errors],
                resource_count=len(resources),
            )
        else:
            logger.info("Snapshot loaded", generation=generation, resource_count=len(resources))
        return snapshot
