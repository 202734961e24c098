"""Front desk screen: arrivals, departures and in-house guests."""

from typing import Any, Optional

from hospitality_sync.clients import HospitalityAPIClient
from hospitality_sync.config import settings
from hospitality_sync.models import Booking, SessionUser
from hospitality_sync.projectors import FrontDeskProjector, FrontDeskTab, FrontDeskView
from hospitality_sync.screens.base_screen import BaseScreen
from hospitality_sync.services import (
    FRONT_DESK_RESOURCES,
    CheckInWorkflow,
    CheckOutWorkflow,
    ResourceKind,
    Snapshot,
    SnapshotFilters,
    WalkInWorkflow,
)

BOOKING_RESOURCES = (ResourceKind.ARRIVALS, ResourceKind.DEPARTURES, ResourceKind.IN_HOUSE)


class FrontDeskScreen(BaseScreen):
    """Front desk state with check-in, check-out and walk-in workflows.

    Switching tabs only re-projects; every successful workflow forces a fresh load.
    """

    def __init__(
        self,
        client: Optional[HospitalityAPIClient] = None,
        user: Optional[SessionUser] = None,
        filters: Optional[SnapshotFilters] = None,
        interval: Optional[float] = None,
        tab: FrontDeskTab = FrontDeskTab.ARRIVALS,
    ):
        super().__init__(
            interval or settings.refresh.front_desk_interval,
            client=client,
            user=user,
            filters=filters,
            name="front-desk",
        )
        self.tab = FrontDeskTab(tab)
        self.check_in = CheckInWorkflow(self.dispatcher, on_success=self.refresh_after_transition)
        self.check_out = CheckOutWorkflow(
            self.dispatcher,
            self.client,
            on_success=self.refresh_after_transition,
        )
        self.walk_in = WalkInWorkflow(self.client, on_success=self.refresh_after_transition)

    @property
    def resources(self):
        return FRONT_DESK_RESOURCES

    def project(self) -> FrontDeskView:
        return FrontDeskProjector.project(
            self.snapshot or Snapshot(),
            self.tab,
            in_flight=self.dispatcher.in_flight_ids("booking"),
        )

    def select_tab(self, tab: FrontDeskTab | str) -> FrontDeskView:
        self.tab = FrontDeskTab(tab)
        return self.reproject()

    def find_booking(self, booking_id: str) -> Optional[Booking]:
        """Look a booking up in the current snapshot."""
        if self.snapshot is None:
            return None
        for resource in BOOKING_RESOURCES:
            for booking in self.snapshot.data(resource, []):
                if booking.id == str(booking_id):
                    return booking
        return None

    async def get_booking(self, booking_id: str) -> Booking:
        """Booking from the snapshot, or from the server when the snapshot lacks it."""
        booking = self.find_booking(booking_id)
        if booking is None:
            booking = Booking.model_validate(await self.client.get_booking(str(booking_id)))
        return booking

    async def open_check_in(
        self,
        booking_id: str,
        room_assignments: Optional[list[dict[str, Any]]] = None,
    ) -> CheckInWorkflow:
        await self.check_in.open(await self.get_booking(booking_id), room_assignments=room_assignments)
        return self.check_in

    async def open_check_out(self, booking_id: str) -> CheckOutWorkflow:
        await self.check_out.open(await self.get_booking(booking_id))
        return self.check_out

    async def open_walk_in(self, guest: Optional[dict[str, Any]] = None) -> WalkInWorkflow:
        await self.walk_in.open(guest)
        return self.walk_in
