"""Projects front desk snapshots into view models."""

from typing import AbstractSet, Optional

from hospitality_sync.models import Booking, BookingLifecycle, RoomAvailabilitySummary
from hospitality_sync.projectors.view_models import (
    AvailabilityRow,
    BookingAction,
    BookingCard,
    FrontDeskTab,
    FrontDeskView,
    SectionError,
)
from hospitality_sync.services.snapshot import ResourceKind, Snapshot

TAB_RESOURCES = {
    FrontDeskTab.ARRIVALS: ResourceKind.ARRIVALS,
    FrontDeskTab.DEPARTURES: ResourceKind.DEPARTURES,
    FrontDeskTab.IN_HOUSE: ResourceKind.IN_HOUSE,
}

# Lifecycle a booking must be in to appear on the tab, and the action offered there
TAB_RULES = {
    FrontDeskTab.ARRIVALS: (BookingLifecycle.ARRIVAL_PENDING, BookingAction.CHECK_IN),
    FrontDeskTab.DEPARTURES: (BookingLifecycle.IN_HOUSE, BookingAction.CHECK_OUT),
    FrontDeskTab.IN_HOUSE: (BookingLifecycle.IN_HOUSE, BookingAction.CHECK_OUT),
}

EMPTY_MESSAGES = {
    FrontDeskTab.ARRIVALS: "No arrivals scheduled for today",
    FrontDeskTab.DEPARTURES: "No departures scheduled for today",
    FrontDeskTab.IN_HOUSE: "No guests currently in house",
}


class FrontDeskProjector:
    """Pure projection of a front desk snapshot for one tab."""

    @staticmethod
    def to_card(
        booking: Booking,
        action: Optional[BookingAction] = None,
        in_flight: AbstractSet[str] = frozenset(),
    ) -> BookingCard:
        """Convert a booking into a card, defaulting any missing nested data.

        Args:
            booking: Booking from a snapshot
            action: Action the current tab offers
            in_flight: Booking ids with a transition outstanding

        Returns:
            BookingCard; the action is disabled while a transition is in flight
        """
        primary = booking.primary_room
        room_type = None
        if primary is not None and primary.room is not None and primary.room.room_type is not None:
            room_type = primary.room.room_type.name or None

        return BookingCard(
            booking_id=booking.id,
            booking_number=booking.booking_number,
            guest_name=booking.guest.full_name if booking.guest else "",
            is_vip=booking.guest.is_vip if booking.guest else False,
            room_numbers=tuple(booking.room_numbers),
            room_type=room_type,
            check_in_date=booking.check_in_date,
            check_out_date=booking.check_out_date,
            expected_arrival=booking.expected_arrival,
            nights=booking.nights,
            adults=booking.adults_count,
            children=booking.children_count,
            special_requests=booking.special_requests,
            balance=booking.folio.balance if booking.folio else 0.0,
            lifecycle=booking.lifecycle,
            action=action,
            action_enabled=action is not None and booking.id not in in_flight,
        )

    @staticmethod
    def cards_for(
        snapshot: Snapshot,
        tab: FrontDeskTab,
        in_flight: AbstractSet[str] = frozenset(),
    ) -> tuple[BookingCard, ...]:
        """Cards for ``tab``; bookings in another lifecycle state are left out."""
        lifecycle, action = TAB_RULES[tab]
        bookings: list[Booking] = snapshot.data(TAB_RESOURCES[tab], [])
        return tuple(
            FrontDeskProjector.to_card(b, action, in_flight)
            for b in bookings
            if b.lifecycle == lifecycle
        )

    @staticmethod
    def availability_rows(summary: Optional[RoomAvailabilitySummary]) -> tuple[AvailabilityRow, ...]:
        if summary is None:
            return ()
        return tuple(
            AvailabilityRow(
                room_type=row.room_type.name,
                total=row.total,
                available=row.available,
                occupied=row.occupied,
                reserved=row.reserved,
                maintenance=row.maintenance,
                cleaning=row.cleaning,
            )
            for row in summary.summary
        )

    @staticmethod
    def project(
        snapshot: Snapshot,
        tab: FrontDeskTab = FrontDeskTab.ARRIVALS,
        in_flight: AbstractSet[str] = frozenset(),
    ) -> FrontDeskView:
        """Build the front desk view for ``tab``.

        Args:
            snapshot: Front desk snapshot (bookings per tab and availability)
            tab: Selected tab
            in_flight: Booking ids with a transition outstanding

        Returns:
            FrontDeskView with counts for every tab and per-section errors
        """
        cards = FrontDeskProjector.cards_for(snapshot, tab, in_flight)
        counts = {
            other: len(FrontDeskProjector.cards_for(snapshot, other))
            for other in FrontDeskTab
        }

        availability: Optional[RoomAvailabilitySummary] = snapshot.data(ResourceKind.ROOM_AVAILABILITY)

        errors = tuple(
            SectionError(resource=kind.value, error=result.error, stale=result.stale)
            for kind, result in sorted(snapshot.results.items(), key=lambda item: item[0].value)
            if result.error is not None
        )

        tab_error = snapshot.error_for(TAB_RESOURCES[tab])
        empty_message = EMPTY_MESSAGES[tab] if not cards and tab_error is None else None

        return FrontDeskView(
            tab=tab,
            cards=cards,
            counts=counts,
            availability=FrontDeskProjector.availability_rows(availability),
            total_rooms=availability.total_rooms if availability else 0,
            available_rooms=availability.available_rooms if availability else 0,
            errors=errors,
            empty_message=empty_message,
            generation=snapshot.generation,
        )
