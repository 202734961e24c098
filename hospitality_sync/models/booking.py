"""Pydantic models for booking responses (arrivals, departures, in-house)."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from hospitality_sync.models.common import EntityId, Floor, RoomNumber
from hospitality_sync.models.status import BookingLifecycle, BookingStatus


class Guest(BaseModel):
    """Guest attached to a booking."""

    id: EntityId
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    phone: Optional[str] = None
    email: Optional[str] = None
    vip_status: Optional[str] = Field("regular", alias="vipStatus")

    class Config:
        extra = "allow"
        populate_by_name = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_vip(self) -> bool:
        return bool(self.vip_status) and self.vip_status != "regular"


class RoomType(BaseModel):
    """Room type reference."""

    id: Optional[EntityId] = None
    name: str = ""
    code: Optional[str] = None
    base_price: Optional[float] = Field(None, alias="basePrice")

    class Config:
        extra = "allow"
        populate_by_name = True


class Room(BaseModel):
    """Physical room reference."""

    id: Optional[EntityId] = None
    room_number: RoomNumber = Field(alias="roomNumber")
    floor: Floor = None
    room_type: Optional[RoomType] = Field(None, alias="roomType")

    class Config:
        extra = "allow"
        populate_by_name = True


class BookingRoom(BaseModel):
    """Room assignment on a booking. The first assignment is the primary room."""

    id: Optional[EntityId] = None
    room_id: Optional[EntityId] = Field(None, alias="roomId")
    room: Optional[Room] = None
    rate_per_night: Optional[float] = Field(None, alias="ratePerNight")
    status: Optional[str] = None

    class Config:
        extra = "allow"
        populate_by_name = True


class FolioSummary(BaseModel):
    """Folio totals embedded in departures and in-house bookings."""

    total_amount: float = Field(default=0.0, alias="totalAmount")
    paid_amount: float = Field(default=0.0, alias="paidAmount")
    balance: float = 0.0

    class Config:
        extra = "allow"
        populate_by_name = True


class Booking(BaseModel):
    """Booking as returned by the bookings endpoints."""

    id: EntityId
    booking_number: Optional[str] = Field(None, alias="bookingNumber")
    status: BookingStatus
    guest_id: Optional[EntityId] = Field(None, alias="guestId")
    guest: Optional[Guest] = None
    rooms: list[BookingRoom] = Field(default_factory=list)
    check_in_date: Optional[datetime] = Field(None, alias="checkInDate")
    check_out_date: Optional[datetime] = Field(None, alias="checkOutDate")
    expected_arrival: Optional[str] = Field(None, alias="expectedArrival")
    adults_count: int = Field(default=1, alias="adultsCount")
    children_count: int = Field(default=0, alias="childrenCount")
    special_requests: Optional[str] = Field(None, alias="specialRequests")
    checked_in_at: Optional[datetime] = Field(None, alias="checkedInAt")
    checked_out_at: Optional[datetime] = Field(None, alias="checkedOutAt")
    folio: Optional[FolioSummary] = None

    class Config:
        extra = "allow"
        populate_by_name = True

    @property
    def lifecycle(self) -> BookingLifecycle:
        """Lifecycle state from the server's timestamps, then its status field."""
        if self.checked_out_at is not None or self.status == BookingStatus.CHECKED_OUT:
            return BookingLifecycle.DEPARTED
        if self.status in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW):
            return BookingLifecycle.CLOSED
        if self.checked_in_at is not None or self.status == BookingStatus.CHECKED_IN:
            return BookingLifecycle.IN_HOUSE
        return BookingLifecycle.ARRIVAL_PENDING

    @property
    def primary_room(self) -> Optional[BookingRoom]:
        return self.rooms[0] if self.rooms else None

    @property
    def room_numbers(self) -> list[str]:
        return [br.room.room_number for br in self.rooms if br.room is not None]

    @property
    def nights(self) -> int:
        """Number of nights between check-in and check-out dates, rounded up."""
        if self.check_in_date is None or self.check_out_date is None:
            return 0
        seconds = (self.check_out_date - self.check_in_date).total_seconds()
        days, remainder = divmod(seconds, 86400)
        return max(0, int(days) + (1 if remainder > 0 else 0))


def parse_bookings(payload: Any) -> list[Booking]:
    """Parse a bookings collection; the server returns a bare JSON array."""
    if not payload:
        return []
    return [Booking.model_validate(item) for item in payload]
