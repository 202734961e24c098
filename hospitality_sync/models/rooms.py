"""Pydantic models for room availability and the room status board."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from hospitality_sync.models.booking import RoomType
from hospitality_sync.models.common import EntityId, Floor, RoomNumber
from hospitality_sync.models.status import CleaningStatus, RoomStatus


class RoomTypeAvailability(BaseModel):
    """Availability counts for one room type."""

    room_type: RoomType = Field(alias="roomType")
    total: int = 0
    available: int = 0
    occupied: int = 0
    reserved: int = 0
    maintenance: int = 0
    cleaning: int = 0

    class Config:
        extra = "allow"
        populate_by_name = True


class RoomAvailabilitySummary(BaseModel):
    """Per room-type availability, recomputed by the server on every read."""

    summary: list[RoomTypeAvailability] = Field(default_factory=list)
    total_rooms: int = Field(default=0, alias="totalRooms")
    available_rooms: int = Field(default=0, alias="availableRooms")

    class Config:
        extra = "allow"
        populate_by_name = True


class RoomStatusEntry(BaseModel):
    """One room on the housekeeping status board."""

    id: EntityId
    room_number: RoomNumber = Field(alias="roomNumber")
    floor: Floor = None
    room_type: Optional[str] = Field(None, alias="roomType")
    status: RoomStatus
    cleaning_status: Optional[CleaningStatus] = Field(None, alias="cleaningStatus")
    has_pending_task: bool = Field(default=False, alias="hasPendingTask")
    current_task: Optional[dict[str, Any]] = Field(None, alias="currentTask")
    is_occupied: bool = Field(default=False, alias="isOccupied")
    current_guest: Optional[str] = Field(None, alias="currentGuest")
    checkout_date: Optional[datetime] = Field(None, alias="checkoutDate")
    is_vip: bool = Field(default=False, alias="isVIP")

    class Config:
        extra = "allow"
        populate_by_name = True


class RoomStatusSummary(BaseModel):
    """Counts shown above the status board."""

    total: int = 0
    clean: int = 0
    dirty: int = 0
    inspecting: int = 0
    occupied: int = 0
    available: int = 0
    maintenance: int = 0

    class Config:
        extra = "allow"
        populate_by_name = True


class RoomStatusBoard(BaseModel):
    """Room status board response."""

    rooms: list[RoomStatusEntry] = Field(default_factory=list)
    summary: RoomStatusSummary = Field(default_factory=RoomStatusSummary)

    class Config:
        extra = "allow"
        populate_by_name = True
