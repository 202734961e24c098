"""Hospitality API response models."""

from hospitality_sync.models.booking import (
    Booking,
    BookingRoom,
    FolioSummary,
    Guest,
    Room,
    RoomType,
    parse_bookings,
)
from hospitality_sync.models.common import EntityId, ErrorBody, Pagination
from hospitality_sync.models.folio import CheckOutPayment, Folio, FolioCharge, FolioPayment
from hospitality_sync.models.housekeeping import (
    HousekeepingStats,
    HousekeepingTask,
    PendingSummary,
    PendingTasks,
    TaskPage,
    TaskRoom,
)
from hospitality_sync.models.rooms import (
    RoomAvailabilitySummary,
    RoomStatusBoard,
    RoomStatusEntry,
    RoomStatusSummary,
    RoomTypeAvailability,
)
from hospitality_sync.models.session import SessionUser
from hospitality_sync.models.status import (
    BookingLifecycle,
    BookingStatus,
    CleaningStatus,
    RoomStatus,
    TaskPriority,
    TaskStatus,
    TaskTransition,
    TaskType,
    Transition,
    offered_transition,
)

__all__ = [
    "Booking",
    "BookingRoom",
    "FolioSummary",
    "Guest",
    "Room",
    "RoomType",
    "parse_bookings",
    "EntityId",
    "ErrorBody",
    "Pagination",
    "CheckOutPayment",
    "Folio",
    "FolioCharge",
    "FolioPayment",
    "HousekeepingStats",
    "HousekeepingTask",
    "PendingSummary",
    "PendingTasks",
    "TaskPage",
    "TaskRoom",
    "RoomAvailabilitySummary",
    "RoomStatusBoard",
    "RoomStatusEntry",
    "RoomStatusSummary",
    "RoomTypeAvailability",
    "SessionUser",
    "BookingLifecycle",
    "BookingStatus",
    "CleaningStatus",
    "RoomStatus",
    "TaskPriority",
    "TaskStatus",
    "TaskTransition",
    "TaskType",
    "Transition",
    "offered_transition",
]
