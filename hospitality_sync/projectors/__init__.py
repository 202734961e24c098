"""Snapshot-to-view-model projection package."""

from hospitality_sync.projectors.front_desk_projector import FrontDeskProjector
from hospitality_sync.projectors.housekeeping_projector import HousekeepingProjector
from hospitality_sync.projectors.view_models import (
    ALL_FLOORS,
    AvailabilityRow,
    BookingAction,
    BookingCard,
    FrontDeskTab,
    FrontDeskView,
    HousekeepingView,
    RoomTile,
    SectionError,
    StatsPanel,
    TaskCard,
    TaskGroup,
    TaskScope,
)

__all__ = [
    "FrontDeskProjector",
    "HousekeepingProjector",
    "ALL_FLOORS",
    "AvailabilityRow",
    "BookingAction",
    "BookingCard",
    "FrontDeskTab",
    "FrontDeskView",
    "HousekeepingView",
    "RoomTile",
    "SectionError",
    "StatsPanel",
    "TaskCard",
    "TaskGroup",
    "TaskScope",
]
