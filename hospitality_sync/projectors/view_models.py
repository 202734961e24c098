"""Immutable view models produced by the projectors."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from hospitality_sync.models import (
    BookingLifecycle,
    CleaningStatus,
    RoomStatus,
    TaskStatus,
    TaskTransition,
)
from hospitality_sync.services.snapshot import ErrorInfo

ALL_FLOORS = "all"


class FrontDeskTab(str, Enum):
    ARRIVALS = "arrivals"
    DEPARTURES = "departures"
    IN_HOUSE = "in_house"


class BookingAction(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class TaskScope(str, Enum):
    """``my_tasks`` shows the signed-in user's open tasks; ``all_tasks`` shows everything."""

    MY_TASKS = "my_tasks"
    ALL_TASKS = "all_tasks"


class SectionError(BaseModel):
    """Error slot for one section of a view.

    ``stale`` is set when the section still shows data from an earlier load.
    """

    resource: str
    error: ErrorInfo
    stale: bool = False

    class Config:
        frozen = True


class BookingCard(BaseModel):
    booking_id: str
    booking_number: Optional[str] = None
    guest_name: str = ""
    is_vip: bool = False
    room_numbers: tuple[str, ...] = ()
    room_type: Optional[str] = None
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    expected_arrival: Optional[str] = None
    nights: int = 0
    adults: int = 1
    children: int = 0
    special_requests: Optional[str] = None
    balance: float = 0.0
    lifecycle: BookingLifecycle
    action: Optional[BookingAction] = None
    action_enabled: bool = False

    class Config:
        frozen = True


class AvailabilityRow(BaseModel):
    room_type: str
    total: int = 0
    available: int = 0
    occupied: int = 0
    reserved: int = 0
    maintenance: int = 0
    cleaning: int = 0

    class Config:
        frozen = True


class FrontDeskView(BaseModel):
    """Everything the front desk screen renders for one tab."""

    tab: FrontDeskTab
    cards: tuple[BookingCard, ...] = ()
    counts: dict[FrontDeskTab, int] = Field(default_factory=dict)
    availability: tuple[AvailabilityRow, ...] = ()
    total_rooms: int = 0
    available_rooms: int = 0
    errors: tuple[SectionError, ...] = ()
    empty_message: Optional[str] = None
    generation: int = 0

    class Config:
        frozen = True


class TaskCard(BaseModel):
    task_id: str
    room_number: str = ""
    floor: Optional[str] = None
    room_type: Optional[str] = None
    task_type: str
    priority: str
    priority_rank: int = 0
    status: TaskStatus
    action: Optional[TaskTransition] = None
    action_enabled: bool = False
    assigned_to: Optional[str] = None
    assignee_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        frozen = True


class TaskGroup(BaseModel):
    status: TaskStatus
    tasks: tuple[TaskCard, ...] = ()

    class Config:
        frozen = True


class RoomTile(BaseModel):
    room_id: str
    room_number: str
    floor: Optional[str] = None
    room_type: Optional[str] = None
    status: RoomStatus
    cleaning_status: Optional[CleaningStatus] = None
    has_pending_task: bool = False
    is_occupied: bool = False
    current_guest: Optional[str] = None
    checkout_date: Optional[datetime] = None
    is_vip: bool = False

    class Config:
        frozen = True


class StatsPanel(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    completion_rate: int = 0
    avg_completion_minutes: int = 0

    class Config:
        frozen = True


class HousekeepingView(BaseModel):
    """Everything the housekeeping screen renders for one scope and floor."""

    scope: TaskScope
    floor: str = ALL_FLOORS
    tasks: tuple[TaskCard, ...] = ()
    groups: tuple[TaskGroup, ...] = ()
    rooms: tuple[RoomTile, ...] = ()
    floors: tuple[str, ...] = ()
    stats: Optional[StatsPanel] = None
    errors: tuple[SectionError, ...] = ()
    empty_message: Optional[str] = None
    generation: int = 0

    class Config:
        frozen = True
