"""Status enums for bookings, housekeeping tasks and rooms.

All of these mirror values the server reports. The client never derives a
next status from them; the only logic here is which single transition the
server will accept from a given task status.
"""

from enum import Enum
from typing import Optional


class BookingStatus(str, Enum):
    """Booking status as stored by the server."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class BookingLifecycle(str, Enum):
    """Display lifecycle of a booking.

    - ARRIVAL_PENDING: expected today or later, not yet checked in
    - IN_HOUSE: checked in, not checked out
    - DEPARTED: checked out
    - CLOSED: cancelled or no-show, never shown as actionable
    """

    ARRIVAL_PENDING = "arrival_pending"
    IN_HOUSE = "in_house"
    DEPARTED = "departed"
    CLOSED = "closed"


class TaskStatus(str, Enum):
    """Housekeeping task status, forward-only on the server."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    VERIFIED = "verified"


class TaskTransition(str, Enum):
    """Single-step commands accepted by the housekeeping task endpoints."""

    START = "start"
    COMPLETE = "complete"
    VERIFY = "verify"


class TaskPriority(str, Enum):
    """Task priority, used for display emphasis and sort order only."""

    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Higher rank sorts first."""
        return PRIORITY_RANK[self]


PRIORITY_RANK = {
    TaskPriority.URGENT: 4,
    TaskPriority.HIGH: 3,
    TaskPriority.NORMAL: 2,
    TaskPriority.LOW: 1,
}


class TaskType(str, Enum):
    """Known housekeeping task types."""

    CLEANING = "cleaning"
    CHECKOUT_CLEAN = "checkout_clean"
    MAINTENANCE = "maintenance"
    INSPECTION = "inspection"
    TURNDOWN = "turndown"
    DEEP_CLEAN = "deep_clean"


class RoomStatus(str, Enum):
    """Read-only room status projection."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"
    OUT_OF_ORDER = "out_of_order"


class CleaningStatus(str, Enum):
    """Room cleaning status maintained by the housekeeping endpoints."""

    CLEAN = "clean"
    DIRTY = "dirty"
    INSPECTING = "inspecting"


class Transition(str, Enum):
    """State-changing commands the dispatcher can send."""

    CHECK_IN = "checkIn"
    CHECK_OUT = "checkOut"
    START_TASK = "startTask"
    COMPLETE_TASK = "completeTask"
    VERIFY_TASK = "verifyTask"

    @property
    def task_transition(self) -> Optional[TaskTransition]:
        """Housekeeping command for this transition, None for booking transitions."""
        return TASK_TRANSITIONS.get(self)


TASK_TRANSITIONS = {
    Transition.START_TASK: TaskTransition.START,
    Transition.COMPLETE_TASK: TaskTransition.COMPLETE,
    Transition.VERIFY_TASK: TaskTransition.VERIFY,
}


def offered_transition(status: TaskStatus) -> Optional[TaskTransition]:
    """Return the only transition the server accepts from ``status``.

    Args:
        status: Current task status

    Returns:
        The offered transition, or None once the task is verified

    Raises:
        ValueError: If ``status`` has no row in the table
    """
    match status:
        case TaskStatus.PENDING:
            return TaskTransition.START
        case TaskStatus.IN_PROGRESS:
            return TaskTransition.COMPLETE
        case TaskStatus.COMPLETED:
            return TaskTransition.VERIFY
        case TaskStatus.VERIFIED:
            return None
    raise ValueError(f"Unhandled task status: {status!r}")


def task_transition_for(transition: TaskTransition) -> Transition:
    """Map a task command back to its dispatcher transition."""
    match transition:
        case TaskTransition.START:
            return Transition.START_TASK
        case TaskTransition.COMPLETE:
            return Transition.COMPLETE_TASK
        case TaskTransition.VERIFY:
            return Transition.VERIFY_TASK
    raise ValueError(f"Unhandled task transition: {transition!r}")
