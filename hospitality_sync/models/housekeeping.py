"""Pydantic models for housekeeping task, pending-task and stats responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from hospitality_sync.models.common import EntityId, Floor, Pagination, RoomNumber
from hospitality_sync.models.status import (
    PRIORITY_RANK,
    CleaningStatus,
    TaskPriority,
    TaskStatus,
    TaskTransition,
    TaskType,
    offered_transition,
)


class TaskRoom(BaseModel):
    """Room fields included with a task."""

    room_number: RoomNumber = Field(alias="roomNumber")
    floor: Floor = None
    cleaning_status: Optional[CleaningStatus] = Field(None, alias="cleaningStatus")
    room_type: Optional[str] = Field(None, alias="roomType")

    class Config:
        extra = "allow"
        populate_by_name = True

    @field_validator("room_type", mode="before")
    @classmethod
    def flatten_room_type(cls, v):
        """Task endpoints nest the type as ``{"name": ...}``."""
        if isinstance(v, dict):
            return v.get("name")
        return v


class HousekeepingTask(BaseModel):
    """One unit of cleaning, maintenance or inspection work."""

    id: EntityId
    room_id: Optional[EntityId] = Field(None, alias="roomId")
    room: Optional[TaskRoom] = None
    type: str = Field(default=TaskType.CLEANING.value, alias="taskType")
    priority: str = TaskPriority.NORMAL.value
    status: TaskStatus
    assigned_to: Optional[EntityId] = Field(None, alias="assignedTo")
    assignee_name: Optional[str] = Field(None, alias="assigneeName")
    notes: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    started_at: Optional[datetime] = Field(None, alias="startedAt")
    completed_at: Optional[datetime] = Field(None, alias="completedAt")
    verified_at: Optional[datetime] = Field(None, alias="verifiedAt")

    class Config:
        extra = "allow"
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def split_assignee(cls, data: Any) -> Any:
        """``assignedTo`` is an id on most endpoints and a ``{id, name}`` object on some."""
        if isinstance(data, dict) and isinstance(data.get("assignedTo"), dict):
            assignee = data["assignedTo"]
            data = {
                **data,
                "assignedTo": assignee.get("id"),
                "assigneeName": assignee.get("name"),
            }
        return data

    @property
    def task_type(self) -> Optional[TaskType]:
        try:
            return TaskType(self.type)
        except ValueError:
            return None

    @property
    def priority_rank(self) -> int:
        """Sort rank; unknown priorities rank below ``low``."""
        try:
            return PRIORITY_RANK[TaskPriority(self.priority)]
        except ValueError:
            return 0

    @property
    def offered_transition(self) -> Optional[TaskTransition]:
        return offered_transition(self.status)

    @property
    def room_number(self) -> str:
        return self.room.room_number if self.room else ""

    @property
    def floor(self) -> Optional[str]:
        return self.room.floor if self.room else None


class TaskPage(BaseModel):
    """Paginated task list from ``GET /housekeeping/tasks``."""

    tasks: list[HousekeepingTask] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)

    class Config:
        extra = "allow"
        populate_by_name = True


class PendingSummary(BaseModel):
    """Summary counts from ``GET /housekeeping/pending``."""

    total: int = 0
    urgent: int = 0
    high: int = 0
    in_progress: int = Field(default=0, alias="inProgress")

    class Config:
        extra = "allow"
        populate_by_name = True


class PendingTasks(BaseModel):
    """Open (pending or in-progress) tasks, sorted by the server by priority."""

    tasks: list[HousekeepingTask] = Field(default_factory=list)
    summary: PendingSummary = Field(default_factory=PendingSummary)

    class Config:
        extra = "allow"
        populate_by_name = True


class HousekeepingStats(BaseModel):
    """Aggregate task statistics."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = Field(default=0, alias="inProgress")
    completion_rate: int = Field(default=0, alias="completionRate")
    avg_completion_minutes: int = Field(default=0, alias="avgCompletionMinutes")
    by_type: dict[str, int] = Field(default_factory=dict, alias="byType")

    class Config:
        extra = "allow"
        populate_by_name = True
