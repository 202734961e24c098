"""Snapshot, transition and refresh services."""

from hospitality_sync.services.refresh_scheduler import RefreshScheduler
from hospitality_sync.services.snapshot import (
    ErrorInfo,
    ErrorKind,
    FetchResult,
    ResourceKind,
    Snapshot,
)
from hospitality_sync.services.snapshot_fetcher import (
    FRONT_DESK_RESOURCES,
    HOUSEKEEPING_RESOURCES,
    SnapshotFetcher,
    SnapshotFilters,
)
from hospitality_sync.services.transition_dispatcher import TransitionDispatcher, TransitionResult
from hospitality_sync.services.workflows import (
    ActionOutcome,
    ActionWorkflow,
    CheckInWorkflow,
    CheckOutWorkflow,
    GuestDraft,
    TaskTransitionWorkflow,
    WalkInWorkflow,
    WorkflowState,
)

__all__ = [
    "RefreshScheduler",
    "ErrorInfo",
    "ErrorKind",
    "FetchResult",
    "ResourceKind",
    "Snapshot",
    "FRONT_DESK_RESOURCES",
    "HOUSEKEEPING_RESOURCES",
    "SnapshotFetcher",
    "SnapshotFilters",
    "TransitionDispatcher",
    "TransitionResult",
    "ActionOutcome",
    "ActionWorkflow",
    "CheckInWorkflow",
    "CheckOutWorkflow",
    "GuestDraft",
    "TaskTransitionWorkflow",
    "WalkInWorkflow",
    "WorkflowState",
]
