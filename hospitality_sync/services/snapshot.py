"""Snapshot container and error classification shared by all services."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from hospitality_sync.clients import (
    HospitalityAPIError,
    PermissionDeniedError,
    ResourceNotFoundError,
    ServerError,
    SessionExpiredError,
    TransitionRejectedError,
    TransportError,
)

GENERIC_FAILURE_MESSAGE = "Unable to reach the server. Please try again."
SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."


class ResourceKind(str, Enum):
    """Resource classes the snapshot fetcher knows how to read."""

    ARRIVALS = "arrivals"
    DEPARTURES = "departures"
    IN_HOUSE = "in_house"
    ROOM_AVAILABILITY = "room_availability"
    TASKS = "tasks"
    PENDING_TASKS = "pending_tasks"
    ROOM_STATUS = "room_status"
    HOUSEKEEPING_STATS = "housekeeping_stats"


class ErrorKind(str, Enum):
    """Error taxonomy surfaced to views and workflows."""

    TRANSPORT = "transport"
    REJECTED = "rejected"
    SESSION_EXPIRED = "session_expired"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER = "server"
    INVALID_RESPONSE = "invalid_response"
    DUPLICATE_SUBMISSION = "duplicate_submission"
    INVALID_TRANSITION = "invalid_transition"
    VALIDATION = "validation"


class ErrorInfo(BaseModel):
    """A classified, display-ready error."""

    kind: ErrorKind
    message: str
    status_code: Optional[int] = None

    class Config:
        frozen = True

    @property
    def is_session_expired(self) -> bool:
        return self.kind == ErrorKind.SESSION_EXPIRED

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        """Classify an exception raised by the API client or by response parsing.

        Server-provided messages are kept verbatim for rejections; transport
        and unexpected failures get a generic notice.
        """
        status_code = getattr(exc, "status_code", None)
        if isinstance(exc, SessionExpiredError):
            return cls(kind=ErrorKind.SESSION_EXPIRED, message=SESSION_EXPIRED_MESSAGE, status_code=status_code)
        if isinstance(exc, PermissionDeniedError):
            return cls(kind=ErrorKind.FORBIDDEN, message=exc.message, status_code=status_code)
        if isinstance(exc, ResourceNotFoundError):
            return cls(kind=ErrorKind.NOT_FOUND, message=exc.message, status_code=status_code)
        if isinstance(exc, TransitionRejectedError):
            return cls(kind=ErrorKind.REJECTED, message=exc.message, status_code=status_code)
        if isinstance(exc, ServerError):
            return cls(kind=ErrorKind.SERVER, message=exc.message, status_code=status_code)
        if isinstance(exc, TransportError):
            return cls(kind=ErrorKind.TRANSPORT, message=GENERIC_FAILURE_MESSAGE)
        if isinstance(exc, ValidationError):
            return cls(kind=ErrorKind.INVALID_RESPONSE, message="Received an unexpected response from the server")
        if isinstance(exc, HospitalityAPIError):
            return cls(kind=ErrorKind.SERVER, message=exc.message, status_code=status_code)
        return cls(kind=ErrorKind.TRANSPORT, message=GENERIC_FAILURE_MESSAGE)


class FetchResult(BaseModel):
    """Outcome of reading one resource class: data or an error, never both."""

    resource: ResourceKind
    data: Any = None
    error: Optional[ErrorInfo] = None
    fetched_at: datetime
    stale: bool = False  # data carried over from an earlier snapshot after a failure

    class Config:
        frozen = True
        arbitrary_types_allowed = True

    @property
    def ok(self) -> bool:
        return self.error is None


class Snapshot:
    """Point-in-time read of one or more resource classes.

    Built by the snapshot fetcher, then treated as read-only: projectors
    and services derive new objects from it instead of changing it.
    """

    def __init__(self, generation: int = 0):
        """Initialize an empty snapshot.

        Args:
            generation: Refresh generation this snapshot was loaded for
        """
        self.generation = generation
        self.start_time = datetime.now(timezone.utc)
        self.results: dict[ResourceKind, FetchResult] = {}

    def add_result(self, result: FetchResult) -> None:
        self.results[result.resource] = result

    def data(self, resource: ResourceKind, default: Any = None) -> Any:
        """Data for ``resource``, or ``default`` when it failed without a fallback or was not fetched."""
        result = self.results.get(resource)
        if result is None or result.data is None:
            return default
        return result.data

    def error_for(self, resource: ResourceKind) -> Optional[ErrorInfo]:
        result = self.results.get(resource)
        return result.error if result else None

    @property
    def errors(self) -> dict[ResourceKind, ErrorInfo]:
        return {kind: r.error for kind, r in self.results.items() if r.error is not None}

    def has_errors(self) -> bool:
        return any(r.error is not None for r in self.results.values())

    def is_complete_failure(self) -> bool:
        return bool(self.results) and all(r.error is not None for r in self.results.values())

    @property
    def session_expired(self) -> bool:
        return any(e.is_session_expired for e in self.errors.values())

    def merge_last_good(self, previous: Optional["Snapshot"]) -> "Snapshot":
        """Return a new snapshot where failed resources keep ``previous`` data.

        The error stays attached so the view can flag the section as stale.
        """
        merged = Snapshot(self.generation)
        merged.start_time = self.start_time
        for kind, result in self.results.items():
            if result.error is not None and previous is not None:
                earlier = previous.results.get(kind)
                if earlier is not None and earlier.data is not None:
                    result = result.model_copy(update={"data": earlier.data, "stale": True})
            merged.add_result(result)
        return merged

    def get_results(self) -> dict[str, Any]:
        """Summary dictionary for logging and the CLI."""
        return {
            "generation": self.generation,
            "start_time": self.start_time.isoformat(),
            "resources": sorted(kind.value for kind in self.results),
            "errors": {kind.value: err.model_dump(mode="json") for kind, err in self.errors.items()},
            "stale": sorted(kind.value for kind, r in self.results.items() if r.stale),
        }
