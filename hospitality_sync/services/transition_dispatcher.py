"""Sends single state-changing commands to the server of record."""

from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ValidationError
from structlog import get_logger

from hospitality_sync.clients import HospitalityAPIClient
from hospitality_sync.models import (
    CheckOutPayment,
    HousekeepingTask,
    SessionUser,
    TaskTransition,
    Transition,
)
from hospitality_sync.models.status import task_transition_for
from hospitality_sync.services.snapshot import ErrorInfo, ErrorKind

logger = get_logger(__name__)

DUPLICATE_SUBMISSION_MESSAGE = "This action is already being processed"
VERIFY_FORBIDDEN_MESSAGE = "Only managers can verify tasks"


class TransitionResult(BaseModel):
    """Outcome of one dispatched transition."""

    transition: Transition
    entity_id: str
    success: bool
    entity: Optional[dict[str, Any]] = None
    error: Optional[ErrorInfo] = None

    class Config:
        frozen = True


def _entity_key(transition: Transition, entity_id: str) -> tuple[str, str]:
    kind = "task" if transition.task_transition is not None else "booking"
    return kind, str(entity_id)


class TransitionDispatcher:
    """Dispatches transitions, one network call each, never retried.

    Holds a per-entity in-flight guard: a second transition for an entity
    that already has one outstanding is refused without touching the
    network. Snapshots are never modified here; callers refresh.

    ``on_change`` is called whenever an entity enters or leaves the
    in-flight set, so a screen can disable and re-enable its control.
    """

    def __init__(self, client: HospitalityAPIClient, on_change: Optional[Callable[[], Any]] = None):
        self.client = client
        self.on_change = on_change
        self._in_flight: set[tuple[str, str]] = set()

    def is_in_flight(self, transition: Transition, entity_id: str) -> bool:
        return _entity_key(transition, entity_id) in self._in_flight

    def in_flight_ids(self, kind: str) -> frozenset[str]:
        """Ids of ``booking`` or ``task`` entities with an outstanding transition."""
        return frozenset(entity_id for k, entity_id in self._in_flight if k == kind)

    async def dispatch(
        self,
        transition: Transition,
        entity_id: str,
        payload: Optional[Union[CheckOutPayment, dict[str, Any]]] = None,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        """Send one transition for one entity.

        Args:
            transition: Command to send
            entity_id: Booking or task id
            payload: Check-out payment, or ``{"roomAssignments": [...]}`` for check-in
            notes: Optional notes for task complete and verify

        Returns:
            TransitionResult with the server's entity or a classified error
        """
        entity_id = str(entity_id)
        key = _entity_key(transition, entity_id)
        if key in self._in_flight:
            logger.warning(
                "Duplicate transition refused",
                transition=transition.value,
                entity_id=entity_id,
            )
            return TransitionResult(
                transition=transition,
                entity_id=entity_id,
                success=False,
                error=ErrorInfo(kind=ErrorKind.DUPLICATE_SUBMISSION, message=DUPLICATE_SUBMISSION_MESSAGE),
            )

        self._in_flight.add(key)
        self._notify_change()
        try:
            entity = await self._send(transition, entity_id, payload, notes)
        except ValidationError as e:
            logger.warning("Invalid transition payload", transition=transition.value, entity_id=entity_id)
            return TransitionResult(
                transition=transition,
                entity_id=entity_id,
                success=False,
                error=ErrorInfo(kind=ErrorKind.VALIDATION, message=_first_error(e)),
            )
        except Exception as e:
            error = ErrorInfo.from_exception(e)
            logger.warning(
                "Transition failed",
                transition=transition.value,
                entity_id=entity_id,
                error_kind=error.kind.value,
                error=error.message,
            )
            return TransitionResult(transition=transition, entity_id=entity_id, success=False, error=error)
        finally:
            self._in_flight.discard(key)
            self._notify_change()

        logger.info("Transition succeeded", transition=transition.value, entity_id=entity_id)
        return TransitionResult(
            transition=transition,
            entity_id=entity_id,
            success=True,
            entity=entity if isinstance(entity, dict) else None,
        )

    async def dispatch_task(
        self,
        task: HousekeepingTask,
        transition: TaskTransition,
        notes: Optional[str] = None,
        user: Optional[SessionUser] = None,
    ) -> TransitionResult:
        """Send a task command after checking it is the one offered for the task's status.

        Args:
            task: Task as last seen in a snapshot
            transition: Requested command
            notes: Optional notes for complete and verify
            user: Signed-in user; verification requires a known user with a manager-level role

        Returns:
            TransitionResult; local refusals make no network call
        """
        command = task_transition_for(transition)
        offered = task.offered_transition
        if offered != transition:
            logger.warning(
                "Task transition not offered",
                task_id=task.id,
                status=task.status.value,
                requested=transition.value,
            )
            return TransitionResult(
                transition=command,
                entity_id=task.id,
                success=False,
                error=ErrorInfo(
                    kind=ErrorKind.INVALID_TRANSITION,
                    message=f"Cannot {transition.value} a task that is {task.status.value}",
                ),
            )

        if transition == TaskTransition.VERIFY and (user is None or not user.can_verify_tasks):
            return TransitionResult(
                transition=command,
                entity_id=task.id,
                success=False,
                error=ErrorInfo(kind=ErrorKind.FORBIDDEN, message=VERIFY_FORBIDDEN_MESSAGE),
            )

        return await self.dispatch(command, task.id, notes=notes)

    def _notify_change(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change()
        except Exception as e:
            logger.error("In-flight change callback failed", error=str(e), exc_info=True)

    async def _send(
        self,
        transition: Transition,
        entity_id: str,
        payload: Optional[Union[CheckOutPayment, dict[str, Any]]],
        notes: Optional[str],
    ) -> Any:
        match transition:
            case Transition.CHECK_IN:
                assignments = (payload or {}).get("roomAssignments") if isinstance(payload, dict) else None
                return await self.client.check_in(entity_id, room_assignments=assignments)
            case Transition.CHECK_OUT:
                return await self.client.check_out(entity_id, _checkout_body(payload))
            case Transition.START_TASK:
                return await self.client.start_task(entity_id)
            case Transition.COMPLETE_TASK:
                return await self.client.complete_task(entity_id, notes=notes)
            case Transition.VERIFY_TASK:
                return await self.client.verify_task(entity_id, notes=notes)
        raise ValueError(f"Unhandled transition: {transition!r}")


def _checkout_body(payload: Optional[Union[CheckOutPayment, dict[str, Any]]]) -> dict[str, Any]:
    """Normalize a check-out payload; raises ValidationError for a malformed dict."""
    if payload is None:
        return CheckOutPayment().to_request()
    if isinstance(payload, CheckOutPayment):
        return payload.to_request()
    return CheckOutPayment.model_validate(payload).to_request()


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    return errors[0]["msg"] if errors else "Invalid request"
