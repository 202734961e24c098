"""Short confirm-and-submit interactions around a single transition."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from structlog import get_logger

from hospitality_sync.clients import HospitalityAPIClient
from hospitality_sync.models import (
    Booking,
    CheckOutPayment,
    Folio,
    HousekeepingTask,
    SessionUser,
    TaskTransition,
    Transition,
)
from hospitality_sync.services.snapshot import ErrorInfo, ErrorKind
from hospitality_sync.services.transition_dispatcher import TransitionDispatcher

logger = get_logger(__name__)

NAME_REQUIRED_MESSAGE = "First name and last name are required"

RefreshCallback = Callable[[], Awaitable[Any]]


class WorkflowState(str, Enum):
    CLOSED = "closed"
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    FAILED = "failed"


class ActionOutcome(BaseModel):
    """Result of a workflow submission that is not a dispatcher transition."""

    success: bool
    entity: Optional[dict[str, Any]] = None
    error: Optional[ErrorInfo] = None

    class Config:
        frozen = True


class ActionWorkflow(ABC):
    """Open, optionally load details, confirm once, then close and refresh.

    A failed submission leaves the workflow open with the server's message
    in ``error`` so the user can retry or cancel. ``confirm()`` is ignored
    unless the workflow is ready or has failed, so a submission in flight
    is never duplicated. Cancelling while details load closes the workflow
    for good; the finished load is dropped.
    """

    requires_target = True

    def __init__(self, on_success: Optional[RefreshCallback] = None, name: str | None = None):
        """Initialize the workflow.

        Args:
            on_success: Awaited after a successful submission, typically a snapshot refresh
            name: Optional name for log events. Defaults to class name.
        """
        self.name = name or self.__class__.__name__
        self.logger = logger.bind(workflow=self.name)
        self.on_success = on_success
        self.state = WorkflowState.CLOSED
        self.target: Any = None
        self.error: Optional[ErrorInfo] = None
        self.last_result: Any = None

    @property
    def is_open(self) -> bool:
        return self.state != WorkflowState.CLOSED

    @property
    def is_submitting(self) -> bool:
        return self.state == WorkflowState.SUBMITTING

    async def open(self, target: Any = None) -> None:
        """Open the workflow for ``target`` and load any details it needs."""
        if self.state == WorkflowState.SUBMITTING:
            raise RuntimeError(f"{self.name} has a submission outstanding")
        self.target = target
        self.error = None
        self.last_result = None
        self.state = WorkflowState.LOADING
        await self.load_details()
        if self.state != WorkflowState.LOADING or self.target is not target:
            self.logger.debug("Detail load abandoned", state=self.state.value)
            return
        self.state = WorkflowState.READY
        self.logger.debug("Workflow opened", target=self.target_id)

    def cancel(self) -> bool:
        """Close without submitting. Returns False while a submission is outstanding."""
        if self.state == WorkflowState.SUBMITTING:
            return False
        self._reset()
        self.logger.debug("Workflow cancelled")
        return True

    async def confirm(self) -> Any:
        """Submit once.

        Returns:
            The submission result, or None when the call was ignored
        """
        if self.state not in (WorkflowState.READY, WorkflowState.FAILED):
            self.logger.debug("Confirm ignored", state=self.state.value)
            return None
        if self.requires_target and self.target is None:
            self.logger.warning("Confirm ignored without a target", state=self.state.value)
            return None

        self.state = WorkflowState.SUBMITTING
        self.error = None
        try:
            result = await self.submit()
        except Exception as e:
            self.logger.error("Workflow submission raised", target=self.target_id, error=str(e), exc_info=True)
            result = ActionOutcome(success=False, error=ErrorInfo.from_exception(e))
        self.last_result = result

        if not result.success:
            self.state = WorkflowState.FAILED
            self.error = result.error
            self.logger.warning(
                "Workflow submission failed",
                target=self.target_id,
                error_kind=result.error.kind.value if result.error else None,
            )
            return result

        self.logger.info("Workflow submission succeeded", target=self.target_id)
        self._reset()
        self.last_result = result
        if self.on_success is not None:
            await self.on_success()
        return result

    @property
    def target_id(self) -> Optional[str]:
        return getattr(self.target, "id", None)

    async def load_details(self) -> None:
        """Load whatever the confirmation needs. Most workflows need nothing."""
        return None

    @abstractmethod
    async def submit(self) -> Any:
        """Perform the submission; must return an object with ``success`` and ``error``."""
        pass

    def _reset(self) -> None:
        self.state = WorkflowState.CLOSED
        self.target = None
        self.error = None


class CheckInWorkflow(ActionWorkflow):
    """Confirm and send a check-in for an arriving booking."""

    def __init__(self, dispatcher: TransitionDispatcher, on_success: Optional[RefreshCallback] = None):
        super().__init__(on_success)
        self.dispatcher = dispatcher
        self.room_assignments: Optional[list[dict[str, Any]]] = None

    async def open(self, target: Booking, room_assignments: Optional[list[dict[str, Any]]] = None) -> None:
        self.room_assignments = room_assignments
        await super().open(target)

    async def submit(self):
        payload = {"roomAssignments": self.room_assignments} if self.room_assignments else None
        return await self.dispatcher.dispatch(Transition.CHECK_IN, self.target.id, payload=payload)


class CheckOutWorkflow(ActionWorkflow):
    """Load the folio, collect the final payment, then send a check-out.

    The payment amount is pre-filled with the folio balance. If the folio
    cannot be loaded the workflow still opens, with ``detail_error`` set and
    the amount taken from the booking's embedded folio summary.
    """

    def __init__(
        self,
        dispatcher: TransitionDispatcher,
        client: HospitalityAPIClient,
        on_success: Optional[RefreshCallback] = None,
    ):
        super().__init__(on_success)
        self.dispatcher = dispatcher
        self.client = client
        self.folio: Optional[Folio] = None
        self.payment = CheckOutPayment()
        self.detail_error: Optional[ErrorInfo] = None

    async def load_details(self) -> None:
        booking: Booking = self.target
        self.folio = None
        self.detail_error = None
        folio: Optional[Folio] = None
        detail_error: Optional[ErrorInfo] = None
        try:
            folio = Folio.model_validate(await self.client.get_folio_by_booking(booking.id))
        except Exception as e:
            detail_error = ErrorInfo.from_exception(e)
            self.logger.warning(
                "Folio load failed",
                booking_id=booking.id,
                error_kind=detail_error.kind.value,
            )

        # Cancelled or reopened for another booking while the folio loaded
        if self.target is not booking:
            return

        self.folio = folio
        self.detail_error = detail_error
        if folio is not None:
            balance = folio.balance
        else:
            balance = booking.folio.balance if booking.folio else 0.0
        self.payment = CheckOutPayment(paymentAmount=max(balance, 0.0))

    @property
    def balance_due(self) -> float:
        if self.folio is not None:
            return self.folio.balance
        booking: Optional[Booking] = self.target
        return booking.folio.balance if booking is not None and booking.folio else 0.0

    def set_payment(
        self,
        method: Optional[str] = None,
        amount: Any = None,
        reference: Optional[str] = None,
    ) -> bool:
        """Update the payment fields. Returns False and sets ``error`` if they are invalid."""
        values = self.payment.model_dump(by_alias=True)
        if method is not None:
            values["paymentMethod"] = method
        if amount is not None:
            values["paymentAmount"] = amount
        if reference is not None:
            values["paymentReference"] = reference or None
        try:
            self.payment = CheckOutPayment.model_validate(values)
        except ValidationError as e:
            self.error = ErrorInfo(kind=ErrorKind.VALIDATION, message=e.errors()[0]["msg"])
            return False
        self.error = None
        return True

    async def submit(self):
        return await self.dispatcher.dispatch(Transition.CHECK_OUT, self.target.id, payload=self.payment)

    def _reset(self) -> None:
        super()._reset()
        self.folio = None
        self.detail_error = None
        self.payment = CheckOutPayment()


class TaskTransitionWorkflow(ActionWorkflow):
    """Confirm the single transition offered for a housekeeping task."""

    def __init__(
        self,
        dispatcher: TransitionDispatcher,
        user: Optional[SessionUser] = None,
        on_success: Optional[RefreshCallback] = None,
    ):
        super().__init__(on_success)
        self.dispatcher = dispatcher
        self.user = user
        self.transition: Optional[TaskTransition] = None
        self.notes: Optional[str] = None

    async def open(
        self,
        target: HousekeepingTask,
        transition: Optional[TaskTransition] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Open for ``target``; the transition defaults to the one offered for its status."""
        self.transition = transition or target.offered_transition
        self.notes = notes
        await super().open(target)

    async def submit(self):
        task: HousekeepingTask = self.target
        if self.transition is None:
            return ActionOutcome(
                success=False,
                error=ErrorInfo(
                    kind=ErrorKind.INVALID_TRANSITION,
                    message=f"No action is available for a task that is {task.status.value}",
                ),
            )
        return await self.dispatcher.dispatch_task(task, self.transition, notes=self.notes, user=self.user)

    def _reset(self) -> None:
        super()._reset()
        self.transition = None
        self.notes = None


class GuestDraft(BaseModel):
    """Walk-in guest form."""

    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    id_type: Optional[str] = Field(None, alias="idType")
    id_number: Optional[str] = Field(None, alias="idNumber")
    nationality: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return (v or "").strip()

    @property
    def has_names(self) -> bool:
        return bool(self.first_name and self.last_name)

    def to_request(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class WalkInWorkflow(ActionWorkflow):
    """Register a walk-in guest record; names are checked before any request."""

    requires_target = False

    def __init__(self, client: HospitalityAPIClient, on_success: Optional[RefreshCallback] = None):
        super().__init__(on_success)
        self.client = client
        self.draft = GuestDraft()

    async def open(self, target: Optional[dict[str, Any]] = None) -> None:
        self.draft = GuestDraft.model_validate(target or {})
        await super().open(target)

    def update(self, **fields: Any) -> None:
        """Update form fields by attribute or wire name."""
        values = self.draft.model_dump()
        values.update(fields)
        self.draft = GuestDraft.model_validate(values)

    async def submit(self) -> ActionOutcome:
        if not self.draft.has_names:
            return ActionOutcome(
                success=False,
                error=ErrorInfo(kind=ErrorKind.VALIDATION, message=NAME_REQUIRED_MESSAGE),
            )
        try:
            guest = await self.client.create_guest(self.draft.to_request())
        except Exception as e:
            return ActionOutcome(success=False, error=ErrorInfo.from_exception(e))
        return ActionOutcome(success=True, entity=guest if isinstance(guest, dict) else None)

    @property
    def target_id(self) -> Optional[str]:
        return None

    def _reset(self) -> None:
        super()._reset()
        self.draft = GuestDraft()
