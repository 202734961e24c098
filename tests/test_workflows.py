"""Tests for the confirm-and-submit workflows."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from hospitality_sync.clients import TransportError
from hospitality_sync.models import Booking, HousekeepingTask, TaskTransition
from hospitality_sync.services import (
    CheckInWorkflow,
    CheckOutWorkflow,
    ErrorKind,
    TaskTransitionWorkflow,
    TransitionDispatcher,
    WalkInWorkflow,
    WorkflowState,
)
from hospitality_sync.services.workflows import NAME_REQUIRED_MESSAGE


def _booking(backend, booking_id: str) -> Booking:
    return Booking.model_validate(backend._with_folio(backend.bookings[booking_id]))


def _task(backend, task_id: str) -> HousekeepingTask:
    return HousekeepingTask.model_validate(backend.tasks[task_id])


@pytest.fixture
def refresh():
    return AsyncMock()


@pytest.fixture
def dispatcher(backend):
    return TransitionDispatcher(backend)


class TestCheckInWorkflow:
    @pytest.mark.asyncio
    async def test_confirm_checks_in_and_refreshes(self, backend, dispatcher, refresh):
        workflow = CheckInWorkflow(dispatcher, on_success=refresh)

        await workflow.open(_booking(backend, "bk-arr-1"))
        assert workflow.state == WorkflowState.READY

        result = await workflow.confirm()

        assert result.success
        assert backend.bookings["bk-arr-1"]["status"] == "checked_in"
        assert workflow.state == WorkflowState.CLOSED
        refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel_sends_nothing(self, backend, dispatcher, refresh):
        workflow = CheckInWorkflow(dispatcher, on_success=refresh)
        await workflow.open(_booking(backend, "bk-arr-1"))

        assert workflow.cancel() is True

        assert workflow.state == WorkflowState.CLOSED
        assert backend.calls_to("check_in") == []
        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejection_stays_open_with_server_message(self, backend, dispatcher, refresh):
        workflow = CheckInWorkflow(dispatcher, on_success=refresh)
        await workflow.open(_booking(backend, "bk-arr-3"))

        result = await workflow.confirm()

        assert not result.success
        assert workflow.state == WorkflowState.FAILED
        assert workflow.error.message == "Cannot check in a cancelled booking"
        assert workflow.target.id == "bk-arr-3"
        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, backend, dispatcher):
        backend.failures["check_in"] = TransportError("connection reset")
        workflow = CheckInWorkflow(dispatcher)
        await workflow.open(_booking(backend, "bk-arr-1"))

        assert not (await workflow.confirm()).success
        assert workflow.error.kind == ErrorKind.TRANSPORT

        del backend.failures["check_in"]
        assert (await workflow.confirm()).success

    @pytest.mark.asyncio
    async def test_confirm_ignored_while_submitting(self, backend, dispatcher):
        release = asyncio.Event()
        original = backend.check_in

        async def slow_check_in(booking_id, room_assignments=None):
            await release.wait()
            return await original(booking_id, room_assignments)

        backend.check_in = slow_check_in
        workflow = CheckInWorkflow(dispatcher)
        await workflow.open(_booking(backend, "bk-arr-1"))

        first = asyncio.create_task(workflow.confirm())
        await asyncio.sleep(0)
        assert workflow.is_submitting
        assert await workflow.confirm() is None
        assert workflow.cancel() is False

        release.set()
        assert (await first).success
        assert len(backend.calls_to("check_in")) == 1

    @pytest.mark.asyncio
    async def test_confirm_without_open_is_ignored(self, dispatcher):
        assert await CheckInWorkflow(dispatcher).confirm() is None

    @pytest.mark.asyncio
    async def test_confirm_without_target_is_ignored(self, backend, dispatcher):
        workflow = CheckInWorkflow(dispatcher)
        workflow.state = WorkflowState.READY

        assert await workflow.confirm() is None
        assert workflow.state == WorkflowState.READY
        assert backend.calls_to("check_in") == []

    @pytest.mark.asyncio
    async def test_submission_error_leaves_workflow_failed(self, backend):
        dispatcher = Mock()
        dispatcher.dispatch = AsyncMock(side_effect=RuntimeError("unexpected"))
        workflow = CheckInWorkflow(dispatcher)
        await workflow.open(_booking(backend, "bk-arr-1"))

        result = await workflow.confirm()

        assert not result.success
        assert workflow.state == WorkflowState.FAILED
        assert workflow.cancel() is True


class TestCheckOutWorkflow:
    @pytest.mark.asyncio
    async def test_payment_prefilled_with_folio_balance(self, backend, dispatcher):
        workflow = CheckOutWorkflow(dispatcher, backend)

        await workflow.open(_booking(backend, "bk-dep-1"))

        assert workflow.folio.balance == 100
        assert workflow.payment.payment_amount == 100
        assert workflow.balance_due == 100
        assert workflow.detail_error is None

    @pytest.mark.asyncio
    async def test_settles_balance_and_checks_out(self, backend, dispatcher, refresh):
        workflow = CheckOutWorkflow(dispatcher, backend, on_success=refresh)
        await workflow.open(_booking(backend, "bk-dep-1"))
        assert workflow.set_payment(method="card", reference="AUTH-55")

        result = await workflow.confirm()

        assert result.success
        assert backend.bookings["bk-dep-1"]["status"] == "checked_out"
        assert backend.folios["bk-dep-1"]["balance"] == 0
        assert backend.calls_to("check_out") == [
            ("bk-dep-1", {"paymentMethod": "card", "paymentAmount": 100.0, "paymentReference": "AUTH-55"})
        ]
        refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unpaid_balance_rejected_verbatim(self, backend, dispatcher):
        workflow = CheckOutWorkflow(dispatcher, backend)
        await workflow.open(_booking(backend, "bk-dep-1"))
        assert workflow.set_payment(amount="")

        result = await workflow.confirm()

        assert not result.success
        assert workflow.state == WorkflowState.FAILED
        assert workflow.error.message == "Outstanding balance of 100. Please collect payment."
        assert backend.bookings["bk-dep-1"]["status"] == "checked_in"

    @pytest.mark.asyncio
    async def test_folio_load_failure_falls_back_to_booking_summary(self, backend, dispatcher):
        backend.failures["get_folio_by_booking"] = TransportError("timeout")
        workflow = CheckOutWorkflow(dispatcher, backend)

        await workflow.open(_booking(backend, "bk-dep-1"))

        assert workflow.state == WorkflowState.READY
        assert workflow.folio is None
        assert workflow.detail_error.kind == ErrorKind.TRANSPORT
        assert workflow.payment.payment_amount == 100

    @pytest.mark.asyncio
    async def test_booking_without_folio_defaults_to_zero(self, backend, dispatcher):
        workflow = CheckOutWorkflow(dispatcher, backend)

        await workflow.open(_booking(backend, "bk-inh-2"))

        assert workflow.detail_error.kind == ErrorKind.NOT_FOUND
        assert workflow.payment.payment_amount == 0

    @pytest.mark.asyncio
    async def test_invalid_payment_method_is_refused(self, backend, dispatcher):
        workflow = CheckOutWorkflow(dispatcher, backend)
        await workflow.open(_booking(backend, "bk-dep-1"))

        assert workflow.set_payment(method="voucher") is False
        assert workflow.error.kind == ErrorKind.VALIDATION
        assert workflow.payment.payment_method == "cash"

    @pytest.mark.asyncio
    async def test_cancel_during_folio_load_stays_closed(self, backend, dispatcher, refresh):
        release = asyncio.Event()
        original = backend.get_folio_by_booking

        async def held_folio(booking_id):
            await release.wait()
            return await original(booking_id)

        backend.get_folio_by_booking = held_folio
        workflow = CheckOutWorkflow(dispatcher, backend, on_success=refresh)

        opening = asyncio.create_task(workflow.open(_booking(backend, "bk-dep-1")))
        await asyncio.sleep(0)
        assert workflow.state == WorkflowState.LOADING
        assert workflow.cancel() is True
        release.set()
        await opening

        assert not workflow.is_open
        assert workflow.target is None
        assert workflow.folio is None
        assert workflow.payment.payment_amount == 0
        assert await workflow.confirm() is None
        assert backend.calls_to("check_out") == []
        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reopen_during_folio_load_keeps_latest_booking(self, backend, dispatcher):
        release = asyncio.Event()
        original = backend.get_folio_by_booking

        async def held_folio(booking_id):
            if booking_id == "bk-dep-1":
                await release.wait()
            return await original(booking_id)

        backend.get_folio_by_booking = held_folio
        workflow = CheckOutWorkflow(dispatcher, backend)

        first = asyncio.create_task(workflow.open(_booking(backend, "bk-dep-1")))
        await asyncio.sleep(0)
        workflow.cancel()
        await workflow.open(_booking(backend, "bk-inh-2"))
        release.set()
        await first

        assert workflow.state == WorkflowState.READY
        assert workflow.target.id == "bk-inh-2"
        assert workflow.folio is None
        assert workflow.detail_error.kind == ErrorKind.NOT_FOUND
        assert workflow.payment.payment_amount == 0

    @pytest.mark.asyncio
    async def test_cancel_clears_payment(self, backend, dispatcher):
        workflow = CheckOutWorkflow(dispatcher, backend)
        await workflow.open(_booking(backend, "bk-dep-1"))

        workflow.cancel()

        assert workflow.folio is None
        assert workflow.payment.payment_amount == 0
        assert backend.calls_to("check_out") == []


class TestTaskTransitionWorkflow:
    @pytest.mark.asyncio
    async def test_defaults_to_offered_transition(self, backend, dispatcher, housekeeper_user):
        workflow = TaskTransitionWorkflow(dispatcher, user=housekeeper_user)

        await workflow.open(_task(backend, "t-1"))

        assert workflow.transition == TaskTransition.START
        assert (await workflow.confirm()).success
        assert backend.tasks["t-1"]["status"] == "in_progress"

    @pytest.mark.asyncio
    async def test_complete_with_notes(self, backend, dispatcher, housekeeper_user):
        workflow = TaskTransitionWorkflow(dispatcher, user=housekeeper_user)

        await workflow.open(_task(backend, "t-3"), notes="Extra towels left")
        await workflow.confirm()

        assert backend.tasks["t-3"]["status"] == "completed"
        assert backend.tasks["t-3"]["notes"] == "Extra towels left"

    @pytest.mark.asyncio
    async def test_verified_task_has_no_action(self, backend, dispatcher, manager_user):
        workflow = TaskTransitionWorkflow(dispatcher, user=manager_user)
        await workflow.open(_task(backend, "t-5"))

        result = await workflow.confirm()

        assert not result.success
        assert result.error.kind == ErrorKind.INVALID_TRANSITION
        assert workflow.state == WorkflowState.FAILED

    @pytest.mark.asyncio
    async def test_housekeeper_cannot_verify(self, backend, dispatcher, housekeeper_user):
        workflow = TaskTransitionWorkflow(dispatcher, user=housekeeper_user)
        await workflow.open(_task(backend, "t-4"), TaskTransition.VERIFY)

        result = await workflow.confirm()

        assert result.error.kind == ErrorKind.FORBIDDEN
        assert backend.calls_to("verify_task") == []


class TestWalkInWorkflow:
    @pytest.mark.asyncio
    async def test_names_required_before_request(self, backend):
        workflow = WalkInWorkflow(backend)
        await workflow.open({"firstName": "  ", "lastName": "Mensah"})

        result = await workflow.confirm()

        assert not result.success
        assert result.error.kind == ErrorKind.VALIDATION
        assert result.error.message == NAME_REQUIRED_MESSAGE
        assert backend.calls_to("create_guest") == []

    @pytest.mark.asyncio
    async def test_creates_guest(self, backend, refresh):
        workflow = WalkInWorkflow(backend, on_success=refresh)
        await workflow.open()
        workflow.update(first_name="Kofi", last_name="Mensah", phone="+233 20 000 0000")

        result = await workflow.confirm()

        assert result.success
        assert result.entity["firstName"] == "Kofi"
        assert backend.guests[0]["phone"] == "+233 20 000 0000"
        assert workflow.draft.first_name == ""
        refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_server_failure_keeps_draft(self, backend):
        backend.failures["create_guest"] = TransportError("timeout")
        workflow = WalkInWorkflow(backend)
        await workflow.open({"firstName": "Kofi", "lastName": "Mensah"})

        result = await workflow.confirm()

        assert result.error.kind == ErrorKind.TRANSPORT
        assert workflow.state == WorkflowState.FAILED
        assert workflow.draft.last_name == "Mensah"
