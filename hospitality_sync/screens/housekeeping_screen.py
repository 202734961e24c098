"""Housekeeping screen: task board, room status board and stats."""

from typing import Optional

from hospitality_sync.clients import HospitalityAPIClient
from hospitality_sync.config import settings
from hospitality_sync.models import HousekeepingTask, SessionUser, TaskTransition
from hospitality_sync.models.status import task_transition_for
from hospitality_sync.projectors import ALL_FLOORS, HousekeepingProjector, HousekeepingView, TaskScope
from hospitality_sync.projectors.housekeeping_projector import MY_TASK_STATUSES
from hospitality_sync.screens.base_screen import BaseScreen
from hospitality_sync.services import (
    HOUSEKEEPING_RESOURCES,
    ErrorInfo,
    ErrorKind,
    ResourceKind,
    Snapshot,
    SnapshotFilters,
    TaskTransitionWorkflow,
    TransitionResult,
)


class HousekeepingScreen(BaseScreen):
    """Housekeeping state with the start, complete and verify task actions.

    The scope changes the task query and forces a new load; the floor only
    filters rooms already loaded.
    """

    def __init__(
        self,
        client: Optional[HospitalityAPIClient] = None,
        user: Optional[SessionUser] = None,
        filters: Optional[SnapshotFilters] = None,
        interval: Optional[float] = None,
        scope: TaskScope = TaskScope.ALL_TASKS,
        floor: str = ALL_FLOORS,
    ):
        super().__init__(
            interval or settings.refresh.housekeeping_interval,
            client=client,
            user=user,
            filters=filters,
            name="housekeeping",
        )
        self.scope = TaskScope(scope)
        self.floor = floor
        self.task_action = TaskTransitionWorkflow(
            self.dispatcher,
            user=user,
            on_success=self.refresh_after_transition,
        )

    @property
    def resources(self):
        return HOUSEKEEPING_RESOURCES

    async def load_user(self) -> Optional[SessionUser]:
        user = await super().load_user()
        self.task_action.user = user
        return user

    def query_filters(self) -> SnapshotFilters:
        if self.scope == TaskScope.MY_TASKS and self.user is not None:
            return self.filters.model_copy(update={"assigned_to": self.user.id, "statuses": MY_TASK_STATUSES})
        return self.filters

    def project(self) -> HousekeepingView:
        return HousekeepingProjector.project(
            self.snapshot or Snapshot(),
            self.scope,
            self.floor,
            user=self.user,
            in_flight=self.dispatcher.in_flight_ids("task"),
        )

    async def set_scope(self, scope: TaskScope | str) -> HousekeepingView:
        """Switch scope and reload; a load still running for the old scope is discarded."""
        self.scope = TaskScope(scope)
        self.reproject()
        await self.scheduler.refresh_now(force=True)
        return self.view

    def set_floor(self, floor: str) -> HousekeepingView:
        self.floor = floor or ALL_FLOORS
        return self.reproject()

    def find_task(self, task_id: str) -> Optional[HousekeepingTask]:
        if self.snapshot is None:
            return None
        for resource in (ResourceKind.TASKS, ResourceKind.PENDING_TASKS):
            page = self.snapshot.data(resource)
            for task in page.tasks if page else []:
                if task.id == str(task_id):
                    return task
        return None

    async def open_task_action(
        self,
        task_id: str,
        transition: Optional[TaskTransition] = None,
        notes: Optional[str] = None,
    ) -> Optional[TaskTransitionWorkflow]:
        """Open the task workflow for a task in the current snapshot, or None if it is not there."""
        task = self.find_task(task_id)
        if task is None:
            return None
        await self.task_action.open(task, transition=transition, notes=notes)
        return self.task_action

    async def transition_task(
        self,
        task_id: str,
        transition: TaskTransition,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        """Send ``transition`` for a task in the current snapshot and refresh on success."""
        task = self.find_task(task_id)
        if task is None:
            return TransitionResult(
                transition=task_transition_for(transition),
                entity_id=str(task_id),
                success=False,
                error=ErrorInfo(kind=ErrorKind.NOT_FOUND, message="Task not found"),
            )
        result = await self.dispatcher.dispatch_task(task, transition, notes=notes, user=self.user)
        if result.success:
            await self.refresh_after_transition()
        return result

    async def start_task(self, task_id: str) -> TransitionResult:
        return await self.transition_task(task_id, TaskTransition.START)

    async def complete_task(self, task_id: str, notes: Optional[str] = None) -> TransitionResult:
        return await self.transition_task(task_id, TaskTransition.COMPLETE, notes=notes)

    async def verify_task(self, task_id: str, notes: Optional[str] = None) -> TransitionResult:
        return await self.transition_task(task_id, TaskTransition.VERIFY, notes=notes)
