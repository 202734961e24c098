"""Projects housekeeping snapshots into view models."""

from typing import AbstractSet, Iterable, Optional

from hospitality_sync.models import (
    HousekeepingStats,
    HousekeepingTask,
    RoomStatusBoard,
    RoomStatusEntry,
    SessionUser,
    TaskPage,
    TaskStatus,
    TaskTransition,
)
from hospitality_sync.projectors.view_models import (
    ALL_FLOORS,
    HousekeepingView,
    RoomTile,
    SectionError,
    StatsPanel,
    TaskCard,
    TaskGroup,
    TaskScope,
)
from hospitality_sync.services.snapshot import ResourceKind, Snapshot

STATUS_ORDER = (
    TaskStatus.PENDING,
    TaskStatus.IN_PROGRESS,
    TaskStatus.COMPLETED,
    TaskStatus.VERIFIED,
)

MY_TASK_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)

EMPTY_MESSAGES = {
    TaskScope.MY_TASKS: "No tasks assigned to you",
    TaskScope.ALL_TASKS: "No housekeeping tasks",
}


def _task_sort_key(card: TaskCard):
    # Urgent first, then oldest first; tasks without a creation time go last
    created = card.created_at.timestamp() if card.created_at else 0.0
    return (-card.priority_rank, card.created_at is None, created, card.task_id)


def _floor_sort_key(floor: str):
    return (0, int(floor), floor) if floor.isdigit() else (1, 0, floor)


class HousekeepingProjector:
    """Pure projection of a housekeeping snapshot for a scope and floor."""

    @staticmethod
    def offered_action(task: HousekeepingTask, user: Optional[SessionUser] = None) -> Optional[TaskTransition]:
        """Action shown for ``task``: its offered transition, hiding verify from non-managers."""
        action = task.offered_transition
        if action == TaskTransition.VERIFY and (user is None or not user.can_verify_tasks):
            return None
        return action

    @staticmethod
    def to_card(
        task: HousekeepingTask,
        user: Optional[SessionUser] = None,
        in_flight: AbstractSet[str] = frozenset(),
    ) -> TaskCard:
        action = HousekeepingProjector.offered_action(task, user)
        return TaskCard(
            task_id=task.id,
            room_number=task.room_number,
            floor=task.floor,
            room_type=task.room.room_type if task.room else None,
            task_type=task.type,
            priority=task.priority,
            priority_rank=task.priority_rank,
            status=task.status,
            action=action,
            action_enabled=action is not None and task.id not in in_flight,
            assigned_to=task.assigned_to,
            assignee_name=task.assignee_name,
            notes=task.notes,
            created_at=task.created_at,
            started_at=task.started_at,
            completed_at=task.completed_at,
        )

    @staticmethod
    def in_scope(task: HousekeepingTask, scope: TaskScope, user: Optional[SessionUser]) -> bool:
        if scope == TaskScope.ALL_TASKS:
            return True
        if task.status not in MY_TASK_STATUSES:
            return False
        return user is None or task.assigned_to == user.id

    @staticmethod
    def group_by_status(cards: Iterable[TaskCard]) -> tuple[TaskGroup, ...]:
        """Group sorted cards by status in lifecycle order, skipping empty groups."""
        cards = list(cards)
        groups = []
        for status in STATUS_ORDER:
            members = tuple(c for c in cards if c.status == status)
            if members:
                groups.append(TaskGroup(status=status, tasks=members))
        return tuple(groups)

    @staticmethod
    def floors(rooms: Iterable[RoomStatusEntry]) -> tuple[str, ...]:
        """Sorted unique floors, numeric floors in numeric order."""
        unique = {room.floor for room in rooms if room.floor}
        return tuple(sorted(unique, key=_floor_sort_key))

    @staticmethod
    def to_tile(room: RoomStatusEntry) -> RoomTile:
        return RoomTile(
            room_id=room.id,
            room_number=room.room_number,
            floor=room.floor,
            room_type=room.room_type,
            status=room.status,
            cleaning_status=room.cleaning_status,
            has_pending_task=room.has_pending_task,
            is_occupied=room.is_occupied,
            current_guest=room.current_guest,
            checkout_date=room.checkout_date,
            is_vip=room.is_vip,
        )

    @staticmethod
    def stats_panel(stats: Optional[HousekeepingStats]) -> Optional[StatsPanel]:
        if stats is None:
            return None
        return StatsPanel(
            total=stats.total,
            completed=stats.completed,
            pending=stats.pending,
            in_progress=stats.in_progress,
            completion_rate=stats.completion_rate,
            avg_completion_minutes=stats.avg_completion_minutes,
        )

    @staticmethod
    def project(
        snapshot: Snapshot,
        scope: TaskScope = TaskScope.ALL_TASKS,
        floor: str = ALL_FLOORS,
        user: Optional[SessionUser] = None,
        in_flight: AbstractSet[str] = frozenset(),
    ) -> HousekeepingView:
        """Build the housekeeping view.

        Args:
            snapshot: Housekeeping snapshot (tasks, room status and stats)
            scope: Task scope selection
            floor: Floor filter for rooms, or ``"all"``
            user: Signed-in user; decides ``my_tasks`` membership and verify visibility
            in_flight: Task ids with a transition outstanding

        Returns:
            HousekeepingView with tasks sorted by priority then age
        """
        task_resource = ResourceKind.TASKS
        if task_resource not in snapshot.results and ResourceKind.PENDING_TASKS in snapshot.results:
            task_resource = ResourceKind.PENDING_TASKS
        page: Optional[TaskPage] = snapshot.data(task_resource)
        tasks = page.tasks if page else []

        cards = sorted(
            (
                HousekeepingProjector.to_card(t, user, in_flight)
                for t in tasks
                if HousekeepingProjector.in_scope(t, scope, user)
            ),
            key=_task_sort_key,
        )

        board: Optional[RoomStatusBoard] = snapshot.data(ResourceKind.ROOM_STATUS)
        rooms = board.rooms if board else []
        visible_rooms = [r for r in rooms if floor == ALL_FLOORS or r.floor == floor]

        errors = tuple(
            SectionError(resource=kind.value, error=result.error, stale=result.stale)
            for kind, result in sorted(snapshot.results.items(), key=lambda item: item[0].value)
            if result.error is not None
        )
        task_error = snapshot.error_for(task_resource)

        return HousekeepingView(
            scope=scope,
            floor=floor,
            tasks=tuple(cards),
            groups=HousekeepingProjector.group_by_status(cards),
            rooms=tuple(HousekeepingProjector.to_tile(r) for r in visible_rooms),
            floors=HousekeepingProjector.floors(rooms),
            stats=HousekeepingProjector.stats_panel(snapshot.data(ResourceKind.HOUSEKEEPING_STATS)),
            errors=errors,
            empty_message=EMPTY_MESSAGES[scope] if not cards and task_error is None else None,
            generation=snapshot.generation,
        )
