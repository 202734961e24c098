"""Base class wiring fetcher, dispatcher and scheduler for one operational screen."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

from structlog import get_logger

from hospitality_sync.clients import HospitalityAPIClient, SessionExpiredError
from hospitality_sync.config import settings
from hospitality_sync.models import SessionUser
from hospitality_sync.services import (
    RefreshScheduler,
    ResourceKind,
    Snapshot,
    SnapshotFetcher,
    SnapshotFilters,
    TransitionDispatcher,
)

logger = get_logger(__name__)


class BaseScreen(ABC):
    """Keeps the latest snapshot and view for a screen.

    Each applied snapshot is merged with the previous one so a failed
    resource keeps showing its last good data, then projected into a fresh
    view. A session-expired error in any resource sets ``session_expired``
    and fires ``on_session_expired`` once.
    """

    def __init__(
        self,
        interval: float,
        client: Optional[HospitalityAPIClient] = None,
        user: Optional[SessionUser] = None,
        filters: Optional[SnapshotFilters] = None,
        name: str | None = None,
    ):
        """Initialize the screen.

        Args:
            interval: Seconds between automatic refreshes
            client: API client (defaults to one built from settings)
            user: Signed-in user; loaded from the API by ``load_user()`` when omitted
            filters: Base snapshot filters (defaults to the configured branch)
            name: Name used in log events. Defaults to class name.
        """
        self.name = name or self.__class__.__name__
        self.logger = logger.bind(screen=self.name)
        self.client = client or HospitalityAPIClient()
        self.user = user
        self.filters = filters or SnapshotFilters(branch_id=settings.branch_id)
        self.fetcher = SnapshotFetcher(self.client)
        self.dispatcher = TransitionDispatcher(self.client)
        self.dispatcher.on_change = self._publish_in_flight
        self.scheduler = RefreshScheduler(
            self._load,
            interval,
            on_snapshot=self._apply,
            name=self.name,
        )
        self.snapshot: Optional[Snapshot] = None
        self.view: Any = None
        self.session_expired = False
        self.on_session_expired: Optional[Callable[[], Any]] = None
        self.on_view: Optional[Callable[[Any], Any]] = None

    @property
    @abstractmethod
    def resources(self) -> Iterable[ResourceKind]:
        """Resource classes loaded on every refresh."""
        pass

    @abstractmethod
    def project(self) -> Any:
        """Project the current snapshot into this screen's view model."""
        pass

    def query_filters(self) -> SnapshotFilters:
        """Filters for the next load. Override when a selection changes the query."""
        return self.filters

    async def load_user(self) -> Optional[SessionUser]:
        """Fetch the signed-in user if none was given. Failures leave ``user`` unset."""
        if self.user is not None:
            return self.user
        try:
            self.user = SessionUser.model_validate(await self.client.get_current_user())
        except Exception as e:
            self.logger.warning("Failed to load session user", error=str(e))
            self._check_session(e)
        return self.user

    async def refresh(self) -> Any:
        """Refresh now, joining an in-flight refresh if there is one, and return the view."""
        await self.scheduler.refresh_now()
        return self.view

    async def refresh_after_transition(self) -> Any:
        """Reload after a successful write.

        A load already in flight may have read the server before the write,
        so it is superseded rather than joined.
        """
        await self.scheduler.refresh_now(force=True)
        return self.view

    async def _load(self, generation: int) -> Snapshot:
        return await self.fetcher.fetch_many(self.resources, self.query_filters(), generation)

    def _apply(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot.merge_last_good(self.snapshot)
        if self.snapshot.session_expired:
            self._mark_session_expired()
        self.view = self.project()
        if self.on_view is not None:
            self.on_view(self.view)

    def _check_session(self, exc: Exception) -> None:
        if isinstance(exc, SessionExpiredError):
            self._mark_session_expired()

    def _mark_session_expired(self) -> None:
        if self.session_expired:
            return
        self.session_expired = True
        self.logger.warning(
            "Session expired",
            login_path=self.user.login_path if self.user else None,
        )
        if self.on_session_expired is not None:
            self.on_session_expired()

    def reproject(self) -> Any:
        """Rebuild the view from the current snapshot without fetching."""
        self.view = self.project()
        return self.view

    def _publish_in_flight(self) -> None:
        # A transition started or finished; its control enables or disables
        if self.snapshot is None:
            return
        self.reproject()
        if self.on_view is not None:
            self.on_view(self.view)

    async def start(self) -> Any:
        await self.load_user()
        self.scheduler.start()
        return await self.refresh()

    async def stop(self) -> None:
        await self.scheduler.stop()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
