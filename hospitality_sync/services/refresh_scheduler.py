"""Periodic and on-demand snapshot refresh with in-flight coalescing."""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from structlog import get_logger

logger = get_logger(__name__)

Loader = Callable[[int], Awaitable[Any]]
SnapshotCallback = Callable[[Any], Any]


class RefreshScheduler:
    """Runs ``load`` on a fixed interval and on demand.

    Every load is tagged with a generation number. A result is applied only
    while its generation is still the latest and the scheduler is open, so
    superseded or post-teardown results are dropped. A manual refresh while
    a load for the current generation is in flight joins that load instead
    of starting another one.
    """

    def __init__(
        self,
        load: Loader,
        interval: float,
        on_snapshot: Optional[SnapshotCallback] = None,
        name: str = "refresh",
    ):
        """Initialize the scheduler.

        Args:
            load: Coroutine function taking the generation number and returning a snapshot
            interval: Seconds between timer-driven refreshes
            on_snapshot: Called (or awaited) with each applied result
            name: Label used in log events
        """
        self.load = load
        self.interval = interval
        self.on_snapshot = on_snapshot
        self.name = name

        self.generation = 0
        self.latest: Any = None
        self.applied_generation: Optional[int] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._in_flight_generation: Optional[int] = None
        self._timer: Optional[asyncio.Task] = None
        self._visible = True
        self._closed = False

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Start the interval timer. Requires a running event loop."""
        if self._closed:
            raise RuntimeError(f"{self.name} scheduler is closed")
        if self.running:
            return
        self._timer = asyncio.create_task(self._tick_loop(), name=f"{self.name}-timer")
        logger.info("Refresh scheduler started", scheduler=self.name, interval=self.interval)

    async def stop(self) -> None:
        """Close the scheduler and cancel the timer.

        An in-flight load is left to finish but its result is discarded.
        """
        self._closed = True
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
        logger.info("Refresh scheduler stopped", scheduler=self.name, generation=self.generation)

    def invalidate(self) -> int:
        """Supersede any in-flight load; its result will not be applied."""
        self.generation += 1
        return self.generation

    async def refresh_now(self, force: bool = False) -> Any:
        """Refresh immediately and return the latest applied result.

        Args:
            force: Start a new generation even if a load is in flight (used
                when the query itself changed, e.g. a new filter)

        Returns:
            The latest applied snapshot, which may be from an earlier load if
            this one was superseded
        """
        if self._closed:
            return self.latest

        if force:
            self.invalidate()

        task = self._in_flight
        if task is not None and not task.done() and self._in_flight_generation == self.generation:
            logger.debug("Joining in-flight refresh", scheduler=self.name, generation=self.generation)
        else:
            task = asyncio.create_task(self._run_load(self.generation), name=f"{self.name}-load")
            self._in_flight = task
            self._in_flight_generation = self.generation

        # Shield so a cancelled caller does not cancel a load other callers joined
        await asyncio.shield(task)
        return self.latest

    async def set_visible(self, visible: bool) -> None:
        """Pause timer-driven refreshes while hidden; refresh at once when shown again."""
        was_visible, self._visible = self._visible, visible
        if visible and not was_visible:
            logger.debug("View visible again, refreshing", scheduler=self.name)
            await self.refresh_now()

    async def _run_load(self, generation: int) -> None:
        try:
            result = await self.load(generation)
        except Exception as e:
            logger.error(
                "Refresh load failed",
                scheduler=self.name,
                generation=generation,
                error=str(e),
                exc_info=True,
            )
            return

        if self._closed:
            logger.debug("Discarding result after teardown", scheduler=self.name, generation=generation)
            return
        if generation != self.generation:
            logger.debug(
                "Discarding superseded result",
                scheduler=self.name,
                generation=generation,
                current=self.generation,
            )
            return

        self.latest = result
        self.applied_generation = generation
        if self.on_snapshot is not None:
            try:
                outcome = self.on_snapshot(result)
                if asyncio.iscoroutine(outcome):
                    await outcome
            except Exception as e:
                logger.error(
                    "Snapshot callback failed",
                    scheduler=self.name,
                    generation=generation,
                    error=str(e),
                    exc_info=True,
                )

    async def _tick_loop(self) -> None:
        while not self._closed:
            await asyncio.sleep(self.interval)
            if self._closed:
                break
            if not self._visible:
                continue
            await self.refresh_now()

    async def __aenter__(self) -> "RefreshScheduler":
        self.start()
        await self.refresh_now()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
