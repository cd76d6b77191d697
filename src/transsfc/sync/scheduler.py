"""
Debounced, concurrency-bounded scheduling of template processing.

Each path moves through ``IDLE -> PENDING_DEBOUNCE -> QUEUED -> PROCESSING
-> IDLE``. Events arriving during the debounce window restart the timer, so
a burst of saves collapses into one run. At most ``max_concurrency`` runs are
in flight across all paths; the rest wait on a FIFO semaphore. A path never
runs twice at the same time: a timer that fires while its previous run is
still queued or processing schedules exactly one follow-up run.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from .types import PathState, SchedulerMetrics
from ..utils.core.exceptions import SchedulerFault

logger = logging.getLogger(__name__)


class DebouncedScheduler:
    """Coalesces change events per path and runs the handler under an admission bound."""

    def __init__(
        self,
        handler: Callable[[Path], Awaitable[None]],
        debounce: float = 0.3,
        max_concurrency: int = 2,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            handler: Coroutine function processing one path
            debounce: Quiet period in seconds before a path is processed
            max_concurrency: Maximum number of handler runs in flight
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if debounce < 0:
            raise ValueError("debounce must be non-negative")

        self._handler: Callable[[Path], Awaitable[None]] = handler
        self._debounce: float = debounce
        self._max_concurrency: int = max_concurrency
        self._semaphore: asyncio.Semaphore = asyncio.Semaphore(max_concurrency)
        self._timers: dict[Path, asyncio.TimerHandle] = {}
        self._active: dict[Path, asyncio.Task[None]] = {}
        self._rerun: set[Path] = set()
        self._states: dict[Path, PathState] = {}
        self._idle: asyncio.Event = asyncio.Event()
        self._idle.set()
        self._closed: bool = False

        self.metrics: SchedulerMetrics = SchedulerMetrics()
        self.faults: dict[Path, SchedulerFault] = {}

    @property
    def max_concurrency(self) -> int:
        """Maximum number of concurrent handler runs."""
        return self._max_concurrency

    @property
    def debounce(self) -> float:
        """Debounce window in seconds."""
        return self._debounce

    def submit(self, path: Path, delay: float | None = None) -> None:
        """
        Record a change event for a path.

        Must be called from the event loop thread.

        Args:
            path: Template path that was added, changed or removed
            delay: Override of the debounce window for this event
        """
        if self._closed:
            logger.debug(f"Scheduler stopped, ignoring event for {path}")
            return

        loop = asyncio.get_running_loop()
        self.metrics.events_received += 1

        pending = self._timers.pop(path, None)
        if pending is not None:
            pending.cancel()

        wait = self._debounce if delay is None else delay
        self._timers[path] = loop.call_later(wait, self._fire, path)
        if path not in self._active:
            self._states[path] = PathState.PENDING_DEBOUNCE
        self._idle.clear()

    def state(self, path: Path) -> PathState:
        """Current scheduling state of a path."""
        return self._states.get(path, PathState.IDLE)

    @property
    def pending_count(self) -> int:
        """Number of paths waiting for their debounce timer."""
        return len(self._timers)

    @property
    def active_count(self) -> int:
        """Number of paths queued or processing."""
        return len(self._active)

    async def drain(self) -> None:
        """Wait until no timers are pending and no runs are queued or in flight."""
        _ = await self._idle.wait()

    async def stop(self) -> None:
        """
        Stop accepting events and cancel pending debounce timers.

        Runs already queued or processing are allowed to finish.
        """
        self._closed = True
        for timer in self._timers.values():
            timer.cancel()
        for path in self._timers:
            if path not in self._active:
                _ = self._states.pop(path, None)
        self._timers.clear()
        self._rerun.clear()

        if self._active:
            logger.debug(f"Waiting for {len(self._active)} in-flight runs to finish")
            _ = await asyncio.gather(*self._active.values(), return_exceptions=True)

        self._update_idle()

    def _fire(self, path: Path) -> None:
        _ = self._timers.pop(path, None)
        if path in self._active:
            self._rerun.add(path)
            return
        self._launch(path)

    def _launch(self, path: Path) -> None:
        self._states[path] = PathState.QUEUED
        self._active[path] = asyncio.create_task(
            self._run(path), name=f"transsfc-sync:{path}"
        )

    async def _run(self, path: Path) -> None:
        try:
            async with self._semaphore:
                self._states[path] = PathState.PROCESSING
                self.metrics.record_start()
                succeeded = False
                try:
                    await self._handler(path)
                    succeeded = True
                    _ = self.faults.pop(path, None)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    fault = SchedulerFault(f"Error processing file {path}: {e}", path, e)
                    self.faults[path] = fault
                    logger.exception(str(fault))
                finally:
                    self.metrics.record_finish(succeeded)
        finally:
            self._finish(path)

    def _finish(self, path: Path) -> None:
        _ = self._active.pop(path, None)

        if path in self._rerun:
            self._rerun.discard(path)
            if not self._closed:
                self._launch(path)
                return

        if path in self._timers:
            self._states[path] = PathState.PENDING_DEBOUNCE
        else:
            _ = self._states.pop(path, None)
        self._update_idle()

    def _update_idle(self) -> None:
        if not self._timers and not self._active:
            self._idle.set()
