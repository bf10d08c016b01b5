"""
Session Clock - Drift-tolerant elapsed time with pause/resume.

Elapsed time is always recomputed from the origin timestamp instead of
being incremented, so late or skipped timer firings self-correct.
"""
import math
from typing import Callable, Optional

from fittrack.core.config import settings
from fittrack.core.errors import ErrorReporter
from fittrack.core.logging import get_logger
from fittrack.core.scheduler import Scheduler, TimerHandle

logger = get_logger(__name__)


class SessionClock:
    """
    Elapsed-time accumulator for one session.

    Fires on_tick(elapsed) every tick interval while running and unpaused,
    and on_autosave() every autosave interval while running (paused or not).
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_tick: Optional[Callable[[int], None]] = None,
        on_autosave: Optional[Callable[[], None]] = None,
        reporter: Optional[ErrorReporter] = None,
        tick_interval: Optional[float] = None,
        autosave_interval: Optional[float] = None,
    ):
        self.scheduler = scheduler
        self.on_tick = on_tick
        self.on_autosave = on_autosave
        self.reporter = reporter or ErrorReporter()
        self.tick_interval = tick_interval or settings.TICK_INTERVAL_SECONDS
        self.autosave_interval = autosave_interval or settings.AUTOSAVE_INTERVAL_SECONDS

        self._origin: Optional[float] = None
        self._paused_at: Optional[float] = None
        self._terminal: Optional[int] = None
        self._tick_handle: Optional[TimerHandle] = None
        self._autosave_handle: Optional[TimerHandle] = None

    @property
    def is_running(self) -> bool:
        return self._origin is not None and self._terminal is None

    @property
    def is_paused(self) -> bool:
        return self.is_running and self._paused_at is not None

    @property
    def elapsed(self) -> int:
        """Whole seconds of unpaused running time."""
        if self._terminal is not None:
            return self._terminal
        if self._origin is None:
            return 0
        reference = self._paused_at if self._paused_at is not None else self.scheduler.now()
        return max(0, math.floor(reference - self._origin))

    def start(self, initial_elapsed: int = 0) -> bool:
        """
        Start the clock.

        Args:
            initial_elapsed: Seconds already accumulated (restored sessions)

        Returns:
            False if the clock is already running
        """
        if self.is_running:
            return False

        self._origin = self.scheduler.now() - initial_elapsed
        self._paused_at = None
        self._terminal = None
        self._schedule_tick()
        self._schedule_autosave()
        return True

    def pause(self) -> bool:
        if not self.is_running or self._paused_at is not None:
            return False

        self._paused_at = self.scheduler.now()
        return True

    def resume(self) -> bool:
        if not self.is_paused:
            return False

        paused_for = self.scheduler.now() - self._paused_at
        self._origin += paused_for
        self._paused_at = None
        return True

    def stop(self) -> bool:
        if not self.is_running:
            return False

        self._terminal = self.elapsed
        self._cancel_timers()
        logger.debug("Session clock stopped", elapsed=self._terminal)
        return True

    def cancel(self) -> None:
        """Halt all notifications and freeze elapsed time."""
        if self.is_running:
            self._terminal = self.elapsed
        self._cancel_timers()
        self.on_tick = None
        self.on_autosave = None

    # ========================================
    # Timer plumbing
    # ========================================

    def _cancel_timers(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        if self._autosave_handle is not None:
            self._autosave_handle.cancel()
            self._autosave_handle = None

    def _schedule_tick(self) -> None:
        self._tick_handle = self.scheduler.after(self.tick_interval, self._fire_tick)

    def _schedule_autosave(self) -> None:
        self._autosave_handle = self.scheduler.after(self.autosave_interval, self._fire_autosave)

    def _fire_tick(self) -> None:
        if not self.is_running:
            return

        self._schedule_tick()
        if self._paused_at is None and self.on_tick is not None:
            try:
                self.on_tick(self.elapsed)
            except Exception as e:
                self.reporter.report("clock.tick", e, elapsed=self.elapsed)

    def _fire_autosave(self) -> None:
        if not self.is_running:
            return

        self._schedule_autosave()
        if self.on_autosave is not None:
            try:
                self.on_autosave()
            except Exception as e:
                self.reporter.report("clock.autosave", e, elapsed=self.elapsed)
