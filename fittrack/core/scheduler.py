"""
Scheduler - Injectable time source for session timers.

Provides:
- now(): current time in epoch seconds
- after(delay, callback): one-shot timer returning a cancellable handle

AsyncioScheduler drives real sessions from the running event loop.
ManualScheduler is a simulated clock for tests and GPS replays.
"""
import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple


class TimerHandle(ABC):
    """Handle for a scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the callback if it has not run yet."""
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):
    """Abstract time source and one-shot timer factory."""

    @abstractmethod
    def now(self) -> float:
        """Current time in epoch seconds."""
        pass

    @abstractmethod
    def after(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay seconds."""
        pass


class _AsyncioHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by the asyncio event loop.

    Timers run on the loop thread, so tracker callbacks never race with
    user-initiated calls made from coroutines on the same loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return time.time()

    def after(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioHandle(self._get_loop().call_later(delay, callback))


class _ManualHandle(TimerHandle):
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """
    Simulated clock.

    Time only moves when advance() is called; due callbacks fire in due
    order with now() set to their due time.

    Usage:
        scheduler = ManualScheduler()
        tracker = create_tracker(ActivityKind.RUNNING, "user-1", scheduler=scheduler)
        tracker.start()
        scheduler.advance(90)
    """

    def __init__(self, start: float = 1_700_000_000.0):
        self._now = start
        self._queue: List[Tuple[float, int, _ManualHandle]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def after(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle(self._now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> None:
        """Move time forward, firing every callback that falls due."""
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            handle.callback()
        self._now = target

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)
