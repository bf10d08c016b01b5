"""
Tracker events and the per-tracker event bus.

The surrounding application subscribes per event type instead of
overwriting callback attributes on the tracker.
"""
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from fittrack.core.errors import ErrorReporter


@dataclass(frozen=True)
class TrackerEvent:
    session_id: Optional[str]


@dataclass(frozen=True)
class DurationTick(TrackerEvent):
    duration: int


@dataclass(frozen=True)
class Started(TrackerEvent):
    restored: bool = False


@dataclass(frozen=True)
class Paused(TrackerEvent):
    reason: str = "manual"


@dataclass(frozen=True)
class Resumed(TrackerEvent):
    reason: str = "manual"


@dataclass(frozen=True)
class Stopped(TrackerEvent):
    duration: int = 0


@dataclass(frozen=True)
class GpsSampleAccepted(TrackerEvent):
    point: Any = None
    stats: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class SplitRecorded(TrackerEvent):
    split: Any = None


@dataclass(frozen=True)
class LapCompleted(TrackerEvent):
    lap: Any = None


@dataclass(frozen=True)
class RestStarted(TrackerEvent):
    seconds: int = 0


@dataclass(frozen=True)
class RestCompleted(TrackerEvent):
    skipped: bool = False


@dataclass(frozen=True)
class AutoSaved(TrackerEvent):
    key: str = ""


E = TypeVar("E", bound=TrackerEvent)
Handler = Callable[[Any], None]


class EventBus:
    """
    Synchronous publish point for tracker events.

    A failing handler is reported and skipped, never allowed to break
    the emitter or the other handlers.
    """

    def __init__(self, reporter: Optional[ErrorReporter] = None):
        self._handlers: Dict[Type[TrackerEvent], List[Handler]] = defaultdict(list)
        self.reporter = reporter or ErrorReporter()

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        """
        Register a handler.

        Returns:
            Callable that removes the handler again
        """
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, event: TrackerEvent) -> None:
        for handler in list(self._handlers.get(type(event), [])):
            try:
                handler(event)
            except Exception as e:
                self.reporter.report(
                    "events.handler",
                    e,
                    event_type=type(event).__name__,
                    session_id=event.session_id,
                )

    def clear(self) -> None:
        self._handlers.clear()

    def handler_count(self, event_type: Optional[Type[TrackerEvent]] = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(h) for h in self._handlers.values())
