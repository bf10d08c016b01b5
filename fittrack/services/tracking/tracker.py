"""
Activity Tracker - Session lifecycle engine shared by every activity kind.

Orchestrates:
- State machine (idle -> active <-> paused -> stopped)
- Session clock, tick events and periodic autosave
- Final save with remote-then-local fallback and the sync queue
- Session restore after an unexpected process exit
"""
import asyncio
import json
import secrets
import string
from typing import Any, Callable, Coroutine, Dict, Optional, Set, Type

from fittrack.core.config import settings
from fittrack.core.errors import ErrorReporter, TrackerError, WorkoutPreparationError
from fittrack.core.logging import (
    get_logger,
    log_remote_save_error,
    log_session_transition,
    session_context,
)
from fittrack.core.scheduler import AsyncioScheduler, Scheduler
from fittrack.models.session import (
    ActivityKind,
    PauseReason,
    Session,
    TrackerState,
    from_iso,
    to_iso,
)
from fittrack.models.sync import SaveResult
from fittrack.services.external.haptics import (
    PAUSE_PATTERN,
    STOP_PATTERN,
    AUTO_PAUSE_PATTERN,
    Haptics,
    NullHaptics,
    Pattern,
    signal,
)
from fittrack.services.external.workout_api import WorkoutAPIInterface
from fittrack.services.storage.history import WorkoutHistory
from fittrack.services.storage.store import InMemoryStore, KeyValueStore, autosave_key
from fittrack.services.storage.sync_queue import SyncQueue
from fittrack.services.tracking.clock import SessionClock
from fittrack.services.tracking.events import (
    AutoSaved,
    DurationTick,
    EventBus,
    Paused,
    Resumed,
    Started,
    Stopped,
    TrackerEvent,
)
from fittrack.services.tracking.extensions.base import ActivityExtension

logger = get_logger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _random_suffix(length: int = 9) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class ActivityTracker:
    """
    Lifecycle engine for one workout session.

    Control operations are synchronous and return False instead of raising
    on an invalid transition. Persistence operations are coroutines.

    Usage:
        tracker = ActivityTracker(RunningExtension(location=provider), user_id="u1",
                                  store=store, api=api)
        tracker.start()
        ...
        tracker.stop()
        result = await tracker.save_workout()
    """

    def __init__(
        self,
        extension: ActivityExtension,
        user_id: Optional[str],
        store: Optional[KeyValueStore] = None,
        api: Optional[WorkoutAPIInterface] = None,
        scheduler: Optional[Scheduler] = None,
        haptics: Optional[Haptics] = None,
        reporter: Optional[ErrorReporter] = None,
        sync_queue: Optional[SyncQueue] = None,
    ):
        self.extension = extension
        self.store = store or InMemoryStore()
        self.api = api
        self.scheduler = scheduler or AsyncioScheduler()
        self.haptics = haptics or NullHaptics()
        self.reporter = reporter or ErrorReporter()
        self.history = WorkoutHistory(self.store)
        self.sync_queue = sync_queue or SyncQueue(self.store, api, scheduler=self.scheduler)

        self.session = Session(activity_type=extension.activity_type, user_id=user_id)
        self.pause_reason: Optional[PauseReason] = None
        self.events = EventBus(self.reporter)
        self.clock = SessionClock(
            self.scheduler,
            on_tick=self._on_tick,
            on_autosave=self._on_autosave_due,
            reporter=self.reporter,
        )

        self._pending: Set[asyncio.Task] = set()
        self._disposed = False

        extension.bind(self)

    # ========================================
    # Public state
    # ========================================

    @property
    def activity_type(self) -> ActivityKind:
        return self.session.activity_type

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id

    @property
    def session_id(self) -> Optional[str]:
        return self.session.session_id

    @property
    def state(self) -> TrackerState:
        return self.session.state

    @property
    def is_active(self) -> bool:
        return self.session.is_active

    @property
    def is_paused(self) -> bool:
        return self.session.is_paused

    @property
    def duration(self) -> int:
        """Active seconds, live while running and frozen after stop or cleanup."""
        return self.clock.elapsed

    @property
    def activity(self) -> ActivityExtension:
        """The activity-specific extension (laps, splits, rest, ...)."""
        return self.extension

    def subscribe(self, event_type: Type[TrackerEvent], handler: Callable[[Any], None]) -> Callable[[], None]:
        """Register an event handler; returns its unsubscribe callable."""
        return self.events.subscribe(event_type, handler)

    def emit(self, event: TrackerEvent) -> None:
        self.events.emit(event)

    # ========================================
    # Lifecycle
    # ========================================

    def generate_session_id(self) -> str:
        millis = int(self.scheduler.now() * 1000)
        return f"{self.activity_type.value.lower()}_{millis}_{_random_suffix()}"

    def start(self) -> bool:
        """
        Start a new session.

        Returns:
            False if a session is already running, the tracker was used
            before, or the activity setup (e.g. location permission) failed
        """
        if self.state != TrackerState.IDLE or self._disposed:
            return False

        self.session.session_id = self.generate_session_id()
        self.session.start_time = self.scheduler.now()
        self.session.state = TrackerState.ACTIVE

        try:
            self.extension.on_start(restored=False)
        except TrackerError as e:
            logger.warning(
                "Session start failed",
                activity_type=self.activity_type.value,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            self.session.session_id = None
            self.session.start_time = None
            self.session.state = TrackerState.IDLE
            return False

        self.clock.start()
        self.emit(Started(session_id=self.session_id))
        log_session_transition(logger, "start", self.session_id, self.activity_type.value, 0)
        return True

    def pause(self, reason: PauseReason = PauseReason.MANUAL) -> bool:
        if self.state != TrackerState.ACTIVE:
            return False

        self.clock.pause()
        self.session.duration = self.clock.elapsed
        self.session.state = TrackerState.PAUSED
        self.pause_reason = reason

        self._vibrate(AUTO_PAUSE_PATTERN if reason == PauseReason.SPEED else PAUSE_PATTERN)
        self.extension.on_pause(reason)
        self.emit(Paused(session_id=self.session_id, reason=reason.value))
        log_session_transition(
            logger, "pause", self.session_id, self.activity_type.value, self.session.duration,
            reason=reason.value,
        )
        return True

    def resume(self, reason: PauseReason = PauseReason.MANUAL) -> bool:
        if self.state != TrackerState.PAUSED:
            return False

        self.clock.resume()
        self.session.state = TrackerState.ACTIVE
        self.pause_reason = None

        self._vibrate(PAUSE_PATTERN)
        self.extension.on_resume(reason)
        self.emit(Resumed(session_id=self.session_id, reason=reason.value))
        log_session_transition(
            logger, "resume", self.session_id, self.activity_type.value, self.duration,
            reason=reason.value,
        )
        return True

    def stop(self) -> bool:
        if not self.is_active:
            return False

        self.clock.stop()
        self.session.duration = self.clock.elapsed
        self.session.end_time = self.scheduler.now()
        self.session.state = TrackerState.STOPPED
        self.pause_reason = None

        self.extension.on_stop()
        self._vibrate(STOP_PATTERN)
        self.emit(Stopped(session_id=self.session_id, duration=self.session.duration))
        log_session_transition(logger, "stop", self.session_id, self.activity_type.value, self.session.duration)
        return True

    def cleanup(self) -> None:
        """Release timers, extension resources and subscribers. Idempotent."""
        self.clock.cancel()
        self.extension.on_cleanup()
        self.events.clear()

        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

        self._disposed = True

    # ========================================
    # Session data
    # ========================================

    def get_session_data(self) -> Dict[str, Any]:
        """Serializable view of the session envelope."""
        self.session.duration = self.duration
        data = self.session.to_dict(now=self.scheduler.now())
        data["pauseReason"] = self.pause_reason.value if self.pause_reason else None
        return data

    def calculate_calories(self) -> int:
        return self.extension.calculate_calories()

    def prepare_workout_data(self) -> Dict[str, Any]:
        """
        Build the final workout record.

        Raises:
            WorkoutPreparationError: The session has no owner
        """
        if not self.user_id:
            raise WorkoutPreparationError("Cannot prepare workout without a userId")

        session_data = self.get_session_data()
        enhanced = self.extension.enhance_session_data(session_data)

        millis = int(self.scheduler.now() * 1000)
        record = {
            "id": f"workout_{millis}_{_random_suffix(6)}",
            "sessionId": self.session_id,
            "userId": self.user_id,
            "type": self.activity_type.value,
            "name": f"{self.activity_type.value} Session",
            "startTime": session_data["startTime"],
            "endTime": session_data["endTime"] or to_iso(self.scheduler.now()),
            "date": session_data["startTime"],
            "duration": session_data["duration"],
            "calories": enhanced["calories"],
            "completed": True,
            "privacy": settings.DEFAULT_PRIVACY,
        }
        return self.extension.prepare_final_payload(record)

    # ========================================
    # Persistence
    # ========================================

    async def auto_save(self) -> bool:
        """
        Write the current snapshot to active_session_<id>.

        Never raises; failures are reported and the session continues.
        """
        if not self.is_active:
            return False

        key = autosave_key(self.session_id)
        try:
            snapshot = self.extension.enhance_session_data(self.get_session_data())
            await self.store.set(key, json.dumps(snapshot))
        except Exception as e:
            self.reporter.report("tracker.autosave", e, session_id=self.session_id)
            return False

        logger.debug("Auto-saved session", session_id=self.session_id, duration=snapshot["duration"])
        self.emit(AutoSaved(session_id=self.session_id, key=key))
        return True

    async def save_workout(self) -> SaveResult:
        """
        Persist the finished workout.

        Remote save first; on any remote failure the record is kept in
        local history and queued for sync, which still counts as success.
        """
        with session_context(self.session_id, self.activity_type.value):
            return await self._save_workout()

    async def _save_workout(self) -> SaveResult:
        try:
            workout = self.prepare_workout_data()
        except Exception as e:
            logger.error(
                "Workout preparation failed",
                session_id=self.session_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return SaveResult(success=False, message=f"Could not prepare workout: {e}")

        response = await self._save_remote(workout)

        if response is not None:
            await self._append_history({**workout, "synced": True})
            await self._clear_autosave()
            return SaveResult(
                success=True,
                message=response.get("message") or f"{self.activity_type.value} session saved successfully!",
                workout=response.get("workout") or workout,
                achievements=response.get("achievements") or [],
                synced=True,
            )

        stored = await self._append_history({**workout, "synced": False})
        queued = await self._enqueue(workout)
        await self._clear_autosave()

        if not stored and not queued:
            return SaveResult(success=False, message="Workout could not be saved", workout=workout)

        return SaveResult(
            success=True,
            message="Workout saved locally, will sync when online",
            workout=workout,
        )

    async def restore_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Reload an autosaved session after an unexpected exit.

        Returns:
            The restored snapshot, or None when nothing was restored
        """
        if self.is_active or self._disposed:
            logger.warning("Cannot restore into a busy tracker", session_id=session_id)
            return None

        try:
            raw = await self.store.get(autosave_key(session_id))
            snapshot = json.loads(raw) if raw is not None else None
        except Exception as e:
            self.reporter.report("tracker.restore", e, session_id=session_id)
            return None

        if not snapshot or not snapshot.get("isActive"):
            return None

        self.session.session_id = snapshot.get("sessionId", session_id)
        self.session.start_time = from_iso(snapshot.get("startTime"))
        self.session.duration = int(snapshot.get("duration", 0))
        self.session.end_time = None
        self.extension.restore(snapshot.get(self.extension.payload_key) or {})

        try:
            self.extension.on_start(restored=True)
        except TrackerError as e:
            self.reporter.report("tracker.restore.on_start", e, session_id=self.session_id)

        self.clock.start(initial_elapsed=self.session.duration)
        if snapshot.get("isPaused"):
            self.clock.pause()
            self.session.state = TrackerState.PAUSED
            self.pause_reason = PauseReason(snapshot.get("pauseReason") or PauseReason.MANUAL.value)
            self.extension.on_pause(self.pause_reason)
        else:
            self.session.state = TrackerState.ACTIVE

        self.emit(Started(session_id=self.session_id, restored=True))
        log_session_transition(
            logger, "restore", self.session_id, self.activity_type.value, self.session.duration,
            paused=self.is_paused,
        )
        return snapshot

    async def flush(self) -> None:
        """Wait for autosaves scheduled by the clock."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ========================================
    # Internals
    # ========================================

    def _vibrate(self, pattern: Pattern) -> None:
        signal(self.haptics, pattern)

    def _on_tick(self, elapsed: int) -> None:
        if self._disposed:
            return
        self.session.duration = elapsed
        self.emit(DurationTick(session_id=self.session_id, duration=elapsed))

    def _on_autosave_due(self) -> None:
        if self._disposed or not self.is_active:
            return
        self._spawn(self.auto_save())

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning("No running event loop, autosave skipped", session_id=self.session_id)
            return

        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _save_remote(self, workout: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Returns the API response on success, None on any failure."""
        if self.api is None:
            logger.info("No workout API configured, saving locally", session_id=self.session_id)
            return None

        try:
            response = await self.api.save_workout(self.activity_type.value, workout)
        except Exception as e:
            log_remote_save_error(
                logger,
                self.activity_type.value,
                type(e).__name__,
                str(e),
                session_id=self.session_id,
            )
            self.reporter.report("tracker.remote_save", e, session_id=self.session_id)
            return None

        if not response or not response.get("success"):
            log_remote_save_error(
                logger,
                self.activity_type.value,
                "RejectedByServer",
                (response or {}).get("message") or "unknown",
                session_id=self.session_id,
            )
            return None

        return response

    async def _append_history(self, workout: Dict[str, Any]) -> bool:
        try:
            await self.history.add(workout)
        except Exception as e:
            self.reporter.report("tracker.history", e, session_id=self.session_id)
            return False
        return True

    async def _enqueue(self, workout: Dict[str, Any]) -> bool:
        try:
            await self.sync_queue.enqueue(workout)
        except Exception as e:
            self.reporter.report("tracker.sync_queue", e, session_id=self.session_id)
            return False
        return True

    async def _clear_autosave(self) -> None:
        if not self.session_id:
            return
        try:
            await self.store.remove(autosave_key(self.session_id))
        except Exception as e:
            self.reporter.report("tracker.clear_autosave", e, session_id=self.session_id)
