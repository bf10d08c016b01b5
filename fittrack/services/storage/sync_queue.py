"""
Sync Queue - Durable retry buffer for workouts that failed remote save.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fittrack.core.config import settings
from fittrack.core.logging import get_logger, log_sync_result
from fittrack.core.scheduler import Scheduler
from fittrack.models.session import to_iso
from fittrack.models.sync import SyncResult
from fittrack.services.external.workout_api import WorkoutAPIInterface
from fittrack.services.storage.store import (
    SYNC_QUEUE_KEY,
    KeyValueStore,
    get_store_lock,
    read_json_list,
    write_json,
)

logger = get_logger(__name__)


class SyncQueue:
    """
    Persisted list of workouts awaiting upload.

    Enqueue and sweep share the store lock, so a sweep's read-modify-write
    never loses an entry enqueued concurrently.

    Usage:
        queue = SyncQueue(store, api)
        await queue.enqueue(workout)
        result = await queue.sync_pending_workouts()
    """

    def __init__(
        self,
        store: KeyValueStore,
        api: Optional[WorkoutAPIInterface] = None,
        scheduler: Optional[Scheduler] = None,
        max_attempts: Optional[int] = None,
    ):
        self.store = store
        self.api = api
        self.scheduler = scheduler
        self.max_attempts = max_attempts or settings.SYNC_MAX_ATTEMPTS

    def _now_iso(self) -> Optional[str]:
        if self.scheduler is not None:
            return to_iso(self.scheduler.now())
        return datetime.now(timezone.utc).isoformat()

    async def enqueue(self, workout: Dict[str, Any]) -> int:
        """
        Append a workout with fresh sync bookkeeping.

        Returns:
            Queue length after the append
        """
        entry = {
            **workout,
            "needsSync": True,
            "syncAttempts": 0,
            "lastSyncAttempt": None,
        }

        async with get_store_lock(self.store):
            queue = await read_json_list(self.store, SYNC_QUEUE_KEY)
            queue.append(entry)
            await write_json(self.store, SYNC_QUEUE_KEY, queue)

        logger.info("Queued workout for sync", workout_id=workout.get("id"), queue_length=len(queue))
        return len(queue)

    async def pending(self) -> List[Dict[str, Any]]:
        return await read_json_list(self.store, SYNC_QUEUE_KEY)

    async def sync_pending_workouts(self) -> SyncResult:
        """
        Try to upload every queued workout once.

        Successful entries leave the queue. Failed entries keep a retry
        budget of max_attempts; once it is spent they are dropped.
        """
        if self.api is None:
            raise ValueError("SyncQueue needs a workout API to sync")

        result = SyncResult()

        async with get_store_lock(self.store):
            queue = await read_json_list(self.store, SYNC_QUEUE_KEY)
            if not queue:
                return result

            kept: List[Dict[str, Any]] = []

            for entry in queue:
                activity_type = entry.get("type", "Unknown")
                payload = {
                    k: v for k, v in entry.items()
                    if k not in ("needsSync", "syncAttempts", "lastSyncAttempt")
                }

                try:
                    response = await self.api.save_workout(activity_type, payload)
                    ok = bool(response.get("success"))
                    failure = None if ok else response.get("message")
                except Exception as e:
                    ok = False
                    failure = f"{type(e).__name__}: {e}"

                if ok:
                    result.synced += 1
                    continue

                attempts = int(entry.get("syncAttempts", 0)) + 1
                updated = {**entry, "syncAttempts": attempts, "lastSyncAttempt": self._now_iso()}

                if attempts < self.max_attempts:
                    kept.append(updated)
                    logger.debug(
                        "Workout sync failed, will retry",
                        workout_id=entry.get("id"),
                        attempts=attempts,
                        reason=failure,
                    )
                else:
                    result.failed += 1
                    result.dropped.append(entry.get("id"))
                    logger.warning(
                        "Dropping workout after exhausting sync attempts",
                        workout_id=entry.get("id"),
                        attempts=attempts,
                        reason=failure,
                    )

            await write_json(self.store, SYNC_QUEUE_KEY, kept)
            result.remaining = len(kept)

        log_sync_result(logger, result.synced, result.failed, result.remaining)
        return result


async def sync_pending_workouts(
    store: KeyValueStore,
    api: WorkoutAPIInterface,
    max_attempts: Optional[int] = None,
) -> SyncResult:
    """Sweep the sync queue of a store (e.g. on every app foreground)."""
    return await SyncQueue(store, api, max_attempts=max_attempts).sync_pending_workouts()
