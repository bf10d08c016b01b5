"""
Workout History - Local list of finished workouts, newest first.
"""
from typing import Any, Dict, List

from fittrack.core.logging import get_logger
from fittrack.services.storage.store import (
    HISTORY_KEY,
    KeyValueStore,
    get_store_lock,
    read_json_list,
    write_json,
)

logger = get_logger(__name__)


class WorkoutHistory:
    """Append/list access to the workoutHistory key."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def add(self, workout: Dict[str, Any]) -> int:
        """
        Prepend a workout.

        Returns:
            History length after the insert
        """
        async with get_store_lock(self.store):
            workouts = await read_json_list(self.store, HISTORY_KEY)
            workouts.insert(0, workout)
            await write_json(self.store, HISTORY_KEY, workouts)

        logger.debug("Added workout to history", workout_id=workout.get("id"), total=len(workouts))
        return len(workouts)

    async def list(self) -> List[Dict[str, Any]]:
        return await read_json_list(self.store, HISTORY_KEY)
