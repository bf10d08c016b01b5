"""
Storage module - Local persistence for sessions and finished workouts.

This module provides:
- KeyValueStore port and an in-memory implementation
- Workout history (newest first)
- Sync queue for deferred uploads
"""
from fittrack.services.storage.history import WorkoutHistory
from fittrack.services.storage.store import InMemoryStore, KeyValueStore, autosave_key
from fittrack.services.storage.sync_queue import SyncQueue, sync_pending_workouts

__all__ = [
    "InMemoryStore",
    "KeyValueStore",
    "autosave_key",
    "WorkoutHistory",
    "SyncQueue",
    "sync_pending_workouts",
]
