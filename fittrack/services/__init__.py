"""
Services module - Session engine and its collaborators.

Modules:
- tracking: lifecycle engine, clock, events and activity extensions
- storage: local store, workout history and sync queue
- external: remote API, location and haptics collaborators
"""
from fittrack.services.tracking import ActivityTracker, create_tracker
from fittrack.services.storage import InMemoryStore, SyncQueue, sync_pending_workouts

__all__ = [
    "ActivityTracker",
    "create_tracker",
    "InMemoryStore",
    "SyncQueue",
    "sync_pending_workouts",
]
