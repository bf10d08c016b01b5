"""
Tracker Factory - Builds a lifecycle engine for an activity kind.
"""
from typing import Any, Dict, Optional, Type, Union

from fittrack.core.errors import ErrorReporter
from fittrack.core.logging import get_logger
from fittrack.core.scheduler import Scheduler
from fittrack.models.session import ActivityKind
from fittrack.services.external.haptics import Haptics
from fittrack.services.external.location import LocationProvider
from fittrack.services.external.workout_api import WorkoutAPIInterface
from fittrack.services.storage.store import KeyValueStore
from fittrack.services.storage.sync_queue import SyncQueue
from fittrack.services.tracking.extensions import (
    ActivityExtension,
    CyclingExtension,
    GpsActivityExtension,
    GymExtension,
    RunningExtension,
    SwimmingExtension,
)
from fittrack.services.tracking.tracker import ActivityTracker

logger = get_logger(__name__)

_EXTENSIONS: Dict[ActivityKind, Type[ActivityExtension]] = {
    ActivityKind.RUNNING: RunningExtension,
    ActivityKind.CYCLING: CyclingExtension,
    ActivityKind.SWIMMING: SwimmingExtension,
    ActivityKind.GYM: GymExtension,
}


def get_extension_class(kind: Union[ActivityKind, str]) -> Type[ActivityExtension]:
    """
    Get the extension class for an activity kind.

    Args:
        kind: ActivityKind or its value ("Running", "Swimming", ...)

    Raises:
        ValueError: If the activity kind is not supported
    """
    try:
        kind = ActivityKind(kind)
    except ValueError:
        raise ValueError(f"Unsupported activity type: {kind}")
    return _EXTENSIONS[kind]


def create_tracker(
    kind: Union[ActivityKind, str],
    user_id: Optional[str],
    *,
    store: Optional[KeyValueStore] = None,
    api: Optional[WorkoutAPIInterface] = None,
    scheduler: Optional[Scheduler] = None,
    haptics: Optional[Haptics] = None,
    location: Optional[LocationProvider] = None,
    reporter: Optional[ErrorReporter] = None,
    sync_queue: Optional[SyncQueue] = None,
    **extension_options: Any,
) -> ActivityTracker:
    """
    Build a tracker for one workout.

    Args:
        kind: Activity kind
        user_id: Session owner, required before saving
        location: Location provider, used by GPS activities only
        **extension_options: Passed to the extension (pool_length,
            auto_pause_speed, auto_lap_distance, ...)

    Returns:
        An idle ActivityTracker
    """
    extension_class = get_extension_class(kind)

    if issubclass(extension_class, GpsActivityExtension):
        extension = extension_class(location=location, **extension_options)
    else:
        if location is not None:
            logger.debug("Ignoring location provider for non-GPS activity", activity_type=str(kind))
        extension = extension_class(**extension_options)

    return ActivityTracker(
        extension,
        user_id,
        store=store,
        api=api,
        scheduler=scheduler,
        haptics=haptics,
        reporter=reporter,
        sync_queue=sync_queue,
    )
