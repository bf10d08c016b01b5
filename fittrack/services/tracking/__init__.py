"""
Tracking module - Workout session lifecycle.

This module provides:
- Geodesic distance and pace/speed conversions
- Drift-tolerant session clock
- Typed tracker events and the event bus
- The lifecycle engine and activity extensions
"""
from fittrack.services.tracking.geo import (
    calculate_distance,
    speed_kmh,
    pace_from_speed,
    format_pace,
    format_duration,
    compress_route,
    encode_route,
    bounding_box,
)
from fittrack.services.tracking.clock import SessionClock
from fittrack.services.tracking.events import (
    EventBus,
    TrackerEvent,
    DurationTick,
    Started,
    Paused,
    Resumed,
    Stopped,
    GpsSampleAccepted,
    SplitRecorded,
    LapCompleted,
    RestStarted,
    RestCompleted,
    AutoSaved,
)
from fittrack.services.tracking.extensions import (
    ActivityExtension,
    GpsActivityExtension,
    RunningExtension,
    CyclingExtension,
    SwimmingExtension,
    GymExtension,
)
from fittrack.services.tracking.tracker import ActivityTracker
from fittrack.services.tracking.factory import create_tracker, get_extension_class

__all__ = [
    # Geo
    "calculate_distance",
    "speed_kmh",
    "pace_from_speed",
    "format_pace",
    "format_duration",
    "compress_route",
    "encode_route",
    "bounding_box",
    # Clock
    "SessionClock",
    # Events
    "EventBus",
    "TrackerEvent",
    "DurationTick",
    "Started",
    "Paused",
    "Resumed",
    "Stopped",
    "GpsSampleAccepted",
    "SplitRecorded",
    "LapCompleted",
    "RestStarted",
    "RestCompleted",
    "AutoSaved",
    # Extensions
    "ActivityExtension",
    "GpsActivityExtension",
    "RunningExtension",
    "CyclingExtension",
    "SwimmingExtension",
    "GymExtension",
    # Engine
    "ActivityTracker",
    "create_tracker",
    "get_extension_class",
]
