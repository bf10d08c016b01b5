"""
Activity extensions - Activity-specific behaviour injected into the tracker.
"""
from fittrack.services.tracking.extensions.base import ActivityExtension
from fittrack.services.tracking.extensions.gps import GpsActivityExtension
from fittrack.services.tracking.extensions.running import RunningExtension
from fittrack.services.tracking.extensions.cycling import CyclingExtension
from fittrack.services.tracking.extensions.swimming import SwimmingExtension
from fittrack.services.tracking.extensions.gym import GymExtension

__all__ = [
    "ActivityExtension",
    "GpsActivityExtension",
    "RunningExtension",
    "CyclingExtension",
    "SwimmingExtension",
    "GymExtension",
]
