"""
External Services - Collaborators owned by the host application.

Services:
- WorkoutAPIInterface / HttpWorkoutAPI: remote workout save
- LocationProvider: position stream for GPS activities
- Haptics: vibration feedback
"""
from fittrack.services.external.haptics import Haptics, NullHaptics
from fittrack.services.external.location import (
    LocationProvider,
    LocationSubscription,
    ManualLocationProvider,
)
from fittrack.services.external.workout_api import HttpWorkoutAPI, WorkoutAPIInterface

__all__ = [
    "Haptics",
    "NullHaptics",
    "LocationProvider",
    "LocationSubscription",
    "ManualLocationProvider",
    "HttpWorkoutAPI",
    "WorkoutAPIInterface",
]
