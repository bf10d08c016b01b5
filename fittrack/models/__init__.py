from fittrack.models.session import ActivityKind, PauseReason, Session, TrackerState
from fittrack.models.gps import Elevation, GpsPoint, PositionSample, Split, TrainingInterval
from fittrack.models.swimming import RestPeriod, SwimLap
from fittrack.models.gym import ExerciseSet
from fittrack.models.sync import SaveResult, SyncResult

__all__ = [
    "ActivityKind",
    "PauseReason",
    "Session",
    "TrackerState",
    "Elevation",
    "GpsPoint",
    "PositionSample",
    "Split",
    "TrainingInterval",
    "RestPeriod",
    "SwimLap",
    "ExerciseSet",
    "SaveResult",
    "SyncResult",
]
