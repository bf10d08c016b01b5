"""
Running Extension - GPS running with MET calories and a run summary.
"""
import math
from typing import Any, Dict

from fittrack.core.errors import WorkoutPreparationError
from fittrack.models.session import ActivityKind
from fittrack.services.tracking.extensions.gps import GpsActivityExtension
from fittrack.services.tracking.geo import format_duration, format_pace


class RunningExtension(GpsActivityExtension):
    """
    Running session behaviour.

    MET bands by average speed, from slow jog to 16+ km/h.
    """

    activity_type = ActivityKind.RUNNING
    payload_key = "running"
    MET_BANDS = (
        (8.0, 6.0),
        (9.7, 8.3),
        (11.3, 9.8),
        (12.9, 11.0),
        (16.0, 12.8),
        (math.inf, 14.5),
    )

    def summary(self) -> Dict[str, Any]:
        """Display-ready run summary."""
        return {
            "distanceKm": f"{self.distance / 1000:.2f}",
            "duration": format_duration(self._duration()),
            "averagePace": format_pace(self.average_pace),
            "bestPace": format_pace(self.best_pace),
            "splits": len(self.splits),
            "elevationGain": round(self.elevation.gain),
        }

    def prepare_final_payload(self, record: Dict[str, Any]) -> Dict[str, Any]:
        if not record.get("userId"):
            raise WorkoutPreparationError("Running workout requires a userId")

        return {
            **super().prepare_final_payload(record),
            "distance": self.distance,
            "summary": self.summary(),
        }
