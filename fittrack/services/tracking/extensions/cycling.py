"""
Cycling Extension - GPS cycling with interval-training blocks.
"""
import math
from typing import Any, Dict, List, Optional

from fittrack.core.config import settings
from fittrack.core.logging import get_logger
from fittrack.models.gps import TrainingInterval
from fittrack.models.session import ActivityKind, from_iso
from fittrack.services.tracking.extensions.gps import GpsActivityExtension

logger = get_logger(__name__)

INTERVAL_TYPES = ("work", "rest", "warmup", "cooldown")


class CyclingExtension(GpsActivityExtension):
    activity_type = ActivityKind.CYCLING
    payload_key = "cycling"
    MET_BANDS = (
        (16.0, 4.0),
        (19.0, 6.8),
        (22.0, 8.0),
        (25.0, 10.0),
        (math.inf, 12.0),
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.intervals: List[TrainingInterval] = []

    def default_auto_pause_speed(self) -> float:
        return settings.CYCLING_AUTO_PAUSE_SPEED_KMH

    def start_interval(
        self,
        interval_type: str,
        duration: int,
        target_power: Optional[float] = None,
    ) -> Optional[TrainingInterval]:
        """
        Log an interval-training block starting now.

        Raises:
            ValueError: Unknown interval type
        """
        if interval_type not in INTERVAL_TYPES:
            raise ValueError(f"Unknown interval type: {interval_type}")
        if self.tracker is None or not self.tracker.is_active:
            return None

        now = self._now()
        interval = TrainingInterval(
            id=f"interval_{int(now * 1000)}",
            type=interval_type,
            start_time=now,
            duration=duration,
            start_distance=self.distance,
            target_power=target_power,
        )
        self.intervals.append(interval)
        logger.info(
            "Interval started",
            session_id=self.tracker.session_id,
            type=interval_type,
            duration=duration,
        )
        return interval

    def activity_data(self) -> Dict[str, Any]:
        return {
            **super().activity_data(),
            "intervals": [i.to_dict() for i in self.intervals],
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        super().restore(snapshot)
        self.intervals = [
            TrainingInterval(
                id=i["id"],
                type=i["type"],
                start_time=from_iso(i.get("startTime")) or self._now(),
                duration=i.get("duration", 0),
                start_distance=i.get("startDistance", 0.0),
                target_power=i.get("targetPower"),
            )
            for i in (snapshot or {}).get("intervals", [])
        ]
