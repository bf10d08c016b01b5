"""
Swimming Extension - Pool laps, SWOLF scoring and rest countdown.

No GPS. Laps are completed by explicit trigger; rest intervals count
down on the tracker's scheduler and never pause the session clock.
"""
from typing import Any, Dict, List, Optional

from fittrack.core.config import settings
from fittrack.core.logging import get_logger
from fittrack.core.scheduler import TimerHandle
from fittrack.models.session import CALORIE_RATES, ActivityKind, from_iso
from fittrack.models.swimming import RestPeriod, SwimLap
from fittrack.services.external.haptics import REST_COMPLETE_PATTERN, signal
from fittrack.services.tracking.events import LapCompleted, RestCompleted, RestStarted
from fittrack.services.tracking.extensions.base import ActivityExtension

logger = get_logger(__name__)

STROKE_TYPES = ("Freestyle", "Backstroke", "Breaststroke", "Butterfly", "Individual Medley")


class SwimmingExtension(ActivityExtension):
    """
    Pool swimming behaviour.

    Usage:
        tracker = create_tracker(ActivityKind.SWIMMING, "u1", pool_length=50)
        tracker.start()
        tracker.activity.complete_lap(stroke_count=20)
        tracker.activity.start_rest(30)
    """

    activity_type = ActivityKind.SWIMMING
    payload_key = "swimming"

    def __init__(self, pool_length: Optional[float] = None, stroke_type: str = "Freestyle"):
        super().__init__()
        self.pool_length = pool_length or settings.DEFAULT_POOL_LENGTH_M
        self.stroke_type = stroke_type

        self.laps: List[SwimLap] = []
        self.total_distance = 0.0
        self.current_lap_start = 0  # duration offset of the current lap boundary

        self.is_resting = False
        self.rest_remaining = 0
        self.rest_periods: List[RestPeriod] = []
        self._rest_planned = 0
        self._rest_started_at: Optional[float] = None
        self._rest_handle: Optional[TimerHandle] = None

    # ========================================
    # Session parameters
    # ========================================

    def set_pool_length(self, length: float) -> None:
        if length <= 0:
            raise ValueError("Pool length must be positive")
        self.pool_length = length

    def set_stroke_type(self, stroke_type: str) -> None:
        self.stroke_type = stroke_type

    # ========================================
    # Laps
    # ========================================

    def complete_lap(self, stroke_count: int = 0) -> Optional[SwimLap]:
        """
        Close the current pool length.

        Returns:
            The new lap, or None when inactive or resting
        """
        if self.tracker is None or not self.tracker.is_active or self.is_resting:
            return None

        duration = self._duration()
        lap_time = duration - self.current_lap_start

        lap = SwimLap(
            lap_number=len(self.laps) + 1,
            time=lap_time,
            stroke_type=self.stroke_type,
            stroke_count=stroke_count,
            pool_length=self.pool_length,
            swolf=lap_time + stroke_count,
            timestamp=self._now(),
        )
        self.laps.append(lap)
        self.total_distance += self.pool_length
        self.current_lap_start = duration

        self.tracker.emit(LapCompleted(session_id=self.tracker.session_id, lap=lap))
        logger.debug(
            "Lap completed",
            session_id=self.tracker.session_id,
            lap=lap.lap_number,
            time=lap_time,
            swolf=lap.swolf,
        )
        return lap

    # ========================================
    # Rest countdown
    # ========================================

    def start_rest(self, seconds: Optional[int] = None) -> bool:
        if self.tracker is None or not self.tracker.is_active or self.is_resting:
            return False

        seconds = seconds if seconds is not None else settings.DEFAULT_REST_SECONDS
        if seconds <= 0:
            return False

        self.is_resting = True
        self.rest_remaining = seconds
        self._rest_planned = seconds
        self._rest_started_at = self._now()
        self._rest_handle = self.tracker.scheduler.after(1, self._rest_tick)

        self.tracker.emit(RestStarted(session_id=self.tracker.session_id, seconds=seconds))
        return True

    def skip_rest(self) -> bool:
        if not self.is_resting:
            return False
        self._end_rest(skipped=True)
        return True

    def _rest_tick(self) -> None:
        if not self.is_resting:
            return

        self.rest_remaining -= 1
        if self.rest_remaining <= 0:
            self._end_rest(skipped=False)
            return

        self._rest_handle = self.tracker.scheduler.after(1, self._rest_tick)

    def _end_rest(self, skipped: bool) -> None:
        self._cancel_rest_timer()
        actual = self._rest_planned - max(0, self.rest_remaining)

        self.rest_periods.append(
            RestPeriod(
                planned=self._rest_planned,
                actual=actual,
                skipped=skipped,
                started_at=self._rest_started_at,
            )
        )
        self.is_resting = False
        self.rest_remaining = 0

        if not skipped:
            signal(self.tracker.haptics, REST_COMPLETE_PATTERN)
        self.tracker.emit(RestCompleted(session_id=self.tracker.session_id, skipped=skipped))

    def _cancel_rest_timer(self) -> None:
        if self._rest_handle is not None:
            self._rest_handle.cancel()
            self._rest_handle = None

    def on_stop(self) -> None:
        if self.is_resting:
            self._end_rest(skipped=True)

    def on_cleanup(self) -> None:
        self._cancel_rest_timer()
        self.is_resting = False

    # ========================================
    # Stats and payloads
    # ========================================

    def stats(self) -> Dict[str, Any]:
        total_laps = len(self.laps)
        if total_laps == 0:
            return {
                "avgLapTime": 0,
                "avgSwolf": 0,
                "avgStrokeRate": 0,
                "pace100m": 0,
                "totalLaps": 0,
                "totalDistance": self.total_distance,
            }

        lap_time = sum(lap.time for lap in self.laps)
        stroke_rate = sum(
            lap.stroke_count / (lap.time / 60) if lap.stroke_count > 0 and lap.time > 0 else 0
            for lap in self.laps
        )

        return {
            "avgLapTime": lap_time / total_laps,
            "avgSwolf": sum(lap.swolf for lap in self.laps) / total_laps,
            "avgStrokeRate": stroke_rate / total_laps,
            "pace100m": lap_time / self.total_distance * 100 if self.total_distance > 0 else 0,
            "totalLaps": total_laps,
            "totalDistance": self.total_distance,
        }

    def intensity_multiplier(self) -> float:
        if not self.laps:
            return 1.0

        avg_swolf = self.stats()["avgSwolf"]
        if avg_swolf < 30:
            return 1.3
        if avg_swolf < 40:
            return 1.1
        return 1.0

    def calculate_calories(self) -> int:
        rate = CALORIE_RATES[ActivityKind.SWIMMING]
        return round((self._duration() / 60) * rate * self.intensity_multiplier())

    def activity_data(self) -> Dict[str, Any]:
        return {
            "poolLength": self.pool_length,
            "strokeType": self.stroke_type,
            "laps": [lap.to_dict() for lap in self.laps],
            "restPeriods": [r.to_dict() for r in self.rest_periods],
            "stats": self.stats(),
        }

    def snapshot(self) -> Dict[str, Any]:
        return {
            **self.activity_data(),
            "currentLapStart": self.current_lap_start,
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        if not snapshot:
            return

        self.pool_length = snapshot.get("poolLength", self.pool_length)
        self.stroke_type = snapshot.get("strokeType", self.stroke_type)
        self.laps = [
            SwimLap.from_dict(lap, from_iso(lap.get("timestamp")) or self._now())
            for lap in snapshot.get("laps", [])
        ]
        self.total_distance = sum(lap.pool_length for lap in self.laps)
        self.current_lap_start = snapshot.get(
            "currentLapStart", sum(lap.time for lap in self.laps)
        )
