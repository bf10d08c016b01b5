"""
GPS Extension - Position pipeline shared by running and cycling.

Per accepted sample:
1. Accuracy gate and 2 m noise filter
2. Distance, instantaneous speed and pace, max speed
3. Speed-based auto-pause / auto-resume
4. Elevation gain, loss and extrema
5. Auto-lap on the configured distance
6. Averages recomputed from totals
"""
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from fittrack.core.config import settings
from fittrack.core.errors import PermissionDeniedError
from fittrack.core.logging import get_logger
from fittrack.models.gps import Elevation, GpsPoint, PositionSample, SpeedSample, Split
from fittrack.models.session import PauseReason, from_iso
from fittrack.services.external.haptics import SPLIT_PATTERN, signal
from fittrack.services.external.location import LocationProvider, LocationSubscription
from fittrack.services.tracking.events import GpsSampleAccepted, SplitRecorded
from fittrack.services.tracking.extensions.base import ActivityExtension
from fittrack.services.tracking.geo import (
    bounding_box,
    calculate_distance,
    compress_route,
    encode_route,
    pace_from_speed,
    speed_kmh,
)

logger = get_logger(__name__)

# (upper speed bound in km/h, MET)
MetBands = Sequence[Tuple[float, float]]


class GpsActivityExtension(ActivityExtension):
    """
    Base for activities driven by a location stream.

    Subclasses set activity_type, payload_key and MET_BANDS.
    """

    supports_gps = True
    MET_BANDS: MetBands = ((math.inf, 8.0),)

    def __init__(
        self,
        location: Optional[LocationProvider] = None,
        auto_pause_enabled: bool = True,
        auto_pause_speed: Optional[float] = None,
        auto_lap_distance: Optional[float] = None,
        min_segment_distance: Optional[float] = None,
        accuracy_threshold: Optional[float] = None,
        route_max_points: Optional[int] = None,
        body_weight_kg: Optional[float] = None,
    ):
        super().__init__()
        self.location = location
        self.auto_pause_enabled = auto_pause_enabled
        self.auto_pause_speed = (
            auto_pause_speed if auto_pause_speed is not None else self.default_auto_pause_speed()
        )
        self.auto_lap_distance = auto_lap_distance or settings.AUTO_LAP_DISTANCE_M
        self.min_segment_distance = (
            min_segment_distance if min_segment_distance is not None else settings.MIN_SEGMENT_DISTANCE_M
        )
        self.accuracy_threshold = accuracy_threshold or settings.GPS_ACCURACY_THRESHOLD_M
        self.route_max_points = route_max_points or settings.ROUTE_MAX_POINTS
        self.body_weight_kg = body_weight_kg or settings.BODY_WEIGHT_KG

        self.gps_points: List[GpsPoint] = []
        self.distance = 0.0  # metres
        self.current_speed = 0.0  # km/h
        self.max_speed = 0.0
        self.average_speed = 0.0
        self.current_pace = 0.0  # min/km
        self.average_pace = 0.0
        self.elevation = Elevation()
        self.splits: List[Split] = []
        self.speed_history: List[SpeedSample] = []
        self.last_lap_distance = 0.0
        self.paused_due_to_speed = False
        self.stopped_time = 0.0

        self._last_point: Optional[GpsPoint] = None
        self._paused_at: Optional[float] = None
        self._subscription: Optional[LocationSubscription] = None

    def default_auto_pause_speed(self) -> float:
        return settings.AUTO_PAUSE_SPEED_KMH

    # ========================================
    # Lifecycle hooks
    # ========================================

    def on_start(self, restored: bool = False) -> None:
        if self.location is None:
            return

        if not self.location.request_permission():
            raise PermissionDeniedError("Location permission is required for GPS tracking")

        self._subscription = self.location.subscribe(self.handle_position)
        logger.debug("Location subscription opened", activity_type=self.activity_type.value, restored=restored)

    def on_pause(self, reason: PauseReason) -> None:
        self.paused_due_to_speed = reason == PauseReason.SPEED
        self._paused_at = self._now()

    def on_resume(self, reason: PauseReason) -> None:
        self.paused_due_to_speed = False
        self._close_stopped_interval()

    def on_stop(self) -> None:
        self._close_stopped_interval()
        self.paused_due_to_speed = False
        self._unsubscribe()

    def on_cleanup(self) -> None:
        self._unsubscribe()

    def _unsubscribe(self) -> None:
        if self._subscription is not None:
            self._subscription.remove()
            self._subscription = None

    def _close_stopped_interval(self) -> None:
        if self._paused_at is not None:
            self.stopped_time += max(0.0, self._now() - self._paused_at)
            self._paused_at = None

    # ========================================
    # Position pipeline
    # ========================================

    def handle_position(self, sample: Union[PositionSample, Dict[str, Any]]) -> Optional[GpsPoint]:
        """
        Process one position sample.

        Returns:
            The accepted GpsPoint, or None if the sample was filtered out
        """
        tracker = self.tracker
        if tracker is None or not tracker.is_active:
            return None

        if not isinstance(sample, PositionSample):
            try:
                sample = PositionSample.model_validate(sample)
            except ValidationError as e:
                tracker.reporter.report("gps.sample", e, session_id=tracker.session_id)
                return None

        if sample.accuracy is not None and sample.accuracy > self.accuracy_threshold:
            logger.debug("Rejected inaccurate GPS sample", accuracy=sample.accuracy)
            return None

        timestamp = sample.timestamp if sample.timestamp is not None else self._now()
        last = self._last_point

        if last is None:
            point = GpsPoint(
                latitude=sample.latitude,
                longitude=sample.longitude,
                altitude=sample.altitude,
                timestamp=timestamp,
                distance=self.distance,
                accuracy=sample.accuracy,
            )
            self._last_point = point
            if not tracker.is_paused:
                self._append_point(point)
            return point

        segment = calculate_distance(last.latitude, last.longitude, sample.latitude, sample.longitude)
        if segment < self.min_segment_distance:
            return None

        elapsed = timestamp - last.timestamp
        segment_speed = speed_kmh(segment, elapsed) if elapsed > 0 else self.current_speed

        if tracker.is_paused:
            if self.paused_due_to_speed and self.auto_pause_enabled and segment_speed >= self.auto_pause_speed:
                tracker.resume(PauseReason.SPEED)
            else:
                self._last_point = GpsPoint(
                    latitude=sample.latitude,
                    longitude=sample.longitude,
                    altitude=sample.altitude,
                    timestamp=timestamp,
                    distance=self.distance,
                    accuracy=sample.accuracy,
                )
                return None

        self.distance += segment

        if elapsed > 0:
            self.current_speed = segment_speed
            self.max_speed = max(self.max_speed, segment_speed)
            self.current_pace = pace_from_speed(segment_speed)
            self.speed_history.append(SpeedSample(speed=segment_speed, timestamp=timestamp))

        if sample.altitude is not None and last.altitude is not None:
            delta = sample.altitude - last.altitude
            if delta > 0:
                self.elevation.gain += delta
            else:
                self.elevation.loss += abs(delta)

        point = GpsPoint(
            latitude=sample.latitude,
            longitude=sample.longitude,
            altitude=sample.altitude,
            timestamp=timestamp,
            speed=self.current_speed,
            distance=self.distance,
            accuracy=sample.accuracy,
        )
        self._append_point(point)
        self._last_point = point

        if self.distance - self.last_lap_distance >= self.auto_lap_distance:
            self.record_split(split_type="auto")

        self._update_averages()

        if self.auto_pause_enabled and self.current_speed < self.auto_pause_speed and not tracker.is_paused:
            tracker.pause(PauseReason.SPEED)

        tracker.emit(GpsSampleAccepted(session_id=tracker.session_id, point=point, stats=self.live_stats()))
        return point

    def _append_point(self, point: GpsPoint) -> None:
        self.gps_points.append(point)
        if point.altitude is not None:
            self.elevation.update_extrema(point.altitude)

    def _update_averages(self) -> None:
        self.average_speed = speed_kmh(self.distance, self._duration())
        self.average_pace = pace_from_speed(self.average_speed)

    # ========================================
    # Splits
    # ========================================

    def record_split(self, split_type: str = "manual") -> Optional[Split]:
        """
        Close the current lap.

        Auto laps and manual splits share numbering and the lap baseline.
        """
        tracker = self.tracker
        if tracker is None or not tracker.is_active:
            return None

        split_distance = self.distance - self.last_lap_distance
        split_time = max(0, self._duration() - sum(s.time for s in self.splits))

        split = Split(
            number=len(self.splits) + 1,
            distance=split_distance,
            time=split_time,
            pace=pace_from_speed(speed_kmh(split_distance, split_time)),
            cumulative_distance=self.distance,
            timestamp=self._now(),
            type=split_type,
        )
        self.splits.append(split)
        self.last_lap_distance = self.distance

        signal(tracker.haptics, SPLIT_PATTERN)
        tracker.emit(SplitRecorded(session_id=tracker.session_id, split=split))
        logger.info(
            "Split recorded",
            session_id=tracker.session_id,
            number=split.number,
            type=split_type,
            distance=round(split_distance, 1),
            time=split_time,
        )
        return split

    @property
    def best_pace(self) -> float:
        """Fastest split pace, or the average pace when no split qualifies."""
        paces = [s.pace for s in self.splits if s.pace > 0 and math.isfinite(s.pace)]
        return min(paces) if paces else self.average_pace

    # ========================================
    # Calories and payloads
    # ========================================

    def met_value(self, speed: float) -> float:
        for upper, met in self.MET_BANDS:
            if speed < upper:
                return met
        return self.MET_BANDS[-1][1]

    def calculate_calories(self) -> int:
        """
        MET-based estimate.

        calories = MET(average speed) * body weight (kg) * hours
        """
        hours = self._duration() / 3600
        return round(self.met_value(self.average_speed) * self.body_weight_kg * hours)

    def live_stats(self) -> Dict[str, Any]:
        return {
            "distance": self.distance,
            "currentSpeed": self.current_speed,
            "averageSpeed": self.average_speed,
            "maxSpeed": self.max_speed,
            "currentPace": self.current_pace,
            "averagePace": self.average_pace,
            "elevationGain": self.elevation.gain,
            "splits": len(self.splits),
        }

    def route_data(self) -> Dict[str, Any]:
        stored = compress_route(self.gps_points, self.route_max_points)
        return {
            "encoded": encode_route(stored),
            "totalPoints": len(self.gps_points),
            "storedPoints": len(stored),
            "boundingBox": bounding_box(self.gps_points),
        }

    def activity_data(self) -> Dict[str, Any]:
        duration = self._duration()
        return {
            "distance": self.distance,
            "distanceKm": round(self.distance / 1000, 3),
            "pace": {
                "average": self.average_pace,
                "best": self.best_pace,
                "current": self.current_pace,
            },
            "speed": {
                "average": self.average_speed,
                "max": self.max_speed,
                "current": self.current_speed,
            },
            "elevation": self.elevation.to_dict(),
            "splits": [s.to_dict() for s in self.splits],
            "route": self.route_data(),
            "performance": {
                "movingTime": duration,
                "stoppedTime": round(self.stopped_time),
            },
        }

    def snapshot(self) -> Dict[str, Any]:
        return {
            **self.activity_data(),
            "lastLapDistance": self.last_lap_distance,
            "pausedDueToSpeed": self.paused_due_to_speed,
            "gpsPoints": [p.to_dict() for p in compress_route(self.gps_points, self.route_max_points)],
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        if not snapshot:
            return

        self.distance = float(snapshot.get("distance", 0.0))
        self.last_lap_distance = float(snapshot.get("lastLapDistance", 0.0))
        self.paused_due_to_speed = bool(snapshot.get("pausedDueToSpeed", False))

        speed = snapshot.get("speed") or {}
        self.average_speed = speed.get("average", 0.0)
        self.max_speed = speed.get("max", 0.0)
        self.current_speed = speed.get("current", 0.0)

        pace = snapshot.get("pace") or {}
        self.average_pace = pace.get("average", 0.0)
        self.current_pace = pace.get("current", 0.0)

        elevation = snapshot.get("elevation") or {}
        self.elevation = Elevation(**{k: v for k, v in elevation.items() if k in Elevation.__dataclass_fields__})

        self.splits = [
            Split.from_dict(s, from_iso(s.get("timestamp")) or self._now())
            for s in snapshot.get("splits", [])
        ]
        self.stopped_time = float((snapshot.get("performance") or {}).get("stoppedTime", 0))

        self.gps_points = [
            GpsPoint(
                latitude=p["latitude"],
                longitude=p["longitude"],
                altitude=p.get("altitude"),
                timestamp=from_iso(p.get("timestamp")) or self._now(),
                speed=p.get("speed", 0.0),
                distance=p.get("distance", 0.0),
            )
            for p in snapshot.get("gpsPoints", [])
        ]
        self._last_point = self.gps_points[-1] if self.gps_points else None
