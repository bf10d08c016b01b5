"""
Base Extension - Abstract interface for activity-specific tracking behaviour.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from fittrack.models.session import CALORIE_RATES, ActivityKind, PauseReason

if TYPE_CHECKING:
    from fittrack.services.tracking.tracker import ActivityTracker


class ActivityExtension(ABC):
    """
    Abstract base class for activity-specific session behaviour.

    The tracker engine owns the lifecycle and calls these hooks at fixed
    points:
    - on_start / on_pause / on_resume / on_stop / on_cleanup
    - calculate_calories
    - enhance_session_data (autosave snapshots)
    - prepare_final_payload (the record sent to the backend)
    - restore (reload state from an autosave snapshot)

    GPS activities additionally accept position samples through
    handle_position.
    """

    activity_type: ActivityKind = ActivityKind.GYM
    payload_key: str = "activity"
    supports_gps: bool = False

    def __init__(self):
        self.tracker: Optional["ActivityTracker"] = None

    def bind(self, tracker: "ActivityTracker") -> None:
        """Attach the extension to its lifecycle engine."""
        self.tracker = tracker

    # ========================================
    # Lifecycle hooks
    # ========================================

    def on_start(self, restored: bool = False) -> None:
        """
        Prepare activity resources.

        Raises:
            TrackerError: Setup failed; the session is not started
        """
        pass

    def on_pause(self, reason: PauseReason) -> None:
        pass

    def on_resume(self, reason: PauseReason) -> None:
        pass

    def on_stop(self) -> None:
        pass

    def on_cleanup(self) -> None:
        pass

    # ========================================
    # Data hooks
    # ========================================

    @abstractmethod
    def activity_data(self) -> Dict[str, Any]:
        """
        Activity-specific payload nested under payload_key.

        Returns:
            JSON-serializable dict
        """
        pass

    def snapshot(self) -> Dict[str, Any]:
        """State written to autosave snapshots. Defaults to activity_data()."""
        return self.activity_data()

    def restore(self, snapshot: Dict[str, Any]) -> None:
        """Reload activity state from an autosave snapshot."""
        pass

    def calculate_calories(self) -> int:
        """
        Basic estimation from a per-activity rate.

        calories = duration_minutes * rate_per_minute
        """
        rate = CALORIE_RATES.get(self.activity_type, 6)
        return round((self._duration() / 60) * rate)

    def enhance_session_data(self, session_data: Dict[str, Any]) -> Dict[str, Any]:
        """Add calories and activity state to a session snapshot."""
        return {
            **session_data,
            "calories": self.calculate_calories(),
            self.payload_key: self.snapshot(),
        }

    def prepare_final_payload(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Nest the activity data into the final workout record."""
        return {
            **record,
            self.payload_key: self.activity_data(),
        }

    # ========================================
    # Shared helpers
    # ========================================

    def _duration(self) -> int:
        return self.tracker.duration if self.tracker is not None else 0

    def _now(self) -> float:
        return self.tracker.scheduler.now()
