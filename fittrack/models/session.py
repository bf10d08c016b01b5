"""
Session identity and lifecycle types.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ActivityKind(str, Enum):
    """Supported activity kinds."""
    RUNNING = "Running"
    CYCLING = "Cycling"
    SWIMMING = "Swimming"
    GYM = "Gym"


class TrackerState(str, Enum):
    """Lifecycle states of a tracking session."""
    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    STOPPED = "stopped"


class PauseReason(str, Enum):
    """Why a session was paused."""
    MANUAL = "manual"
    SPEED = "speed"


# Calories per minute used when an activity has no specific formula
CALORIE_RATES = {
    ActivityKind.RUNNING: 12,
    ActivityKind.CYCLING: 8,
    ActivityKind.SWIMMING: 10,
    ActivityKind.GYM: 6,
}


def to_iso(timestamp: Optional[float]) -> Optional[str]:
    """Convert epoch seconds to an ISO-8601 UTC string."""
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def from_iso(value: Optional[str]) -> Optional[float]:
    """Convert an ISO-8601 string back to epoch seconds."""
    if not value:
        return None
    return datetime.fromisoformat(value).timestamp()


@dataclass
class Session:
    """Identity and temporal envelope of one workout attempt."""
    activity_type: ActivityKind
    user_id: Optional[str]
    session_id: Optional[str] = None
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    duration: int = 0
    state: TrackerState = TrackerState.IDLE

    @property
    def is_active(self) -> bool:
        return self.state in (TrackerState.ACTIVE, TrackerState.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self.state == TrackerState.PAUSED

    def to_dict(self, now: Optional[float] = None) -> Dict[str, Any]:
        """Serialize for autosave snapshots and workout payloads."""
        return {
            "sessionId": self.session_id,
            "activityType": self.activity_type.value,
            "userId": self.user_id,
            "startTime": to_iso(self.start_time),
            "endTime": to_iso(self.end_time),
            "duration": self.duration,
            "isActive": self.is_active,
            "isPaused": self.is_paused,
            "timestamp": to_iso(now),
        }
