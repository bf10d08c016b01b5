"""
GPS-derived data structures for running and cycling sessions.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from fittrack.models.session import to_iso


class PositionSample(BaseModel):
    """Raw position sample pushed by the location provider."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    altitude: Optional[float] = None
    accuracy: Optional[float] = Field(None, ge=0)
    speed_hint: Optional[float] = None  # m/s as reported by the device
    timestamp: Optional[float] = None  # epoch seconds, defaults to scheduler time


@dataclass(frozen=True)
class GpsPoint:
    """Accepted GPS point. Never mutated after capture."""
    latitude: float
    longitude: float
    altitude: Optional[float]
    timestamp: float
    speed: float = 0.0  # km/h
    distance: float = 0.0  # cumulative metres at capture
    accuracy: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
            "timestamp": to_iso(self.timestamp),
            "speed": self.speed,
            "distance": self.distance,
        }


@dataclass
class Split:
    """Completed distance/time segment."""
    number: int
    distance: float  # metres
    time: int  # seconds
    pace: float  # min/km
    cumulative_distance: float
    timestamp: float
    type: str = "auto"  # auto or manual

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "distance": self.distance,
            "time": self.time,
            "pace": self.pace,
            "cumulativeDistance": self.cumulative_distance,
            "timestamp": to_iso(self.timestamp),
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], timestamp: float) -> "Split":
        return cls(
            number=data["number"],
            distance=data["distance"],
            time=data["time"],
            pace=data["pace"],
            cumulative_distance=data.get("cumulativeDistance", 0.0),
            timestamp=timestamp,
            type=data.get("type", "auto"),
        )


@dataclass
class Elevation:
    """Cumulative climb/descent and running altitude extrema."""
    gain: float = 0.0
    loss: float = 0.0
    current: float = 0.0
    max: Optional[float] = None
    min: Optional[float] = None

    def update_extrema(self, altitude: float) -> None:
        self.current = altitude
        self.max = altitude if self.max is None else max(self.max, altitude)
        self.min = altitude if self.min is None else min(self.min, altitude)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SpeedSample:
    speed: float  # km/h
    timestamp: float


@dataclass
class TrainingInterval:
    """Interval-training block logged during a cycling session."""
    id: str
    type: str  # work, rest, warmup, cooldown
    start_time: float
    duration: int
    start_distance: float
    target_power: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "startTime": to_iso(self.start_time),
            "duration": self.duration,
            "startDistance": self.start_distance,
            "targetPower": self.target_power,
        }
