"""
Pool swimming data structures.
"""
from dataclasses import dataclass
from typing import Any, Dict

from fittrack.models.session import to_iso


@dataclass
class SwimLap:
    """One completed pool length."""
    lap_number: int
    time: int  # seconds since the previous lap boundary
    stroke_type: str
    stroke_count: int
    pool_length: float
    swolf: int  # time + stroke_count, lower is better
    timestamp: float

    @property
    def distance(self) -> float:
        return self.pool_length

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lapNumber": self.lap_number,
            "time": self.time,
            "strokeType": self.stroke_type,
            "strokeCount": self.stroke_count,
            "poolLength": self.pool_length,
            "distance": self.distance,
            "swolf": self.swolf,
            "timestamp": to_iso(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], timestamp: float) -> "SwimLap":
        return cls(
            lap_number=data["lapNumber"],
            time=data["time"],
            stroke_type=data["strokeType"],
            stroke_count=data["strokeCount"],
            pool_length=data["poolLength"],
            swolf=data["swolf"],
            timestamp=timestamp,
        )


@dataclass
class RestPeriod:
    """A rest interval between lengths."""
    planned: int
    actual: int
    skipped: bool
    started_at: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "planned": self.planned,
            "actual": self.actual,
            "skipped": self.skipped,
            "startedAt": to_iso(self.started_at),
        }
