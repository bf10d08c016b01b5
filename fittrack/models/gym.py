"""
Gym session data structures.
"""
from dataclasses import dataclass
from typing import Any, Dict

from fittrack.models.session import to_iso


@dataclass
class ExerciseSet:
    """One logged set."""
    exercise: str
    set_number: int
    reps: int
    weight: float
    timestamp: float

    @property
    def volume(self) -> float:
        return self.reps * self.weight

    def to_dict(self) -> Dict[str, Any]:
        return {
            "setNumber": self.set_number,
            "reps": self.reps,
            "weight": self.weight,
            "timestamp": to_iso(self.timestamp),
        }
