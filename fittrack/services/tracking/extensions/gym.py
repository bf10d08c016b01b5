"""
Gym Extension - Set logging for strength sessions.
"""
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from fittrack.models.gym import ExerciseSet
from fittrack.models.session import ActivityKind, from_iso
from fittrack.services.tracking.extensions.base import ActivityExtension


class GymExtension(ActivityExtension):
    """Strength session. Calories use the base per-minute rate."""

    activity_type = ActivityKind.GYM
    payload_key = "gym"

    def __init__(self):
        super().__init__()
        self.sets: List[ExerciseSet] = []

    def record_set(self, exercise: str, reps: int, weight: float = 0) -> Optional[ExerciseSet]:
        if self.tracker is None or not self.tracker.is_active:
            return None
        if reps <= 0:
            raise ValueError("Reps must be positive")

        logged = ExerciseSet(
            exercise=exercise,
            set_number=sum(1 for s in self.sets if s.exercise == exercise) + 1,
            reps=reps,
            weight=weight,
            timestamp=self._now(),
        )
        self.sets.append(logged)
        return logged

    def activity_data(self) -> Dict[str, Any]:
        exercises: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
        for s in self.sets:
            exercises.setdefault(s.exercise, []).append(s.to_dict())

        return {
            "exercises": [{"name": name, "sets": sets} for name, sets in exercises.items()],
            "stats": {
                "totalSets": len(self.sets),
                "totalReps": sum(s.reps for s in self.sets),
                "totalWeight": sum(s.volume for s in self.sets),
                "exerciseCount": len(exercises),
            },
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self.sets = [
            ExerciseSet(
                exercise=exercise["name"],
                set_number=s["setNumber"],
                reps=s["reps"],
                weight=s.get("weight", 0),
                timestamp=from_iso(s.get("timestamp")) or self._now(),
            )
            for exercise in (snapshot or {}).get("exercises", [])
            for s in exercise.get("sets", [])
        ]
