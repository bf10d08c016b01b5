"""
Results returned by persistence operations.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SaveResult:
    """Outcome of ActivityTracker.save_workout()."""
    success: bool
    message: str
    workout: Optional[Dict[str, Any]] = None
    achievements: List[Dict[str, Any]] = field(default_factory=list)
    synced: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "workout": self.workout,
            "achievements": self.achievements,
            "synced": self.synced,
        }


@dataclass
class SyncResult:
    """Outcome of one sync queue sweep."""
    synced: int = 0
    failed: int = 0
    remaining: int = 0
    dropped: List[str] = field(default_factory=list)
