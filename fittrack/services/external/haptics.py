"""
Haptics - Fire-and-forget vibration feedback.
"""
from abc import ABC, abstractmethod
from typing import List, Sequence, Union

from fittrack.core.logging import get_logger

logger = get_logger(__name__)

Pattern = Union[int, Sequence[int]]

# Vibration patterns in milliseconds
PAUSE_PATTERN = 100
STOP_PATTERN = (100, 100, 100)
AUTO_PAUSE_PATTERN = 200
SPLIT_PATTERN = (200, 100, 200)
REST_COMPLETE_PATTERN = 500


class Haptics(ABC):
    """Abstract device vibration collaborator."""

    @abstractmethod
    def vibrate(self, pattern: Pattern) -> None:
        pass


class NullHaptics(Haptics):
    """Records patterns instead of vibrating."""

    def __init__(self):
        self.patterns: List[Pattern] = []

    def vibrate(self, pattern: Pattern) -> None:
        self.patterns.append(pattern)


def signal(haptics: Haptics, pattern: Pattern) -> None:
    """Vibrate, ignoring device failures."""
    try:
        haptics.vibrate(pattern)
    except Exception as e:
        logger.debug("Haptic feedback failed", error_type=type(e).__name__, error_message=str(e))
