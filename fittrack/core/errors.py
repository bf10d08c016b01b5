"""
Tracker error taxonomy and the suppressed-error reporting seam.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from fittrack.core.logging import get_logger

logger = get_logger(__name__)


class TrackerError(Exception):
    """Base exception for tracker errors."""

    pass


class PermissionDeniedError(TrackerError):
    """A device permission required to start a session was refused."""

    pass


class WorkoutPreparationError(TrackerError):
    """The final workout record could not be built."""

    pass


class RemoteSaveError(TrackerError):
    """Transport or backend failure while saving a workout remotely."""

    pass


@dataclass
class SuppressedError:
    """One error that was caught and recovered from."""
    where: str
    error: BaseException
    context: Dict[str, Any] = field(default_factory=dict)


class ErrorReporter:
    """
    Single sink for errors that must not escape a timer or callback.

    Every suppressed error is logged and kept, so callers and tests can
    inspect what was swallowed.
    """

    def __init__(self, max_kept: int = 100):
        self._errors: List[SuppressedError] = []
        self._max_kept = max_kept
        self.count = 0

    def report(self, where: str, error: BaseException, **context: Any) -> None:
        """Record a suppressed error."""
        self.count += 1
        self._errors.append(SuppressedError(where=where, error=error, context=context))
        if len(self._errors) > self._max_kept:
            self._errors.pop(0)

        logger.error(
            "Suppressed error",
            where=where,
            error_type=type(error).__name__,
            error_message=str(error),
            **context
        )

    @property
    def errors(self) -> List[SuppressedError]:
        return list(self._errors)

    def count_for(self, where: str) -> int:
        """Number of kept errors reported from one location."""
        return sum(1 for e in self._errors if e.where == where)

    def clear(self) -> None:
        self._errors.clear()
        self.count = 0
