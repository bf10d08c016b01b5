"""
Location Service - Push-based position stream for GPS activities.
"""
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from fittrack.models.gps import PositionSample

PositionCallback = Callable[[PositionSample], None]


class LocationSubscription(ABC):
    """Active position subscription."""

    @abstractmethod
    def remove(self) -> None:
        """Stop delivering samples."""
        pass


class LocationProvider(ABC):
    """
    Abstract location services collaborator.

    Implementations deliver samples on the tracker's event loop thread,
    in capture order.
    """

    @abstractmethod
    def request_permission(self) -> bool:
        """Return True if fine location access is granted."""
        pass

    @abstractmethod
    def subscribe(self, callback: PositionCallback) -> LocationSubscription:
        """Start delivering samples (requested cadence ~1 s or every 3 m)."""
        pass


class _ManualSubscription(LocationSubscription):
    def __init__(self, provider: "ManualLocationProvider", callback: PositionCallback):
        self._provider = provider
        self.callback: Optional[PositionCallback] = callback

    def remove(self) -> None:
        if self in self._provider._subscriptions:
            self._provider._subscriptions.remove(self)
        self.callback = None


class ManualLocationProvider(LocationProvider):
    """
    Provider fed by explicit push() calls.

    Used for tests and for replaying recorded routes.
    """

    def __init__(self, permission_granted: bool = True):
        self.permission_granted = permission_granted
        self._subscriptions: List[_ManualSubscription] = []

    def request_permission(self) -> bool:
        return self.permission_granted

    def subscribe(self, callback: PositionCallback) -> LocationSubscription:
        subscription = _ManualSubscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def push(self, sample: PositionSample) -> None:
        """Deliver one sample to every live subscriber."""
        for subscription in list(self._subscriptions):
            if subscription.callback is not None:
                subscription.callback(sample)
