"""Pytest configuration and fixtures for tracker tests."""

from typing import Any, Dict, Optional
from unittest.mock import AsyncMock

import pytest

from fittrack.core.errors import ErrorReporter, RemoteSaveError
from fittrack.core.scheduler import ManualScheduler
from fittrack.models.gps import PositionSample
from fittrack.models.session import ActivityKind
from fittrack.services.external.haptics import NullHaptics
from fittrack.services.external.location import ManualLocationProvider
from fittrack.services.storage.store import InMemoryStore
from fittrack.services.tracking import create_tracker


# One step north of ~100.08 m (0.0009 degrees of latitude)
LAT_STEP_100M = 0.0009


# -------------------------------------------------------------------------
# Collaborator Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Simulated clock; time moves only on advance()."""
    return ManualScheduler()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def haptics() -> NullHaptics:
    return NullHaptics()


@pytest.fixture
def location() -> ManualLocationProvider:
    return ManualLocationProvider()


@pytest.fixture
def reporter() -> ErrorReporter:
    return ErrorReporter()


@pytest.fixture
def ok_api() -> AsyncMock:
    """Remote API that accepts every workout."""
    api = AsyncMock()
    api.save_workout = AsyncMock(
        return_value={
            "success": True,
            "workout": {"id": "remote-1"},
            "achievements": [{"name": "First Run"}],
            "message": "Running session saved successfully!",
        }
    )
    return api


@pytest.fixture
def failing_api() -> AsyncMock:
    """Remote API that always raises a transport error."""
    api = AsyncMock()
    api.save_workout = AsyncMock(side_effect=RemoteSaveError("network unreachable"))
    return api


# -------------------------------------------------------------------------
# Tracker Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
def make_tracker(scheduler, store, haptics, location, reporter):
    """Factory building trackers wired to the test collaborators."""

    def _make(
        kind: ActivityKind = ActivityKind.RUNNING,
        user_id: Optional[str] = "user-1",
        api: Any = None,
        **options: Any,
    ):
        return create_tracker(
            kind,
            user_id,
            store=store,
            api=api,
            scheduler=scheduler,
            haptics=haptics,
            location=location,
            reporter=reporter,
            **options,
        )

    return _make


@pytest.fixture
def running_tracker(make_tracker):
    return make_tracker(ActivityKind.RUNNING)


@pytest.fixture
def swimming_tracker(make_tracker):
    return make_tracker(ActivityKind.SWIMMING)


class RouteWalker:
    """Pushes samples along a northbound line through the location provider."""

    def __init__(self, location: ManualLocationProvider, scheduler: ManualScheduler):
        self.location = location
        self.scheduler = scheduler
        self.latitude = 45.0
        self.longitude = 7.0
        self.altitude = 100.0

    def push(self, **overrides: Any) -> None:
        data: Dict[str, Any] = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
            "accuracy": 5.0,
        }
        data.update(overrides)
        self.location.push(PositionSample(**data))

    def step(self, seconds: float, degrees: float = LAT_STEP_100M, climb: float = 0.0, **overrides: Any) -> None:
        """Advance time, move north and push one sample."""
        self.scheduler.advance(seconds)
        self.latitude += degrees
        self.altitude += climb
        self.push(**overrides)


@pytest.fixture
def walker(location, scheduler) -> RouteWalker:
    return RouteWalker(location, scheduler)
