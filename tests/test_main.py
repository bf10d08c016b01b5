"""Tests for the route replay entry point."""

import json

import pytest

from fittrack.main import load_route, replay
from fittrack.models.session import ActivityKind


def _route(points: int, seconds: int = 30):
    return [
        {"offset": i * seconds, "latitude": 45.0 + i * 0.0009, "longitude": 7.0, "altitude": 200.0, "accuracy": 4.0}
        for i in range(points)
    ]


def test_load_route_sorts_by_offset(tmp_path):
    path = tmp_path / "route.json"
    path.write_text(json.dumps(list(reversed(_route(3)))))

    assert [s["offset"] for s in load_route(path)] == [0, 30, 60]


def test_load_route_rejects_non_list(tmp_path):
    path = tmp_path / "route.json"
    path.write_text(json.dumps({"latitude": 1}))

    with pytest.raises(ValueError):
        load_route(path)


@pytest.mark.asyncio
async def test_replay_saves_locally_without_upload():
    result = await replay(_route(13), ActivityKind.RUNNING, "user-1")

    assert result["success"] is True
    assert result["synced"] is False
    workout = result["workout"]
    assert workout["duration"] == 360
    assert workout["running"]["distance"] == pytest.approx(1200.9, abs=1)
    assert len(workout["running"]["splits"]) == 1
