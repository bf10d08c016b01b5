"""Tests for pool swimming and gym sessions."""

import pytest

from fittrack.models.session import ActivityKind
from fittrack.services.external.haptics import REST_COMPLETE_PATTERN
from fittrack.services.tracking import LapCompleted, RestCompleted, RestStarted


@pytest.fixture
def swim(swimming_tracker):
    swimming_tracker.start()
    return swimming_tracker


# -------------------------------------------------------------------------
# Tests: laps
# -------------------------------------------------------------------------


def test_swolf_is_lap_time_plus_strokes(swim, scheduler):
    scheduler.advance(45)
    lap = swim.activity.complete_lap(stroke_count=20)

    assert lap.time == 45
    assert lap.swolf == 65
    assert lap.lap_number == 1


def test_lap_time_is_measured_from_previous_boundary(swim, scheduler):
    laps = []
    swim.subscribe(LapCompleted, laps.append)

    scheduler.advance(40)
    swim.activity.complete_lap(18)
    scheduler.advance(35)
    second = swim.activity.complete_lap(16)

    assert second.time == 35
    assert second.lap_number == 2
    assert swim.activity.total_distance == 50
    assert len(laps) == 2


def test_no_lap_when_inactive(swimming_tracker):
    assert swimming_tracker.activity.complete_lap(10) is None
    assert swimming_tracker.activity.laps == []


def test_lap_completes_while_paused(swim, scheduler):
    scheduler.advance(45)
    swim.pause()

    lap = swim.activity.complete_lap(20)

    assert lap is not None
    assert lap.time == 45
    assert lap.swolf == 65

    scheduler.advance(30)
    swim.resume()
    scheduler.advance(10)
    assert swim.activity.complete_lap(8).time == 10


def test_pool_length_and_stroke_change_mid_session(swim, scheduler):
    ext = swim.activity
    scheduler.advance(30)
    ext.complete_lap(15)

    ext.set_pool_length(50)
    ext.set_stroke_type("Backstroke")
    scheduler.advance(60)
    lap = ext.complete_lap(30)

    assert lap.pool_length == 50
    assert lap.stroke_type == "Backstroke"
    assert ext.total_distance == 75

    with pytest.raises(ValueError):
        ext.set_pool_length(0)


# -------------------------------------------------------------------------
# Tests: rest countdown
# -------------------------------------------------------------------------


def test_rest_countdown_completes(swim, scheduler, haptics):
    started, completed = [], []
    swim.subscribe(RestStarted, started.append)
    swim.subscribe(RestCompleted, completed.append)
    ext = swim.activity

    assert ext.start_rest(10) is True
    scheduler.advance(4)
    assert ext.is_resting
    assert ext.rest_remaining == 6
    assert ext.complete_lap(10) is None

    scheduler.advance(6)

    assert not ext.is_resting
    assert started[0].seconds == 10
    assert completed[0].skipped is False
    assert REST_COMPLETE_PATTERN in haptics.patterns
    assert ext.rest_periods[0].actual == 10


def test_skip_rest_ends_early(swim, scheduler):
    ext = swim.activity
    ext.start_rest(30)
    scheduler.advance(5)

    assert ext.skip_rest() is True
    assert ext.skip_rest() is False
    assert ext.rest_periods[0].skipped is True
    assert ext.rest_periods[0].actual == 5

    scheduler.advance(30)
    assert ext.complete_lap(12) is not None


def test_rest_does_not_pause_duration(swim, scheduler):
    swim.activity.start_rest(20)
    scheduler.advance(25)
    assert swim.duration == 25


def test_cleanup_cancels_rest_countdown(swim, scheduler):
    swim.activity.start_rest(30)
    swim.cleanup()
    scheduler.advance(60)

    assert scheduler.pending == 0
    assert swim.activity.rest_periods == []


# -------------------------------------------------------------------------
# Tests: calories and payload
# -------------------------------------------------------------------------


@pytest.mark.parametrize(
    "lap_seconds, strokes, expected",
    [
        (20, 5, 13),  # swolf 25 -> 1.3x
        (20, 15, 11),  # swolf 35 -> 1.1x
        (20, 30, 10),  # swolf 50 -> 1.0x
    ],
)
def test_swim_calories_use_swolf_multiplier(swimming_tracker, scheduler, lap_seconds, strokes, expected):
    swimming_tracker.start()
    for _ in range(3):
        scheduler.advance(lap_seconds)
        swimming_tracker.activity.complete_lap(strokes)

    # 60 s at 10 cal/min
    assert swimming_tracker.calculate_calories() == expected


def test_swim_calories_without_laps(swim, scheduler):
    scheduler.advance(120)
    assert swim.calculate_calories() == 20


def test_swim_payload_stats(swim, scheduler):
    for strokes in (20, 22):
        scheduler.advance(30)
        swim.activity.complete_lap(strokes)
    swim.stop()

    workout = swim.prepare_workout_data()
    stats = workout["swimming"]["stats"]

    assert stats["totalLaps"] == 2
    assert stats["totalDistance"] == 50
    assert stats["avgLapTime"] == 30
    assert stats["avgSwolf"] == 51
    assert stats["avgStrokeRate"] == pytest.approx(42.0)
    assert stats["pace100m"] == pytest.approx(120.0)
    assert len(workout["swimming"]["laps"]) == 2


def test_stroke_rate_averages_per_lap_rates(swim, scheduler):
    scheduler.advance(30)
    swim.activity.complete_lap(20)
    scheduler.advance(60)
    swim.activity.complete_lap(0)

    # 40 strokes/min and a lap without strokes
    assert swim.activity.stats()["avgStrokeRate"] == pytest.approx(20.0)


@pytest.mark.asyncio
async def test_swim_restore_keeps_laps(make_tracker, scheduler):
    crashed = make_tracker(ActivityKind.SWIMMING)
    crashed.start()
    scheduler.advance(40)
    crashed.activity.complete_lap(20)
    scheduler.advance(10)
    await crashed.auto_save()
    crashed.cleanup()

    restored = make_tracker(ActivityKind.SWIMMING)
    await restored.restore_session(crashed.session_id)
    scheduler.advance(20)
    lap = restored.activity.complete_lap(18)

    assert lap.lap_number == 2
    assert lap.time == 30
    assert restored.activity.total_distance == 50


# -------------------------------------------------------------------------
# Tests: gym
# -------------------------------------------------------------------------


def test_gym_sets_are_grouped_with_totals(make_tracker, scheduler):
    tracker = make_tracker(ActivityKind.GYM)
    ext = tracker.activity
    assert ext.record_set("Squat", 5, 100) is None

    tracker.start()
    ext.record_set("Squat", 5, 100)
    ext.record_set("Squat", 5, 105)
    ext.record_set("Pull-up", 8)
    scheduler.advance(1200)
    tracker.stop()

    workout = tracker.prepare_workout_data()
    gym = workout["gym"]

    assert [e["name"] for e in gym["exercises"]] == ["Squat", "Pull-up"]
    assert [s["setNumber"] for s in gym["exercises"][0]["sets"]] == [1, 2]
    assert gym["stats"] == {
        "totalSets": 3,
        "totalReps": 18,
        "totalWeight": 1025,
        "exerciseCount": 2,
    }
    assert workout["calories"] == 120
