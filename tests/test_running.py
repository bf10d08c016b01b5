"""Tests for the GPS pipeline of running and cycling sessions."""

import pytest

from fittrack.core.errors import WorkoutPreparationError
from fittrack.models.gps import Split
from fittrack.models.session import ActivityKind, PauseReason
from fittrack.services.external.haptics import AUTO_PAUSE_PATTERN, SPLIT_PATTERN
from fittrack.services.tracking import GpsSampleAccepted, SplitRecorded

LAT_STEP_100M = 0.0009


@pytest.fixture
def run(running_tracker, walker):
    """Started running session with the first sample already accepted."""
    running_tracker.start()
    walker.push()
    return running_tracker


# -------------------------------------------------------------------------
# Tests: filtering
# -------------------------------------------------------------------------


def test_first_sample_sets_origin_without_distance(run):
    ext = run.activity
    assert ext.distance == 0
    assert len(ext.gps_points) == 1


def test_noise_filter_discards_short_segments(run, walker):
    ext = run.activity
    walker.step(30)
    before = (ext.distance, ext.current_speed, ext.elevation.gain, len(ext.gps_points))

    # ~1.1 m north with a climb: below the 2 m noise floor
    walker.step(5, degrees=0.00001, climb=5.0)

    assert (ext.distance, ext.current_speed, ext.elevation.gain, len(ext.gps_points)) == before


def test_inaccurate_samples_are_rejected(run, walker):
    walker.step(30, accuracy=50.0)
    assert run.activity.distance == 0


def test_samples_ignored_when_not_active(running_tracker):
    assert running_tracker.activity.handle_position({"latitude": 45.0, "longitude": 7.0}) is None
    assert running_tracker.activity.gps_points == []


def test_invalid_sample_dict_is_reported(run, reporter):
    assert run.activity.handle_position({"latitude": 200, "longitude": 0}) is None
    assert reporter.count_for("gps.sample") == 1


def test_distance_is_monotonic(run, walker):
    ext = run.activity
    seen = [ext.distance]
    for degrees in (LAT_STEP_100M, 0.00001, -LAT_STEP_100M, LAT_STEP_100M, 0.0):
        walker.step(30, degrees=degrees)
        seen.append(ext.distance)

    assert seen == sorted(seen)


# -------------------------------------------------------------------------
# Tests: metrics
# -------------------------------------------------------------------------


def test_speed_pace_and_averages(run, walker):
    ext = run.activity
    events = []
    run.subscribe(GpsSampleAccepted, events.append)

    walker.step(30)

    assert ext.distance == pytest.approx(100.08, abs=0.1)
    assert ext.current_speed == pytest.approx(12.0, rel=0.01)
    assert ext.current_pace == pytest.approx(5.0, rel=0.01)
    assert ext.max_speed == ext.current_speed
    assert ext.average_speed == pytest.approx(12.0, rel=0.01)
    assert len(ext.speed_history) == 1
    assert events[0].stats["distance"] == ext.distance


def test_elevation_gain_loss_and_extrema(run, walker):
    walker.step(30, climb=10.0)
    walker.step(30, climb=-4.0)
    walker.step(30, climb=2.0)

    elevation = run.activity.elevation
    assert elevation.gain == pytest.approx(12.0)
    assert elevation.loss == pytest.approx(4.0)
    assert elevation.max == pytest.approx(110.0)
    assert elevation.min == pytest.approx(100.0)
    assert elevation.current == pytest.approx(108.0)


def test_calories_use_met_bands(run, walker):
    # 12 km/h for one hour: MET 11.0 * 70 kg * 1 h
    for _ in range(120):
        walker.step(30)

    assert run.activity.average_speed == pytest.approx(12.0, rel=0.01)
    assert run.calculate_calories() == 770


# -------------------------------------------------------------------------
# Tests: auto-lap and splits
# -------------------------------------------------------------------------


def test_auto_lap_every_1000m(run, walker, haptics):
    laps = []
    run.subscribe(SplitRecorded, laps.append)

    for _ in range(25):
        walker.step(30)

    ext = run.activity
    assert ext.distance == pytest.approx(2502, abs=2)
    assert [s.number for s in ext.splits] == [1, 2]
    assert all(s.type == "auto" for s in ext.splits)
    assert ext.splits[0].cumulative_distance == pytest.approx(1000.8, abs=1)
    assert ext.splits[1].cumulative_distance == pytest.approx(2001.6, abs=1)
    assert sum(s.time for s in ext.splits) == 600
    assert len(laps) == 2
    assert haptics.patterns.count(SPLIT_PATTERN) == 2

    run.stop()
    assert len(ext.splits) == 2


def test_manual_split_shares_numbering_and_baseline(run, walker):
    for _ in range(5):
        walker.step(30)
    manual = run.activity.record_split()

    for _ in range(10):
        walker.step(30)

    splits = run.activity.splits
    assert manual.type == "manual"
    assert [s.number for s in splits] == [1, 2]
    assert splits[1].type == "auto"
    assert splits[1].distance == pytest.approx(1000.8, abs=1)
    assert splits[0].time + splits[1].time == run.duration


def test_best_pace_is_fastest_split(run):
    ext = run.activity
    ext.splits = [
        Split(number=1, distance=1000, time=330, pace=5.5, cumulative_distance=1000, timestamp=0),
        Split(number=2, distance=1000, time=290, pace=4.83, cumulative_distance=2000, timestamp=0),
        Split(number=3, distance=0, time=5, pace=0.0, cumulative_distance=2000, timestamp=0),
    ]
    assert ext.best_pace == pytest.approx(4.83)


def test_best_pace_falls_back_to_average(run, walker):
    walker.step(30)
    ext = run.activity
    ext.splits = [
        Split(number=1, distance=0, time=10, pace=0.0, cumulative_distance=0, timestamp=0),
        Split(number=2, distance=5, time=0, pace=float("inf"), cumulative_distance=5, timestamp=0),
    ]
    assert ext.best_pace == ext.average_pace
    assert ext.best_pace > 0


# -------------------------------------------------------------------------
# Tests: auto-pause
# -------------------------------------------------------------------------


def test_auto_pause_and_resume(run, walker, haptics):
    ext = run.activity
    walker.step(30)

    # ~3.3 m in 30 s is well under 1 km/h
    walker.step(30, degrees=0.00003)
    assert run.is_paused
    assert run.pause_reason == PauseReason.SPEED
    assert ext.paused_due_to_speed is True
    assert AUTO_PAUSE_PATTERN in haptics.patterns

    paused_distance = ext.distance
    walker.step(30)

    assert not run.is_paused
    assert ext.paused_due_to_speed is False
    assert ext.distance > paused_distance


def test_manual_pause_is_never_auto_resumed(run, walker):
    walker.step(30)
    run.pause()
    distance = run.activity.distance

    walker.step(30)
    walker.step(30)

    assert run.is_paused
    assert run.activity.distance == distance


def test_paused_displacement_is_not_credited_after_resume(run, walker):
    walker.step(30)
    run.pause()
    for _ in range(5):
        walker.step(30)
    run.resume()
    distance = run.activity.distance

    walker.step(30)

    assert run.activity.distance == pytest.approx(distance + 100.08, abs=0.5)


def test_auto_pause_can_be_disabled(make_tracker, walker):
    tracker = make_tracker(ActivityKind.RUNNING, auto_pause_enabled=False)
    tracker.start()
    walker.push()
    walker.step(30, degrees=0.00003)

    assert not tracker.is_paused


# -------------------------------------------------------------------------
# Tests: payload
# -------------------------------------------------------------------------


def test_final_payload_nests_running_data(run, walker):
    for _ in range(12):
        walker.step(30)
    run.stop()

    workout = run.prepare_workout_data()
    running = workout["running"]

    assert running["distance"] == pytest.approx(run.activity.distance)
    assert len(running["splits"]) == 1
    assert running["route"]["totalPoints"] == 13
    assert running["route"]["encoded"].count(";") == 12
    assert running["pace"]["best"] > 0
    assert workout["summary"]["splits"] == 1


def test_running_payload_requires_user(run):
    with pytest.raises(WorkoutPreparationError):
        run.activity.prepare_final_payload({"userId": None})


def test_route_is_compressed_for_storage(make_tracker, walker):
    tracker = make_tracker(ActivityKind.RUNNING, route_max_points=10)
    tracker.start()
    walker.push()
    for _ in range(30):
        walker.step(30)

    route = tracker.activity.route_data()
    assert route["totalPoints"] == 31
    assert route["storedPoints"] <= 11


# -------------------------------------------------------------------------
# Tests: cycling
# -------------------------------------------------------------------------


def test_cycling_auto_pause_threshold_and_calories(make_tracker, walker):
    tracker = make_tracker(ActivityKind.CYCLING)
    tracker.start()
    walker.push()
    ext = tracker.activity
    assert ext.auto_pause_speed == 2.0

    # ~100 m every 15 s is 24 km/h: MET 10.0 * 70 kg * 0.5 h
    for _ in range(120):
        walker.step(15)

    assert ext.average_speed == pytest.approx(24.0, rel=0.01)
    assert tracker.calculate_calories() == 350


def test_cycling_intervals_in_payload(make_tracker, walker):
    tracker = make_tracker(ActivityKind.CYCLING)
    tracker.start()
    walker.push()

    interval = tracker.activity.start_interval("work", 240, target_power=250)
    with pytest.raises(ValueError):
        tracker.activity.start_interval("sprint", 30)
    tracker.stop()

    workout = tracker.prepare_workout_data()
    assert interval.type == "work"
    assert workout["cycling"]["intervals"][0]["targetPower"] == 250
    assert "running" not in workout
