"""Tests for the sync queue and workout history."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from fittrack.core.errors import RemoteSaveError
from fittrack.services.storage import SyncQueue, WorkoutHistory, sync_pending_workouts
from fittrack.services.storage.store import HISTORY_KEY, SYNC_QUEUE_KEY


async def _queue(store):
    return json.loads(await store.get(SYNC_QUEUE_KEY))


async def _seed(store, entries):
    await store.set(SYNC_QUEUE_KEY, json.dumps(entries))


def _entry(workout_id, attempts=0):
    return {
        "id": workout_id,
        "type": "Running",
        "userId": "user-1",
        "needsSync": True,
        "syncAttempts": attempts,
        "lastSyncAttempt": None,
    }


# -------------------------------------------------------------------------
# Tests: enqueue
# -------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_enqueue_adds_sync_bookkeeping(store):
    queue = SyncQueue(store)
    length = await queue.enqueue({"id": "w1", "type": "Running"})

    assert length == 1
    entry = (await queue.pending())[0]
    assert entry["needsSync"] is True
    assert entry["syncAttempts"] == 0
    assert entry["lastSyncAttempt"] is None


@pytest.mark.asyncio
async def test_concurrent_enqueues_are_not_lost(store):
    queue = SyncQueue(store)
    await asyncio.gather(*(queue.enqueue({"id": f"w{i}"}) for i in range(20)))

    assert len(await queue.pending()) == 20


@pytest.mark.asyncio
async def test_corrupt_queue_is_treated_as_empty(store):
    await store.set(SYNC_QUEUE_KEY, "not json")
    queue = SyncQueue(store)
    await queue.enqueue({"id": "w1"})

    assert [e["id"] for e in await queue.pending()] == ["w1"]


# -------------------------------------------------------------------------
# Tests: sweep
# -------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_sweep_removes_synced_entries(store, ok_api):
    await _seed(store, [_entry("w1"), _entry("w2")])

    result = await sync_pending_workouts(store, ok_api)

    assert result.synced == 2
    assert result.remaining == 0
    assert await _queue(store) == []
    activity_type, payload = ok_api.save_workout.await_args.args
    assert activity_type == "Running"
    assert "syncAttempts" not in payload
    assert "needsSync" not in payload


@pytest.mark.asyncio
async def test_sweep_retry_exhaustion(store, failing_api, scheduler):
    await _seed(store, [_entry("almost-done", attempts=2), _entry("retry", attempts=1)])
    queue = SyncQueue(store, failing_api, scheduler=scheduler)

    result = await queue.sync_pending_workouts()

    remaining = await _queue(store)
    assert result.synced == 0
    assert result.failed == 1
    assert result.dropped == ["almost-done"]
    assert [e["id"] for e in remaining] == ["retry"]
    assert remaining[0]["syncAttempts"] == 2
    assert remaining[0]["lastSyncAttempt"] is not None


@pytest.mark.asyncio
async def test_sweep_mixed_results(store):
    api = AsyncMock()
    api.save_workout = AsyncMock(
        side_effect=[
            {"success": True},
            {"success": False, "message": "duplicate"},
            RemoteSaveError("timeout"),
        ]
    )
    await _seed(store, [_entry("a"), _entry("b"), _entry("c")])

    result = await SyncQueue(store, api).sync_pending_workouts()

    assert result.synced == 1
    assert result.remaining == 2
    assert [e["syncAttempts"] for e in await _queue(store)] == [1, 1]


@pytest.mark.asyncio
async def test_sweep_is_safe_to_repeat(store, ok_api):
    queue = SyncQueue(store, ok_api)
    result = await queue.sync_pending_workouts()
    assert result.synced == 0

    await queue.enqueue({"id": "w1", "type": "Swimming"})
    assert (await queue.sync_pending_workouts()).synced == 1
    assert (await queue.sync_pending_workouts()).synced == 0


@pytest.mark.asyncio
async def test_sweep_requires_api(store):
    with pytest.raises(ValueError):
        await SyncQueue(store).sync_pending_workouts()


# -------------------------------------------------------------------------
# Tests: history
# -------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_history_is_newest_first(store):
    history = WorkoutHistory(store)
    await history.add({"id": "old"})
    await history.add({"id": "new"})

    assert [w["id"] for w in await history.list()] == ["new", "old"]
    assert json.loads(await store.get(HISTORY_KEY))[0]["id"] == "new"
