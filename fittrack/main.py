"""
fittrack - Replay a recorded route through a tracking session.

Usage:
    python -m fittrack.main route.json --activity Running --user user-1
    python -m fittrack.main route.json --activity Cycling --user user-1 --upload

route.json is a list of samples:
    [{"offset": 0, "latitude": 45.0, "longitude": 7.0, "altitude": 210, "accuracy": 5}, ...]
where offset is seconds since the session start.
"""
import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List

from fittrack.core.config import settings
from fittrack.core.logging import get_logger, session_context, setup_logging
from fittrack.core.scheduler import ManualScheduler
from fittrack.models.gps import PositionSample
from fittrack.models.session import ActivityKind
from fittrack.services.external.location import ManualLocationProvider
from fittrack.services.external.workout_api import HttpWorkoutAPI
from fittrack.services.storage.store import InMemoryStore
from fittrack.services.tracking import create_tracker

logger = get_logger(__name__)


def load_route(path: Path) -> List[Dict[str, Any]]:
    samples = json.loads(path.read_text())
    if not isinstance(samples, list):
        raise ValueError("Route file must contain a JSON list of samples")
    return sorted(samples, key=lambda s: s.get("offset", 0))


async def replay(
    samples: List[Dict[str, Any]],
    activity: ActivityKind,
    user_id: str,
    upload: bool = False,
) -> Dict[str, Any]:
    """
    Drive a tracker with recorded samples on a simulated clock.

    Returns:
        Save result and the final workout record
    """
    scheduler = ManualScheduler()
    location = ManualLocationProvider()
    store = InMemoryStore()
    api = HttpWorkoutAPI() if upload else None

    tracker = create_tracker(
        activity,
        user_id,
        store=store,
        api=api,
        scheduler=scheduler,
        location=location,
    )

    if not tracker.start():
        raise RuntimeError(f"Could not start {activity.value} session")

    with session_context(tracker.session_id, activity.value):
        logger.info("Replaying route", samples=len(samples), upload=upload)

        elapsed = 0.0
        for raw in samples:
            offset = float(raw.get("offset", elapsed))
            scheduler.advance(max(0.0, offset - elapsed))
            elapsed = max(elapsed, offset)

            fields = {k: v for k, v in raw.items() if k != "offset"}
            location.push(PositionSample(**fields))
            await tracker.flush()

        tracker.stop()
        result = await tracker.save_workout()
        tracker.cleanup()

    return result.to_dict()


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay a recorded route through a tracking session")
    parser.add_argument("route", type=Path, help="JSON file with position samples")
    parser.add_argument(
        "--activity",
        default=ActivityKind.RUNNING.value,
        choices=[ActivityKind.RUNNING.value, ActivityKind.CYCLING.value],
    )
    parser.add_argument("--user", required=True, help="Workout owner id")
    parser.add_argument(
        "--upload",
        action="store_true",
        help=f"Save to the workout API ({settings.API_BASE_URL})",
    )
    args = parser.parse_args()

    setup_logging()
    result = asyncio.run(
        replay(load_route(args.route), ActivityKind(args.activity), args.user, upload=args.upload)
    )
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
