"""
Geodesic distance and pace/speed conversions. No state.
"""
import math
from typing import Any, Dict, List, Optional, Sequence

from fittrack.models.gps import GpsPoint

EARTH_RADIUS_M = 6_371_000


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two coordinates (Haversine).

    Returns:
        Distance in metres
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def speed_kmh(distance_m: float, seconds: float) -> float:
    """Speed in km/h, 0 when no time has elapsed."""
    if seconds <= 0:
        return 0.0
    return distance_m / seconds * 3.6


def pace_from_speed(speed: float) -> float:
    """Pace in min/km for a speed in km/h. Zero speed means zero pace."""
    if speed <= 0:
        return 0.0
    return 60 / speed


def format_pace(pace_min_per_km: float) -> str:
    """Format pace as m:ss."""
    if pace_min_per_km <= 0 or not math.isfinite(pace_min_per_km):
        return "0:00"

    minutes = int(pace_min_per_km)
    seconds = round((pace_min_per_km - minutes) * 60)
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes}:{seconds:02d}"


def format_duration(seconds: int) -> str:
    """Format duration as h:mm:ss, or m:ss below one hour."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def compress_route(points: Sequence[GpsPoint], max_points: int = 500) -> List[GpsPoint]:
    """
    Subsample a route so it stays near max_points.

    Keeps every Nth point and always the final one.
    """
    if len(points) <= max_points:
        return list(points)

    step = math.ceil(len(points) / max_points)
    compressed = list(points[::step])

    if compressed[-1] is not points[-1]:
        compressed.append(points[-1])

    return compressed


def encode_route(points: Sequence[GpsPoint], precision: int = 6) -> str:
    """Encode points as 'lat,lon;lat,lon;...'."""
    return ";".join(
        f"{round(p.latitude, precision)},{round(p.longitude, precision)}"
        for p in points
    )


def bounding_box(points: Sequence[GpsPoint]) -> Optional[Dict[str, Any]]:
    """Min/max latitude and longitude of a route, None for an empty route."""
    if not points:
        return None

    lats = [p.latitude for p in points]
    lons = [p.longitude for p in points]
    return {
        "minLatitude": min(lats),
        "maxLatitude": max(lats),
        "minLongitude": min(lons),
        "maxLongitude": max(lons),
    }
