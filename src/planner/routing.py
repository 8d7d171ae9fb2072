"""
Distance and duration utilities for route planning.

Travel is modelled as a straight line (haversine great-circle distance)
driven at a fixed average speed. Handling time for a job grows linearly
with the volume of cargo to load and unload.

TODO: Swap in road-network travel times (e.g. an OSRM table lookup) once the
planner has access to a routing backend.
"""

import math
from typing import Optional

from .models import Location

EARTH_RADIUS_KM = 6371.0

# Defaults tuned for Greater Vancouver; overridable through settings
AVERAGE_SPEED_KMH = 40.0
BASE_JOB_MINUTES = 30.0  # Minimum handling time for any job
JOB_MINUTES_PER_M3 = 15.0


def is_valid_location(location: Optional[Location]) -> bool:
    """
    Checks that a location carries usable coordinates.

    Both coordinates must be present, finite, and within
    latitude [-90, 90] / longitude [-180, 180].
    """
    if location is None or location.lat is None or location.lon is None:
        return False
    if not (math.isfinite(location.lat) and math.isfinite(location.lon)):
        return False
    return -90.0 <= location.lat <= 90.0 and -180.0 <= location.lon <= 180.0


def calculate_distance_km(start_loc: Location, end_loc: Location) -> float:
    """
    Calculates the great-circle distance between two locations.

    Args:
        start_loc: Starting location (lat/lon in degrees)
        end_loc: Ending location (lat/lon in degrees)

    Returns:
        Distance in kilometers
    """
    lat1, lon1 = math.radians(start_loc.lat), math.radians(start_loc.lon)
    lat2, lon2 = math.radians(end_loc.lat), math.radians(end_loc.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def calculate_travel_time(distance_km: float, average_speed_kmh: float = AVERAGE_SPEED_KMH) -> float:
    """Converts a distance into travel minutes at the average speed."""
    return distance_km / average_speed_kmh * 60


def estimate_job_duration(
    volume: float,
    base_minutes: float = BASE_JOB_MINUTES,
    minutes_per_m3: float = JOB_MINUTES_PER_M3,
) -> float:
    """Estimates loading/unloading minutes for a job from its cargo volume."""
    return base_minutes + volume * minutes_per_m3
