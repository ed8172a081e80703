"""
Geospatial calculations using the Haversine formula - distances, bearings, angle deltas and speeds
"""

import math
from typing import Iterable, Tuple


EARTH_RADIUS_KM = 6371.0088
KM_PER_NM = 1.852


def calculate_distance_nm(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth in nautical miles.

    Uses the Haversine formula with the mean Earth radius.

    Args:
        lat1: Latitude of first point in decimal degrees
        lon1: Longitude of first point in decimal degrees
        lat2: Latitude of second point in decimal degrees
        lon2: Longitude of second point in decimal degrees

    Returns:
        Distance in nautical miles
    """
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c / KM_PER_NM


def normalize_deg(deg: float) -> float:
    """Bring an angle into 0..360 (normalize_deg(-10) == 350)"""
    value = deg % 360.0
    return 0.0 if value == 360.0 else value


def initial_bearing_deg(lat1: float, lon1: float, lat2: float, lon2: float) -> int:
    """
    Initial great circle bearing from the first point to the second.

    Returns:
        Bearing in whole degrees, 0..359
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlon = math.radians(lon2 - lon1)

    y = math.sin(dlon) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlon)

    bearing = math.degrees(math.atan2(y, x))
    return int(round(normalize_deg(bearing))) % 360


def angular_delta(a: float, b: float) -> float:
    """Shortest angular distance between two directions, 0..180"""
    d = abs(normalize_deg(a) - normalize_deg(b))
    return min(d, 360.0 - d)


def speed_knots(distance_nm: float, seconds: float) -> float:
    """Average speed over a leg; elapsed time is floored at one second"""
    return distance_nm / (max(1.0, seconds) / 3600.0)


def calculate_track_distance(points: Iterable[Tuple[float, float]]) -> float:
    """
    Calculate total distance along a track.

    Args:
        points: (lat, lon) pairs in travel order

    Returns:
        Total distance in nautical miles
    """
    total_distance = 0.0
    previous = None
    for point in points:
        if previous is not None:
            total_distance += calculate_distance_nm(previous[0], previous[1], point[0], point[1])
        previous = point

    return total_distance
