"""
Utility modules for the Logbook

Common helpers used across the package:
- distance: Great circle distance, bearing and angle math
- data_transform: Operator input parsing, lookup tables and formatting
"""

from .distance import (
    calculate_distance_nm, initial_bearing_deg, normalize_deg, angular_delta,
    speed_knots, calculate_track_distance,
)
from .data_transform import parse_bearing, beaufort_to_knots, default_awa, format_position, format_clock_time

__all__ = [
    'calculate_distance_nm',
    'initial_bearing_deg',
    'normalize_deg',
    'angular_delta',
    'speed_knots',
    'calculate_track_distance',
    'parse_bearing',
    'beaufort_to_knots',
    'default_awa',
    'format_position',
    'format_clock_time',
]
