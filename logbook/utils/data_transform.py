"""
Data transformation and formatting utilities - operator input parsing and domain lookup tables
"""

from datetime import datetime
from typing import Optional

from ..models.enums import PointOfSail


# Low end of each Beaufort force, in knots
BEAUFORT_LOW_KNOTS = [0, 1, 4, 7, 11, 17, 22, 28, 34, 41, 48, 56, 64]

DEFAULT_AWA_BY_POINT_OF_SAIL = {
    PointOfSail.CLOSE_HAULED: 35,
    PointOfSail.CLOSE_REACH: 45,
    PointOfSail.BEAM_REACH: 90,
    PointOfSail.BROAD_REACH: 120,
    PointOfSail.RUNNING: 120,
    PointOfSail.DEAD_RUN: 170,
    PointOfSail.STOPPED: 0,
}


def parse_bearing(text: Optional[str]) -> Optional[int]:
    """
    Parse an operator-entered bearing.

    Args:
        text: Raw prompt answer, e.g. "245" or " 245° "

    Returns:
        Whole degrees in 0..359, or None if the answer is empty, malformed or out of range
    """
    if text is None:
        return None

    cleaned = text.strip().rstrip("°").strip()
    if not cleaned:
        return None

    try:
        value = float(cleaned.replace(",", "."))
    except ValueError:
        return None

    if value != value or value < 0 or value > 359:
        return None

    return int(round(value)) % 360


def beaufort_to_knots(force: int) -> int:
    """Approximate true wind speed for a Beaufort force (forces above 12 read as 12)"""
    if force <= 0:
        return 0
    return BEAUFORT_LOW_KNOTS[min(force, 12)]


def default_awa(point_of_sail: PointOfSail) -> int:
    return DEFAULT_AWA_BY_POINT_OF_SAIL.get(point_of_sail, 0)


def format_coordinate(value: float, positive: str, negative: str, width: int = 2) -> str:
    hemisphere = positive if value >= 0 else negative
    value = abs(value)
    degrees = int(value)
    minutes = (value - degrees) * 60
    return f"{degrees:0{width}d}°{minutes:06.3f}'{hemisphere}"


def format_position(lat: float, lon: float) -> str:
    """Format a position the way it is written in a paper log, e.g. 47°12.345'N 002°01.000'W"""
    return f"{format_coordinate(lat, 'N', 'S')} {format_coordinate(lon, 'E', 'W', width=3)}"


def format_clock_time(moment: datetime) -> str:
    return moment.strftime("%H:%M")
