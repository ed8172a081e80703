import pytest

from logbook.utils.distance import (
    angular_delta, calculate_distance_nm, calculate_track_distance, initial_bearing_deg,
    normalize_deg, speed_knots,
)
from logbook.utils.data_transform import beaufort_to_knots, format_position, parse_bearing


def test_angular_delta_wraps_around_north():
    assert angular_delta(350, 10) == 20
    assert angular_delta(10, 350) == 20
    assert angular_delta(0, 180) == 180


def test_normalize_deg():
    assert normalize_deg(-10) == 350
    assert normalize_deg(360) == 0
    assert normalize_deg(725) == 5


def test_one_degree_of_latitude_is_about_sixty_miles():
    assert calculate_distance_nm(50.0, -4.0, 51.0, -4.0) == pytest.approx(60.0, rel=0.005)
    assert calculate_distance_nm(43.1, 6.1, 43.1, 6.1) == 0


def test_initial_bearing_cardinal_points():
    assert initial_bearing_deg(50.0, -4.0, 51.0, -4.0) == 0
    assert initial_bearing_deg(50.0, -4.0, 49.0, -4.0) == 180
    assert initial_bearing_deg(0.0, 0.0, 0.0, 1.0) == 90


def test_speed_floors_elapsed_time_at_one_second():
    assert speed_knots(5.0, 3600) == pytest.approx(5.0)
    assert speed_knots(1.0, 0) == pytest.approx(3600.0)


def test_track_distance_sums_legs():
    points = [(50.0, -4.0), (50.5, -4.0), (51.0, -4.0)]
    assert calculate_track_distance(points) == pytest.approx(calculate_distance_nm(50.0, -4.0, 51.0, -4.0))
    assert calculate_track_distance([]) == 0


@pytest.mark.parametrize("text,expected", [
    ("245", 245),
    (" 101° ", 101),
    ("0", 0),
    ("359", 359),
    ("360", None),
    ("-5", None),
    ("abc", None),
    ("", None),
    (None, None),
])
def test_parse_bearing(text, expected):
    assert parse_bearing(text) == expected


def test_beaufort_low_end_table():
    assert beaufort_to_knots(0) == 0
    assert beaufort_to_knots(4) == 11
    assert beaufort_to_knots(8) == 34
    assert beaufort_to_knots(15) == 64


def test_format_position():
    assert format_position(47.2, -2.5) == "47°12.000'N 002°30.000'W"
