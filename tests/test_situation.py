import itertools

import pytest

from logbook.models import (
    EmergencyNature, EnvironmentDanger, NavStatus, NavZone, PropulsionTool, SevereWeather,
    Situation, Trip, TripStatus, VesselState,
)
from logbook.services import derive_situation, situation_title


def vessel_with(status=TripStatus.UNDERWAY, **fields):
    trip = Trip(status=status) if status is not None else None
    return VesselState(trip=trip, **fields)


def test_no_trip_and_completed_trip_are_preparing():
    assert derive_situation(vessel_with(status=None)) == Situation.S1_PREPARING_TRIP
    assert derive_situation(vessel_with(status=TripStatus.COMPLETED)) == Situation.S1_PREPARING_TRIP
    assert derive_situation(vessel_with(status=TripStatus.PREPARING)) == Situation.S1_PREPARING_TRIP


def test_started_trip():
    assert derive_situation(vessel_with(status=TripStatus.STARTED)) == Situation.S2_TRIP_STARTED


def test_emergency_wins_over_storm():
    vessel = vessel_with(
        emergency_state=True,
        emergency_nature=EmergencyNature.FIRE,
        severe_weather=SevereWeather.STORM,
    )
    assert derive_situation(vessel) == Situation.E2_FIRE


@pytest.mark.parametrize("nature,expected", [
    (EmergencyNature.MOB, Situation.E1_MOB),
    (EmergencyNature.FIRE, Situation.E2_FIRE),
    (EmergencyNature.HEALTH, Situation.E3_MEDICAL),
    (EmergencyNature.FLOODING, Situation.E4_OTHER_EMERGENCY),
    (EmergencyNature.PIRACY, Situation.E4_OTHER_EMERGENCY),
])
def test_emergency_nature(nature, expected):
    assert derive_situation(vessel_with(emergency_state=True, emergency_nature=nature)) == expected


def test_storm_wins_over_danger():
    vessel = vessel_with(severe_weather=SevereWeather.GALE, environment_dangers=[EnvironmentDanger.NETS])
    assert derive_situation(vessel) == Situation.S8_STORM


def test_danger_split_by_wind_strength():
    light = vessel_with(environment_dangers=[EnvironmentDanger.NETS], wind_force=4)
    strong = vessel_with(environment_dangers=[EnvironmentDanger.NETS], wind_force=5)
    assert derive_situation(light) == Situation.S9_DANGER_LIGHT_WIND
    assert derive_situation(strong) == Situation.S9W_DANGER_STRONG_WIND


def test_danger_list_of_none_is_no_danger():
    vessel = vessel_with(environment_dangers=[EnvironmentDanger.NONE], nav_zone=NavZone.OPEN_SEA)
    assert derive_situation(vessel) == Situation.S44_OPEN_SEA_MOTOR


@pytest.mark.parametrize("zone", [NavZone.HARBOUR, NavZone.ANCHORAGE, NavZone.BUOY_FIELD])
def test_harbour_zones_split_by_nav_status(zone):
    stopped = vessel_with(nav_zone=zone, nav_status=NavStatus.STOPPED)
    moving = vessel_with(nav_zone=zone, nav_status=NavStatus.UNDERWAY)
    assert derive_situation(stopped) == Situation.S7_HARBOUR_STOPPED
    assert derive_situation(moving) == Situation.S3_IN_HARBOUR_AREA


def test_approach_split_by_propulsion():
    assert derive_situation(vessel_with(nav_zone=NavZone.APPROACH)) == Situation.S6_APPROACH_MOTOR
    sailing = vessel_with(nav_zone=NavZone.APPROACH, propulsion=PropulsionTool.SAIL, wind_force=7)
    assert derive_situation(sailing) == Situation.S6S_APPROACH_SAIL


@pytest.mark.parametrize("zone,motor,sail,strong", [
    (NavZone.COASTAL, Situation.S41_COASTAL_MOTOR, Situation.S51_COASTAL_SAIL, Situation.S51W_COASTAL_SAIL_STRONG),
    (NavZone.PROTECTED_WATER, Situation.S42_PROTECTED_MOTOR, Situation.S52_PROTECTED_SAIL,
     Situation.S52W_PROTECTED_SAIL_STRONG),
    (NavZone.INTRACOASTAL_WATERWAY, Situation.S43_WATERWAY_MOTOR, Situation.S53_WATERWAY_SAIL,
     Situation.S53W_WATERWAY_SAIL_STRONG),
    (NavZone.OPEN_SEA, Situation.S44_OPEN_SEA_MOTOR, Situation.S54_OPEN_SEA_SAIL,
     Situation.S54W_OPEN_SEA_SAIL_STRONG),
    (NavZone.TRAFFIC, Situation.S45_TRAFFIC_LANE_MOTOR, Situation.S55_TRAFFIC_LANE_SAIL,
     Situation.S55W_TRAFFIC_LANE_SAIL_STRONG),
])
def test_zone_by_propulsion_table(zone, motor, sail, strong):
    assert derive_situation(vessel_with(nav_zone=zone, propulsion=PropulsionTool.MOTOR)) == motor
    assert derive_situation(vessel_with(nav_zone=zone, propulsion=PropulsionTool.NONE)) == motor
    assert derive_situation(vessel_with(nav_zone=zone, propulsion=PropulsionTool.MOTORSAIL, wind_force=3)) == sail
    assert derive_situation(vessel_with(nav_zone=zone, propulsion=PropulsionTool.SAIL, wind_force=6)) == strong


def test_unmatched_zone_falls_back_to_coastal():
    assert derive_situation(vessel_with(nav_zone=NavZone.NONE)) == Situation.S41_COASTAL_MOTOR
    sailing = vessel_with(nav_zone=NavZone.NONE, propulsion=PropulsionTool.SAIL, wind_force=6)
    assert derive_situation(sailing) == Situation.S51W_COASTAL_SAIL_STRONG


def test_derivation_is_total_and_deterministic():
    combos = itertools.product(
        [None] + list(TripStatus),
        list(NavZone),
        list(PropulsionTool),
        [NavStatus.STOPPED, NavStatus.UNDERWAY],
        [0, 6],
        [False, True],
    )
    for status, zone, propulsion, nav_status, force, emergency in combos:
        vessel = vessel_with(
            status=status,
            nav_zone=zone,
            propulsion=propulsion,
            nav_status=nav_status,
            wind_force=force,
            emergency_state=emergency,
            emergency_nature=EmergencyNature.MOB if emergency else EmergencyNature.NONE,
        )
        first = derive_situation(vessel)
        assert isinstance(first, Situation)
        assert derive_situation(vessel) == first
        assert situation_title(first)
