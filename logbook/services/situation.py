"""
Situation derivation.

Maps the live vessel state to exactly one Situation with a strict decision
table: rules are tried top to bottom and the first match wins.
"""

from ..models.enums import EmergencyNature, NavZone, PropulsionTool, SevereWeather, Situation, TripStatus
from ..models.vessel import VesselState


HARBOUR_ZONES = (NavZone.HARBOUR, NavZone.ANCHORAGE, NavZone.BUOY_FIELD)

MOTOR_BY_ZONE = {
    NavZone.COASTAL: Situation.S41_COASTAL_MOTOR,
    NavZone.PROTECTED_WATER: Situation.S42_PROTECTED_MOTOR,
    NavZone.INTRACOASTAL_WATERWAY: Situation.S43_WATERWAY_MOTOR,
    NavZone.OPEN_SEA: Situation.S44_OPEN_SEA_MOTOR,
    NavZone.TRAFFIC: Situation.S45_TRAFFIC_LANE_MOTOR,
}

SAIL_BY_ZONE = {
    NavZone.COASTAL: Situation.S51_COASTAL_SAIL,
    NavZone.PROTECTED_WATER: Situation.S52_PROTECTED_SAIL,
    NavZone.INTRACOASTAL_WATERWAY: Situation.S53_WATERWAY_SAIL,
    NavZone.OPEN_SEA: Situation.S54_OPEN_SEA_SAIL,
    NavZone.TRAFFIC: Situation.S55_TRAFFIC_LANE_SAIL,
}

SAIL_STRONG_BY_ZONE = {
    NavZone.COASTAL: Situation.S51W_COASTAL_SAIL_STRONG,
    NavZone.PROTECTED_WATER: Situation.S52W_PROTECTED_SAIL_STRONG,
    NavZone.INTRACOASTAL_WATERWAY: Situation.S53W_WATERWAY_SAIL_STRONG,
    NavZone.OPEN_SEA: Situation.S54W_OPEN_SEA_SAIL_STRONG,
    NavZone.TRAFFIC: Situation.S55W_TRAFFIC_LANE_SAIL_STRONG,
}

EMERGENCY_BY_NATURE = {
    EmergencyNature.MOB: Situation.E1_MOB,
    EmergencyNature.FIRE: Situation.E2_FIRE,
    EmergencyNature.HEALTH: Situation.E3_MEDICAL,
}

SITUATION_TITLES = {
    Situation.S1_PREPARING_TRIP: "Preparing trip",
    Situation.S2_TRIP_STARTED: "Trip started",
    Situation.S3_IN_HARBOUR_AREA: "In harbour area",
    Situation.S41_COASTAL_MOTOR: "Coastal navigation under motor",
    Situation.S42_PROTECTED_MOTOR: "Protected waters under motor",
    Situation.S43_WATERWAY_MOTOR: "Waterway under motor",
    Situation.S44_OPEN_SEA_MOTOR: "Open sea under motor",
    Situation.S45_TRAFFIC_LANE_MOTOR: "Traffic lane under motor",
    Situation.S51_COASTAL_SAIL: "Coastal navigation under sail",
    Situation.S52_PROTECTED_SAIL: "Protected waters under sail",
    Situation.S53_WATERWAY_SAIL: "Waterway under sail",
    Situation.S54_OPEN_SEA_SAIL: "Open sea under sail",
    Situation.S55_TRAFFIC_LANE_SAIL: "Traffic lane under sail",
    Situation.S51W_COASTAL_SAIL_STRONG: "Coastal sailing, strong wind",
    Situation.S52W_PROTECTED_SAIL_STRONG: "Protected waters, strong wind",
    Situation.S53W_WATERWAY_SAIL_STRONG: "Waterway sailing, strong wind",
    Situation.S54W_OPEN_SEA_SAIL_STRONG: "Open sea sailing, strong wind",
    Situation.S55W_TRAFFIC_LANE_SAIL_STRONG: "Traffic lane sailing, strong wind",
    Situation.S6_APPROACH_MOTOR: "Approach under motor",
    Situation.S6S_APPROACH_SAIL: "Approach under sail",
    Situation.S7_HARBOUR_STOPPED: "Moored or anchored",
    Situation.S8_STORM: "Storm manoeuvres",
    Situation.S9_DANGER_LIGHT_WIND: "Danger spotted",
    Situation.S9W_DANGER_STRONG_WIND: "Danger spotted, strong wind",
    Situation.E1_MOB: "Man overboard",
    Situation.E2_FIRE: "Fire on board",
    Situation.E3_MEDICAL: "Medical emergency",
    Situation.E4_OTHER_EMERGENCY: "Emergency",
}


def derive_situation(vessel: VesselState) -> Situation:
    """
    Derive the current Situation.

    Pure and total: the same state always yields the same Situation, and every
    state yields one.
    """
    trip = vessel.trip
    if trip is None or trip.status in (TripStatus.PREPARING, TripStatus.COMPLETED):
        return Situation.S1_PREPARING_TRIP
    if trip.status == TripStatus.STARTED:
        return Situation.S2_TRIP_STARTED

    if vessel.emergency_state and vessel.emergency_nature != EmergencyNature.NONE:
        return EMERGENCY_BY_NATURE.get(vessel.emergency_nature, Situation.E4_OTHER_EMERGENCY)

    if vessel.severe_weather != SevereWeather.NONE:
        return Situation.S8_STORM

    if vessel.has_danger():
        return Situation.S9W_DANGER_STRONG_WIND if vessel.strong_wind() else Situation.S9_DANGER_LIGHT_WIND

    zone = vessel.nav_zone
    if zone in HARBOUR_ZONES:
        return Situation.S7_HARBOUR_STOPPED if vessel.is_stopped() else Situation.S3_IN_HARBOUR_AREA

    under_motor = vessel.propulsion in (PropulsionTool.MOTOR, PropulsionTool.NONE)
    sailing = vessel.propulsion in (PropulsionTool.SAIL, PropulsionTool.MOTORSAIL)

    if under_motor:
        if zone == NavZone.APPROACH:
            return Situation.S6_APPROACH_MOTOR
        return MOTOR_BY_ZONE.get(zone, Situation.S41_COASTAL_MOTOR)

    if sailing:
        if zone == NavZone.APPROACH:
            return Situation.S6S_APPROACH_SAIL
        table = SAIL_STRONG_BY_ZONE if vessel.strong_wind() else SAIL_BY_ZONE
        return table.get(zone, table[NavZone.COASTAL])

    # in tow
    return Situation.S41_COASTAL_MOTOR


def situation_title(situation: Situation) -> str:
    return SITUATION_TITLES[situation]
