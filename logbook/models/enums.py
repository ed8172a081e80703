"""
Enumerations shared by the logbook domain - vessel state, trips, sailing geometry and weather
"""

from enum import Enum


class TripStatus(str, Enum):
    """Lifecycle of a trip"""
    PREPARING = "preparing"
    STARTED = "started"
    UNDERWAY = "underway"
    INTERRUPTED = "interrupted"
    COMPLETED = "completed"


class NavStatus(str, Enum):
    """How the boat is currently making way"""
    BARE_POLES = "bare poles"
    HEAVE_TO = "heave to"
    STOPPED = "moored or anchored"
    UNDERWAY = "en route"
    STORM_TACTICS = "storm tactics"
    NONE = "none"


class NavZone(str, Enum):
    """Navigation zone the boat is in"""
    COASTAL = "coastal"
    INTRACOASTAL_WATERWAY = "intracoastal waterway"
    APPROACH = "approach"
    PROTECTED_WATER = "protected water"
    OPEN_SEA = "open sea"
    HARBOUR = "harbour"
    ANCHORAGE = "anchorage"
    BUOY_FIELD = "buoy field"
    TRAFFIC = "traffic lane"
    NONE = "none"


class PropulsionTool(str, Enum):
    """What is currently driving the boat"""
    MOTOR = "motor"
    SAIL = "sails"
    IN_TOW = "in_tow"
    MOTORSAIL = "motor_and_sail"
    NONE = "none"


class MooringType(str, Enum):
    MOORING_BALL = "mooring_ball"
    CHAIN_MOORING = "chain_mooring"
    MOORED_ON_BUOY = "moored_on_buoy"
    MOORED_ON_SHORE = "moored_to_shore"
    AT_ANCHOR = "at_anchor"
    DOUBLE = "double_moored"
    OTHER = "other"
    NONE = "none"


class Tack(str, Enum):
    STARBOARD = "starboard"
    PORT = "port"
    NONE = "none"


class PointOfSail(str, Enum):
    """Points of sail, ordered from closest to the wind to dead downwind"""
    CLOSE_HAULED = "close hauled"
    CLOSE_REACH = "close reach"
    BEAM_REACH = "beam reach"
    BROAD_REACH = "broad reach"
    RUNNING = "running"
    DEAD_RUN = "dead run"
    STOPPED = "stopped"


class Steering(str, Enum):
    BY_HAND = "hand_steering"
    AUTOPILOT = "autopilot"
    FIXED = "fixed_rudder"
    NONE = "free rudder"


class AutopilotMode(str, Enum):
    OFF = "off"
    ON_TWA = "on_twa"
    ON_AWA = "on_awa"
    ON_HDG = "on_hdg"
    ON_COG = "on_cog"
    ON_TRACK = "on_track"
    UNKNOWN = "on_unknown"


class SevereWeather(str, Enum):
    NONE = "none"
    STORM = "storm"
    SQUALL = "squall"
    GALE = "gale"
    HURRICANE = "hurricane"
    WATERSPOUT = "waterspout"
    THUNDERSTORM = "thunderstorm"
    MICROBURST = "microburst"
    DERECHO = "derecho"
    MESOSCALE = "mesoscale_convective_system"


class EnvironmentDanger(str, Enum):
    """Hazards reported around the boat; a list of just NONE means no danger"""
    NONE = "none"
    STRONG_CURRENTS = "strong_currents"
    TRAFFIC = "heavy_traffic"
    FLOATING_DEBRIS = "floating_debris"
    ICEBERGS = "icebergs"
    GROWLERS = "growlers"
    WEEDS = "dense_weeds"
    NETS = "fishing_nets"
    COLLISION_COURSE = "collision_course"
    UNCHARTED = "uncharted_highs"
    MAGNETIC_ANOMALIES = "magnetic_anomalies"
    ANIMALS = "hazardous_animals"
    ORCAS = "orca_attack"
    MILITARY = "military_presence"
    FLOATING_STRUCTURES = "floating_structures"
    WINDMILLS = "windmills"
    FIXED_STRUCTURES = "fixed_structures"
    UNPREDICTABLE_VESSELS = "unpredictable_vessels"
    OTHER = "other"


class EmergencyNature(str, Enum):
    NONE = "none"
    MOB = "man_overboard"
    FIRE = "fire"
    HEALTH = "health_issue"
    FLOODING = "flooding"
    COLLISION = "collision"
    MECHANICAL = "mechanical_failure"
    PIRACY = "piracy"
    RELAY = "mayday relay"
    OTHER = "other emergency"


class EmergencyLevel(str, Enum):
    NONE = "none"
    DISTRESS = "distress"
    URGENCY = "urgency"
    SECURITE = "securite"


class FixSource(str, Enum):
    """Provenance of a position fix, in order of preference"""
    SENSOR = "sensor"
    DEVICE = "device"
    LAST_KNOWN = "last_known"


class Situation(str, Enum):
    """Operating context label that drives which actions are offered"""
    S1_PREPARING_TRIP = "S1"
    S2_TRIP_STARTED = "S2"
    S3_IN_HARBOUR_AREA = "S3"

    S41_COASTAL_MOTOR = "S41"
    S42_PROTECTED_MOTOR = "S42"
    S43_WATERWAY_MOTOR = "S43"
    S44_OPEN_SEA_MOTOR = "S44"
    S45_TRAFFIC_LANE_MOTOR = "S45"

    S51_COASTAL_SAIL = "S51"
    S52_PROTECTED_SAIL = "S52"
    S53_WATERWAY_SAIL = "S53"
    S54_OPEN_SEA_SAIL = "S54"
    S55_TRAFFIC_LANE_SAIL = "S55"

    S51W_COASTAL_SAIL_STRONG = "S51w"
    S52W_PROTECTED_SAIL_STRONG = "S52w"
    S53W_WATERWAY_SAIL_STRONG = "S53w"
    S54W_OPEN_SEA_SAIL_STRONG = "S54w"
    S55W_TRAFFIC_LANE_SAIL_STRONG = "S55w"

    S6_APPROACH_MOTOR = "S6"
    S6S_APPROACH_SAIL = "S6s"
    S7_HARBOUR_STOPPED = "S7"
    S8_STORM = "S8"
    S9_DANGER_LIGHT_WIND = "S9"
    S9W_DANGER_STRONG_WIND = "S9w"

    E1_MOB = "E1"
    E2_FIRE = "E2"
    E3_MEDICAL = "E3"
    E4_OTHER_EMERGENCY = "E4"


class ActionGroup(str, Enum):
    """Coarse grouping used to lay out actions"""
    EMERGENCY = "emergency"
    CHECKLIST = "checklist"
    INCIDENT = "incident"
    MOTOR = "motor"
    NAVIGATION = "navigation"
    ENVIRONMENT = "environment"
    OTHER_LOG = "other_log"
    SAIL_PLAN = "sail_plan"
    GENERIC = "generic"
