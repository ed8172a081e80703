"""
Visibility predicates - decide, against the live vessel state, whether an action is offered.

Every predicate takes the ActionRuntime of the action being considered and
only reads state. Tags missing from VISIBILITY are always visible.
"""

from typing import Callable, Dict

from ..models.boat import MotorState
from ..models.enums import NavStatus, NavZone, PointOfSail, PropulsionTool, Steering, TripStatus
from .tags import ActionTag as T


Predicate = Callable[[object], bool]


def always(rt) -> bool:
    return True


# Trip

def trip_preparing(rt) -> bool:
    return rt.vessel.trip_status() == TripStatus.PREPARING


def trip_in_progress(rt) -> bool:
    """Trip left preparation and is not completed yet"""
    return rt.vessel.trip_status() in (TripStatus.STARTED, TripStatus.UNDERWAY, TripStatus.INTERRUPTED)


# Navigation

def boat_stopped(rt) -> bool:
    return rt.vessel.is_stopped()


def underway(rt) -> bool:
    return rt.vessel.is_underway()


def in_zone(*zones: NavZone) -> Predicate:
    def predicate(rt) -> bool:
        return rt.vessel.nav_zone in zones
    return predicate


def underway_in(*zones: NavZone) -> Predicate:
    def predicate(rt) -> bool:
        return underway(rt) and rt.vessel.nav_zone in zones
    return predicate


def underway_outside(*zones: NavZone) -> Predicate:
    def predicate(rt) -> bool:
        return underway(rt) and rt.vessel.nav_zone not in zones
    return predicate


def sailing(rt) -> bool:
    return rt.vessel.is_sailing()


def stormy(rt) -> bool:
    return rt.vessel.is_stormy()


def emergency(rt) -> bool:
    return rt.vessel.emergency_state


def autopilot_engaged(rt) -> bool:
    return rt.vessel.steering == Steering.AUTOPILOT


def held_up(rt) -> bool:
    """Off the route, or stopped making way at sea (heave to, bare poles, storm tactics)"""
    if not trip_in_progress(rt):
        return False
    if rt.vessel.nav_status in (NavStatus.HEAVE_TO, NavStatus.BARE_POLES, NavStatus.STORM_TACTICS):
        return True
    return underway(rt) and not rt.vessel.on_course


# Motors

def single_motor_running(rt) -> bool:
    motor = rt.vessel.boat.propulsion_motor()
    return motor is not None and motor.is_running


def single_motor_stopped(rt) -> bool:
    motor = rt.vessel.boat.propulsion_motor()
    return motor is not None and motor.state == MotorState.STOPPED


def several_motors(rt) -> bool:
    return rt.vessel.boat.has_several_motors()


# Sails

def classical_sloop(rt) -> bool:
    return rt.vessel.boat.is_classical_sloop()


def sail_is(attribute: str, is_set: bool) -> Predicate:
    """Sloop rig whose `attribute` sail exists and is (not) set"""
    def predicate(rt) -> bool:
        boat = rt.vessel.boat
        sail = getattr(boat, attribute)
        return boat.is_classical_sloop() and sail is not None and sail.is_set == is_set
    return predicate


def sail_can(attribute: str, capability: str) -> Predicate:
    def predicate(rt) -> bool:
        boat = rt.vessel.boat
        sail = getattr(boat, attribute)
        return boat.is_classical_sloop() and sail is not None and getattr(sail, capability)
    return predicate


def sail_partly_reduced(attribute: str) -> Predicate:
    """More than one reduction step in, so a single-step increase differs from going full"""
    def predicate(rt) -> bool:
        boat = rt.vessel.boat
        sail = getattr(boat, attribute)
        return boat.is_classical_sloop() and sail is not None and sail.can_increase and sail.reduction_level > 1
    return predicate


def can_set_all_sails(rt) -> bool:
    return (
        classical_sloop(rt)
        and underway(rt)
        and rt.vessel.propulsion in (PropulsionTool.MOTOR, PropulsionTool.NONE)
    )


def wing_on_wing_possible(is_on: bool) -> Predicate:
    def predicate(rt) -> bool:
        vessel = rt.vessel
        boat = vessel.boat
        return (
            boat.is_classical_sloop()
            and boat.headsail.is_set
            and boat.mainsail.is_set
            and vessel.point_of_sail == PointOfSail.RUNNING
            and vessel.wing_on_wing == is_on
        )
    return predicate


# Predicates per tag

VISIBILITY: Dict[T, Predicate] = {
    T.A1: trip_preparing,
    T.A1R: lambda rt: trip_in_progress(rt) and boat_stopped(rt),
    T.A1A: trip_preparing,
    T.A2: lambda rt: rt.vessel.has_active_trip(),

    T.A3: single_motor_running,
    T.A4: single_motor_running,
    T.A5: single_motor_running,
    T.A6: single_motor_running,

    T.A7M: lambda rt: boat_stopped(rt) and trip_in_progress(rt) and rt.vessel.is_moored(),
    T.A7A: lambda rt: boat_stopped(rt) and trip_in_progress(rt) and rt.vessel.nav_zone == NavZone.ANCHORAGE,
    T.A8M: lambda rt: (
        trip_in_progress(rt) and not boat_stopped(rt)
        and rt.vessel.nav_zone in (NavZone.HARBOUR, NavZone.BUOY_FIELD)
    ),
    T.A8A: lambda rt: trip_in_progress(rt) and not boat_stopped(rt) and rt.vessel.nav_zone == NavZone.ANCHORAGE,
    T.A9: in_zone(NavZone.HARBOUR),
    T.A10: in_zone(NavZone.HARBOUR),

    T.A11H: underway_in(NavZone.HARBOUR),
    T.A11A: underway_in(NavZone.ANCHORAGE),
    T.A11B: underway_in(NavZone.BUOY_FIELD),
    T.A11HR: underway_in(NavZone.COASTAL, NavZone.APPROACH),
    T.A11AR: underway_in(NavZone.COASTAL, NavZone.APPROACH),
    T.A11BR: underway_in(NavZone.COASTAL, NavZone.APPROACH),

    T.A12: underway_outside(NavZone.PROTECTED_WATER),
    T.A13: underway_outside(NavZone.COASTAL),
    T.A14: underway_outside(NavZone.OPEN_SEA),
    T.A15: underway_outside(NavZone.INTRACOASTAL_WATERWAY),
    T.A16: underway_outside(NavZone.OPEN_SEA, NavZone.APPROACH),
    T.A17: lambda rt: underway(rt) and sailing(rt),
    T.A18: lambda rt: underway(rt) and rt.vessel.boat.is_sailboat(),
    T.A19: lambda rt: rt.vessel.has_danger() or stormy(rt),
    T.A20: held_up,
    T.A21: underway,
    T.A23: underway,
    T.A24: lambda rt: underway(rt) and rt.vessel.next_waypoint is not None,

    T.A25: lambda rt: underway(rt) and not autopilot_engaged(rt),
    T.A25R: lambda rt: underway(rt) and autopilot_engaged(rt),
    T.A26: lambda rt: underway(rt) and autopilot_engaged(rt),

    T.A27: can_set_all_sails,
    T.A27R: lambda rt: classical_sloop(rt) and sailing(rt),
    T.A27W: wing_on_wing_possible(False),
    T.A27WR: wing_on_wing_possible(True),
    T.A29: sail_is("headsail", False),
    T.A29R: sail_is("headsail", True),
    T.A30: sail_is("mainsail", False),
    T.A30R: sail_is("mainsail", True),
    T.A31: sail_is("gennaker", False),
    T.A31R: sail_is("gennaker", True),
    T.A32: sail_is("spinnaker", False),
    T.A32R: sail_is("spinnaker", True),

    T.A33R: sail_can("mainsail", "can_reef_further"),
    T.A33F: sail_can("mainsail", "can_furl_further"),
    T.A34: sail_can("mainsail", "can_increase"),
    T.A35R: sail_can("headsail", "can_reef_further"),
    T.A35F: sail_can("headsail", "can_furl_further"),
    T.A36: sail_can("headsail", "can_increase"),
    T.A37: sail_partly_reduced("mainsail"),
    T.A38: sail_partly_reduced("headsail"),

    T.A39: sailing,
    T.A40: sailing,
    T.A41: sailing,
    T.A42: sailing,
    T.A43: sailing,
    T.A44: sailing,
    T.A45: stormy,
    T.A46: stormy,
    T.A47: stormy,
    T.A48: stormy,
    T.A49: boat_stopped,
    T.A50: in_zone(NavZone.COASTAL),
    T.A51: stormy,

    T.AF2: single_motor_stopped,
    T.AF2R: single_motor_running,
    T.AF21: several_motors,
    T.AF3N: lambda rt: rt.vessel.daytime,
    T.AF3D: lambda rt: not rt.vessel.daytime,
    T.AF17: lambda rt: bool(rt.vessel.boat.extra_rigs),
}

VISIBILITY.update({tag: emergency for tag in T if tag.value.startswith("EM")})


def predicate_for(tag: T) -> Predicate:
    return VISIBILITY.get(tag, always)
