"""
Action handlers - what each operator action does to the vessel and the log.

Every handler is an async callable taking an ActionRuntime. Handlers never
write the vessel directly: they build a patch and hand it to one of three
logging paths on the context:

- ctx.log_now(header, patch): position-significant actions, through the
  reconciliation pipeline; the patch lands at commit with the new position
- ctx.log_simple(message, patch): everything else that deserves an entry
- ctx.instance_log: single-field changes with their own log wording

Sheet-only actions hand over to the operator's full form.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from ..models.boat import BoatProfile, MotorState, MotorUse, SailKind
from ..models.enums import (
    AutopilotMode, EmergencyLevel, EmergencyNature, EnvironmentDanger, MooringType,
    NavStatus, NavZone, PointOfSail, PropulsionTool, SevereWeather, Steering, Tack, TripStatus,
)
from ..models.vessel import VesselState, Waypoint
from ..services.instance_log import (
    MOORING_LEFT_TEXT, MOORING_SET_TEXT, NAV_STATUS_TEXT, NO_TRIP_NOTICE,
    POINT_OF_SAIL_ORDER, STEERING_TEXT,
)
from ..services.reconciliation import DEFAULT_HEADER
from ..utils.data_transform import format_clock_time, parse_bearing
from ..utils.distance import initial_bearing_deg
from .tags import ActionTag as T

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[None]]
E = TypeVar("E")

SAIL_LABELS = {
    SailKind.MAINSAIL: "Mainsail",
    SailKind.HEADSAIL: "Genoa",
    SailKind.GENNAKER: "Gennaker/code zero",
    SailKind.SPINNAKER: "Spinnaker",
}

OPPOSITE_TACK = {Tack.STARBOARD: Tack.PORT, Tack.PORT: Tack.STARBOARD}

MOORING_ALIASES = {
    "shore": MooringType.MOORED_ON_SHORE,
    "quay": MooringType.MOORED_ON_SHORE,
    "ball": MooringType.MOORING_BALL,
    "buoy": MooringType.MOORED_ON_BUOY,
    "chain": MooringType.CHAIN_MOORING,
    "double": MooringType.DOUBLE,
    "other": MooringType.OTHER,
}

SAILING_ORDER = [pos for pos in POINT_OF_SAIL_ORDER if pos != PointOfSail.STOPPED]


# Helpers

def parse_choice(answer: Optional[str], choices: Sequence[E]) -> Optional[E]:
    """
    Match free text against enum members by value or name, allowing prefixes.

    "mech" finds MECHANICAL, "mayday relay" finds RELAY.
    """
    if not answer:
        return None
    wanted = answer.strip().lower().replace(" ", "_").replace("-", "_")
    if not wanted:
        return None

    for member in choices:
        value = member.value.lower().replace(" ", "_")
        name = member.name.lower()
        if wanted in (value, name):
            return member
    for member in choices:
        value = member.value.lower().replace(" ", "_")
        name = member.name.lower()
        if value.startswith(wanted) or name.startswith(wanted):
            return member
    return None


def require_trip(ctx) -> bool:
    """Check for an active trip before asking the operator anything"""
    if ctx.vessel.has_active_trip():
        return True
    ctx.notify(NO_TRIP_NOTICE)
    return False


def trip_moved(vessel: VesselState, status: TripStatus, at) -> Dict[str, Any]:
    """Patch moving the trip to `status`, or nothing when it is already there or cannot go"""
    trip = vessel.trip
    if trip is None or trip.status == status or not trip.can_transition(status):
        return {}
    moved = trip.model_copy(deep=True)
    moved.transition(status, at)
    return {"trip": moved}


def complete_trip(ctx, message: str) -> None:
    """Write the closing entry, then close the trip and reset the voyage state"""
    if ctx.log_simple(message) is None:
        return

    trip = ctx.vessel.trip.model_copy(deep=True)
    trip.transition(TripStatus.COMPLETED, ctx.clock())
    ctx.vessel.apply_patch({
        "trip": trip,
        "nav_status": NavStatus.NONE,
        "environment_dangers": [EnvironmentDanger.NONE],
        "emergency_state": False,
        "emergency_nature": EmergencyNature.NONE,
        "emergency_level": EmergencyLevel.NONE,
    })
    logger.info(f"🏁 Trip {trip.id[:8]} completed")


def engaged(boat: BoatProfile) -> bool:
    """Some non-generator motor is driving the boat (neutral does not count)"""
    return any(
        motor.use != MotorUse.GENERATOR and motor.state not in (MotorState.STOPPED, MotorState.NEUTRAL)
        for motor in boat.motors
    )


def propulsion_for(boat: BoatProfile) -> PropulsionTool:
    if boat.any_sail_set():
        return PropulsionTool.MOTORSAIL if engaged(boat) else PropulsionTool.SAIL
    return PropulsionTool.MOTOR if engaged(boat) else PropulsionTool.NONE


def with_motor_state(boat: BoatProfile, state: MotorState) -> BoatProfile:
    boat = boat.model_copy(deep=True)
    idx = boat.propulsion_motor_index()
    if idx is not None:
        boat.motors[idx].state = state
    return boat


def with_sail(boat: BoatProfile, kind: SailKind, **changes) -> BoatProfile:
    boat = boat.model_copy(deep=True)
    sail = boat.sail(kind)
    for name, value in changes.items():
        setattr(sail, name, value)
    return boat


def motor_patch(vessel: VesselState, boat: BoatProfile) -> Dict[str, Any]:
    patch: Dict[str, Any] = {"boat": boat}
    if vessel.is_underway() and vessel.propulsion != PropulsionTool.IN_TOW:
        patch["propulsion"] = propulsion_for(boat)
    return patch


def sail_plan_patch(vessel: VesselState, boat: BoatProfile) -> Dict[str, Any]:
    patch: Dict[str, Any] = {"boat": boat}
    if vessel.propulsion != PropulsionTool.IN_TOW:
        patch["propulsion"] = propulsion_for(boat)
    if not boat.any_sail_set():
        patch.update({"tack": Tack.NONE, "point_of_sail": PointOfSail.STOPPED, "wing_on_wing": False})
    return patch


def parse_int(text: Optional[str], low: int, high: int) -> Optional[int]:
    if text is None:
        return None
    try:
        value = int(text.strip().rstrip("%"))
    except ValueError:
        return None
    return value if low <= value <= high else None


# Trip lifecycle

async def start_trip(rt) -> None:
    ctx = rt.context
    trip = ctx.vessel.trip.model_copy(deep=True)
    trip.transition(TripStatus.STARTED, ctx.clock())

    header = f"{trip.trip_type} started"
    if trip.destination:
        header += f", destination {trip.destination}"
    ctx.log_simple(header, {"trip": trip, "nav_status": NavStatus.STOPPED})


async def finish_trip(rt) -> None:
    zone = rt.vessel.nav_zone.value
    complete_trip(rt.context, f"Trip completed, boat in {zone}")


async def abort_trip(rt) -> None:
    ctx = rt.context
    reason = await ctx.prompt_single_line("Abort trip", "Why is the trip aborted?", placeholder="Reason")
    if reason is None:
        ctx.notify("Trip not aborted - a reason is required.")
        return
    complete_trip(ctx, f"Trip aborted because {reason}")


async def force_stop_logging(rt) -> None:
    ctx = rt.context
    reason = await ctx.prompt_single_line(
        "Force stop logging", "Why is the logbook interrupted?", placeholder="Reason"
    )
    if reason is None:
        ctx.notify("Logging not stopped - a reason is required.")
        return
    complete_trip(ctx, f"The logbook is interrupted here because {reason}")


# Motor regime

def motor_regime(state: MotorState, text: str) -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        boat = with_motor_state(ctx.vessel.boat, state)
        ctx.log_simple(text, motor_patch(ctx.vessel, boat))
    return handler


async def start_motor(rt) -> None:
    ctx = rt.context
    boat = with_motor_state(ctx.vessel.boat, MotorState.NEUTRAL)
    ctx.log_simple("Main motor started", motor_patch(ctx.vessel, boat))


async def stop_motor(rt) -> None:
    ctx = rt.context
    boat = with_motor_state(ctx.vessel.boat, MotorState.STOPPED)
    ctx.log_simple("Main motor stopped", motor_patch(ctx.vessel, boat))


# Cast off and mooring

async def cast_off(rt) -> None:
    ctx = rt.context
    vessel = ctx.vessel
    header = f"Casted off at {format_clock_time(ctx.clock())}"
    if vessel.mooring in MOORING_LEFT_TEXT:
        header = f"{MOORING_LEFT_TEXT[vessel.mooring]}, {header[0].lower()}{header[1:]}"

    patch = {
        "nav_status": NavStatus.UNDERWAY,
        "mooring": MooringType.NONE,
        "on_course": True,
        **trip_moved(vessel, TripStatus.UNDERWAY, ctx.clock()),
    }
    await ctx.log_now(header, patch)


async def raise_anchor(rt) -> None:
    ctx = rt.context
    patch = {
        "nav_status": NavStatus.UNDERWAY,
        "mooring": MooringType.NONE,
        "on_course": True,
        **trip_moved(ctx.vessel, TripStatus.UNDERWAY, ctx.clock()),
    }
    await ctx.log_now("Anchor raised", patch)


def stop_patch(ctx, mooring: MooringType) -> Dict[str, Any]:
    return {
        "mooring": mooring,
        "nav_status": NavStatus.STOPPED,
        **trip_moved(ctx.vessel, TripStatus.INTERRUPTED, ctx.clock()),
    }


async def moor_boat(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    answer = await ctx.prompt_single_line(
        "Moor boat",
        "How is the boat moored? (shore, ball, buoy, chain, double, other)",
        initial_text="shore"
    )
    if answer is None:
        return

    choices = [m for m in MooringType if m not in (MooringType.NONE, MooringType.AT_ANCHOR)]
    mooring = MOORING_ALIASES.get(answer.lower()) or parse_choice(answer, choices)
    if mooring is None:
        ctx.notify(f"Unknown mooring type '{answer}'.")
        return

    ctx.log_simple(MOORING_SET_TEXT[mooring], stop_patch(ctx, mooring))


async def drop_anchor(rt) -> None:
    ctx = rt.context
    ctx.log_simple("Anchor dropped", stop_patch(ctx, MooringType.AT_ANCHOR))


async def tank_fuel(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    answer = await ctx.prompt_single_line("Tank fuel", "New fuel level in %", placeholder="0-100", numeric=True)
    if answer is None:
        return
    level = parse_int(answer, 0, 100)
    if level is None:
        ctx.notify(f"Invalid fuel level '{answer}', expected 0-100.")
        return
    ctx.log_simple(f"Fuel tanked, new fuel level: {level}%", {"fuel_level": level})


async def relocate_boat(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    place = await ctx.prompt_single_line("Relocate boat", "Where is the boat now?", placeholder="Visitor's dock")
    if place is None:
        return
    ctx.log_simple(f"Boat relocated, now at {place}")


# Zones

def leave_zone() -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        old = ctx.vessel.nav_zone
        header, patch = ctx.instance_log.nav_zone_change(NavZone.COASTAL)
        if old in (NavZone.ANCHORAGE, NavZone.BUOY_FIELD):
            header = f"Left the {old.value}. {header}"
        patch["nav_status"] = NavStatus.UNDERWAY
        await ctx.log_now(header, patch)
    return handler


def enter_zone(zone: NavZone) -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        header, patch = ctx.instance_log.nav_zone_change(zone)
        await ctx.log_now(header, patch)
    return handler


# Navigation state

async def heave_to(rt) -> None:
    rt.context.log_simple(NAV_STATUS_TEXT[NavStatus.HEAVE_TO], {"nav_status": NavStatus.HEAVE_TO})


async def bare_poles(rt) -> None:
    ctx = rt.context
    boat = ctx.vessel.boat.model_copy(deep=True)
    for sail in boat.sails:
        sail.is_set = False
        sail.reduction_level = 0

    patch = sail_plan_patch(ctx.vessel, boat)
    patch["nav_status"] = NavStatus.BARE_POLES
    ctx.log_simple(NAV_STATUS_TEXT[NavStatus.BARE_POLES], patch)


async def dangers_cleared(rt) -> None:
    ctx = rt.context
    header = "Dangers cleared"
    if ctx.vessel.is_stormy():
        header += ", storm is over"
    ctx.log_simple(header, {
        "environment_dangers": [EnvironmentDanger.NONE],
        "severe_weather": SevereWeather.NONE,
    })


async def back_on_track(rt) -> None:
    ctx = rt.context
    await ctx.log_now("Back on track", {"on_course": True, "nav_status": NavStatus.UNDERWAY})


async def request_deviation(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    reason = await ctx.prompt_single_line("Deviation", "Why does the boat leave the planned route?")
    if reason is None:
        return
    await ctx.log_now(f"Deviating from route: {reason}", {"on_course": False})


async def change_course(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    answer = await ctx.prompt_single_line(
        "Change course", "New compass course (0-359)", placeholder="°", numeric=True
    )
    if answer is None:
        return
    course = parse_bearing(answer)
    if course is None:
        ctx.notify(f"Invalid course '{answer}', expected 0-359.")
        return
    await ctx.log_now(f"Course changed to {course}°", {"magnetic_heading": course})


async def course_to_waypoint(rt) -> None:
    ctx = rt.context
    vessel = ctx.vessel
    waypoint = vessel.next_waypoint

    header = f"Course set to waypoint {waypoint.name}"
    patch: Dict[str, Any] = {"on_course": True}
    if vessel.has_position() and (waypoint.lat or waypoint.lon):
        bearing = initial_bearing_deg(vessel.lat, vessel.lon, waypoint.lat, waypoint.lon)
        header += f" ({bearing}°)"
        patch["bearing"] = bearing
    await ctx.log_now(header, patch)


# Autopilot

async def autopilot_on(rt) -> None:
    rt.context.instance_log.autopilot_changed(AutopilotMode.UNKNOWN)


async def autopilot_off(rt) -> None:
    rt.context.instance_log.autopilot_changed(AutopilotMode.OFF)


# Sail plan

def present_sheet(tag: T) -> Handler:
    async def handler(rt) -> None:
        rt.context.present_sheet(tag)
    return handler


async def set_all_sails(rt) -> None:
    ctx = rt.context
    boat = with_sail(ctx.vessel.boat, SailKind.MAINSAIL, is_set=True)
    boat = with_sail(boat, SailKind.HEADSAIL, is_set=True)
    ctx.log_simple("All sails set", sail_plan_patch(ctx.vessel, boat))


async def drop_all_sails(rt) -> None:
    ctx = rt.context
    boat = ctx.vessel.boat.model_copy(deep=True)
    for sail in boat.sails:
        sail.is_set = False
        sail.reduction_level = 0
    ctx.log_simple("All sails dropped", sail_plan_patch(ctx.vessel, boat))


def wing_on_wing(is_on: bool) -> Handler:
    async def handler(rt) -> None:
        rt.context.instance_log.wing_on_wing_changed(is_on)
    return handler


def set_sail(kind: SailKind, is_set: bool) -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        if is_set:
            boat = with_sail(ctx.vessel.boat, kind, is_set=True)
            text = f"{SAIL_LABELS[kind]} set"
        else:
            boat = with_sail(ctx.vessel.boat, kind, is_set=False, reduction_level=0)
            text = f"{SAIL_LABELS[kind]} dropped"
        ctx.log_simple(text, sail_plan_patch(ctx.vessel, boat))
    return handler


def reduce_sail(kind: SailKind) -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        sail = ctx.vessel.boat.sail(kind)
        level = sail.reduction_level + 1
        boat = with_sail(ctx.vessel.boat, kind, reduction_level=level)
        if sail.can_reef_further:
            text = f"{SAIL_LABELS[kind]} reefed (reef {level})"
        else:
            text = f"{SAIL_LABELS[kind]} furled (step {level})"
        ctx.log_simple(text, {"boat": boat})
    return handler


def full_sail(kind: SailKind) -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        boat = with_sail(ctx.vessel.boat, kind, reduction_level=0)
        ctx.log_simple(f"{SAIL_LABELS[kind]} full", {"boat": boat})
    return handler


def increase_sail(kind: SailKind) -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        level = ctx.vessel.boat.sail(kind).reduction_level - 1
        boat = with_sail(ctx.vessel.boat, kind, reduction_level=level)
        ctx.log_simple(f"{SAIL_LABELS[kind]} increased, reduction now {level}", {"boat": boat})
    return handler


# Sailing geometry

def change_tack(verb: str) -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        new = OPPOSITE_TACK.get(ctx.vessel.tack)
        if new is None:
            ctx.notify("Current tack unknown - set the sail geometry first.")
            return
        await ctx.log_now(f"{verb}, new tack on: {new.value}", {"tack": new, "wing_on_wing": False})
    return handler


def shift_point_of_sail(step: int) -> Handler:
    """step +1 falls off (away from the wind), -1 luffs up"""
    async def handler(rt) -> None:
        ctx = rt.context
        current = ctx.vessel.point_of_sail
        if current not in SAILING_ORDER:
            ctx.notify("Point of sail unknown - set the sail geometry first.")
            return

        index = SAILING_ORDER.index(current) + step
        if not 0 <= index < len(SAILING_ORDER):
            ctx.notify(f"Already {current.value}, cannot go further.")
            return

        header, patch = ctx.instance_log.point_of_sail_change(SAILING_ORDER[index])
        await ctx.log_now(header, patch)
    return handler


def simple_log(text: str, patch: Optional[Dict[str, Any]] = None) -> Handler:
    async def handler(rt) -> None:
        rt.context.log_simple(text, dict(patch) if patch else None)
    return handler


def storm_tactic(text: str) -> Handler:
    return simple_log(text, {"nav_status": NavStatus.STORM_TACTICS})


async def final_log(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    message = "Closing remarks for this leg"
    last = ctx.last_log_entry()
    if last is not None:
        message += f" (last entry at {format_clock_time(last.timestamp)})"

    summary = await ctx.prompt_single_line("Final log", message)
    if summary is None:
        return
    ctx.log_simple(f"Final log: {summary}")


async def landmark(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    name = await ctx.prompt_single_line("Landmark", "Which landmark is abeam?", placeholder="Lighthouse")
    if name is None:
        return
    await ctx.log_now(f"Landmark abeam: {name}")


async def storm_steering(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    answer = await ctx.prompt_single_line(
        "Storm steering", "Steering mode (hand, autopilot, fixed, free)", initial_text="hand"
    )
    if answer is None:
        return
    steering = parse_choice(answer, list(Steering))
    if steering is None:
        ctx.notify(f"Unknown steering mode '{answer}'.")
        return

    patch: Dict[str, Any] = {"steering": steering}
    if steering != Steering.AUTOPILOT:
        patch["autopilot_mode"] = AutopilotMode.OFF
    ctx.log_simple(f"Storm steering: {STEERING_TEXT[steering]}", patch)


# Emergency triggers

def declare_emergency(
    nature: EmergencyNature,
    level: EmergencyLevel = EmergencyLevel.DISTRESS,
    description: str = ""
) -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        header, patch = ctx.instance_log.emergency_start_change(nature, level, description)
        await ctx.log_now(header, patch)
    return handler


async def fire_emergency(rt) -> None:
    ctx = rt.context
    location = await ctx.prompt_single_line("Fire", "Where is the fire?", placeholder="Engine room")
    description = f"location: {location}" if location else ""
    header, patch = ctx.instance_log.emergency_start_change(EmergencyNature.FIRE, EmergencyLevel.DISTRESS, description)
    await ctx.log_now(header, patch)


async def medical_emergency(rt) -> None:
    ctx = rt.context
    answer = await ctx.prompt_single_line(
        "Medical", "Level of the emergency (distress or urgency)", initial_text="urgency"
    )
    level = parse_choice(answer, [EmergencyLevel.DISTRESS, EmergencyLevel.URGENCY]) or EmergencyLevel.URGENCY
    header, patch = ctx.instance_log.emergency_start_change(EmergencyNature.HEALTH, level)
    await ctx.log_now(header, patch)


async def other_emergency(rt) -> None:
    ctx = rt.context
    choices = [n for n in EmergencyNature if n != EmergencyNature.NONE]
    answer = await ctx.prompt_single_line(
        "Emergency",
        "Nature (flooding, collision, mechanical, piracy, relay, other)",
        initial_text="other"
    )
    nature = parse_choice(answer, choices) or EmergencyNature.OTHER
    header, patch = ctx.instance_log.emergency_start_change(nature, EmergencyLevel.DISTRESS)
    await ctx.log_now(header, patch)


# Fixed bar

def parse_dangers(answer: str) -> Tuple[List[EnvironmentDanger], List[str]]:
    """
    Read a comma separated danger list.

    Words may be any part of a danger name ("nets" finds fishing nets).
    Returns the dangers and the words that matched none; those count as OTHER.
    """
    choices = [d for d in EnvironmentDanger if d != EnvironmentDanger.NONE]
    dangers, unknown = [], []
    for part in answer.split(","):
        word = part.strip()
        if not word:
            continue
        key = word.lower().replace(" ", "_").replace("-", "_")
        danger = parse_choice(word, choices) or next((d for d in choices if key in d.value), None)
        if danger is None:
            unknown.append(word)
            danger = EnvironmentDanger.OTHER
        if danger not in dangers:
            dangers.append(danger)
    return dangers, unknown


async def danger_spotted(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    answer = await ctx.prompt_single_line(
        "Danger spotted",
        "Which dangers? (comma separated: currents, traffic, debris, nets, orcas...)",
        placeholder="fishing nets"
    )
    if answer is None:
        return

    spotted, unknown = parse_dangers(answer)
    dangers = [d for d in ctx.vessel.environment_dangers if d != EnvironmentDanger.NONE]
    dangers += [d for d in spotted if d not in dangers]
    ctx.instance_log.dangers_updated(dangers, notes=", ".join(unknown))


def day_night(is_day: bool) -> Handler:
    async def handler(rt) -> None:
        rt.context.instance_log.day_night_changed(is_day)
    return handler


def prompted_log(title: str, message: str, template: str, fallback: Optional[str] = None) -> Handler:
    """
    Ask one line and log it through `template` ("{}" is the answer).

    A cancelled prompt logs `fallback` when given, otherwise nothing.
    """
    async def handler(rt) -> None:
        ctx = rt.context
        if not require_trip(ctx):
            return

        answer = await ctx.prompt_single_line(title, message)
        if answer is not None:
            ctx.log_simple(template.format(answer))
        elif fallback is not None:
            ctx.log_simple(fallback)
    return handler


async def weather_report(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    answer = await ctx.prompt_single_line(
        "Weather report", "Wind force (Beaufort 0-12)", initial_text=str(ctx.vessel.wind_force), numeric=True
    )
    if answer is None:
        return
    force = parse_int(answer, 0, 12)
    if force is None:
        ctx.notify(f"Invalid Beaufort force '{answer}', expected 0-12.")
        return
    ctx.instance_log.beaufort_changed(force)


async def insert_waypoint(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    answer = await ctx.prompt_single_line(
        "Insert WPT", "Waypoint name, optionally followed by lat, lon", placeholder="Cap Nord, 43.12, 5.93"
    )
    if answer is None:
        return

    parts = [part.strip() for part in answer.split(",")]
    waypoint = Waypoint(name=answer)
    if len(parts) == 3:
        try:
            waypoint = Waypoint(name=parts[0], lat=float(parts[1]), lon=float(parts[2]))
        except ValueError:
            ctx.notify(f"Could not read coordinates in '{answer}'.")
            return
    ctx.instance_log.next_waypoint_changed(waypoint)


async def change_destination(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    destination = await ctx.prompt_single_line("Change destination", "New destination")
    if destination is None:
        return
    trip = ctx.vessel.trip.model_copy(deep=True)
    trip.destination = destination
    ctx.log_simple(f"New destination chosen: {destination}", {"trip": trip})


async def log_position(rt) -> None:
    await rt.context.log_now(DEFAULT_HEADER)


async def goto_next_waypoint(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    vessel = ctx.vessel
    route = vessel.trip.route
    if not route:
        ctx.notify("No route defined for this trip.")
        return

    current = vessel.next_waypoint
    names = [waypoint.name for waypoint in route]
    index = names.index(current.name) + 1 if current is not None and current.name in names else 0
    if index >= len(route):
        ctx.notify("Last waypoint reached - no further WPT in the route.")
        return

    following = route[index]
    ctx.log_simple(f"Navigating to next WPT ({following.name})", {
        "last_waypoint": current,
        "next_waypoint": following,
        "on_course": True,
    })


async def extra_rigging(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    rigs = ctx.vessel.boat.extra_rigs
    answer = await ctx.prompt_single_line("Extra rigging", "Rig used: " + ", ".join(rigs))
    if answer is None:
        return
    rig = next((r for r in rigs if r.lower() == answer.lower()), None)
    if rig is None:
        ctx.notify(f"Unknown rig '{answer}'.")
        return
    ctx.log_simple(f"Rig added: {rig}")


# Emergency management

def radio_call(text: str, level: Optional[EmergencyLevel] = None) -> Handler:
    async def handler(rt) -> None:
        ctx = rt.context
        nature = ctx.vessel.emergency_nature
        header = text
        if nature != EmergencyNature.NONE:
            header += f" ({nature.value.replace('_', ' ')})"
        ctx.log_simple(header, {"emergency_level": level} if level else None)
    return handler


async def in_tow(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    destination = await ctx.prompt_single_line("In tow", "Towed towards?")
    text = "Currently under tow"
    if destination:
        text += f" towards {destination}"
    ctx.log_simple(text, {"propulsion": PropulsionTool.IN_TOW})


async def urgency_level(rt) -> None:
    ctx = rt.context
    if not require_trip(ctx):
        return

    answer = await ctx.prompt_single_line(
        "Urgency level",
        "distress, urgency or securite",
        initial_text=ctx.vessel.emergency_level.value
    )
    choices = [EmergencyLevel.DISTRESS, EmergencyLevel.URGENCY, EmergencyLevel.SECURITE]
    level = parse_choice(answer, choices)
    if level is None or level == ctx.vessel.emergency_level:
        ctx.notify("Emergency level unchanged.")
        return
    ctx.log_simple(f"Emergency level changed to {level.value}", {"emergency_level": level})


async def end_emergency(rt) -> None:
    ctx = rt.context
    outcome = await ctx.prompt_single_line("End emergency", "Outcome (optional)")
    ctx.instance_log.emergency_ended(outcome or "")


HANDLERS: Dict[T, Handler] = {
    T.A1: start_trip,
    T.A1R: finish_trip,
    T.A1A: abort_trip,
    T.A2: force_stop_logging,

    T.A3: motor_regime(MotorState.IDLE, "Main motor to idle"),
    T.A4: motor_regime(MotorState.CRUISE, "Main motor to cruise"),
    T.A5: motor_regime(MotorState.SLOW, "Main motor to slow forward"),
    T.A6: motor_regime(MotorState.FULL, "Main motor to full forward"),

    T.A7M: cast_off,
    T.A7A: raise_anchor,
    T.A8M: moor_boat,
    T.A8A: drop_anchor,
    T.A9: tank_fuel,
    T.A10: relocate_boat,

    T.A11H: leave_zone(),
    T.A11A: leave_zone(),
    T.A11B: leave_zone(),
    T.A11HR: enter_zone(NavZone.HARBOUR),
    T.A11AR: enter_zone(NavZone.ANCHORAGE),
    T.A11BR: enter_zone(NavZone.BUOY_FIELD),

    T.A12: enter_zone(NavZone.PROTECTED_WATER),
    T.A13: enter_zone(NavZone.COASTAL),
    T.A14: enter_zone(NavZone.OPEN_SEA),
    T.A15: enter_zone(NavZone.INTRACOASTAL_WATERWAY),
    T.A16: enter_zone(NavZone.APPROACH),
    T.A17: heave_to,
    T.A18: bare_poles,
    T.A19: dangers_cleared,
    T.A20: back_on_track,
    T.A21: request_deviation,
    T.A23: change_course,
    T.A24: course_to_waypoint,

    T.A25: autopilot_on,
    T.A25R: autopilot_off,
    T.A26: present_sheet(T.A26),

    T.A27: set_all_sails,
    T.A27R: drop_all_sails,
    T.A27W: wing_on_wing(True),
    T.A27WR: wing_on_wing(False),
    T.A28: present_sheet(T.A28),
    T.A29: set_sail(SailKind.HEADSAIL, True),
    T.A29R: set_sail(SailKind.HEADSAIL, False),
    T.A30: set_sail(SailKind.MAINSAIL, True),
    T.A30R: set_sail(SailKind.MAINSAIL, False),
    T.A31: set_sail(SailKind.GENNAKER, True),
    T.A31R: set_sail(SailKind.GENNAKER, False),
    T.A32: set_sail(SailKind.SPINNAKER, True),
    T.A32R: set_sail(SailKind.SPINNAKER, False),

    T.A33R: reduce_sail(SailKind.MAINSAIL),
    T.A33F: reduce_sail(SailKind.MAINSAIL),
    T.A34: full_sail(SailKind.MAINSAIL),
    T.A35R: reduce_sail(SailKind.HEADSAIL),
    T.A35F: reduce_sail(SailKind.HEADSAIL),
    T.A36: full_sail(SailKind.HEADSAIL),
    T.A37: increase_sail(SailKind.MAINSAIL),
    T.A38: increase_sail(SailKind.HEADSAIL),

    T.A39: change_tack("Tacked"),
    T.A40: change_tack("Gybed"),
    T.A41: simple_log("Sails flattened"),
    T.A42: simple_log("Sails curved"),
    T.A43: shift_point_of_sail(+1),
    T.A44: shift_point_of_sail(-1),
    T.A45: storm_tactic("Running off before the storm"),
    T.A46: storm_tactic("Forereaching"),
    T.A47: storm_tactic("Drogue deployed"),
    T.A48: storm_tactic("Sea anchor deployed"),
    T.A49: final_log,
    T.A50: landmark,
    T.A51: storm_steering,

    T.E1: declare_emergency(EmergencyNature.MOB, description="Crew member over board"),
    T.E2: fire_emergency,
    T.E3: medical_emergency,
    T.E4: other_emergency,

    T.AF1: danger_spotted,
    T.AF2: start_motor,
    T.AF2R: stop_motor,
    T.AF21: present_sheet(T.AF21),
    T.AF3N: day_night(False),
    T.AF3D: day_night(True),
    T.AF4: prompted_log("Failure report", "What failed?", "Failure report: {}"),
    T.AF5: prompted_log("Manual log", "Log entry text", "{}"),
    T.AF6: present_sheet(T.AF6),
    T.AF7: prompted_log("Crew incident", "What happened?", "Crew incident: {}"),
    T.AF8: present_sheet(T.AF8),
    T.AF9: weather_report,
    T.AF10: prompted_log("Encounter", "What was encountered?", "Encounter: {}"),
    T.AF11: insert_waypoint,
    T.AF14: change_destination,
    T.AF15: log_position,
    T.AF16: goto_next_waypoint,
    T.AF17: extra_rigging,

    T.EM1: radio_call("MAYDAY call sent", EmergencyLevel.DISTRESS),
    T.EM1R: radio_call("MAYDAY RELAY call sent"),
    T.EM2: radio_call("PAN PAN call sent", EmergencyLevel.URGENCY),
    T.EM3: radio_call("SECURITE call sent", EmergencyLevel.SECURITE),
    T.EM4: prompted_log("Ack call", "Which station acknowledged?", "Call acknowledged by {}"),
    T.EM5: prompted_log("Who (crew)", "Crew member concerned", "Crew member concerned: {}"),
    T.EM6: simple_log("Assistance required"),
    T.EM7: prompted_log("SAR in area", "Brief description", "SAR team arrived in area: {}", "SAR team arrived in area"),
    T.EM8: prompted_log("Assessment", "Describe the current situation", "Current situation is {}"),
    T.EM9: simple_log("Asked for medical advice"),
    T.EM10: simple_log("Tow requested"),
    T.EM11: in_tow,
    T.EM11T: prompted_log("Take in tow", "Towing towards?", "Took casualty in tow towards {}", "Took casualty in tow"),
    T.EM12: prompted_log("Abandon ship", "Liferaft or jump?", "Abandon ship: {}", "Abandon ship"),
    T.EM13: urgency_level,
    T.EM14: end_emergency,
}
