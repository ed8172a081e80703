import asyncio

import pytest

from logbook.actions import ActionContext, ActionTag as T, LOG_IN_FLIGHT_NOTICE
from logbook.actions.handlers import parse_choice, parse_dangers
from logbook.errors import ActionNotAvailable
from logbook.models import (
    EmergencyLevel, EmergencyNature, EnvironmentDanger, MooringType, MotorState, NavStatus, NavZone,
    PointOfSail, PropulsionTool, Situation, Tack, TripStatus, Waypoint,
)
from logbook.services import NO_TRIP_NOTICE


def fire(runner, tag):
    return asyncio.run(runner.fire(tag))


def entries(context):
    return context.store.entries(context.vessel.trip.id)


# Trip lifecycle

def test_start_trip_then_cast_off(runner, context, operator, clock):
    assert runner.situation() == Situation.S1_PREPARING_TRIP

    assert fire(runner, T.A1) == Situation.S2_TRIP_STARTED
    assert context.vessel.trip.status == TripStatus.STARTED
    assert entries(context)[-1].text == "Cruise started, destination Porquerolles"

    assert fire(runner, "A7M") == Situation.S3_IN_HARBOUR_AREA
    vessel = context.vessel
    assert vessel.trip.status == TripStatus.UNDERWAY
    assert vessel.nav_status == NavStatus.UNDERWAY
    assert vessel.mooring == MooringType.NONE
    assert entries(context)[-1].header() == "Dropped Lines, casted off at 10:00"
    assert "Logged: Dropped Lines, casted off at 10:00" in operator.notices


def test_leave_harbour_and_moor_again(runner, context, operator, put_underway):
    put_underway(NavZone.HARBOUR)

    assert fire(runner, T.A11H) == Situation.S41_COASTAL_MOTOR
    assert context.vessel.nav_zone == NavZone.COASTAL
    assert entries(context)[-1].header().startswith("Left the harbour.")

    fire(runner, T.A11HR)
    assert context.vessel.nav_zone == NavZone.HARBOUR

    operator.answers = ["ball"]
    assert fire(runner, T.A8M) == Situation.S7_HARBOUR_STOPPED
    assert context.vessel.mooring == MooringType.MOORING_BALL
    assert context.vessel.trip.status == TripStatus.INTERRUPTED
    assert entries(context)[-1].text == "Moored on a ball"


def test_finish_trip_resets_voyage(runner, context, put_underway):
    put_underway(NavZone.HARBOUR, nav_status=NavStatus.STOPPED, environment_dangers=[EnvironmentDanger.NETS])

    fire(runner, T.A1R)

    assert context.vessel.trip.status == TripStatus.COMPLETED
    assert context.vessel.nav_status == NavStatus.NONE
    assert not context.vessel.has_danger()
    assert entries(context)[-1].text == "Trip completed, boat in harbour"
    assert runner.situation() == Situation.S1_PREPARING_TRIP


def test_abort_needs_a_reason(runner, context, operator):
    fire(runner, T.A1A)

    assert context.vessel.trip.status == TripStatus.PREPARING
    assert "Trip not aborted - a reason is required." in operator.notices

    operator.answers = ["crew sick"]
    fire(runner, T.A1A)
    assert context.vessel.trip.status == TripStatus.COMPLETED
    assert entries(context)[-1].text == "Trip aborted because crew sick"


# Availability

def test_unknown_tag_is_refused(runner):
    with pytest.raises(ActionNotAvailable, match="unknown"):
        fire(runner, "ZZ9")


def test_invisible_tag_is_refused(runner, context):
    version = context.vessel.version
    with pytest.raises(ActionNotAvailable, match="not visible"):
        fire(runner, T.A8M)
    assert context.vessel.version == version
    assert context.store.count() == 0


def test_menu_lists_visible_actions(runner):
    menu = runner.available_actions()
    assert menu.situation == Situation.S1_PREPARING_TRIP
    assert T.A1 in menu.tags()
    assert T.AF1 in [d.tag for d in menu.global_bar]
    assert T.A1R not in menu.tags()


# No trip

def test_actions_without_trip_only_notify(runner, context, operator):
    context.vessel.apply_patch({"trip": None})

    fire(runner, T.AF5)
    fire(runner, T.AF15)

    assert context.store.count() == 0
    assert operator.prompts == []
    assert operator.notices == [NO_TRIP_NOTICE, NO_TRIP_NOTICE]


def test_log_simple_without_trip_leaves_vessel_alone(context, operator):
    context.vessel.apply_patch({"trip": None})
    version = context.vessel.version

    assert context.log_simple("Sails flattened", {"wind_force": 3}) is None
    assert context.vessel.version == version
    assert context.vessel.wind_force == 0
    assert operator.notices == [NO_TRIP_NOTICE]


# Single flight

def test_overlapping_log_now_is_refused(vessel, store, operator, settings, clock, put_underway):
    put_underway(NavZone.COASTAL)

    async def scenario():
        gate = asyncio.Event()

        async def held_sleep(seconds):
            await gate.wait()

        ctx = ActionContext(vessel, store, operator, settings=settings, clock=clock, sleep=held_sleep)
        first = asyncio.create_task(ctx.log_now("First"))
        while not ctx.log_in_flight:
            await asyncio.sleep(0)

        second = await ctx.log_now("Second")
        gate.set()
        result = await first
        return ctx, second, result

    ctx, second, result = asyncio.run(scenario())

    assert second is None
    assert LOG_IN_FLIGHT_NOTICE in operator.notices
    assert result.entry.text == "First"
    assert store.count() == 1
    assert not ctx.log_in_flight


# Danger and emergency

def test_danger_spotted_and_cleared(runner, context, operator, put_underway):
    put_underway(NavZone.COASTAL)
    operator.answers = ["nets, sharks"]

    assert fire(runner, T.AF1) == Situation.S9_DANGER_LIGHT_WIND
    assert context.vessel.environment_dangers == [EnvironmentDanger.NETS, EnvironmentDanger.OTHER]
    assert entries(context)[-1].text.endswith("notes: sharks")

    assert fire(runner, T.A19) == Situation.S41_COASTAL_MOTOR
    assert context.vessel.environment_dangers == [EnvironmentDanger.NONE]


def test_man_overboard_and_back(runner, context, operator, put_underway):
    put_underway(NavZone.OPEN_SEA)

    assert fire(runner, T.E1) == Situation.E1_MOB
    vessel = context.vessel
    assert vessel.emergency_state
    assert vessel.emergency_level == EmergencyLevel.DISTRESS
    assert entries(context)[-1].header() == "EMERGENCY (distress): man overboard - Crew member over board"

    fire(runner, T.EM1)
    assert entries(context)[-1].text == "MAYDAY call sent (man overboard)"

    operator.answers = ["casualty recovered"]
    assert fire(runner, T.EM14) == Situation.S44_OPEN_SEA_MOTOR
    assert not vessel.emergency_state
    assert vessel.emergency_nature == EmergencyNature.NONE
    assert entries(context)[-1].text == "Emergency over: casualty recovered"


def test_medical_emergency_defaults_to_urgency(runner, context, put_underway):
    put_underway(NavZone.COASTAL)

    assert fire(runner, T.E3) == Situation.E3_MEDICAL
    assert context.vessel.emergency_level == EmergencyLevel.URGENCY


# Motor and sails

def test_motor_start_and_regime(runner, context, put_underway):
    put_underway(NavZone.COASTAL)

    fire(runner, T.AF2)
    assert context.vessel.boat.motors[0].state == MotorState.NEUTRAL
    assert context.vessel.propulsion == PropulsionTool.NONE

    fire(runner, T.A4)
    assert context.vessel.boat.motors[0].state == MotorState.CRUISE
    assert context.vessel.propulsion == PropulsionTool.MOTOR
    assert entries(context)[-1].text == "Main motor to cruise"

    fire(runner, T.AF2R)
    assert context.vessel.propulsion == PropulsionTool.NONE


def test_set_sails_and_reef(runner, context, put_underway):
    put_underway(NavZone.COASTAL, wind_force=5)

    assert fire(runner, T.A27) == Situation.S51W_COASTAL_SAIL_STRONG
    assert context.vessel.propulsion == PropulsionTool.SAIL

    fire(runner, T.A33R)
    fire(runner, T.A33R)
    mainsail = context.vessel.boat.mainsail
    assert mainsail.reduction_level == 2
    assert entries(context)[-1].text == "Mainsail reefed (reef 2)"

    fire(runner, T.A37)
    assert context.vessel.boat.mainsail.reduction_level == 1

    with pytest.raises(ActionNotAvailable):
        fire(runner, T.A37)

    fire(runner, T.A34)
    assert context.vessel.boat.mainsail.reduction_level == 0


def test_tack_and_fall_off(runner, context, put_underway):
    put_underway(
        NavZone.OPEN_SEA,
        propulsion=PropulsionTool.SAIL,
        tack=Tack.PORT,
        point_of_sail=PointOfSail.BEAM_REACH,
    )

    fire(runner, T.A39)
    assert context.vessel.tack == Tack.STARBOARD
    assert entries(context)[-1].header() == "Tacked, new tack on: starboard"

    fire(runner, T.A43)
    assert context.vessel.point_of_sail == PointOfSail.BROAD_REACH
    assert entries(context)[-1].header() == "Fell off to broad reach on starboard tack"


def test_luff_up(runner, context, put_underway):
    put_underway(NavZone.OPEN_SEA, propulsion=PropulsionTool.SAIL, tack=Tack.PORT, point_of_sail=PointOfSail.BEAM_REACH)

    fire(runner, T.A44)
    assert context.vessel.point_of_sail == PointOfSail.CLOSE_REACH
    assert entries(context)[-1].header() == "Luffed to close reach on port tack"


def test_change_course_logs_the_new_heading(runner, context, operator, put_underway):
    put_underway(NavZone.COASTAL, cog=100, magnetic_heading=150, sog=5)
    operator.answers = ["200"]

    fire(runner, T.A23)

    entry = entries(context)[-1]
    assert entry.header() == "Course changed to 200°"
    assert entry.magnetic_heading == 200
    assert context.vessel.magnetic_heading == 200
    # only the course question, no bearing check
    assert len(operator.prompts) == 1


def test_change_course_rejects_malformed_course(runner, context, operator, put_underway):
    put_underway(NavZone.COASTAL, magnetic_heading=150)
    operator.answers = ["north"]

    fire(runner, T.A23)

    assert context.store.count() == 0
    assert context.vessel.magnetic_heading == 150
    assert "Invalid course 'north', expected 0-359." in operator.notices


def test_final_log_mentions_last_entry(runner, context, operator, clock, put_underway):
    put_underway(NavZone.HARBOUR, nav_status=NavStatus.STOPPED)
    context.log_simple("Lines doubled")
    clock.advance(30 * 60)
    operator.answers = ["calm crossing"]

    fire(runner, T.A49)

    assert "last entry at 10:00" in operator.prompts[-1].message
    assert entries(context)[-1].text == "Final log: calm crossing"


def test_goto_next_waypoint(runner, context, put_underway):
    route = [Waypoint(name="Cap Nord", lat=43.2, lon=6.2), Waypoint(name="Porquerolles", lat=43.0, lon=6.2)]
    trip = context.vessel.trip.model_copy(update={"route": route})
    put_underway(NavZone.COASTAL, trip=trip.model_copy(update={"status": TripStatus.UNDERWAY}))

    fire(runner, T.AF16)
    assert context.vessel.next_waypoint.name == "Cap Nord"

    fire(runner, T.AF16)
    assert context.vessel.next_waypoint.name == "Porquerolles"
    assert context.vessel.last_waypoint.name == "Cap Nord"


def test_sheet_actions_hand_over_to_operator(runner, operator, put_underway):
    put_underway(NavZone.COASTAL)
    fire(runner, T.AF6)
    assert operator.sheets == ["AF6"]


# Parsing helpers

def test_parse_choice_prefers_exact_then_prefix():
    assert parse_choice("mech", list(EmergencyNature)) == EmergencyNature.MECHANICAL
    assert parse_choice("mayday relay", list(EmergencyNature)) == EmergencyNature.RELAY
    assert parse_choice("fire", list(EmergencyNature)) == EmergencyNature.FIRE
    assert parse_choice("", list(EmergencyNature)) is None
    assert parse_choice("zebra", list(EmergencyNature)) is None


def test_parse_dangers_keeps_unknown_words():
    dangers, unknown = parse_dangers("currents, orcas, traffic, kraken")
    assert dangers == [
        EnvironmentDanger.STRONG_CURRENTS, EnvironmentDanger.ORCAS,
        EnvironmentDanger.TRAFFIC, EnvironmentDanger.OTHER,
    ]
    assert unknown == ["kraken"]
