import asyncio
from datetime import datetime, timedelta

import pytest

from logbook.models import (
    FixSource, LogEntry, PipelineTimings, PositionFix, SensorSnapshot, Trip, TripStatus, VesselState,
)
from logbook.services import NO_TRIP_NOTICE, LogQueue, LogWriter, PositionReconciliationPipeline
from logbook.services.reconciliation import (
    DEFAULT_HEADER, UNRELIABLE_VECTOR_NOTICE, derive_nav_fix, needs_second_measurement,
)
from logbook.tools import InMemoryLogStore, ScriptedOperator, SensorFeed, StaticPositionSource

T0 = datetime(2024, 6, 1, 9, 0, 0)

# One nautical mile of latitude, in degrees, on the mean earth sphere
NM = 1 / 60.04


def last_entry(trip_id="trip", lat=50.0, lon=-4.0, at=T0, **fields):
    return LogEntry(id="last", trip_id=trip_id, timestamp=at, lat=lat, lon=lon, **fields)


def fix(lat, lon=-4.0, at=T0, source=FixSource.DEVICE):
    return PositionFix(timestamp=at, lat=lat, lon=lon, source=source)


def make_pipeline(vessel, clock, operator=None, position_source=None, sensor_feed=None, store=None, timings=None):
    store = store or InMemoryLogStore()
    if vessel.trip is not None:
        store.insert_trip(vessel.trip)
    queue = LogQueue()
    return PositionReconciliationPipeline(
        vessel=vessel,
        store=store,
        queue=queue,
        writer=LogWriter(store, clock),
        operator=operator or ScriptedOperator(),
        position_source=position_source,
        sensor_feed=sensor_feed,
        timings=timings or PipelineTimings(settle_seconds=0, remeasure_seconds=0),
        clock=clock,
        sleep=clock.sleep
    )


def underway_vessel(**fields):
    return VesselState(trip=Trip(status=TripStatus.UNDERWAY), **fields)


# Vector validation

def test_forty_percent_speed_deviation_needs_second_measurement():
    previous = last_entry()
    p1 = fix(50.0 + 5 * NM, at=T0 + timedelta(hours=1))
    p2 = fix(50.0 + 12 * NM, at=T0 + timedelta(hours=2))
    assert needs_second_measurement(p1, p2, previous)


def test_ten_percent_speed_deviation_is_accepted():
    previous = last_entry()
    p1 = fix(50.0 + 5 * NM, at=T0 + timedelta(hours=1))
    p2 = fix(50.0 + 10.5 * NM, at=T0 + timedelta(hours=2))
    assert not needs_second_measurement(p1, p2, previous)


def test_track_change_needs_second_measurement():
    previous = last_entry()
    p1 = fix(50.0 + 5 * NM, at=T0 + timedelta(hours=1))
    # same speed, heading east instead of north
    p2 = fix(p1.lat, lon=-4.0 + 5 * NM / 0.64, at=T0 + timedelta(hours=2))
    assert needs_second_measurement(p1, p2, previous)


def test_stationary_baseline_is_exempt():
    previous = last_entry()
    p1 = fix(50.0, at=T0 + timedelta(hours=1))
    p2 = fix(50.0 + 3 * NM, at=T0 + timedelta(hours=2))
    assert not needs_second_measurement(p1, p2, previous)


def test_no_baseline_without_previous_position():
    p1 = fix(50.0)
    p2 = fix(51.0, at=T0 + timedelta(hours=1))
    assert not needs_second_measurement(p1, p2, None)
    assert not needs_second_measurement(p1, p2, last_entry(lat=0.0, lon=0.0))


# Field derivation

def test_fresh_sensor_reading_beats_computed_value():
    vessel = underway_vessel()
    snapshot = SensorSnapshot(timestamp=T0, sog=6.2, cog=210.0)
    p1 = fix(50.0)
    p2 = fix(50.0 + NM, at=T0 + timedelta(hours=1))

    nav_fix = derive_nav_fix(vessel, p1, p2, None, False, snapshot)

    assert nav_fix.sog == 6.2
    assert nav_fix.cog == 210.0
    assert nav_fix.stw == 6.2


def test_computed_values_only_fill_unset_fields():
    p1 = fix(50.0)
    p2 = fix(50.0 + 4 * NM, at=T0 + timedelta(hours=1))

    unset = derive_nav_fix(underway_vessel(), p1, p2, None, False)
    assert unset.sog == pytest.approx(4.0, abs=0.05)
    assert unset.cog == 0.0

    moving = derive_nav_fix(underway_vessel(sog=6.0, cog=90.0, stw=5.8), p1, p2, None, False)
    assert moving.sog is None
    assert moving.cog is None
    assert moving.stw is None


def test_unreliable_vector_uses_last_log_leg():
    previous = last_entry()
    p1 = fix(50.0 + 5 * NM, at=T0 + timedelta(hours=1))
    p2 = fix(50.0 + 30 * NM, at=T0 + timedelta(hours=2))

    nav_fix = derive_nav_fix(underway_vessel(), p1, p2, previous, True)

    assert nav_fix.sog == pytest.approx(5.0, abs=0.05)


def test_beaufort_four_fills_true_wind_speed():
    p1 = fix(50.0)
    nav_fix = derive_nav_fix(underway_vessel(wind_force=4), p1, p1, None, False)
    assert nav_fix.tws == 11


def test_existing_true_wind_speed_is_not_overwritten():
    p1 = fix(50.0)
    nav_fix = derive_nav_fix(underway_vessel(wind_force=4, tws=15.0), p1, p1, None, False)
    assert nav_fix.tws is None


# Full runs

def test_run_without_trip_writes_nothing(clock):
    vessel = VesselState(lat=43.1, lon=6.1)
    operator = ScriptedOperator()
    store = InMemoryLogStore()
    pipeline = make_pipeline(vessel, clock, operator=operator, store=store)

    state = asyncio.run(pipeline.run("Position logged"))

    assert state.aborted
    assert store.count() == 0
    assert operator.notices == [NO_TRIP_NOTICE]
    assert vessel.version == 0


def test_heading_prompt_uses_operator_bearing(clock):
    vessel = underway_vessel(lat=43.1, lon=6.1, cog=100.0, magnetic_heading=125.0, sog=5.0)
    operator = ScriptedOperator(["101"])
    pipeline = make_pipeline(vessel, clock, operator=operator)

    state = asyncio.run(pipeline.run("Position logged"))

    assert len(operator.prompts) == 1
    assert operator.prompts[0].numeric
    assert state.heading_prompted
    assert state.entry.magnetic_heading == 101


def test_cancelled_heading_prompt_keeps_heading(clock):
    vessel = underway_vessel(lat=43.1, lon=6.1, cog=100.0, magnetic_heading=125.0, sog=5.0)
    operator = ScriptedOperator([None])
    pipeline = make_pipeline(vessel, clock, operator=operator)

    state = asyncio.run(pipeline.run("Position logged"))

    assert len(operator.prompts) == 1
    assert state.entry.magnetic_heading == 125


@pytest.mark.parametrize("answer", ["abc", "400"])
def test_malformed_heading_answer_keeps_heading(clock, answer):
    vessel = underway_vessel(lat=43.1, lon=6.1, cog=100.0, magnetic_heading=125.0, sog=5.0)
    operator = ScriptedOperator([answer])
    pipeline = make_pipeline(vessel, clock, operator=operator)

    state = asyncio.run(pipeline.run("Position logged"))

    assert len(operator.prompts) == 1
    assert state.heading_prompted
    assert state.entry.magnetic_heading == 125


def test_confirmed_bearing_still_far_off_is_forced_to_cog(clock):
    vessel = underway_vessel(lat=43.1, lon=6.1, cog=100.0, magnetic_heading=130.0, sog=5.0)
    operator = ScriptedOperator(["200"])
    pipeline = make_pipeline(vessel, clock, operator=operator)

    state = asyncio.run(pipeline.run("Position logged"))

    assert len(operator.prompts) == 1
    assert state.entry.magnetic_heading == 100


@pytest.mark.parametrize("heading,expected", [(115.0, 115.0), (150.0, 100.0)])
def test_heading_outside_prompt_band_needs_no_operator(clock, heading, expected):
    vessel = underway_vessel(lat=43.1, lon=6.1, cog=100.0, magnetic_heading=heading, sog=5.0)
    operator = ScriptedOperator()
    pipeline = make_pipeline(vessel, clock, operator=operator)

    state = asyncio.run(pipeline.run("Position logged"))

    assert operator.prompts == []
    assert state.entry.magnetic_heading == expected


def test_beaufort_default_lands_in_entry(clock):
    vessel = underway_vessel(lat=43.1, lon=6.1, wind_force=4)
    pipeline = make_pipeline(vessel, clock)

    state = asyncio.run(pipeline.run("Position logged"))

    assert state.entry.tws == 11
    assert state.entry.wind_force == 4


def test_entry_uses_p1_and_vessel_moves_to_p2(clock):
    vessel = underway_vessel(lat=50.0, lon=-4.0)
    source = StaticPositionSource([(50.01, -4.0), (50.02, -4.0)], clock=clock)
    timings = PipelineTimings(settle_seconds=60, remeasure_seconds=120)
    pipeline = make_pipeline(vessel, clock, position_source=source, timings=timings)
    start = clock()

    state = asyncio.run(pipeline.run("Position logged", action_patch={"on_course": False}))

    assert state.entry.lat == 50.01
    assert state.entry.timestamp == start
    assert vessel.lat == 50.02
    assert vessel.last_nav_at == start + timedelta(seconds=60)
    assert vessel.on_course is False
    assert state.entry.text == "Position logged"
    assert clock.sleeps == [60]


def test_inconsistent_vector_is_measured_once_more(clock):
    vessel = underway_vessel(lat=50.0, lon=-4.0)
    store = InMemoryLogStore()
    store.insert_entry(last_entry(trip_id=vessel.trip.id, at=clock() - timedelta(hours=1)))
    p1 = 50.0 + 5 * NM
    # 5 kn over the 1 s settle, then over the 1 + 2 s after re-measuring
    bad_p2 = p1 + 0.01
    good_p2 = p1 + 5 * NM * 3 / 3600
    source = StaticPositionSource([(p1, -4.0), (bad_p2, -4.0), (good_p2, -4.0)], clock=clock)
    operator = ScriptedOperator()
    timings = PipelineTimings(settle_seconds=1, remeasure_seconds=2)
    pipeline = make_pipeline(vessel, clock, operator=operator, position_source=source, store=store, timings=timings)

    state = asyncio.run(pipeline.run("Position logged"))

    assert source.requests == 3
    assert state.remeasured
    assert not state.vector_unreliable
    assert clock.sleeps == [1, 2]
    assert UNRELIABLE_VECTOR_NOTICE not in operator.notices
    assert vessel.lat == good_p2
    assert state.entry.lat == p1


def test_still_inconsistent_vector_continues_with_notice(clock):
    vessel = underway_vessel(lat=50.0, lon=-4.0)
    store = InMemoryLogStore()
    store.insert_entry(last_entry(trip_id=vessel.trip.id, at=clock() - timedelta(hours=1)))
    p1 = 50.0 + 5 * NM
    source = StaticPositionSource([(p1, -4.0), (p1 + 0.01, -4.0), (p1 + 0.02, -4.0)], clock=clock)
    operator = ScriptedOperator()
    timings = PipelineTimings(settle_seconds=1, remeasure_seconds=2)
    pipeline = make_pipeline(vessel, clock, operator=operator, position_source=source, store=store, timings=timings)

    state = asyncio.run(pipeline.run("Position logged"))

    assert source.requests == 3
    assert state.vector_unreliable
    assert UNRELIABLE_VECTOR_NOTICE in operator.notices
    assert state.entry is not None
    assert store.count() == 2
    # SOG falls back to the last-log average
    assert state.entry.sog == pytest.approx(5.0, abs=0.05)


# Tiered acquisition

def test_fresh_sensor_position_wins(clock):
    vessel = underway_vessel(lat=50.0, lon=-4.0)
    feed = SensorFeed(SensorSnapshot(timestamp=clock(), lat=50.5, lon=-4.5))
    source = StaticPositionSource([(51.0, -5.0)], clock=clock)
    pipeline = make_pipeline(vessel, clock, position_source=source, sensor_feed=feed)

    fix_ = asyncio.run(pipeline.acquire_fix())

    assert fix_.source == FixSource.SENSOR
    assert (fix_.lat, fix_.lon) == (50.5, -4.5)
    assert source.requests == 0


def test_stale_sensor_falls_back_to_device(clock):
    vessel = underway_vessel(lat=50.0, lon=-4.0)
    feed = SensorFeed(SensorSnapshot(timestamp=clock() - timedelta(seconds=10), lat=50.5, lon=-4.5))
    source = StaticPositionSource([(51.0, -5.0)], clock=clock)
    pipeline = make_pipeline(vessel, clock, position_source=source, sensor_feed=feed)

    fix_ = asyncio.run(pipeline.acquire_fix())

    assert fix_.source == FixSource.DEVICE
    assert fix_.lat == 51.0


@pytest.mark.parametrize("scripted", [None, (0.0, 0.0)])
def test_failed_or_trivial_device_fix_falls_back_to_last_known(clock, scripted):
    vessel = underway_vessel(lat=50.0, lon=-4.0)
    source = StaticPositionSource([scripted], clock=clock)
    pipeline = make_pipeline(vessel, clock, position_source=source)

    fix_ = asyncio.run(pipeline.acquire_fix())

    assert fix_.source == FixSource.LAST_KNOWN
    assert (fix_.lat, fix_.lon) == (50.0, -4.0)


def test_slow_device_times_out_to_last_known(clock):
    vessel = underway_vessel(lat=50.0, lon=-4.0)
    source = StaticPositionSource([(51.0, -5.0)], clock=clock, delay=5.0)
    timings = PipelineTimings(settle_seconds=0, remeasure_seconds=0, device_timeout_seconds=0.05)
    pipeline = make_pipeline(vessel, clock, position_source=source, timings=timings)

    fix_ = asyncio.run(pipeline.acquire_fix())

    assert source.requests == 1
    assert fix_.source == FixSource.LAST_KNOWN
    assert (fix_.lat, fix_.lon) == (50.0, -4.0)


# Action changes

def test_heading_set_by_the_action_is_not_forced_to_cog(clock):
    vessel = underway_vessel(lat=43.1, lon=6.1, cog=100.0, magnetic_heading=150.0, sog=5.0)
    operator = ScriptedOperator()
    pipeline = make_pipeline(vessel, clock, operator=operator)

    state = asyncio.run(pipeline.run("Course changed to 200°", action_patch={"magnetic_heading": 200}))

    assert operator.prompts == []
    assert state.entry.magnetic_heading == 200
    assert vessel.magnetic_heading == 200


def test_values_set_by_the_action_are_not_derived(clock):
    vessel = underway_vessel(lat=50.0, lon=-4.0)
    source = StaticPositionSource([(50.0, -4.0), (50.0 + NM / 60, -4.0)], clock=clock)
    timings = PipelineTimings(settle_seconds=60, remeasure_seconds=0)
    pipeline = make_pipeline(vessel, clock, position_source=source, timings=timings)

    state = asyncio.run(pipeline.run("Speed set", action_patch={"sog": 3.0}))

    assert state.nav_fix.sog is None
    assert state.entry.sog == 3.0
    assert vessel.sog == 3.0


def test_blank_header_still_writes_the_fix(clock):
    vessel = underway_vessel(lat=43.1, lon=6.1, wind_force=4)
    operator = ScriptedOperator()
    pipeline = make_pipeline(vessel, clock, operator=operator)

    state = asyncio.run(pipeline.run("   "))

    assert state.entry is not None
    assert state.entry.text == DEFAULT_HEADER
    assert state.entry.tws == 11
    assert f"Logged: {DEFAULT_HEADER}" in operator.notices
