"""
Shared fixtures: a sloop, an in-memory store, a scripted operator and an
action context whose clock only moves when the pipeline sleeps.
"""

from datetime import datetime, timedelta

import pytest

from logbook.actions import ActionContext, ActionRunner
from logbook.models import (
    BoatProfile, LogbookSettings, MooringType, Motor, NavStatus, NavZone, PipelineTimings,
    ReductionMode, Sail, SailKind, Trip, TripStatus, VesselState,
)
from logbook.tools import InMemoryLogStore, ScriptedOperator


class FakeClock:
    """Callable clock; `sleep` records the wait and moves time forward instead of waiting"""

    def __init__(self, start: datetime = datetime(2024, 6, 1, 10, 0, 0)):
        self.now = start
        self.sleeps = []

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def boat():
    return BoatProfile(
        name="Aurora",
        motors=[Motor(name="Main motor")],
        sails=[
            Sail(kind=SailKind.MAINSAIL, reduction_mode=ReductionMode.REEF, max_reduction=3),
            Sail(kind=SailKind.HEADSAIL, reduction_mode=ReductionMode.FURL, max_reduction=3),
        ]
    )


@pytest.fixture
def trip():
    return Trip(trip_type="Cruise", destination="Porquerolles")


@pytest.fixture
def store(trip):
    store = InMemoryLogStore()
    store.insert_trip(trip)
    return store


@pytest.fixture
def vessel(boat, trip):
    """Trip in preparation, boat on its lines in the harbour"""
    return VesselState(
        boat=boat,
        trip=trip,
        lat=43.1,
        lon=6.1,
        mooring=MooringType.MOORED_ON_SHORE,
        nav_zone=NavZone.HARBOUR
    )


@pytest.fixture
def operator():
    return ScriptedOperator()


@pytest.fixture
def settings():
    return LogbookSettings(timings=PipelineTimings(settle_seconds=0, remeasure_seconds=0))


@pytest.fixture
def context(vessel, store, operator, settings, clock):
    return ActionContext(
        vessel=vessel,
        store=store,
        operator=operator,
        settings=settings,
        clock=clock,
        sleep=clock.sleep
    )


@pytest.fixture
def runner(context):
    return ActionRunner(context)


@pytest.fixture
def put_underway(vessel):
    """Move the vessel to an underway trip in `zone` without logging anything"""
    def apply(zone: NavZone = NavZone.COASTAL, **changes):
        underway_trip = vessel.trip.model_copy(update={"status": TripStatus.UNDERWAY})
        vessel.apply_patch({
            "trip": underway_trip,
            "nav_zone": zone,
            "nav_status": NavStatus.UNDERWAY,
            "mooring": MooringType.NONE,
            **changes,
        })
        return vessel
    return apply
