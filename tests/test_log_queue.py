import pytest

from logbook.models import Trip, TripStatus, VesselState
from logbook.services import InstanceLogHandler, LogQueue, LogWriter, NO_TRIP_NOTICE
from logbook.tools import InMemoryLogStore


@pytest.fixture
def live_vessel(trip):
    return VesselState(trip=trip.model_copy(update={"status": TripStatus.UNDERWAY}), lat=43.1, lon=6.1, sog=5.2)


@pytest.fixture
def writer(store, clock):
    return LogWriter(store, clock)


def test_same_key_keeps_first_position_and_last_text():
    queue = LogQueue()
    queue.enqueue("SOG", "Speed 4 kn")
    queue.enqueue("TWD", "Wind from 270")
    queue.enqueue("SOG", "Speed 6 kn")

    assert len(queue) == 2
    assert queue.keys() == ["SOG", "TWD"]
    assert queue.items[0].text == "Speed 6 kn"


def test_texts_skip_blank_lines():
    queue = LogQueue()
    queue.enqueue("P1", "")
    queue.enqueue("note", "  Dolphins  ")
    assert queue.texts() == ["Dolphins"]


def test_flush_writes_one_entry_with_all_mutations(live_vessel, writer, store):
    queue = LogQueue()

    def set_sog(draft):
        draft.sog = 7.5

    queue.enqueue("SOG", "Speed up", set_sog)
    queue.enqueue("note", "Dolphins abeam")

    entry = writer.flush(live_vessel, queue)

    assert store.count() == 1
    assert entry.sog == 7.5
    assert entry.text == "Speed up\nDolphins abeam"
    assert entry.lat == 43.1
    assert len(queue) == 0


def test_flush_without_trip_is_a_no_op(writer, store):
    queue = LogQueue()
    queue.enqueue("note", "Dolphins")

    assert writer.flush(VesselState(), queue) is None
    assert store.count() == 0
    assert queue.keys() == ["note"]


def test_flush_with_completed_trip_is_a_no_op(writer, store):
    queue = LogQueue()
    queue.enqueue("note", "Dolphins")
    vessel = VesselState(trip=Trip(status=TripStatus.COMPLETED))

    assert writer.flush(vessel, queue) is None
    assert len(queue) == 1


def test_write_merged_appends_header_last(live_vessel, writer):
    queue = LogQueue()
    queue.enqueue("cloudiness", "Actual cloud cover: 3/8")
    entry = writer.write_merged(live_vessel, queue, "Position logged")
    assert entry.header() == "Position logged"
    assert entry.text.splitlines()[0] == "Actual cloud cover: 3/8"


def test_write_now_can_leave_the_queue_alone(live_vessel, writer):
    queue = LogQueue()
    queue.enqueue("note", "Pending")

    def mark(draft):
        draft.wind_force = 3

    entry = writer.write_now(live_vessel, queue, "Reefed", apply=mark, flush_queue_first=False)

    assert entry.text == "Reefed"
    assert entry.wind_force == 3
    assert queue.keys() == ["note"]


def test_entries_are_immutable(live_vessel, writer):
    entry = writer.write_now(live_vessel, LogQueue(), "Reefed")
    with pytest.raises(Exception):
        entry.text = "changed"


def test_latest_entry_is_by_timestamp(live_vessel, store, clock):
    writer = LogWriter(store, clock)
    first = writer.write_now(live_vessel, LogQueue(), "First")
    clock.advance(60)
    second = writer.write_now(live_vessel, LogQueue(), "Second")

    assert store.latest_entry(live_vessel.trip.id) == second
    assert store.latest_entry(live_vessel.trip.id) != first
    assert store.latest_entry("unknown") is None


def test_instance_log_without_trip_only_notifies(clock):
    notices = []
    vessel = VesselState()
    store = InMemoryLogStore()
    handler = InstanceLogHandler(vessel, LogQueue(), LogWriter(store, clock), notices.append, clock)

    assert handler.beaufort_changed(5) is None
    assert store.count() == 0
    assert vessel.wind_force == 0
    assert notices == [NO_TRIP_NOTICE]


def test_deferred_changes_ride_along_with_next_entry(live_vessel, store, clock):
    queue = LogQueue()
    handler = InstanceLogHandler(live_vessel, queue, LogWriter(store, clock), lambda text: None, clock)

    handler.cloudiness_changed(3)
    handler.wind_direction_changed(270)
    assert store.count() == 0

    entry = handler.beaufort_changed(5)

    assert store.count() == 1
    assert entry.cloud_cover == 3
    assert entry.twd == 270
    assert entry.wind_force == 5
    assert entry.header() == "Wind changed to 5 Bft"
