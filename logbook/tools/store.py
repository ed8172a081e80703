"""
Log store - persistence contract for trips and log entries, plus an in-memory adapter
"""

import logging
from typing import Dict, List, Optional, Protocol

from ..models.log_entry import LogEntry
from ..models.vessel import Trip

logger = logging.getLogger(__name__)


class LogStore(Protocol):
    """What the logbook needs from a persistent store"""

    def insert_entry(self, entry: LogEntry) -> None:
        ...

    def insert_trip(self, trip: Trip) -> None:
        ...

    def latest_entry(self, trip_id: str) -> Optional[LogEntry]:
        """Most recent entry of the trip by timestamp, or None"""
        ...

    def entries(self, trip_id: str) -> List[LogEntry]:
        ...

    def count(self) -> int:
        ...


class InMemoryLogStore:
    """
    Store keeping everything in process memory.

    Entries are kept per trip in insertion order; `latest_entry` sorts by
    timestamp so back-dated entries are handled the same way a database query would.
    """

    def __init__(self):
        self._trips: Dict[str, Trip] = {}
        self._entries: Dict[str, List[LogEntry]] = {}

    def insert_entry(self, entry: LogEntry) -> None:
        self._entries.setdefault(entry.trip_id, []).append(entry)
        logger.debug(f"💾 Stored entry {entry.id} for trip {entry.trip_id}")

    def insert_trip(self, trip: Trip) -> None:
        self._trips[trip.id] = trip
        self._entries.setdefault(trip.id, [])

    def trip(self, trip_id: str) -> Optional[Trip]:
        return self._trips.get(trip_id)

    def latest_entry(self, trip_id: str) -> Optional[LogEntry]:
        entries = self._entries.get(trip_id)
        if not entries:
            return None
        return max(entries, key=lambda entry: entry.timestamp)

    def entries(self, trip_id: str) -> List[LogEntry]:
        return list(self._entries.get(trip_id, []))

    def count(self) -> int:
        return sum(len(entries) for entries in self._entries.values())
