"""
Deferred log queue and log writer.

Handlers collect field changes in a LogQueue under stable keys. A LogWriter
turns the whole queue into exactly one LogEntry: it hydrates a draft from the
live vessel, applies every queued mutation in queue order, joins their texts
and stores the frozen entry. Without an active trip nothing is written and the
queue is left as it was.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional
from pydantic import BaseModel, Field

from ..models.log_entry import LogDraft, LogEntry
from ..models.vessel import VesselState
from ..tools.store import LogStore

logger = logging.getLogger(__name__)

DraftMutation = Callable[[LogDraft], None]


class PendingLogMutation(BaseModel):
    """One queued change: a stable key, a text line and an optional draft edit"""
    key: str = Field(..., description="Deduplication key")
    text: str = Field("", description="Line added to the entry text")
    apply: Optional[DraftMutation] = Field(None, description="Edit applied to the draft before freezing")

    class Config:
        """Pydantic model configuration"""
        frozen = True
        arbitrary_types_allowed = True


class LogQueue:
    """
    Ordered, key-deduplicated accumulator of pending mutations.

    Enqueuing an existing key replaces its text and apply function but keeps
    the position the key was first seen at.
    """

    def __init__(self):
        self._items: Dict[str, PendingLogMutation] = {}

    def enqueue(self, key: str, text: str, apply: Optional[DraftMutation] = None) -> None:
        # dict assignment to an existing key keeps its insertion slot
        self._items[key] = PendingLogMutation(key=key, text=text, apply=apply)

    @property
    def items(self) -> List[PendingLogMutation]:
        return list(self._items.values())

    def keys(self) -> List[str]:
        return list(self._items.keys())

    def texts(self) -> List[str]:
        """Non-empty, trimmed texts in queue order"""
        return [item.text.strip() for item in self._items.values() if item.text.strip()]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items


class LogWriter:
    """
    Commits queued mutations as log entries.

    Args:
        store: Where entries are inserted
        clock: Source of "now" for the draft timestamp
    """

    def __init__(self, store: LogStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def hydrate(self, vessel: VesselState) -> LogDraft:
        """Copy the live vessel fields into a fresh draft"""
        return LogDraft(
            trip_id=vessel.trip.id,
            timestamp=self.clock(),
            lat=vessel.lat,
            lon=vessel.lon,
            sog=vessel.sog,
            cog=vessel.cog,
            stw=vessel.stw,
            magnetic_heading=vessel.magnetic_heading,
            awa=vessel.awa,
            aws=vessel.aws,
            tws=vessel.tws,
            twd=vessel.twd,
            wind_force=vessel.wind_force,
            propulsion=vessel.propulsion,
            steering=vessel.steering,
            point_of_sail=vessel.point_of_sail,
            tack=vessel.tack,
            air_temperature=vessel.air_temperature,
            water_temperature=vessel.water_temperature,
            sea_state=vessel.sea_state,
            cloud_cover=vessel.cloud_cover,
            precipitation=vessel.precipitation,
            severe_weather=vessel.severe_weather,
            visibility=vessel.visibility,
            next_waypoint=vessel.next_waypoint.name if vessel.next_waypoint else None,
        )

    def flush(self, vessel: VesselState, queue: LogQueue) -> Optional[LogEntry]:
        """
        Write every queued mutation as one entry.

        Returns:
            The new entry, or None when there is no active trip or nothing queued
        """
        if not vessel.has_active_trip():
            logger.info("⏸️ No active trip, queue kept for later")
            return None
        if not len(queue):
            return None

        return self._commit(vessel, queue.items, queue.texts(), queue)

    def write_merged(self, vessel: VesselState, queue: LogQueue, header: str) -> Optional[LogEntry]:
        """Flush the queue with `header` appended as the last text line"""
        if not vessel.has_active_trip():
            logger.info("⏸️ No active trip, queue kept for later")
            return None

        lines = queue.texts()
        header = (header or "").strip()
        if header:
            lines.append(header)

        if not lines:
            queue.clear()
            return None

        return self._commit(vessel, queue.items, lines, queue)

    def write_now(
        self,
        vessel: VesselState,
        queue: LogQueue,
        header: str,
        apply: Optional[DraftMutation] = None,
        flush_queue_first: bool = True
    ) -> Optional[LogEntry]:
        """
        Commit one entry right away.

        Args:
            vessel: Live vessel state
            queue: Pending mutations
            header: Entry text for this change
            apply: One more draft edit, applied after the queued ones
            flush_queue_first: Absorb pending mutations into the same entry

        Returns:
            The new entry, or None without an active trip
        """
        if not vessel.has_active_trip():
            return None

        mutations = queue.items if flush_queue_first else []
        lines = queue.texts() if flush_queue_first else []
        if header and header.strip():
            lines.append(header.strip())
        if apply is not None:
            mutations.append(PendingLogMutation(key="now", text="", apply=apply))

        return self._commit(vessel, mutations, lines, queue if flush_queue_first else None)

    def _commit(
        self,
        vessel: VesselState,
        mutations: List[PendingLogMutation],
        lines: List[str],
        queue: Optional[LogQueue]
    ) -> LogEntry:
        draft = self.hydrate(vessel)
        for mutation in mutations:
            if mutation.apply is not None:
                mutation.apply(draft)
        draft.text = "\n".join(lines)

        entry = draft.freeze()
        self.store.insert_entry(entry)
        if queue is not None:
            queue.clear()

        logger.info(f"📝 Log entry {entry.id[:8]} written ({len(mutations)} mutations)")
        return entry
