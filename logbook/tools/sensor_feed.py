"""
External sensor feed - holder for the latest NMEA snapshot
"""

import logging
from typing import Optional

from ..models.position import SensorSnapshot

logger = logging.getLogger(__name__)


class SensorFeed:
    """
    Keeps the most recent instrument snapshot.

    No snapshot at all is a valid state and means there is no authoritative data.
    """

    def __init__(self, snapshot: Optional[SensorSnapshot] = None):
        self._snapshot = snapshot

    def update(self, snapshot: SensorSnapshot) -> None:
        self._snapshot = snapshot
        logger.debug(f"📡 Sensor snapshot from {snapshot.source_id} at {snapshot.timestamp.isoformat()}")

    def clear(self) -> None:
        self._snapshot = None

    def snapshot(self) -> Optional[SensorSnapshot]:
        return self._snapshot
