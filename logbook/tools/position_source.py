"""
Device position source - one-shot location requests
"""

import asyncio
from datetime import datetime
from typing import Callable, List, Optional, Protocol, Tuple

from ..errors import PositionUnavailable
from ..models.enums import FixSource
from ..models.position import PositionFix


class PositionSource(Protocol):
    """A device GPS that can be asked for one fix"""

    async def request_fix(self) -> Optional[PositionFix]:
        """
        Request a single fix.

        May return None or raise PositionUnavailable when no fix can be had;
        callers bound the wait with their own timeout.
        """
        ...


class StaticPositionSource:
    """
    Position source replaying a scripted list of positions.

    Each request consumes the next position; the last one repeats. A None
    entry makes that request raise PositionUnavailable.
    """

    def __init__(
        self,
        positions: List[Optional[Tuple[float, float]]],
        clock: Callable[[], datetime] = datetime.now,
        delay: float = 0.0
    ):
        self.positions = list(positions)
        self.clock = clock
        self.delay = delay
        self.requests = 0

    async def request_fix(self) -> Optional[PositionFix]:
        self.requests += 1
        if self.delay:
            await asyncio.sleep(self.delay)

        if not self.positions:
            raise PositionUnavailable("No position scripted")

        position = self.positions.pop(0) if len(self.positions) > 1 else self.positions[0]
        if position is None:
            raise PositionUnavailable("Device reported no fix")

        lat, lon = position
        return PositionFix(timestamp=self.clock(), lat=lat, lon=lon, source=FixSource.DEVICE)
