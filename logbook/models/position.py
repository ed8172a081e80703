"""
Position models - Fixes, sensor snapshots and derived navigation values
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from .enums import FixSource


TRIVIAL_COORDINATE = 0.0001


class PositionFix(BaseModel):
    """
    A single timestamped position reading and where it came from.

    Short-lived: produced and consumed within one reconciliation run.
    """
    timestamp: datetime = Field(..., description="When the fix was taken")
    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")
    source: FixSource = Field(..., description="Sensor feed, device GPS or last known position")

    class Config:
        """Pydantic model configuration"""
        frozen = True

    def is_trivial(self) -> bool:
        """A fix sitting on (0, 0) is what a cold GPS reports before it has a position"""
        return abs(self.lat) <= TRIVIAL_COORDINATE and abs(self.lon) <= TRIVIAL_COORDINATE


class SensorSnapshot(BaseModel):
    """
    Latest readings from the external instrument feed (NMEA).

    Every reading is optional; a snapshot with only wind data is valid.
    """
    timestamp: datetime = Field(..., description="When the snapshot was assembled")
    lat: Optional[float] = Field(None, description="Latitude from the GPS sentence")
    lon: Optional[float] = Field(None, description="Longitude from the GPS sentence")
    sog: Optional[float] = Field(None, description="Speed over ground in knots")
    cog: Optional[float] = Field(None, description="Course over ground in degrees")
    stw: Optional[float] = Field(None, description="Speed through water in knots")
    magnetic_heading: Optional[float] = Field(None, description="Compass heading in degrees")
    awa: Optional[float] = Field(None, description="Apparent wind angle")
    aws: Optional[float] = Field(None, description="Apparent wind speed in knots")
    twd: Optional[float] = Field(None, description="True wind direction")
    tws: Optional[float] = Field(None, description="True wind speed in knots")
    source_id: str = Field("nmea", description="Identifier of the feed")

    def age_seconds(self, now: datetime) -> float:
        return (now - self.timestamp).total_seconds()

    def is_fresh(self, now: datetime, max_age: float = 2.5) -> bool:
        return 0 <= self.age_seconds(now) <= max_age

    def has_position(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_fix(self) -> Optional[PositionFix]:
        if not self.has_position():
            return None
        return PositionFix(timestamp=self.timestamp, lat=self.lat, lon=self.lon, source=FixSource.SENSOR)


class NavFix(BaseModel):
    """Navigation values derived by one reconciliation run; None means not derived"""
    sog: Optional[float] = Field(None, description="Speed over ground")
    cog: Optional[float] = Field(None, description="Course over ground")
    stw: Optional[float] = Field(None, description="Speed through water")
    heading: Optional[float] = Field(None, description="Magnetic heading")
    awa: Optional[float] = Field(None, description="Apparent wind angle")
    aws: Optional[float] = Field(None, description="Apparent wind speed")
    tws: Optional[float] = Field(None, description="True wind speed")
    twd: Optional[float] = Field(None, description="True wind direction")
