"""
Log entry models - The append-only record written for every logged action
"""

import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from .enums import PointOfSail, PropulsionTool, SevereWeather, Steering, Tack


class LogFields(BaseModel):
    """Snapshot of navigation, sailing and weather fields carried by a log record"""
    trip_id: str = Field(..., description="Trip the entry belongs to")
    timestamp: datetime = Field(default_factory=datetime.now, description="Moment the entry refers to")
    lat: float = Field(0.0, description="Latitude at the moment of logging")
    lon: float = Field(0.0, description="Longitude at the moment of logging")
    text: str = Field("", description="Entry text, one line per logged change")

    sog: float = Field(0.0, description="Speed over ground in knots")
    cog: float = Field(0.0, description="Course over ground in degrees")
    stw: float = Field(0.0, description="Speed through water in knots")
    magnetic_heading: float = Field(0.0, description="Compass heading in degrees")
    awa: float = Field(0.0, description="Apparent wind angle")
    aws: float = Field(0.0, description="Apparent wind speed")
    tws: float = Field(0.0, description="True wind speed")
    twd: float = Field(0.0, description="True wind direction")
    wind_force: int = Field(0, description="Beaufort force")

    propulsion: PropulsionTool = Field(PropulsionTool.NONE, description="Propulsion at the moment of logging")
    steering: Steering = Field(Steering.BY_HAND, description="Steering mode")
    point_of_sail: PointOfSail = Field(PointOfSail.STOPPED, description="Point of sail")
    tack: Tack = Field(Tack.NONE, description="Tack")

    air_temperature: Optional[float] = Field(None, description="Air temperature in Celsius")
    water_temperature: Optional[float] = Field(None, description="Water temperature in Celsius")
    sea_state: int = Field(0, description="Douglas sea state")
    cloud_cover: int = Field(0, description="Cloud cover in octas")
    precipitation: str = Field("none", description="Precipitation")
    severe_weather: SevereWeather = Field(SevereWeather.NONE, description="Severe weather")
    visibility: str = Field("good", description="Visibility")
    next_waypoint: Optional[str] = Field(None, description="Name of the next waypoint")


class LogDraft(LogFields):
    """
    Mutable working copy of a log entry.

    The writer hydrates a draft from the vessel, lets queued mutations edit it,
    then freezes it into a LogEntry.
    """

    def freeze(self, entry_id: Optional[str] = None) -> "LogEntry":
        return LogEntry(id=entry_id or uuid.uuid4().hex, **self.model_dump())


class LogEntry(LogFields):
    """Immutable log record; never changed after creation"""
    id: str = Field(..., description="Entry identifier")

    class Config:
        """Pydantic model configuration"""
        frozen = True

    def header(self) -> str:
        """Last text line, which is where the action header goes"""
        lines = self.text.splitlines()
        return lines[-1] if lines else ""
