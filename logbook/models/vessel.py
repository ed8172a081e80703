"""
Vessel domain models - Live vessel state and trips
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .boat import BoatProfile
from .enums import (
    AutopilotMode, EmergencyLevel, EmergencyNature, EnvironmentDanger, MooringType,
    NavStatus, NavZone, PointOfSail, PropulsionTool, SevereWeather, Steering, Tack,
    TripStatus,
)
from ..errors import TripLifecycleError


ALLOWED_TRIP_TRANSITIONS = {
    TripStatus.PREPARING: {TripStatus.STARTED, TripStatus.COMPLETED},
    TripStatus.STARTED: {TripStatus.UNDERWAY, TripStatus.COMPLETED},
    TripStatus.UNDERWAY: {TripStatus.INTERRUPTED, TripStatus.COMPLETED},
    TripStatus.INTERRUPTED: {TripStatus.UNDERWAY, TripStatus.COMPLETED},
    TripStatus.COMPLETED: set(),
}


class Waypoint(BaseModel):
    name: str = Field(..., description="Waypoint name as shown in the route")
    lat: float = Field(0.0, description="Latitude in decimal degrees")
    lon: float = Field(0.0, description="Longitude in decimal degrees")


class Trip(BaseModel):
    """
    A voyage window owning zero or more log entries.

    Status moves along preparing -> started -> underway <-> interrupted -> completed.
    A trip may also be completed from preparing or started (aborted before departure).
    """
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Trip identifier")
    trip_type: str = Field(default="Cruise", description="Kind of trip (cruise, delivery, regatta...)")
    destination: Optional[str] = Field(None, description="Planned destination")
    route: List[Waypoint] = Field(default_factory=list, description="Planned waypoints")
    status: TripStatus = Field(default=TripStatus.PREPARING, description="Lifecycle status")
    started_at: Optional[datetime] = Field(None, description="When the trip left preparation")
    completed_at: Optional[datetime] = Field(None, description="When the trip was closed")

    @property
    def is_active(self) -> bool:
        return self.status != TripStatus.COMPLETED

    def can_transition(self, status: TripStatus) -> bool:
        return status in ALLOWED_TRIP_TRANSITIONS[self.status]

    def transition(self, status: TripStatus, at: Optional[datetime] = None) -> None:
        """Move to `status`, raising TripLifecycleError for an illegal move"""
        if not self.can_transition(status):
            raise TripLifecycleError(self.status, status)

        at = at or datetime.now()
        if self.status == TripStatus.PREPARING and status == TripStatus.STARTED:
            self.started_at = at
        if status == TripStatus.COMPLETED:
            self.completed_at = at
        self.status = status


class VesselState(BaseModel):
    """
    The single live snapshot of the vessel.

    There is exactly one instance per vessel context. It is never historical:
    every committing operation changes it through `apply_patch`, which bumps
    `version` once per patch so callers can tell whether anything moved.
    """
    boat: BoatProfile = Field(default_factory=BoatProfile, description="Boat profile with live motor and sail state")
    trip: Optional[Trip] = Field(None, description="Current trip, if any")

    # Position
    lat: float = Field(0.0, description="Last known latitude")
    lon: float = Field(0.0, description="Last known longitude")
    last_nav_at: Optional[datetime] = Field(None, description="Time of the last position update")

    # Navigation context
    mooring: MooringType = Field(MooringType.NONE, description="How the boat is made fast")
    nav_status: NavStatus = Field(NavStatus.NONE, description="Stopped, underway, heave to...")
    nav_zone: NavZone = Field(NavZone.NONE, description="Navigation zone")
    propulsion: PropulsionTool = Field(PropulsionTool.NONE, description="Current means of propulsion")
    on_course: bool = Field(True, description="Following the planned route")
    next_waypoint: Optional[Waypoint] = Field(None, description="Waypoint the boat is heading to")
    last_waypoint: Optional[Waypoint] = Field(None, description="Last waypoint passed")

    # Motion, 0 means unset
    cog: float = Field(0.0, description="Course over ground in degrees")
    magnetic_heading: float = Field(0.0, description="Compass heading in degrees")
    bearing: float = Field(0.0, description="Bearing to the next waypoint in degrees")
    sog: float = Field(0.0, description="Speed over ground in knots")
    stw: float = Field(0.0, description="Speed through water in knots")

    # Sailing geometry
    tack: Tack = Field(Tack.NONE, description="Current tack")
    point_of_sail: PointOfSail = Field(PointOfSail.STOPPED, description="Current point of sail")
    aws: float = Field(0.0, description="Apparent wind speed in knots")
    awa: float = Field(0.0, description="Apparent wind angle in degrees")
    twa: float = Field(0.0, description="True wind angle in degrees")
    wing_on_wing: bool = Field(False, description="Headsail poled out opposite the main")
    steering: Steering = Field(Steering.BY_HAND, description="Steering mode")
    autopilot_mode: AutopilotMode = Field(AutopilotMode.OFF, description="Autopilot mode")
    autopilot_direction: float = Field(0.0, description="Autopilot set angle or heading")

    # Weather
    daytime: bool = Field(True, description="Day or night")
    tws: float = Field(0.0, description="True wind speed in knots")
    twd: float = Field(0.0, description="True wind direction in degrees")
    wind_force: int = Field(0, ge=0, le=12, description="Beaufort force")
    visibility: str = Field("good", description="Visibility description")
    cloud_cover: int = Field(0, ge=0, le=8, description="Cloud cover in octas")
    precipitation: str = Field("none", description="Precipitation description")
    sea_state: int = Field(0, ge=0, le=9, description="Douglas sea state")
    air_temperature: Optional[float] = Field(None, description="Air temperature in Celsius")
    water_temperature: Optional[float] = Field(None, description="Water temperature in Celsius")
    severe_weather: SevereWeather = Field(SevereWeather.NONE, description="Severe weather condition")
    environment_dangers: List[EnvironmentDanger] = Field(
        default_factory=lambda: [EnvironmentDanger.NONE],
        description="Active hazards; [none] when clear"
    )

    # Emergency
    emergency_state: bool = Field(False, description="An emergency is ongoing")
    emergency_level: EmergencyLevel = Field(EmergencyLevel.NONE, description="Distress, urgency or securite")
    emergency_nature: EmergencyNature = Field(EmergencyNature.NONE, description="What the emergency is")
    emergency_start: Optional[datetime] = Field(None, description="When the emergency was declared")
    emergency_end: Optional[datetime] = Field(None, description="When the emergency was closed")
    emergency_description: str = Field("", description="Free text about the emergency")

    fuel_level: Optional[float] = Field(None, ge=0, le=100, description="Fuel tank level in percent")

    version: int = Field(0, description="Bumped once per applied patch")

    class Config:
        """Pydantic model configuration"""
        validate_assignment = True

    def apply_patch(self, patch: Dict[str, Any]) -> int:
        """
        Apply a set of field changes as one step.

        Args:
            patch: Mapping of field name to new value

        Returns:
            The new version number
        """
        unknown = [name for name in patch if name not in type(self).model_fields or name == "version"]
        if unknown:
            raise KeyError(f"Unknown vessel fields in patch: {', '.join(unknown)}")

        # Validate everything before touching self so a bad value leaves no partial state
        candidate = self.model_validate({**self.model_dump(), **patch})
        for name in patch:
            setattr(self, name, getattr(candidate, name))

        self.version += 1
        return self.version

    def has_active_trip(self) -> bool:
        return self.trip is not None and self.trip.is_active

    def trip_status(self) -> Optional[TripStatus]:
        return self.trip.status if self.trip else None

    def is_stopped(self) -> bool:
        return self.nav_status == NavStatus.STOPPED

    def is_underway(self) -> bool:
        return self.nav_status == NavStatus.UNDERWAY

    def is_sailing(self) -> bool:
        return self.propulsion in (PropulsionTool.SAIL, PropulsionTool.MOTORSAIL)

    def is_moored(self) -> bool:
        return self.mooring not in (MooringType.NONE, MooringType.AT_ANCHOR)

    def has_danger(self) -> bool:
        return any(danger != EnvironmentDanger.NONE for danger in self.environment_dangers)

    def strong_wind(self) -> bool:
        return self.wind_force > 4

    def is_stormy(self) -> bool:
        return self.severe_weather != SevereWeather.NONE or self.wind_force >= 8

    def has_position(self) -> bool:
        return self.lat != 0 or self.lon != 0
