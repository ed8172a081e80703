"""
Data Models for the Logbook

Organized by concern:
- enums: Closed vocabularies (trip status, nav zone, propulsion, situation...)
- boat: Boat profile with motors and sails
- vessel: Live vessel state and trips
- log_entry: Log drafts and immutable log entries
- position: Position fixes, sensor snapshots, derived navigation values
- config: Pipeline timings, thresholds and settings
- workflow: LangGraph reconciliation state
"""

from .enums import (
    TripStatus, NavStatus, NavZone, PropulsionTool, MooringType, Tack, PointOfSail,
    Steering, AutopilotMode, SevereWeather, EnvironmentDanger, EmergencyNature,
    EmergencyLevel, FixSource, Situation, ActionGroup,
)
from .boat import BoatProfile, BoatType, Motor, MotorState, MotorUse, Sail, SailKind, ReductionMode
from .vessel import VesselState, Trip, Waypoint
from .log_entry import LogDraft, LogEntry, LogFields
from .position import PositionFix, SensorSnapshot, NavFix
from .config import PipelineTimings, ReconciliationThresholds, LogbookSettings
from .workflow import ReconciliationState

__all__ = [
    # Vocabularies
    'TripStatus', 'NavStatus', 'NavZone', 'PropulsionTool', 'MooringType', 'Tack',
    'PointOfSail', 'Steering', 'AutopilotMode', 'SevereWeather', 'EnvironmentDanger',
    'EmergencyNature', 'EmergencyLevel', 'FixSource', 'Situation', 'ActionGroup',

    # Domain models
    'BoatProfile', 'BoatType', 'Motor', 'MotorState', 'MotorUse', 'Sail', 'SailKind',
    'ReductionMode', 'VesselState', 'Trip', 'Waypoint',
    'LogDraft', 'LogEntry', 'LogFields',
    'PositionFix', 'SensorSnapshot', 'NavFix',

    # Configuration models
    'PipelineTimings', 'ReconciliationThresholds', 'LogbookSettings',

    # Workflow models
    'ReconciliationState',
]
