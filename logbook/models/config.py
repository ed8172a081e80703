"""
Configuration models - Pipeline timings, reconciliation thresholds and runtime settings
"""

import os
from pydantic import BaseModel, Field


class PipelineTimings(BaseModel):
    """
    Fixed waits of the reconciliation pipeline, in seconds.

    Not operator-configurable; tests inject zeros.
    """
    settle_seconds: float = Field(1.0, ge=0, description="Wait between the first and second fix")
    remeasure_seconds: float = Field(2.0, ge=0, description="Wait before re-acquiring a flagged second fix")
    device_timeout_seconds: float = Field(0.35, ge=0, description="Upper bound on a one-shot device fix")
    sensor_max_age_seconds: float = Field(2.5, ge=0, description="Sensor snapshot freshness window")


class ReconciliationThresholds(BaseModel):
    """Numeric thresholds used to validate vectors and resolve headings"""
    speed_deviation: float = Field(0.20, description="Relative speed change that flags a vector")
    speed_floor_knots: float = Field(0.1, description="Floor for the baseline speed in the deviation ratio")
    stationary_knots: float = Field(0.2, description="Baseline speed under which validation is skipped")
    track_delta_deg: float = Field(20.0, description="Track change that flags a vector")
    heading_accept_deg: float = Field(20.0, description="COG/heading delta accepted without a prompt")
    heading_force_deg: float = Field(40.0, description="COG/heading delta beyond which heading is forced to COG")
    unset_speed_knots: float = Field(0.1, description="Speeds at or below this count as unset")


class LogbookSettings(BaseModel):
    """
    Root settings object handed to the action context.
    """
    boat_name: str = Field("Unnamed boat", description="Name used for a fresh boat profile")
    log_level: str = Field("INFO", description="Logging level for the console entry point")
    timings: PipelineTimings = Field(default_factory=PipelineTimings, description="Pipeline waits")
    thresholds: ReconciliationThresholds = Field(
        default_factory=ReconciliationThresholds,
        description="Validation and heading thresholds"
    )

    @classmethod
    def from_env(cls) -> "LogbookSettings":
        """Build settings from LOGBOOK_* environment variables (call load_dotenv first)"""
        return cls(
            boat_name=os.getenv("LOGBOOK_BOAT_NAME", "Unnamed boat"),
            log_level=os.getenv("LOGBOOK_LOG_LEVEL", "INFO").upper(),
        )
