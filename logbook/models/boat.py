"""
Boat profile models - Motors, sails and rigging the action catalog reasons about
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class BoatType(str, Enum):
    SAILBOAT = "sailboat"
    MOTORBOAT = "motorboat"
    MOTORSAILER = "motorsailer"


class MotorUse(str, Enum):
    PROPULSION = "propulsion"
    OUTBOARD = "outboard"
    GENERATOR = "generator"


class MotorState(str, Enum):
    IDLE = "idle"
    CRUISE = "cruise"
    SLOW = "slow"
    FULL = "full"
    STOPPED = "stopped"
    NEUTRAL = "neutral"


class SailKind(str, Enum):
    MAINSAIL = "mainsail"
    HEADSAIL = "headsail"
    GENNAKER = "gennaker"
    SPINNAKER = "spinnaker"


class ReductionMode(str, Enum):
    NONE = "none"
    REEF = "by reefing"
    FURL = "by furling"


class Motor(BaseModel):
    """A single engine on board"""
    name: str = Field(default="Main motor", description="Display name of the motor")
    inboard: bool = Field(default=True, description="Inboard installation")
    use: MotorUse = Field(default=MotorUse.PROPULSION, description="What the motor is used for")
    state: MotorState = Field(default=MotorState.STOPPED, description="Current motor regime")

    @property
    def is_running(self) -> bool:
        # neutral counts as running, the hour counter ticks
        return self.state != MotorState.STOPPED


class Sail(BaseModel):
    """
    A sail and how far it is currently reduced.

    `reduction_level` counts reefs taken in (or furling steps); zero means full.
    """
    kind: SailKind = Field(..., description="Which sail this is")
    is_set: bool = Field(default=False, description="Hoisted or unfurled")
    reduction_mode: ReductionMode = Field(default=ReductionMode.NONE, description="How the sail area is reduced")
    reduction_level: int = Field(default=0, ge=0, description="Current reduction step")
    max_reduction: int = Field(default=0, ge=0, description="Deepest reduction step available")

    @property
    def can_reduce(self) -> bool:
        return (
            self.is_set
            and self.reduction_mode != ReductionMode.NONE
            and self.reduction_level < self.max_reduction
        )

    @property
    def can_increase(self) -> bool:
        return self.is_set and self.reduction_level > 0

    @property
    def can_reef_further(self) -> bool:
        return self.reduction_mode == ReductionMode.REEF and self.can_reduce

    @property
    def can_furl_further(self) -> bool:
        return self.reduction_mode == ReductionMode.FURL and self.can_reduce


class BoatProfile(BaseModel):
    """
    Static description of the boat plus the live state of its motors and sails.
    """
    name: str = Field(default="Unnamed boat", description="Boat name")
    boat_type: BoatType = Field(default=BoatType.SAILBOAT, description="Sailboat, motorboat or motorsailer")
    motors: List[Motor] = Field(default_factory=list, description="Engines on board")
    sails: List[Sail] = Field(default_factory=list, description="Sail inventory")
    extra_rigs: List[str] = Field(default_factory=list, description="Optional rigging (preventer, whisker pole...)")

    def sail(self, kind: SailKind) -> Optional[Sail]:
        for sail in self.sails:
            if sail.kind == kind:
                return sail
        return None

    @property
    def mainsail(self) -> Optional[Sail]:
        return self.sail(SailKind.MAINSAIL)

    @property
    def headsail(self) -> Optional[Sail]:
        return self.sail(SailKind.HEADSAIL)

    @property
    def gennaker(self) -> Optional[Sail]:
        return self.sail(SailKind.GENNAKER)

    @property
    def spinnaker(self) -> Optional[Sail]:
        return self.sail(SailKind.SPINNAKER)

    def is_sailboat(self) -> bool:
        return self.boat_type in (BoatType.SAILBOAT, BoatType.MOTORSAILER)

    def is_classical_sloop(self) -> bool:
        """Mainsail plus headsail - the rig the sail actions are written for"""
        return self.mainsail is not None and self.headsail is not None

    def any_sail_set(self) -> bool:
        return any(sail.is_set for sail in self.sails)

    def propulsion_motor_index(self) -> Optional[int]:
        """
        Index of "the" propulsion motor, if one can be singled out.

        A single inboard non-generator motor qualifies; so does a lone outboard
        on a boat without inboards.
        """
        if not self.motors:
            return None

        inboard = [
            idx for idx, motor in enumerate(self.motors)
            if motor.inboard and motor.use != MotorUse.GENERATOR
        ]
        if len(inboard) == 1:
            return inboard[0]

        if not inboard and len(self.motors) == 1 and self.motors[0].use == MotorUse.OUTBOARD:
            return 0

        return None

    def propulsion_motor(self) -> Optional[Motor]:
        idx = self.propulsion_motor_index()
        return self.motors[idx] if idx is not None else None

    def has_several_motors(self) -> bool:
        return len(self.motors) > 1 and self.propulsion_motor_index() is None
