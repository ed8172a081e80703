"""
Workflow state models - LangGraph state for the position reconciliation run
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .log_entry import LogEntry
from .position import NavFix, PositionFix


class ReconciliationState(BaseModel):
    """
    Data bus between the nodes of one reconciliation run.

    Holds only plain data. The vessel, store and operator channels stay on the
    pipeline object; nothing here is visible outside the run until `commit`.
    """

    header: str = Field(..., description="Header line appended to the log entry")
    action_patch: Dict[str, Any] = Field(
        default_factory=dict,
        description="Vessel changes made by the fired action, applied together with P2 at commit"
    )

    # Fixes
    p1: Optional[PositionFix] = Field(None, description="First fix; anchors the entry timestamp and position")
    p2: Optional[PositionFix] = Field(None, description="Second, confirmatory fix; becomes the vessel position")
    last_entry: Optional[LogEntry] = Field(None, description="Most recent entry of the trip, used as baseline")

    # Validation
    vector_unreliable: bool = Field(False, description="P1->P2 vector failed validation")
    remeasured: bool = Field(False, description="P2 has been re-acquired once")

    # Derived values
    nav_fix: NavFix = Field(default_factory=NavFix, description="Derived navigation values")
    heading_prompted: bool = Field(False, description="Operator was asked to confirm the heading")

    # Outcome
    aborted: bool = Field(False, description="Run stopped before committing")
    entry: Optional[LogEntry] = Field(None, description="Entry written by the commit step")
    vessel_patch: Dict[str, Any] = Field(default_factory=dict, description="Changes applied to the vessel at commit")
    notices: List[str] = Field(default_factory=list, description="Operator notices raised by the run")

    current_step: str = Field(default="check_trip", description="Current workflow step identifier")
    errors: List[str] = Field(default_factory=list, description="Degradations recorded during the run")

    class Config:
        """Pydantic model configuration"""
        arbitrary_types_allowed = True
