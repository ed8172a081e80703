"""
Position reconciliation pipeline.

One "log now" run: acquire a first fix, wait, acquire a second fix, validate
the vector against the previous log entry (re-measuring once if needed),
derive missing navigation values, settle the heading/COG discrepancy and
commit a single merged log entry. The run is a LangGraph state machine; the
only step that touches the vessel, the queue or the store is the commit node,
so a run abandoned before it leaves no trace.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from langgraph.graph import END, StateGraph

from ..errors import PositionUnavailable
from ..models.config import PipelineTimings, ReconciliationThresholds
from ..models.enums import FixSource
from ..models.log_entry import LogEntry
from ..models.position import NavFix, PositionFix, SensorSnapshot
from ..models.vessel import VesselState
from ..models.workflow import ReconciliationState
from ..tools.operator import OperatorChannel, PromptRequest
from ..tools.position_source import PositionSource
from ..tools.sensor_feed import SensorFeed
from ..tools.store import LogStore
from ..utils.data_transform import beaufort_to_knots, default_awa, parse_bearing
from ..utils.distance import angular_delta, calculate_distance_nm, initial_bearing_deg, speed_knots
from .instance_log import NO_TRIP_NOTICE
from .log_queue import LogQueue, LogWriter

logger = logging.getLogger(__name__)

UNRELIABLE_VECTOR_NOTICE = "Position vector unreliable - using last-log average for SOG/COG."
DEFAULT_HEADER = "Position logged"


def leg_vector(lat1: float, lon1: float, t1: datetime, lat2: float, lon2: float, t2: datetime):
    """Average speed (kn) and track (deg) between two timestamped positions"""
    distance = calculate_distance_nm(lat1, lon1, lat2, lon2)
    seconds = (t2 - t1).total_seconds()
    return speed_knots(distance, seconds), initial_bearing_deg(lat1, lon1, lat2, lon2), distance


def needs_second_measurement(
    p1: PositionFix,
    p2: PositionFix,
    last_entry: Optional[LogEntry],
    thresholds: Optional[ReconciliationThresholds] = None
) -> bool:
    """
    Check the P1->P2 vector against the last-log->P1 baseline.

    Args:
        p1: First fix of the run
        p2: Second fix of the run
        last_entry: Most recent entry of the trip, if any
        thresholds: Deviation limits

    Returns:
        True when the vector looks unreliable and P2 should be measured again
    """
    thresholds = thresholds or ReconciliationThresholds()
    if last_entry is None or last_entry.lat == 0 or last_entry.lon == 0:
        return False

    baseline_speed, baseline_track, _ = leg_vector(
        last_entry.lat, last_entry.lon, last_entry.timestamp, p1.lat, p1.lon, p1.timestamp
    )
    speed, track, _ = leg_vector(p1.lat, p1.lon, p1.timestamp, p2.lat, p2.lon, p2.timestamp)

    # practically stopped, any wobble would trigger
    if baseline_speed < thresholds.stationary_knots:
        return False

    ratio = abs(speed - baseline_speed) / max(baseline_speed, thresholds.speed_floor_knots)
    if ratio > thresholds.speed_deviation:
        return True

    return angular_delta(baseline_track, track) > thresholds.track_delta_deg


def fresh_snapshot(
    snapshot: Optional[SensorSnapshot],
    now: datetime,
    timings: PipelineTimings
) -> Optional[SensorSnapshot]:
    if snapshot is not None and snapshot.is_fresh(now, timings.sensor_max_age_seconds):
        return snapshot
    return None


def derive_nav_fix(
    vessel: VesselState,
    p1: PositionFix,
    p2: PositionFix,
    last_entry: Optional[LogEntry],
    vector_unreliable: bool,
    snapshot: Optional[SensorSnapshot] = None,
    thresholds: Optional[ReconciliationThresholds] = None
) -> NavFix:
    """
    Derive navigation values for the entry, field by field.

    A fresh sensor reading wins. Otherwise a value computed from the P1->P2
    vector (or from last-log->P1 when that vector was flagged) or a domain
    default fills the field, but only when the vessel holds its unset value
    for it. `snapshot` must already be known to be fresh.
    """
    thresholds = thresholds or ReconciliationThresholds()
    fix = NavFix()

    if snapshot is not None:
        fix.sog = snapshot.sog
        fix.cog = snapshot.cog
        fix.stw = snapshot.stw
        fix.heading = snapshot.magnetic_heading
        fix.awa = snapshot.awa
        fix.aws = snapshot.aws
        fix.twd = snapshot.twd
        fix.tws = snapshot.tws

    sog_unset = vessel.sog <= thresholds.unset_speed_knots
    cog_unset = vessel.cog <= 0
    if (sog_unset and fix.sog is None) or (cog_unset and fix.cog is None):
        if vector_unreliable and last_entry is not None:
            speed, track, distance = leg_vector(
                last_entry.lat, last_entry.lon, last_entry.timestamp, p1.lat, p1.lon, p1.timestamp
            )
        else:
            speed, track, distance = leg_vector(p1.lat, p1.lon, p1.timestamp, p2.lat, p2.lon, p2.timestamp)

        if sog_unset and fix.sog is None:
            fix.sog = round(speed, 1)
        # a zero-length leg has no direction
        if cog_unset and fix.cog is None and distance > 0:
            fix.cog = float(track)

    if vessel.stw <= thresholds.unset_speed_knots and fix.stw is None:
        if fix.sog is not None:
            fix.stw = fix.sog
        elif not sog_unset:
            fix.stw = vessel.sog

    if vessel.awa == 0 and fix.awa is None:
        fix.awa = float(default_awa(vessel.point_of_sail))

    if vessel.tws == 0 and fix.tws is None and vessel.wind_force > 0:
        fix.tws = float(beaufort_to_knots(vessel.wind_force))

    return fix


class PositionReconciliationPipeline:
    """
    LangGraph workflow producing one reconciled log entry per run.

    Args:
        vessel: Live vessel state; only the commit node changes it
        store: Log store, read for the last entry of the trip
        queue: Deferred log queue the derived mutations are added to
        writer: Log writer committing the merged entry
        operator: Notification and prompt channel
        position_source: Optional device GPS
        sensor_feed: Optional NMEA feed
        timings: Fixed waits
        thresholds: Validation and heading limits
        clock: Source of "now"
        sleep: Cooperative sleep, asyncio.sleep unless a test swaps it
    """

    def __init__(
        self,
        vessel: VesselState,
        store: LogStore,
        queue: LogQueue,
        writer: LogWriter,
        operator: OperatorChannel,
        position_source: Optional[PositionSource] = None,
        sensor_feed: Optional[SensorFeed] = None,
        timings: Optional[PipelineTimings] = None,
        thresholds: Optional[ReconciliationThresholds] = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.vessel = vessel
        self.store = store
        self.queue = queue
        self.writer = writer
        self.operator = operator
        self.position_source = position_source
        self.sensor_feed = sensor_feed
        self.timings = timings or PipelineTimings()
        self.thresholds = thresholds or ReconciliationThresholds()
        self.clock = clock
        self.sleep = sleep

        self.workflow = self._build_workflow()
        self.app = self.workflow.compile()

    def _build_workflow(self) -> StateGraph:
        workflow = StateGraph(ReconciliationState)

        workflow.add_node("node_check_trip", self.node_check_trip)
        workflow.add_node("node_acquire_p1", self.node_acquire_p1)
        workflow.add_node("node_settle", self.node_settle)
        workflow.add_node("node_acquire_p2", self.node_acquire_p2)
        workflow.add_node("node_validate_vector", self.node_validate_vector)
        workflow.add_node("node_remeasure", self.node_remeasure)
        workflow.add_node("node_derive_fixes", self.node_derive_fixes)
        workflow.add_node("node_resolve_heading", self.node_resolve_heading)
        workflow.add_node("node_commit", self.node_commit)

        workflow.set_entry_point("node_check_trip")

        workflow.add_conditional_edges(
            "node_check_trip",
            self.trip_gate,
            {
                "continue": "node_acquire_p1",
                "abort": END
            }
        )
        workflow.add_edge("node_acquire_p1", "node_settle")
        workflow.add_edge("node_settle", "node_acquire_p2")
        workflow.add_edge("node_acquire_p2", "node_validate_vector")

        # One extra measurement at most
        workflow.add_conditional_edges(
            "node_validate_vector",
            self.vector_gate,
            {
                "remeasure": "node_remeasure",
                "derive": "node_derive_fixes"
            }
        )
        workflow.add_edge("node_remeasure", "node_validate_vector")

        workflow.add_edge("node_derive_fixes", "node_resolve_heading")
        workflow.add_edge("node_resolve_heading", "node_commit")
        workflow.add_edge("node_commit", END)

        return workflow

    async def run(self, header: str, action_patch: Optional[Dict[str, Any]] = None) -> ReconciliationState:
        """
        Run the pipeline once.

        Args:
            header: Text of the action being logged
            action_patch: Vessel changes made by the action itself; they become
                visible at commit together with the new position, or not at all

        Returns:
            The final workflow state
        """
        # a blank header would leave nothing to write the fixes into
        header = (header or "").strip() or DEFAULT_HEADER
        initial = ReconciliationState(header=header, action_patch=action_patch or {})
        result = await self.app.ainvoke(initial)
        if isinstance(result, ReconciliationState):
            return result
        return ReconciliationState(**result)

    # Notices

    def _notice(self, state: ReconciliationState, text: str):
        self.operator.notify(text)
        return state.notices + [text]

    # Position acquisition

    async def acquire_fix(self) -> PositionFix:
        """
        Take one fix from the best available tier.

        A fresh sensor position wins, then a non-trivial device fix obtained
        within the device timeout, then the vessel's last known position.
        """
        now = self.clock()
        snapshot = fresh_snapshot(self.sensor_feed.snapshot() if self.sensor_feed else None, now, self.timings)
        if snapshot is not None and snapshot.has_position():
            logger.debug("📡 Fix from sensor feed")
            return snapshot.to_fix()

        if self.position_source is not None:
            try:
                fix = await asyncio.wait_for(
                    self.position_source.request_fix(),
                    timeout=self.timings.device_timeout_seconds
                )
            except asyncio.TimeoutError:
                logger.info("⏱️ Device fix timed out, falling back to last known position")
                fix = None
            except PositionUnavailable as e:
                logger.info(f"📵 Device fix unavailable: {e}")
                fix = None

            if fix is not None and not fix.is_trivial():
                logger.debug("📱 Fix from device")
                return fix

        logger.debug("📌 Fix from last known position")
        return PositionFix(
            timestamp=self.clock(),
            lat=self.vessel.lat,
            lon=self.vessel.lon,
            source=FixSource.LAST_KNOWN
        )

    # Nodes

    async def node_check_trip(self, state: ReconciliationState) -> Dict[str, Any]:
        if not self.vessel.has_active_trip():
            logger.info("⛔ No active trip, run aborted")
            return {
                "aborted": True,
                "notices": self._notice(state, NO_TRIP_NOTICE),
                "current_step": "check_trip"
            }

        return {
            "last_entry": self.store.latest_entry(self.vessel.trip.id),
            "current_step": "check_trip"
        }

    async def node_acquire_p1(self, state: ReconciliationState) -> Dict[str, Any]:
        p1 = await self.acquire_fix()
        logger.info(f"🛰️ P1 {p1.lat:.5f}, {p1.lon:.5f} ({p1.source.value})")
        return {"p1": p1, "current_step": "acquire_p1"}

    async def node_settle(self, state: ReconciliationState) -> Dict[str, Any]:
        await self.sleep(self.timings.settle_seconds)
        return {"current_step": "settle"}

    async def node_acquire_p2(self, state: ReconciliationState) -> Dict[str, Any]:
        p2 = await self.acquire_fix()
        logger.info(f"🛰️ P2 {p2.lat:.5f}, {p2.lon:.5f} ({p2.source.value})")
        return {"p2": p2, "current_step": "acquire_p2"}

    async def node_validate_vector(self, state: ReconciliationState) -> Dict[str, Any]:
        flagged = needs_second_measurement(state.p1, state.p2, state.last_entry, self.thresholds)
        update: Dict[str, Any] = {"vector_unreliable": flagged, "current_step": "validate_vector"}

        if flagged and state.remeasured:
            logger.warning("⚠️ Vector still inconsistent after re-measuring")
            update["notices"] = self._notice(state, UNRELIABLE_VECTOR_NOTICE)
            update["errors"] = state.errors + ["vector unreliable"]
        elif flagged:
            logger.info("🔁 Vector inconsistent with last log, measuring P2 again")

        return update

    async def node_remeasure(self, state: ReconciliationState) -> Dict[str, Any]:
        await self.sleep(self.timings.remeasure_seconds)
        p2 = await self.acquire_fix()
        logger.info(f"🛰️ P2' {p2.lat:.5f}, {p2.lon:.5f} ({p2.source.value})")
        return {"p2": p2, "remeasured": True, "current_step": "remeasure"}

    async def node_derive_fixes(self, state: ReconciliationState) -> Dict[str, Any]:
        snapshot = fresh_snapshot(
            self.sensor_feed.snapshot() if self.sensor_feed else None,
            self.clock(),
            self.timings
        )
        # values the action sets count as already known
        baseline = self.vessel.model_copy(update=state.action_patch) if state.action_patch else self.vessel
        nav_fix = derive_nav_fix(
            baseline, state.p1, state.p2, state.last_entry,
            state.vector_unreliable, snapshot, self.thresholds
        )
        logger.debug(f"🧮 Derived {nav_fix.model_dump(exclude_none=True)}")
        return {"nav_fix": nav_fix, "current_step": "derive_fixes"}

    async def node_resolve_heading(self, state: ReconciliationState) -> Dict[str, Any]:
        """
        Settle COG against the magnetic heading.

        Up to 20 degrees apart is accepted, beyond 40 the heading is set to COG,
        and in between the operator is asked once for the compass bearing.
        A heading set by the action itself is the new course and is kept.
        """
        nav_fix = state.nav_fix.model_copy()
        update: Dict[str, Any] = {"current_step": "resolve_heading"}

        if "magnetic_heading" in state.action_patch:
            logger.info(f"🧭 Heading {state.action_patch['magnetic_heading']} set by the action, not checked")
            nav_fix.heading = None
            update["nav_fix"] = nav_fix
            return update

        if "cog" in state.action_patch:
            cog = state.action_patch["cog"]
        else:
            cog = nav_fix.cog if nav_fix.cog is not None else self.vessel.cog
        heading = nav_fix.heading if nav_fix.heading is not None else self.vessel.magnetic_heading
        if cog <= 0 or heading <= 0:
            update["nav_fix"] = nav_fix
            return update

        delta = angular_delta(cog, heading)
        if delta <= self.thresholds.heading_accept_deg:
            update["nav_fix"] = nav_fix
            return update

        if delta > self.thresholds.heading_force_deg:
            logger.info(f"🧭 Heading {heading:.0f} forced to COG {cog:.0f} (delta {delta:.0f})")
            nav_fix.heading = cog
            update["nav_fix"] = nav_fix
            return update

        notices = self._notice(
            state, f"COG differs from bearing by {delta:.0f}°. Please confirm compass bearing."
        )
        answer = await self.operator.prompt(PromptRequest(
            title="Bearing check",
            message=f"COG {cog:.0f}° differs from bearing {heading:.0f}°.\nEnter actual magnetic bearing (0-359):",
            placeholder="e.g. 245",
            initial_text=f"{heading:.0f}",
            numeric=True
        ))

        confirmed = parse_bearing(answer)
        if confirmed is not None:
            heading = float(confirmed)
            nav_fix.heading = heading
        else:
            logger.info("🧭 No valid bearing entered, keeping heading")

        if angular_delta(cog, heading) > self.thresholds.heading_force_deg:
            nav_fix.heading = cog

        update.update({"nav_fix": nav_fix, "heading_prompted": True, "notices": notices})
        return update

    async def node_commit(self, state: ReconciliationState) -> Dict[str, Any]:
        """Enqueue the derived mutations, move the vessel to P2 and write one entry"""
        p1, p2 = state.p1, state.p2
        if not self.vessel.has_active_trip():
            # trip closed while the run was suspended
            return {
                "aborted": True,
                "notices": self._notice(state, NO_TRIP_NOTICE),
                "current_step": "commit"
            }

        def stamp_p1(draft):
            draft.timestamp = p1.timestamp
            draft.lat = p1.lat
            draft.lon = p1.lon

        self.queue.enqueue("P1", "", stamp_p1)
        self._enqueue_nav_fix(state.nav_fix, skip=state.action_patch)

        patch = {**state.action_patch, "lat": p2.lat, "lon": p2.lon, "last_nav_at": p2.timestamp}
        self.vessel.apply_patch(patch)

        entry = self.writer.write_merged(self.vessel, self.queue, state.header)
        logger.info(f"✅ Logged '{state.header}' at {p1.lat:.5f}, {p1.lon:.5f}")

        return {
            "entry": entry,
            "vessel_patch": patch,
            "notices": self._notice(state, f"Logged: {state.header}"),
            "current_step": "commit"
        }

    def _enqueue_nav_fix(self, nav_fix: NavFix, skip: Optional[Dict[str, Any]] = None) -> None:
        skip = skip or {}
        fields = [
            ("SOGfix", "sog", "sog"),
            ("COGfix", "cog", "cog"),
            ("STWfix", "stw", "stw"),
            ("HDGfix", "heading", "magnetic_heading"),
            ("AWAfix", "awa", "awa"),
            ("TWSfix", "tws", "tws"),
            ("TWDfix", "twd", "twd"),
            ("AWSfix", "aws", "aws"),
        ]
        for key, source, target in fields:
            value = getattr(nav_fix, source)
            if value is None or target in skip:
                continue
            self.queue.enqueue(key, "", self._setter(target, value))

    @staticmethod
    def _setter(field: str, value: float):
        def apply(draft):
            setattr(draft, field, value)
        return apply

    # Routing

    def trip_gate(self, state: ReconciliationState) -> str:
        return "abort" if state.aborted else "continue"

    def vector_gate(self, state: ReconciliationState) -> str:
        if state.vector_unreliable and not state.remeasured:
            return "remeasure"
        return "derive"
