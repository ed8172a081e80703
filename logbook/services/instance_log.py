"""
Instance-change logging.

Turns a change of one live vessel field into its side effects on the vessel
and the log text describing it. Changes that matter on their own are written
right away through LogWriter.write_merged (absorbing anything queued); minor
value updates (COG, SOG, wind...) are only queued and ride along with the next
written entry.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models.enums import (
    AutopilotMode, EmergencyLevel, EmergencyNature, EnvironmentDanger, MooringType,
    NavStatus, NavZone, PointOfSail, PropulsionTool, Steering, Tack,
)
from ..models.log_entry import LogEntry
from ..models.vessel import VesselState, Waypoint
from .log_queue import LogQueue, LogWriter

logger = logging.getLogger(__name__)

NO_TRIP_NOTICE = "No active Trip - action not logged."

MOORING_SET_TEXT = {
    MooringType.MOORING_BALL: "Moored on a ball",
    MooringType.CHAIN_MOORING: "Moored on a chain",
    MooringType.MOORED_ON_BUOY: "Moored on a buoy",
    MooringType.MOORED_ON_SHORE: "Mooring lines set",
    MooringType.AT_ANCHOR: "Dropped anchor",
    MooringType.DOUBLE: "Double moored",
    MooringType.OTHER: "Moored",
    MooringType.NONE: "Mooring cleared",
}

MOORING_LEFT_TEXT = {
    MooringType.MOORING_BALL: "Dropped Mooring Ball",
    MooringType.CHAIN_MOORING: "Dropped Mooring Chain",
    MooringType.MOORED_ON_BUOY: "Left Buoy",
    MooringType.MOORED_ON_SHORE: "Dropped Lines",
    MooringType.AT_ANCHOR: "Raised Anchor",
    MooringType.DOUBLE: "Left Mooring, Dropped Lines",
    MooringType.OTHER: "Left Mooring",
}

NAV_STATUS_TEXT = {
    NavStatus.BARE_POLES: "Navigation stopped, running under bare poles",
    NavStatus.HEAVE_TO: "Navigation stopped, heave to",
    NavStatus.UNDERWAY: "Navigation resumed",
    NavStatus.STORM_TACTICS: "Using storm tactics to ride out the storm",
    NavStatus.NONE: "Acquiring data to make a decision",
}

NAV_ZONE_TEXT = {
    NavZone.COASTAL: "Cruising in coastal zone",
    NavZone.INTRACOASTAL_WATERWAY: "Entered the inland waterway",
    NavZone.PROTECTED_WATER: "In protected water",
    NavZone.APPROACH: "Approaching the harbour",
    NavZone.OPEN_SEA: "Navigating in open sea",
    NavZone.HARBOUR: "In harbour zone",
    NavZone.ANCHORAGE: "In anchorage",
    NavZone.BUOY_FIELD: "In a buoy field",
    NavZone.TRAFFIC: "Entered a traffic-lane",
    NavZone.NONE: "Undetermined navigation zone",
}

PROPULSION_TEXT = {
    PropulsionTool.MOTOR: "Motor only",
    PropulsionTool.SAIL: "Sails set, Motor Off",
    PropulsionTool.IN_TOW: "In Tow",
    PropulsionTool.MOTORSAIL: "Using both Motor and Sail",
}

STEERING_TEXT = {
    Steering.BY_HAND: "Hand steering engaged",
    Steering.AUTOPILOT: "Helm control delegated to autopilot",
    Steering.FIXED: "Rudder fixed",
    Steering.NONE: "Rudder free",
}

AUTOPILOT_TEXT = {
    AutopilotMode.OFF: "Autopilot switched Off",
    AutopilotMode.ON_TWA: "Autopilot is On, in Windmode: true wind",
    AutopilotMode.ON_AWA: "Autopilot is On in Windmode: apparent wind",
    AutopilotMode.ON_HDG: "Autopilot is On, in heading mode",
    AutopilotMode.ON_COG: "Autopilot is On, follows Course Over Ground",
    AutopilotMode.ON_TRACK: "Autopilot is On, track mode",
    AutopilotMode.UNKNOWN: "Autopilot is On",
}

POINT_OF_SAIL_ORDER = [
    PointOfSail.CLOSE_HAULED, PointOfSail.CLOSE_REACH, PointOfSail.BEAM_REACH,
    PointOfSail.BROAD_REACH, PointOfSail.RUNNING, PointOfSail.DEAD_RUN, PointOfSail.STOPPED,
]


def danger_label(danger: EnvironmentDanger) -> str:
    return danger.value.replace("_", " ")


class InstanceLogHandler:
    """
    Knows how to turn changes of the live vessel state into log entries.

    Args:
        vessel: Live vessel state, changed through apply_patch
        queue: Deferred log queue shared with the action context
        writer: Log writer committing entries
        notify: Operator notification channel
        clock: Source of "now" for emergency timestamps
    """

    def __init__(
        self,
        vessel: VesselState,
        queue: LogQueue,
        writer: LogWriter,
        notify: Callable[[str], None],
        clock: Callable[[], datetime] = datetime.now
    ):
        self.vessel = vessel
        self.queue = queue
        self.writer = writer
        self.notify = notify
        self.clock = clock

    # Generic helpers

    def _require_trip(self) -> bool:
        if self.vessel.has_active_trip():
            return True
        self.notify(NO_TRIP_NOTICE)
        return False

    def _write(self, header: str, patch: Optional[Dict[str, Any]] = None) -> Optional[LogEntry]:
        if patch:
            self.vessel.apply_patch(patch)
        return self.writer.write_merged(self.vessel, self.queue, header)

    def enqueue_delta(self, key: str, label: str, value: Any, apply=None) -> None:
        self.queue.enqueue(key, f"{label} {value}", apply)

    def flush(self) -> Optional[LogEntry]:
        return self.writer.flush(self.vessel, self.queue)

    def log_simple(self, message: str) -> Optional[LogEntry]:
        """Write `message` as an entry of its own, absorbing anything queued"""
        if not self._require_trip():
            return None
        return self.writer.write_now(self.vessel, self.queue, message)

    # Mooring, nav status and zone

    def mooring_changed(self, new: MooringType) -> Optional[LogEntry]:
        if not self._require_trip():
            return None

        old = self.vessel.mooring
        if new == MooringType.NONE and old != MooringType.NONE:
            text = MOORING_LEFT_TEXT[old]
        else:
            text = MOORING_SET_TEXT[new]

        patch: Dict[str, Any] = {"mooring": new}
        if new != MooringType.NONE:
            patch["nav_status"] = NavStatus.STOPPED
            if new in (MooringType.MOORED_ON_SHORE, MooringType.DOUBLE):
                patch["nav_zone"] = NavZone.HARBOUR
            else:
                patch["nav_zone"] = NavZone.ANCHORAGE

        return self._write(text, patch)

    def nav_status_changed(self, new: NavStatus) -> Optional[LogEntry]:
        if not self._require_trip():
            return None

        if new == NavStatus.STOPPED:
            # the mooring change that goes with it writes the entry
            self.vessel.apply_patch({"nav_status": new})
            return None

        return self._write(NAV_STATUS_TEXT[new], {"nav_status": new, "mooring": MooringType.NONE})

    def nav_zone_changed(self, new: NavZone) -> Optional[LogEntry]:
        if not self._require_trip():
            return None
        header, patch = self.nav_zone_change(new)
        return self._write(header, patch)

    def nav_zone_change(self, new: NavZone) -> Tuple[str, Dict[str, Any]]:
        """Header and vessel patch for entering `new`, without writing anything"""
        old = self.vessel.nav_zone
        prefix = ""
        if old == NavZone.TRAFFIC:
            prefix = "Traffic-lane quitted. "
        if old == NavZone.HARBOUR:
            prefix += "Left the harbour. "

        patch: Dict[str, Any] = {"nav_zone": new}
        if new not in (NavZone.HARBOUR, NavZone.ANCHORAGE):
            patch["mooring"] = MooringType.NONE
            if self.vessel.nav_status in (NavStatus.STOPPED, NavStatus.NONE):
                patch["nav_status"] = NavStatus.UNDERWAY

        return prefix + NAV_ZONE_TEXT[new], patch

    # Propulsion, steering and autopilot

    def propulsion_changed(self, new: PropulsionTool) -> Optional[LogEntry]:
        if not self._require_trip():
            return None

        patch: Dict[str, Any] = {"propulsion": new}
        if new == PropulsionTool.NONE:
            self.vessel.apply_patch(patch)
            return None

        patch["mooring"] = MooringType.NONE
        if self.vessel.nav_status in (NavStatus.STOPPED, NavStatus.NONE):
            patch["nav_status"] = NavStatus.UNDERWAY
        return self._write(PROPULSION_TEXT[new], patch)

    def steering_changed(self, new: Steering) -> Optional[LogEntry]:
        if not self._require_trip():
            return None
        patch: Dict[str, Any] = {"steering": new}
        if new != Steering.AUTOPILOT:
            patch["autopilot_mode"] = AutopilotMode.OFF
        return self._write(STEERING_TEXT[new], patch)

    def autopilot_changed(self, new: AutopilotMode) -> Optional[LogEntry]:
        if not self._require_trip():
            return None

        patch: Dict[str, Any] = {"autopilot_mode": new}
        if new == AutopilotMode.OFF:
            if self.vessel.steering == Steering.AUTOPILOT:
                patch["steering"] = Steering.BY_HAND
        else:
            patch["steering"] = Steering.AUTOPILOT
        return self._write(AUTOPILOT_TEXT[new], patch)

    def autopilot_direction_changed(self, degrees: int) -> None:
        self.vessel.apply_patch({"autopilot_direction": degrees})
        self.queue.enqueue("autopilotDir", f"AP direction set to {degrees}°")

    # Waypoints and course

    def next_waypoint_changed(self, waypoint: Optional[Waypoint]) -> Optional[LogEntry]:
        if waypoint is not None and self.vessel.has_active_trip():
            return self._write(f"Next WPT is now {waypoint.name}", {"next_waypoint": waypoint})

        self.vessel.apply_patch({"next_waypoint": waypoint})
        if waypoint is None:
            self.queue.enqueue("nextWPT", "Next WPT cleared")
        return None

    def course_over_ground_changed(self, degrees: int) -> None:
        self.vessel.apply_patch({"cog": degrees})

        def apply(draft):
            draft.cog = degrees

        self.enqueue_delta("COG", "New ground course is", f"{degrees}°", apply)

    def bearing_to_waypoint_changed(self, degrees: int) -> None:
        self.vessel.apply_patch({"bearing": degrees})
        self.queue.enqueue("BTW", f"New course to WPT is {degrees}°")

    def speed_over_ground_changed(self, knots: float) -> None:
        self.vessel.apply_patch({"sog": knots})

        def apply(draft):
            draft.sog = knots

        self.enqueue_delta("SOG", "Speed over ground is", f"{knots:.1f} kn", apply)

    # Sailing dynamics

    def tack_changed(self, new: Tack) -> Optional[LogEntry]:
        old = self.vessel.tack
        # a tack appearing or disappearing comes with hoisting or dropping sails
        if old == Tack.NONE or new == Tack.NONE or old == new:
            self.vessel.apply_patch({"tack": new})
            return None

        if not self._require_trip():
            return None
        return self._write(f"Tacked, new tack on: {new.value}", {"tack": new})

    def point_of_sail_changed(self, new: PointOfSail) -> Optional[LogEntry]:
        if not self._require_trip():
            return None
        header, patch = self.point_of_sail_change(new)
        return self._write(header, patch)

    def point_of_sail_change(self, new: PointOfSail) -> Tuple[str, Dict[str, Any]]:
        """Header and vessel patch for sailing on `new`; moving down the order falls off"""
        old = self.vessel.point_of_sail
        tack = self.vessel.tack.value
        if old == PointOfSail.STOPPED:
            return f"Boat on {new.value} on {tack} tack", {"point_of_sail": new}

        old_index = POINT_OF_SAIL_ORDER.index(old)
        new_index = POINT_OF_SAIL_ORDER.index(new)
        if new_index > old_index:
            verb = "Fell off to"
        elif new_index < old_index:
            verb = "Luffed to"
        else:
            verb = "Held"
        return f"{verb} {new.value} on {tack} tack", {"point_of_sail": new}

    def wing_on_wing_changed(self, is_on: bool) -> Optional[LogEntry]:
        if not self._require_trip():
            return None
        header = "Sails set wing-on-wing" if is_on else "Wing-on-wing configuration broken"
        return self._write(header, {"wing_on_wing": is_on})

    def day_night_changed(self, is_day: bool) -> Optional[LogEntry]:
        if not self._require_trip():
            return None
        header = "Daytime navigation selected" if is_day else "Night navigation (navigation lights set)"
        return self._write(header, {"daytime": is_day})

    # Weather and environment

    def wind_speed_changed(self, knots: int) -> None:
        self.vessel.apply_patch({"tws": knots})

        def apply(draft):
            draft.tws = knots

        self.enqueue_delta("TWS", "Wind changed to", f"{knots} kn", apply)

    def wind_direction_changed(self, degrees: int) -> None:
        self.vessel.apply_patch({"twd": degrees})

        def apply(draft):
            draft.twd = degrees

        self.enqueue_delta("TWD", "Wind shifted to", f"{degrees}°", apply)

    def beaufort_changed(self, force: int) -> Optional[LogEntry]:
        if not self._require_trip():
            return None
        return self._write(f"Wind changed to {force} Bft", {"wind_force": force})

    def cloudiness_changed(self, octas: int) -> None:
        self.vessel.apply_patch({"cloud_cover": octas})

        def apply(draft):
            draft.cloud_cover = octas

        self.queue.enqueue("cloudiness", f"Actual cloud cover: {octas}/8", apply)

    def visibility_changed(self, visibility: str) -> Optional[LogEntry]:
        if not self._require_trip():
            return None
        return self._write(f"Visibility is now: {visibility}", {"visibility": visibility})

    def dangers_updated(self, dangers: List[EnvironmentDanger], notes: str = "") -> Optional[LogEntry]:
        if not self._require_trip():
            return None

        active = [danger for danger in dangers if danger != EnvironmentDanger.NONE]
        notes = notes.strip()
        if active:
            header = "Environment dangers updated: " + ", ".join(danger_label(d) for d in active)
        else:
            header = "Environment dangers cleared"
        if notes:
            header += f" - notes: {notes}"

        return self._write(header, {"environment_dangers": active or [EnvironmentDanger.NONE]})

    # Emergencies

    def emergency_started(
        self,
        nature: EmergencyNature,
        level: EmergencyLevel = EmergencyLevel.DISTRESS,
        description: str = ""
    ) -> Optional[LogEntry]:
        if not self._require_trip():
            return None
        header, patch = self.emergency_start_change(nature, level, description)
        return self._write(header, patch)

    def emergency_start_change(
        self,
        nature: EmergencyNature,
        level: EmergencyLevel = EmergencyLevel.DISTRESS,
        description: str = ""
    ) -> Tuple[str, Dict[str, Any]]:
        logger.warning(f"🚨 Emergency declared: {nature.value} ({level.value})")
        description = description.strip()
        header = f"EMERGENCY ({level.value}): {nature.value.replace('_', ' ')}"
        if description:
            header += f" - {description}"
        return header, {
            "emergency_state": True,
            "emergency_nature": nature,
            "emergency_level": level,
            "emergency_start": self.clock(),
            "emergency_end": None,
            "emergency_description": description,
        }

    def emergency_ended(self, outcome: str = "") -> Optional[LogEntry]:
        if not self._require_trip():
            return None

        header = "Emergency over"
        if outcome.strip():
            header += f": {outcome.strip()}"
        logger.info("🟢 Emergency closed")
        return self._write(header, {
            "emergency_state": False,
            "emergency_nature": EmergencyNature.NONE,
            "emergency_level": EmergencyLevel.NONE,
            "emergency_end": self.clock(),
        })
