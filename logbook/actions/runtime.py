"""
Action runtime - the context handlers run in, and the runner that fires actions.

ActionContext owns the per-vessel machinery (deferred queue, writer,
instance-change logger, reconciliation pipeline) and the collaborator
channels. ActionRunner derives the situation, lists the actions worth
offering and fires one by tag.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from pydantic import BaseModel, Field

from ..errors import ActionNotAvailable
from ..models.config import LogbookSettings
from ..models.enums import Situation
from ..models.log_entry import LogEntry
from ..models.vessel import VesselState
from ..models.workflow import ReconciliationState
from ..services.instance_log import InstanceLogHandler, NO_TRIP_NOTICE
from ..services.log_queue import LogQueue, LogWriter
from ..services.reconciliation import PositionReconciliationPipeline
from ..services.situation import derive_situation
from ..tools.operator import OperatorChannel, PromptRequest
from ..tools.position_source import PositionSource
from ..tools.sensor_feed import SensorFeed
from ..tools.store import LogStore
from .catalog import ActionCatalog, ActionDefinition, build_default_catalog
from .tags import ActionTag

logger = logging.getLogger(__name__)

LOG_IN_FLIGHT_NOTICE = "A position log is already running - action ignored."


class ActionContext:
    """
    Everything an action handler may touch.

    Args:
        vessel: The single live vessel state
        store: Log store the entries go to
        operator: Notification, prompt and sheet channel
        settings: Logbook settings (timings and thresholds)
        position_source: One-shot device position source
        sensor_feed: Latest NMEA snapshot holder
        clock: Source of "now"
        sleep: Awaitable sleep used by the pipeline waits
    """

    def __init__(
        self,
        vessel: VesselState,
        store: LogStore,
        operator: OperatorChannel,
        settings: Optional[LogbookSettings] = None,
        position_source: Optional[PositionSource] = None,
        sensor_feed: Optional[SensorFeed] = None,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ):
        self.vessel = vessel
        self.store = store
        self.operator = operator
        self.settings = settings or LogbookSettings()
        self.position_source = position_source
        self.sensor_feed = sensor_feed
        self.clock = clock

        self.queue = LogQueue()
        self.writer = LogWriter(store, clock)
        self.instance_log = InstanceLogHandler(vessel, self.queue, self.writer, self.notify, clock)
        self.pipeline = PositionReconciliationPipeline(
            vessel=vessel,
            store=store,
            queue=self.queue,
            writer=self.writer,
            operator=operator,
            position_source=position_source,
            sensor_feed=sensor_feed,
            timings=self.settings.timings,
            thresholds=self.settings.thresholds,
            clock=clock,
            sleep=sleep
        )

        self._log_in_flight = False

    # Collaborators

    def notify(self, text: str) -> None:
        self.operator.notify(text)

    def present_sheet(self, tag: Union[ActionTag, str]) -> None:
        tag = tag.value if isinstance(tag, ActionTag) else tag
        logger.info(f"🗂️ Presenting sheet for {tag}")
        self.operator.present_sheet(tag)

    async def prompt_single_line(
        self,
        title: str,
        message: str,
        placeholder: str = "",
        initial_text: str = "",
        numeric: bool = False
    ) -> Optional[str]:
        """
        Ask the operator for one line of text.

        Returns:
            The trimmed answer, or None when cancelled or left empty
        """
        answer = await self.operator.prompt(PromptRequest(
            title=title,
            message=message,
            placeholder=placeholder,
            initial_text=initial_text,
            numeric=numeric
        ))
        if answer is None:
            return None
        answer = answer.strip()
        return answer or None

    def last_log_entry(self) -> Optional[LogEntry]:
        if self.vessel.trip is None:
            return None
        return self.store.latest_entry(self.vessel.trip.id)

    def runtime_for(self, definition: ActionDefinition) -> "ActionRuntime":
        return ActionRuntime(context=self, definition=definition)

    # Logging

    def log_simple(self, message: str, patch: Optional[Dict[str, Any]] = None) -> Optional[LogEntry]:
        """
        Write `message` at the current position, without a position run.

        Without an active trip the operator is told and nothing changes,
        `patch` included.
        """
        if not self.vessel.has_active_trip():
            self.notify(NO_TRIP_NOTICE)
            return None

        if patch:
            self.vessel.apply_patch(patch)
        entry = self.writer.write_now(self.vessel, self.queue, message)
        self.notify(f"Logged: {message}")
        return entry

    async def log_now(self, header: str, patch: Optional[Dict[str, Any]] = None) -> Optional[ReconciliationState]:
        """
        Run the position reconciliation pipeline for `header`.

        `patch` is applied to the vessel at commit together with the new
        position. Only one run may be in flight per context; an overlapping
        call is refused with a notice and returns None.
        """
        if self._log_in_flight:
            logger.warning(f"⚠️ Refused overlapping log for '{header}'")
            self.notify(LOG_IN_FLIGHT_NOTICE)
            return None

        self._log_in_flight = True
        try:
            return await self.pipeline.run(header, action_patch=patch)
        finally:
            self._log_in_flight = False

    @property
    def log_in_flight(self) -> bool:
        return self._log_in_flight


class ActionRuntime:
    """The (context, definition) pair handed to visibility predicates and handlers"""

    def __init__(self, context: ActionContext, definition: ActionDefinition):
        self.context = context
        self.definition = definition

    @property
    def vessel(self) -> VesselState:
        return self.context.vessel

    @property
    def tag(self) -> ActionTag:
        return self.definition.tag


class ActionMenu(BaseModel):
    """What the operator can do right now"""
    situation: Situation = Field(..., description="Derived situation")
    global_bar: List[ActionDefinition] = Field(default_factory=list, description="Always-available tools")
    contextual: List[ActionDefinition] = Field(default_factory=list, description="Situation specific actions")

    def tags(self) -> List[ActionTag]:
        return [definition.tag for definition in self.global_bar + self.contextual]


class ActionRunner:
    """
    Fires actions against one ActionContext.

    The situation is never stored: it is derived from the vessel before
    listing actions and again after every fired action.
    """

    def __init__(self, context: ActionContext, catalog: Optional[ActionCatalog] = None):
        self.context = context
        self.catalog = catalog or build_default_catalog()

    def situation(self) -> Situation:
        return derive_situation(self.context.vessel)

    def available_actions(self) -> ActionMenu:
        situation = self.situation()
        return ActionMenu(
            situation=situation,
            global_bar=self.catalog.global_bar(self.context),
            contextual=self.catalog.contextual(situation, self.context)
        )

    async def fire(self, tag: Union[ActionTag, str]) -> Situation:
        """
        Run the handler of `tag`.

        Returns:
            The situation derived after the handler finished

        Raises:
            ActionNotAvailable: The tag is unknown or not visible in the current state
        """
        try:
            tag = ActionTag(tag)
        except ValueError:
            raise ActionNotAvailable(str(tag), "unknown")

        definition = self.catalog.variant(tag)
        if definition is None:
            raise ActionNotAvailable(tag.value, "unknown")

        runtime = self.context.runtime_for(definition)
        if not definition.is_visible(runtime):
            raise ActionNotAvailable(tag.value, "not visible in the current state")

        logger.info(f"▶️ Firing {tag.value} ({definition.title})")
        await definition.handler(runtime)

        situation = self.situation()
        logger.info(f"🧭 Situation is now {situation.value}")
        return situation
