"""
Action catalog - immutable registry of action definitions and situation layouts.

A definition pairs a tag with its title, icon, visibility predicate and
handler. The catalog is built once; firing an action never changes it.
"""

import logging
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Tuple
from pydantic import BaseModel, Field

from ..errors import LogbookError
from ..models.enums import ActionGroup, Situation
from .handlers import HANDLERS
from .situation_map import SITUATION_MAP
from .tags import ActionTag as T
from .visibility import always, predicate_for

logger = logging.getLogger(__name__)


GLOBAL_BAR_TAGS: Tuple[T, ...] = (
    T.E1, T.E2, T.E3, T.E4,
    T.AF1, T.AF2, T.AF2R, T.AF21, T.AF3N, T.AF3D,
    T.AF4, T.AF5, T.AF6, T.AF7, T.AF8, T.AF9, T.AF10, T.AF11,
    T.AF14, T.AF15, T.AF16, T.AF17,
)

G = ActionGroup

# tag: (title, group, icon, emphasised)
CATALOG_TABLE: Dict[T, Tuple[str, ActionGroup, Optional[str], bool]] = {
    T.A1: ("Start trip", G.NAVIGATION, "play.fill", False),
    T.A1R: ("Finish trip", G.NAVIGATION, "stop.fill", False),
    T.A1A: ("Abort trip", G.NAVIGATION, "xmark.circle", False),
    T.A2: ("Force stop logging", G.OTHER_LOG, "exclamationmark.triangle", False),

    T.A3: ("Engine idle", G.MOTOR, "gauge.low", False),
    T.A4: ("Engine cruise", G.MOTOR, "gauge", False),
    T.A5: ("Engine slow", G.MOTOR, "gauge.medium", False),
    T.A6: ("Engine full", G.MOTOR, "gauge.high", False),

    T.A7M: ("Cast off (moored)", G.NAVIGATION, "figure.walk", False),
    T.A7A: ("Raise anchor", G.NAVIGATION, "anchor", False),
    T.A8M: ("Moor boat", G.NAVIGATION, "dock.rectangle", False),
    T.A8A: ("Drop anchor", G.NAVIGATION, "anchor.circle", False),
    T.A9: ("Tank fuel", G.OTHER_LOG, "fuelpump", False),
    T.A10: ("Relocate boat", G.NAVIGATION, "location.viewfinder", False),

    T.A11H: ("Leave harbour", G.NAVIGATION, None, False),
    T.A11HR: ("In harbour", G.NAVIGATION, None, False),
    T.A11A: ("Leave anchorage", G.NAVIGATION, None, False),
    T.A11AR: ("In anchorage", G.NAVIGATION, None, False),
    T.A11B: ("Leave buoy field", G.NAVIGATION, None, False),
    T.A11BR: ("In buoy field", G.NAVIGATION, None, False),

    T.A12: ("Protected water", G.NAVIGATION, None, False),
    T.A13: ("Coastal zone", G.NAVIGATION, None, False),
    T.A14: ("Open sea", G.NAVIGATION, None, False),
    T.A15: ("Intracoastal", G.NAVIGATION, None, False),
    T.A16: ("Approach", G.NAVIGATION, None, False),
    T.A17: ("Heave to", G.NAVIGATION, None, False),
    T.A18: ("Bare poles", G.NAVIGATION, None, False),
    T.A19: ("Dangers cleared", G.NAVIGATION, None, False),
    T.A20: ("Back on track", G.NAVIGATION, None, False),
    T.A21: ("Req deviation", G.NAVIGATION, None, False),
    T.A23: ("Change course", G.NAVIGATION, None, False),
    T.A24: ("Course to waypoint", G.NAVIGATION, None, False),

    T.A25: ("Autopilot ON", G.NAVIGATION, "steeringwheel", False),
    T.A25R: ("Autopilot OFF", G.NAVIGATION, "steeringwheel.slash", False),
    T.A26: ("Autopilot mode", G.NAVIGATION, None, False),

    T.A27: ("Set all sails", G.SAIL_PLAN, None, False),
    T.A27R: ("Drop all sails", G.SAIL_PLAN, None, False),
    T.A27W: ("Wing On Wing", G.SAIL_PLAN, None, False),
    T.A27WR: ("On Same Tack", G.SAIL_PLAN, None, False),
    T.A28: ("Change sail plan", G.SAIL_PLAN, None, False),
    T.A29: ("Set genoa", G.SAIL_PLAN, None, False),
    T.A29R: ("Drop genoa", G.SAIL_PLAN, None, False),
    T.A30: ("Set mainsail", G.SAIL_PLAN, None, False),
    T.A30R: ("Drop mainsail", G.SAIL_PLAN, None, False),
    T.A31: ("Set Gennaker/CO", G.SAIL_PLAN, None, False),
    T.A31R: ("Drop Gennaker/CO", G.SAIL_PLAN, None, False),
    T.A32: ("Set spinnaker", G.SAIL_PLAN, None, False),
    T.A32R: ("Drop spinnaker", G.SAIL_PLAN, None, False),

    T.A33R: ("Reef mainsail", G.SAIL_PLAN, None, False),
    T.A33F: ("Furl mainsail", G.SAIL_PLAN, None, False),
    T.A34: ("Full mainsail", G.SAIL_PLAN, None, False),
    T.A35R: ("Reef genoa", G.SAIL_PLAN, None, False),
    T.A35F: ("Furl genoa", G.SAIL_PLAN, None, False),
    T.A36: ("Full genoa", G.SAIL_PLAN, None, False),
    T.A37: ("Increase mainsail", G.SAIL_PLAN, None, False),
    T.A38: ("Increase genoa", G.SAIL_PLAN, None, False),

    T.A39: ("Tack", G.ENVIRONMENT, None, False),
    T.A40: ("Gybe", G.ENVIRONMENT, None, False),
    T.A41: ("Flatten sails", G.ENVIRONMENT, None, False),
    T.A42: ("Curve sails", G.ENVIRONMENT, None, False),
    T.A43: ("Fall off", G.ENVIRONMENT, None, False),
    T.A44: ("Luff", G.ENVIRONMENT, None, False),
    T.A45: ("Run off", G.ENVIRONMENT, None, False),
    T.A46: ("Forereach", G.ENVIRONMENT, None, False),
    T.A47: ("Drogue", G.ENVIRONMENT, None, False),
    T.A48: ("Sea anchor", G.ENVIRONMENT, None, False),
    T.A49: ("Final log", G.OTHER_LOG, None, False),
    T.A50: ("Landmark", G.OTHER_LOG, None, False),
    T.A51: ("Storm steering", G.NAVIGATION, None, False),

    T.E1: ("MOB", G.EMERGENCY, "figure.wave.circle", True),
    T.E2: ("Fire", G.EMERGENCY, "flame.fill", True),
    T.E3: ("Medical", G.EMERGENCY, "stethoscope", True),
    T.E4: ("Emergency", G.EMERGENCY, "exclamationmark.octagon.fill", True),

    T.AF1: ("Danger spotted", G.ENVIRONMENT, "exclamationmark.triangle", False),
    T.AF2: ("Start motor", G.MOTOR, "engine.combustion", False),
    T.AF2R: ("Stop motor", G.MOTOR, "engine.combustion.slash", False),
    T.AF21: ("Motors", G.MOTOR, "engine.combustion.circle", False),
    T.AF3N: ("Night", G.ENVIRONMENT, "moon.stars", False),
    T.AF3D: ("Day", G.ENVIRONMENT, "sun.max", False),
    T.AF4: ("Failure report", G.INCIDENT, "exclamationmark.bubble", False),
    T.AF5: ("Manual log", G.OTHER_LOG, "book.and.pen", False),
    T.AF6: ("Modify instances", G.OTHER_LOG, "slider.horizontal.3", False),
    T.AF7: ("Crew incident", G.INCIDENT, "person.fill.questionmark", False),
    T.AF8: ("Run checklist", G.CHECKLIST, "checklist", False),
    T.AF9: ("Weather report", G.ENVIRONMENT, "cloud.sun", False),
    T.AF10: ("Encounter", G.ENVIRONMENT, "binoculars", False),
    T.AF11: ("Insert WPT", G.NAVIGATION, "mappin.and.ellipse", False),
    T.AF14: ("Change destination", G.NAVIGATION, "signpost.right", False),
    T.AF15: ("Log position", G.NAVIGATION, "scope", False),
    T.AF16: ("Goto next WPT", G.NAVIGATION, "arrowshape.turn.up.right", False),
    T.AF17: ("Extra rigging", G.ENVIRONMENT, None, False),

    T.EM1: ("Mayday", G.EMERGENCY, None, True),
    T.EM1R: ("Mayday relay", G.EMERGENCY, None, False),
    T.EM2: ("PAN PAN", G.EMERGENCY, None, False),
    T.EM3: ("Securité", G.EMERGENCY, None, False),
    T.EM4: ("Ack call", G.EMERGENCY, None, False),
    T.EM5: ("Who (crew)", G.EMERGENCY, None, False),
    T.EM6: ("Req assist", G.EMERGENCY, None, False),
    T.EM7: ("SAR in area", G.EMERGENCY, None, False),
    T.EM8: ("Assessment", G.EMERGENCY, None, False),
    T.EM9: ("Get medical advice", G.EMERGENCY, None, False),
    T.EM10: ("Tow requested", G.EMERGENCY, None, False),
    T.EM11: ("In tow", G.EMERGENCY, None, False),
    T.EM11T: ("Take in tow", G.EMERGENCY, None, False),
    T.EM12: ("Abandon ship", G.EMERGENCY, None, True),
    T.EM13: ("Urgency level", G.EMERGENCY, None, False),
    T.EM14: ("End emergency", G.EMERGENCY, None, False),
}


class ActionDefinition(BaseModel):
    """One operator action: what it is called, when it is offered and what it does"""
    tag: T = Field(..., description="Stable action identifier")
    title: str = Field(..., description="Title shown to the operator")
    group: ActionGroup = Field(ActionGroup.GENERIC, description="Layout group")
    icon: Optional[str] = Field(None, description="Symbol name for the button")
    emphasised: bool = Field(False, description="Rendered prominently")
    is_visible: Callable[[Any], bool] = Field(default=always, description="Visibility predicate on an ActionRuntime")
    handler: Callable[[Any], Awaitable[None]] = Field(..., description="Async handler taking an ActionRuntime")

    class Config:
        """Pydantic model configuration"""
        frozen = True
        arbitrary_types_allowed = True


class ActionCatalog:
    """
    Read-only lookup of definitions and situation layouts.

    Args:
        definitions: Definition per tag
        situation_map: Ordered tags per situation
        global_bar_tags: Tags always offered, kept out of situation lists
    """

    def __init__(
        self,
        definitions: Mapping[T, ActionDefinition],
        situation_map: Mapping[Situation, List[T]],
        global_bar_tags: Iterable[T] = GLOBAL_BAR_TAGS
    ):
        self._definitions = MappingProxyType(dict(definitions))
        self._situation_map = MappingProxyType({
            situation: tuple(tags) for situation, tags in situation_map.items()
        })
        self.global_bar_tags = tuple(global_bar_tags)

    @property
    def situation_map(self) -> Mapping[Situation, Tuple[T, ...]]:
        return self._situation_map

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, tag: T) -> bool:
        return tag in self._definitions

    def variant(self, tag: T) -> Optional[ActionDefinition]:
        return self._definitions.get(tag)

    def definitions(self, tags: Iterable[T]) -> List[ActionDefinition]:
        """Definitions for `tags` in order; unknown tags are skipped"""
        return [self._definitions[tag] for tag in tags if tag in self._definitions]

    def situation_tags(self, situation: Situation) -> List[T]:
        """Ordered tags of `situation`, each once, without the fixed bar tags"""
        seen = set(self.global_bar_tags)
        tags = []
        for tag in self._situation_map.get(situation, ()):
            if tag in seen:
                continue
            seen.add(tag)
            tags.append(tag)
        return tags

    def visible_definitions(self, tags: Iterable[T], context) -> List[ActionDefinition]:
        """Definitions whose predicate holds for the live state behind `context`"""
        return [
            definition for definition in self.definitions(tags)
            if definition.is_visible(context.runtime_for(definition))
        ]

    def global_bar(self, context) -> List[ActionDefinition]:
        return self.visible_definitions(self.global_bar_tags, context)

    def contextual(self, situation: Situation, context) -> List[ActionDefinition]:
        return self.visible_definitions(self.situation_tags(situation), context)


def build_default_catalog() -> ActionCatalog:
    """
    Build the catalog of every ActionTag.

    Raises:
        LogbookError: A tag lacks a catalog row or a handler, or a situation has no layout
    """
    all_tags = set(T)
    missing_rows = all_tags - set(CATALOG_TABLE)
    missing_handlers = all_tags - set(HANDLERS)
    if missing_rows or missing_handlers:
        raise LogbookError(
            "Incomplete action catalog: "
            f"no row for {sorted(t.value for t in missing_rows)}, "
            f"no handler for {sorted(t.value for t in missing_handlers)}"
        )

    missing_layouts = set(Situation) - set(SITUATION_MAP)
    if missing_layouts:
        raise LogbookError(f"No action layout for {sorted(s.value for s in missing_layouts)}")

    definitions = {}
    for tag in T:
        title, group, icon, emphasised = CATALOG_TABLE[tag]
        definitions[tag] = ActionDefinition(
            tag=tag,
            title=title,
            group=group,
            icon=icon,
            emphasised=emphasised,
            is_visible=predicate_for(tag),
            handler=HANDLERS[tag]
        )

    logger.debug(f"📚 Action catalog built with {len(definitions)} definitions")
    return ActionCatalog(definitions, SITUATION_MAP)
