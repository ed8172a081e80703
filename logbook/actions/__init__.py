"""
Action system for the Logbook

- tags: Identifier of every operator action
- situation_map: Ordered actions per situation
- visibility: Predicates deciding whether an action is offered
- handlers: What each action does
- catalog: Immutable registry of action definitions
- runtime: Action context, runtime and runner
"""

from .tags import ActionTag
from .catalog import ActionCatalog, ActionDefinition, GLOBAL_BAR_TAGS, build_default_catalog
from .runtime import ActionContext, ActionMenu, ActionRunner, ActionRuntime, LOG_IN_FLIGHT_NOTICE

__all__ = [
    'ActionTag',
    'ActionCatalog',
    'ActionDefinition',
    'GLOBAL_BAR_TAGS',
    'build_default_catalog',
    'ActionContext',
    'ActionMenu',
    'ActionRunner',
    'ActionRuntime',
    'LOG_IN_FLIGHT_NOTICE',
]
