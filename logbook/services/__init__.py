"""
Service layer for the Logbook

- situation: Derives the current Situation from the vessel state
- log_queue: Deferred log queue and log writer
- instance_log: Logs changes of individual vessel fields
- reconciliation: LangGraph position reconciliation pipeline
"""

from .situation import derive_situation, situation_title
from .log_queue import PendingLogMutation, LogQueue, LogWriter
from .instance_log import InstanceLogHandler, NO_TRIP_NOTICE
from .reconciliation import PositionReconciliationPipeline, needs_second_measurement, derive_nav_fix

__all__ = [
    'derive_situation',
    'situation_title',
    'PendingLogMutation',
    'LogQueue',
    'LogWriter',
    'InstanceLogHandler',
    'NO_TRIP_NOTICE',
    'PositionReconciliationPipeline',
    'needs_second_measurement',
    'derive_nav_fix',
]
