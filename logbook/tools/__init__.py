"""
Collaborator contracts and adapters for the Logbook

- store: Log store protocol and in-memory store
- position_source: One-shot device position requests
- sensor_feed: Latest NMEA sensor snapshot
- operator: Notification, prompt and sheet channels
"""

from .store import LogStore, InMemoryLogStore
from .position_source import PositionSource, StaticPositionSource
from .sensor_feed import SensorFeed
from .operator import OperatorChannel, PromptRequest, ConsoleOperator, ScriptedOperator

__all__ = [
    'LogStore',
    'InMemoryLogStore',
    'PositionSource',
    'StaticPositionSource',
    'SensorFeed',
    'OperatorChannel',
    'PromptRequest',
    'ConsoleOperator',
    'ScriptedOperator',
]
