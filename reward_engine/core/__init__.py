"""
Core engine module.

Exports:
- EventBus, Event, EngineEvent: Event system
- Model: Frozen pydantic base for configuration data
- PeriodicTask: Background interval runner
"""

from reward_engine.core.events import EventBus, Event, EngineEvent
from reward_engine.core.model import Model
from reward_engine.core.sweeper import PeriodicTask

__all__ = [
    # Events
    "EventBus",
    "Event",
    "EngineEvent",
    # Data
    "Model",
    # Scheduling
    "PeriodicTask",
]
