"""
Reward Engine

Generic infrastructure for event-driven reward processing.

Quick Start:
    from reward_engine.core import EventBus, PeriodicTask
    from reward_engine.resources import ConfigStore

    bus = EventBus()
    store = ConfigStore("config/rewards.json", MyConfig, "my.schema.json")
    config = store.load()
"""

__version__ = "1.3.0"

# Re-export core components for convenience
from reward_engine.core import (
    Event,
    EventBus,
    EngineEvent,
    Model,
    PeriodicTask,
)
from reward_engine.resources import ConfigError, ConfigStore

__all__ = [
    # Events
    "EventBus",
    "Event",
    "EngineEvent",
    # Data
    "Model",
    # Scheduling
    "PeriodicTask",
    # Resources
    "ConfigStore",
    "ConfigError",
]
