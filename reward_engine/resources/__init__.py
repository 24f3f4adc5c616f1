"""
Resource loading module.

Exports:
- ConfigStore: JSON configuration with schema validation and reload
- ConfigError: Raised for unreadable or invalid configuration
"""

from reward_engine.resources.config_store import ConfigStore, ConfigError, load_schema

__all__ = [
    "ConfigStore",
    "ConfigError",
    "load_schema",
]
