"""
Exceptions raised by the battle rewards package.

Per-reward failures are never raised to callers; these cover startup,
configuration and payload parsing.
"""

from reward_engine.resources import ConfigError


class BattleRewardsError(Exception):
    """Base class for battle rewards errors."""


class StartupError(BattleRewardsError):
    """A required collaborator is missing or incompatible."""


class ItemPayloadError(BattleRewardsError):
    """An item payload could not be parsed."""


__all__ = [
    "BattleRewardsError",
    "ConfigError",
    "ItemPayloadError",
    "StartupError",
]
