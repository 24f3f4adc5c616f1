"""
Battle Rewards

Grants configurable rewards to players when creature battles end.

Provides:
- Battle tracking (state, classification, lifecycle triggers)
- Reward rules (conditions, priority tiers, exclusion, chance)
- Reward dispatch (cooldowns, items, commands, placeholders)

Quick Start:
    from reward_engine.core import EventBus
    from battle_rewards import BattleRewards

    bus = EventBus()
    rewards = BattleRewards(host=MyHost(), event_bus=bus)
    rewards.start()
"""

__version__ = "1.3.0"

from battle_rewards.app import BattleRewards
from battle_rewards.errors import BattleRewardsError, ConfigError, ItemPayloadError, StartupError
from battle_rewards.host import Player, RewardHost

__all__ = [
    "BattleRewards",
    "Player",
    "RewardHost",
    # Errors
    "BattleRewardsError",
    "ConfigError",
    "ItemPayloadError",
    "StartupError",
]
