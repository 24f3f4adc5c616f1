"""
Rewards module - rule evaluation and delivery.

Provides:
- Reward and configuration models
- Condition matching
- Tiered selection with exclusion
- Cooldowns
- Dispatch to the host
"""

from battle_rewards.rewards.models import (
    Trigger,
    RewardType,
    WeightedItem,
    Reward,
    RewardConfig,
    ItemStack,
)
from battle_rewards.rewards.conditions import matches, conditions_match
from battle_rewards.rewards.selector import RewardSelector
from battle_rewards.rewards.cooldowns import CooldownTracker
from battle_rewards.rewards.dispatcher import RewardDispatcher, pick_weighted
from battle_rewards.rewards.service import RewardService

__all__ = [
    # Models
    "Trigger",
    "RewardType",
    "WeightedItem",
    "Reward",
    "RewardConfig",
    "ItemStack",
    # Conditions
    "matches",
    "conditions_match",
    # Selection
    "RewardSelector",
    # Delivery
    "CooldownTracker",
    "RewardDispatcher",
    "pick_weighted",
    "RewardService",
]
