"""
Reward rules and configuration models.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import ConfigDict, Field, ValidationError, field_validator, model_validator

from battle_rewards.errors import ItemPayloadError
from reward_engine.core import Model


class Trigger(str, Enum):
    """Terminal event kinds that cause reward resolution."""
    BATTLE_WON = "BattleWon"
    BATTLE_LOST = "BattleLost"
    BATTLE_FORFEIT = "BattleForfeit"
    CAPTURED = "Captured"

    def __str__(self) -> str:
        return self.value


class RewardType:
    """Known reward kinds."""
    ITEM = "item"
    COMMAND = "command"


# Trigger -> (field name, JSON key) of its reward map
TRIGGER_MAPS: dict[Trigger, tuple[str, str]] = {
    Trigger.BATTLE_WON: ("battle_won_rewards", "battleWonRewards"),
    Trigger.BATTLE_LOST: ("battle_lost_rewards", "battleLostRewards"),
    Trigger.BATTLE_FORFEIT: ("battle_forfeit_rewards", "battleForfeitRewards"),
    Trigger.CAPTURED: ("capture_rewards", "captureRewards"),
}

ALL_BATTLE_TYPES = ["wild", "npc", "pvp"]

Condition = Union[str, list[str]]


class WeightedItem(Model):
    """One item payload variant and its relative weight."""
    value: str
    weight: int = Field(default=1, ge=0)


class Reward(Model):
    """
    A reward rule.

    Attributes:
        id: Stable identifier (the key in its trigger map)
        type: "item" or "command"
        chance: Percent chance in [0, 100]
        cooldown: Seconds before the same player can receive it again
        order: Lower orders are evaluated first
        excludes: Reward ids that may not also be granted in the same pass
    """
    id: str = ""
    type: str
    message: str = ""
    command: str = ""
    item_stack: list[WeightedItem] = Field(default_factory=list, alias="itemStack")
    chance: float = Field(default=100.0, ge=0, le=100)
    cooldown: int = Field(default=0, ge=0)
    cooldown_message: str = Field(default="", alias="cooldownMessage")
    battle_types: list[str] = Field(default_factory=lambda: list(ALL_BATTLE_TYPES), alias="battleTypes")
    conditions: list[Condition] = Field(default_factory=list)
    conditions_blacklist: bool = Field(default=False, alias="conditionsBlacklist")
    min_level: int = Field(default=1, alias="minLevel")
    max_level: int = Field(default=100, alias="maxLevel")
    order: int = 999
    excludes: list[str] = Field(default_factory=list)
    allowed_dimensions: Optional[list[str]] = Field(default=None, alias="allowedDimensions")

    @field_validator("battle_types")
    @classmethod
    def _lowercase_battle_types(cls, value: list[str]) -> list[str]:
        return [t.strip().lower() for t in value]

    @model_validator(mode="after")
    def _check_level_range(self) -> Reward:
        if self.min_level > self.max_level:
            raise ValueError(f"minLevel {self.min_level} is greater than maxLevel {self.max_level}")
        return self

    def applies_to(self, battle_type_label: str) -> bool:
        """Check if this rule fires for a battle classification."""
        return battle_type_label in self.battle_types

    def level_in_range(self, level: int) -> bool:
        return self.min_level <= level <= self.max_level

    def allows_dimension(self, dimension: str) -> bool:
        """Check the realm restriction (none set = everywhere)."""
        return not self.allowed_dimensions or dimension in self.allowed_dimensions


class RewardConfig(Model):
    """
    Complete reward configuration.

    Rewards are grouped in one map per trigger. Map keys become the
    reward ids.
    """
    version: str = "1.3.0"
    debug_enabled: bool = Field(default=False, alias="debugEnabled")
    inventory_full_behavior: Literal["drop", "skip"] = Field(default="drop", alias="inventoryFullBehavior")
    battle_won_rewards: dict[str, Reward] = Field(default_factory=dict, alias="battleWonRewards")
    battle_lost_rewards: dict[str, Reward] = Field(default_factory=dict, alias="battleLostRewards")
    battle_forfeit_rewards: dict[str, Reward] = Field(default_factory=dict, alias="battleForfeitRewards")
    capture_rewards: dict[str, Reward] = Field(default_factory=dict, alias="captureRewards")

    @model_validator(mode="before")
    @classmethod
    def _assign_reward_ids(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        for field_name, alias in TRIGGER_MAPS.values():
            key = alias if alias in data else field_name
            rewards = data.get(key)
            if not isinstance(rewards, dict):
                continue

            named = {}
            for reward_id, reward in rewards.items():
                if isinstance(reward, dict) and not reward.get("id"):
                    reward = {**reward, "id": reward_id}
                elif isinstance(reward, Reward) and not reward.id:
                    reward = reward.clone(id=reward_id)
                named[reward_id] = reward
            data[key] = named
        return data

    def rewards_for(self, trigger: Trigger) -> list[Reward]:
        """Rewards configured for a trigger, in configuration order."""
        field_name, _ = TRIGGER_MAPS[trigger]
        return list(getattr(self, field_name).values())

    def get_reward(self, trigger: Trigger, reward_id: str) -> Optional[Reward]:
        field_name, _ = TRIGGER_MAPS[trigger]
        return getattr(self, field_name).get(reward_id)

    @property
    def reward_count(self) -> int:
        return sum(len(self.rewards_for(t)) for t in Trigger)


class ItemStack(Model):
    """
    A concrete item to hand to a player.

    Payload form: {"id": "cobblemon:poke_ball", "count": 5, ...}
    Extra keys (components, display data) are kept for the host.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='allow')

    id: str = Field(min_length=1)
    count: int = Field(default=1, ge=1)

    @classmethod
    def from_payload(cls, payload: str) -> ItemStack:
        """
        Parse a JSON item payload.

        Raises:
            ItemPayloadError: the payload is not valid JSON or not an item
        """
        try:
            data = json.loads(payload)
        except (TypeError, json.JSONDecodeError) as e:
            raise ItemPayloadError(f"Item payload is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ItemPayloadError("Item payload must be a JSON object")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ItemPayloadError(f"Invalid item payload: {e}") from e
