"""
Reward dispatch - cooldown gating and effect execution.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from battle_rewards.battle.events import RewardEvent
from battle_rewards.battle.models import BattleState
from battle_rewards.errors import ItemPayloadError
from battle_rewards.host import Player, RewardHost
from battle_rewards.rewards.cooldowns import CooldownTracker
from battle_rewards.rewards.models import Reward, RewardConfig, RewardType, Trigger, WeightedItem
from battle_rewards.rewards.placeholders import apply_placeholders, build_placeholders
from reward_engine.core.events import EventBus

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_MESSAGE = "<red>Wait %time% seconds...</red>"


def pick_weighted(items: Sequence[WeightedItem], rng: random.Random) -> Optional[str]:
    """
    Choose one payload with probability weight / total weight.

    Returns:
        The chosen payload, None when total weight is not positive
    """
    total = sum(item.weight for item in items)
    if total <= 0:
        return None

    roll = rng.randint(1, total)
    cumulative = 0
    for item in items:
        cumulative += item.weight
        if roll <= cumulative:
            return item.value
    return None


def cooldown_key(trigger: Trigger, reward: Reward) -> str:
    """Cooldown identity of a reward. Ids are only unique within one trigger map."""
    return f"{trigger.value}:{reward.id}"


@dataclass
class EffectResult:
    """Outcome of performing a reward effect."""
    success: bool
    item_count: int = 0
    reason: str = ""


class RewardDispatcher:
    """
    Grants a selected reward to a player.

    Checks the cooldown, performs the effect through the host, then
    records the grant and sends the reward message. The player's
    cooldown lock is held for the whole sequence so two racing grants
    cannot both pass the check. Failures are logged and reported as
    False; nothing is raised to the caller.
    """

    def __init__(
        self,
        host: RewardHost,
        cooldowns: CooldownTracker,
        config_source: Callable[[], RewardConfig],
        rng: Optional[random.Random] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.host = host
        self.cooldowns = cooldowns
        self._config_source = config_source
        self._rng = rng or random.Random()
        self.events = event_bus

        self._effects: dict[str, Callable[[Player, Reward, BattleState, Trigger], EffectResult]] = {
            RewardType.ITEM: self._give_item,
            RewardType.COMMAND: self._run_command,
        }

    def dispatch(self, player: Player, reward: Reward, state: BattleState, trigger: Trigger) -> bool:
        """
        Grant one reward.

        Returns:
            True if the reward was delivered and its cooldown recorded
        """
        with self.cooldowns.hold(player.uuid):
            now = self.cooldowns.now_millis()
            key = cooldown_key(trigger, reward)
            remaining = self.cooldowns.remaining_millis(player.uuid, key, reward.cooldown, now)
            if remaining > 0:
                self._send_cooldown_message(player, reward, state, trigger, remaining)
                self._publish(RewardEvent.REWARD_ON_COOLDOWN, player, reward, state, trigger)
                return False

            effect = self._effects.get(reward.type.lower())
            if effect is None:
                logger.warning("Invalid reward type '%s' for reward %s", reward.type, reward.id)
                self._publish(RewardEvent.REWARD_FAILED, player, reward, state, trigger)
                return False

            result = effect(player, reward, state, trigger)
            if not result.success:
                logger.debug("Reward %s not granted to %s: %s", reward.id, player.name, result.reason)
                self._publish(RewardEvent.REWARD_FAILED, player, reward, state, trigger)
                return False

            self.cooldowns.record(player.uuid, key, now)

        if reward.message:
            values = build_placeholders(player, state, reward, trigger, item_count=result.item_count)
            self._send(player, apply_placeholders(reward.message, values))

        logger.debug("Granted %s to %s (%s)", reward.id, player.name, trigger)
        self._publish(RewardEvent.REWARD_GRANTED, player, reward, state, trigger)
        return True

    def _give_item(self, player: Player, reward: Reward, state: BattleState, trigger: Trigger) -> EffectResult:
        if not reward.item_stack:
            return EffectResult(False, reason="no item stack defined")

        payload = pick_weighted(reward.item_stack, self._rng)
        if payload is None:
            return EffectResult(False, reason="item weights sum to zero")

        try:
            stack = self.host.parse_item(payload)
        except ItemPayloadError as e:
            logger.warning("Failed to parse item for reward %s: %s", reward.id, e)
            return EffectResult(False, reason="malformed item payload")

        try:
            if self.host.give_item(player, stack):
                return EffectResult(True, item_count=stack.count)

            if self._config_source().inventory_full_behavior == "drop":
                self.host.drop_item(player, stack)
                return EffectResult(True, item_count=stack.count)
        except Exception:
            logger.exception("Failed to give item for reward %s to %s", reward.id, player.name)
            return EffectResult(False, reason="inventory error")

        return EffectResult(False, reason="inventory full")

    def _run_command(self, player: Player, reward: Reward, state: BattleState, trigger: Trigger) -> EffectResult:
        if not reward.command.strip():
            logger.warning("Empty command for reward %s", reward.id)
            return EffectResult(False, reason="empty command")

        values = build_placeholders(player, state, reward, trigger)
        command = apply_placeholders(reward.command, values)
        try:
            self.host.execute_command(command, player)
        except Exception as e:
            logger.warning("Command '%s' failed for %s: %s", command, player.name, e)
            return EffectResult(False, reason="command failed")

        return EffectResult(True)

    def _send_cooldown_message(
        self,
        player: Player,
        reward: Reward,
        state: BattleState,
        trigger: Trigger,
        remaining_millis: int,
    ) -> None:
        template = reward.cooldown_message or DEFAULT_COOLDOWN_MESSAGE
        values = build_placeholders(
            player, state, reward, trigger,
            remaining_seconds=remaining_millis // 1000,
        )
        self._send(player, apply_placeholders(template, values))

    def _send(self, player: Player, text: str) -> None:
        try:
            self.host.send_message(player, text)
        except Exception:
            logger.exception("Failed to send message to %s", player.name)

    def _publish(
        self,
        event_type: RewardEvent,
        player: Player,
        reward: Reward,
        state: BattleState,
        trigger: Trigger,
    ) -> None:
        if self.events is None:
            return
        self.events.publish(
            event_type,
            player=player,
            reward=reward,
            trigger=trigger,
            battle_id=state.battle_id,
        )
