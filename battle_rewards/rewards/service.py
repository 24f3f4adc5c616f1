"""
Reward resolution - selection followed by dispatch.
"""

from __future__ import annotations

import logging

from battle_rewards.battle.models import BattleState
from battle_rewards.battle.properties import describe
from battle_rewards.host import Player
from battle_rewards.rewards.dispatcher import RewardDispatcher
from battle_rewards.rewards.models import Reward, Trigger
from battle_rewards.rewards.selector import RewardSelector

logger = logging.getLogger(__name__)


class RewardService:
    """Runs one resolution pass for a player."""

    def __init__(self, selector: RewardSelector, dispatcher: RewardDispatcher):
        self.selector = selector
        self.dispatcher = dispatcher

    def resolve(self, player: Player, state: BattleState, trigger: Trigger) -> list[Reward]:
        """
        Select and grant rewards.

        A failing reward never stops the others.

        Returns:
            Rewards that were actually granted
        """
        logger.debug(
            "Resolving %s for %s: type=%s opponent_level=%d",
            trigger, player.name, state.battle_type.label, state.opponent_level,
        )
        if state.opponent_properties:
            logger.debug("Opponent snapshot: %s", describe(state.opponent_properties))

        selected = self.selector.select(state, trigger, player)
        if not selected:
            logger.debug("No rewards eligible for %s", player.name)
            return []

        granted = []
        for reward in selected:
            try:
                if self.dispatcher.dispatch(player, reward, state, trigger):
                    granted.append(reward)
            except Exception:
                logger.exception("Unexpected error granting %s to %s", reward.id, player.name)
        return granted
