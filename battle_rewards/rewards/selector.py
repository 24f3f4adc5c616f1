"""
Reward selection - eligibility, priority tiers, exclusion and chance rolls.
"""

from __future__ import annotations

import logging
import random
from itertools import groupby
from typing import Callable, Optional

from battle_rewards.battle.models import BattleState
from battle_rewards.host import Player
from battle_rewards.rewards.conditions import conditions_match
from battle_rewards.rewards.models import Reward, RewardConfig, Trigger

logger = logging.getLogger(__name__)


class RewardSelector:
    """
    Decides which rewards a resolution pass grants.

    Selection walks every priority tier (lowest `order` first). Within
    a tier each candidate not excluded by an earlier pick is rolled
    independently; a successful roll adds the reward's `excludes` to
    the exclusion set seen by everything after it. Any number of
    rewards may come back.
    """

    def __init__(
        self,
        config_source: Callable[[], RewardConfig],
        rng: Optional[random.Random] = None,
    ):
        self._config_source = config_source
        self._rng = rng or random.Random()

    def eligible(
        self,
        state: BattleState,
        trigger: Trigger,
        player: Player,
        opponent_level: Optional[int] = None,
    ) -> list[Reward]:
        """Rewards whose filters pass, in configuration order."""
        level = state.opponent_level if opponent_level is None else opponent_level
        battle_type = state.battle_type.label
        snapshot = state.opponent_properties

        result = []
        for reward in self._config_source().rewards_for(trigger):
            if not reward.allows_dimension(player.dimension):
                logger.debug("Skip %s: dimension %s not allowed", reward.id, player.dimension)
                continue
            if not reward.applies_to(battle_type):
                logger.debug("Skip %s: battle type %s", reward.id, battle_type)
                continue
            if not conditions_match(reward.conditions, snapshot, reward.conditions_blacklist):
                logger.debug("Skip %s: conditions not met", reward.id)
                continue
            if not reward.level_in_range(level):
                logger.debug("Skip %s: level %d outside %d..%d",
                             reward.id, level, reward.min_level, reward.max_level)
                continue
            result.append(reward)
        return result

    def select(
        self,
        state: BattleState,
        trigger: Trigger,
        player: Player,
        opponent_level: Optional[int] = None,
    ) -> list[Reward]:
        """
        Pick the rewards to grant for one player and trigger.

        Returns:
            Selected rewards in evaluation order (possibly empty)
        """
        candidates = self.eligible(state, trigger, player, opponent_level)
        if not candidates:
            return []

        selected: list[Reward] = []
        excluded: set[str] = set()

        # sorted() is stable, so config order is kept within a tier
        tiers = groupby(sorted(candidates, key=lambda r: r.order), key=lambda r: r.order)
        for order, tier in tiers:
            for reward in tier:
                if reward.id in excluded:
                    logger.debug("Skip %s: excluded by an earlier reward", reward.id)
                    continue

                roll = self._rng.random() * 100.0
                if roll >= reward.chance:
                    logger.debug("Roll %.2f failed for %s (chance %s)", roll, reward.id, reward.chance)
                    continue

                logger.debug("Roll %.2f selected %s (order %d)", roll, reward.id, order)
                selected.append(reward)
                excluded.update(reward.excludes)

        return selected
