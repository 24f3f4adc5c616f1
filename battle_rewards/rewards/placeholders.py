"""
Placeholder substitution for reward messages and commands.

Tokens:
    %player%           player name
    %pokemon%          opponent species
    %level%            opponent level
    %battleType%       battle classification, lowercase
    %chance%           reward chance
    %coords%           player block coordinates x,y,z
    %trigger%          trigger name (BattleWon, Captured, ...)
    %dimension%        player's current dimension
    %rewardItemCount%  number of items granted (0 for commands)
    %time%             seconds of cooldown left (cooldown messages only)
"""

from __future__ import annotations

from typing import Mapping, Optional

from battle_rewards.battle.models import BattleState
from battle_rewards.host import Player
from battle_rewards.rewards.models import Reward, Trigger


def build_placeholders(
    player: Player,
    state: BattleState,
    reward: Reward,
    trigger: Trigger,
    item_count: int = 0,
    remaining_seconds: Optional[int] = None,
) -> dict[str, str]:
    """Collect token values for one reward grant."""
    opponent = state.opponent_creature
    values = {
        "%player%": player.name,
        "%pokemon%": opponent.species if opponent else "",
        "%level%": str(opponent.level) if opponent else "",
        "%battleType%": state.battle_type.label,
        "%chance%": str(reward.chance),
        "%coords%": player.coords,
        "%trigger%": str(trigger),
        "%dimension%": player.dimension,
        "%rewardItemCount%": str(item_count),
    }
    if remaining_seconds is not None:
        values["%time%"] = str(remaining_seconds)
    return values


def apply_placeholders(text: str, values: Mapping[str, str]) -> str:
    """Replace every token occurrence in text."""
    for token, value in values.items():
        text = text.replace(token, value)
    return text
