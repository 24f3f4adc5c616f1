"""
Default configuration written when no configuration file exists.

The commands assume an economy plugin that understands
`eco deposit <amount> <currency> <player>`.
"""

from __future__ import annotations

from battle_rewards.rewards.models import Reward, RewardConfig, WeightedItem


def _deposit(reward_id: str, amount: int, currency: str, message: str, **kwargs) -> Reward:
    return Reward(
        id=reward_id,
        type="command",
        message=message,
        command=f"eco deposit {amount} {currency} %player%",
        **kwargs,
    )


def _ball(item_id: str, count: int) -> WeightedItem:
    return WeightedItem(value=f'{{"id": "{item_id}", "count": {count}}}', weight=1)


def default_config() -> RewardConfig:
    """Build the shipped example configuration."""
    won = [
        _deposit(
            "wild_dollars_rare", 100, "dollars",
            "You received <green>$100</green> for winning the battle!",
            chance=10.0, battle_types=["wild"], order=1,
            excludes=["wild_dollars_uncommon", "wild_dollars_common"],
        ),
        _deposit(
            "wild_dollars_uncommon", 50, "dollars",
            "You received <green>$50</green> for winning the battle!",
            chance=25.0, battle_types=["wild"], order=2,
            excludes=["wild_dollars_common"],
        ),
        _deposit(
            "wild_dollars_common", 25, "dollars",
            "You received <green>$25</green> for winning the battle!",
            chance=50.0, battle_types=["wild"], order=3,
        ),
        _deposit(
            "wild_high_level_bonus", 75, "dollars",
            "You received a <gold>High Level Bonus</gold> of <green>$75</green>!",
            battle_types=["wild"], min_level=50, max_level=100, order=3,
        ),
        _deposit(
            "npc_dollars_reward", 100, "dollars",
            "You received <green>$100</green> for defeating the trainer!",
            battle_types=["npc"], order=1,
        ),
        _deposit(
            "pvp_dollars_reward", 150, "dollars",
            "You received <green>$150</green> for winning the PVP battle!",
            battle_types=["pvp"], order=1,
        ),
        Reward(
            id="tier1_reward_pokeball",
            type="item",
            message="You received %rewardItemCount% Poke Balls for winning!",
            item_stack=[_ball("cobblemon:poke_ball", 5)],
            chance=80.0, cooldown=300, battle_types=["wild"],
            min_level=1, max_level=30, order=4,
        ),
        Reward(
            id="tier2_reward_greatball",
            type="item",
            message="You received %rewardItemCount% Great Balls for winning!",
            item_stack=[_ball("cobblemon:great_ball", 3)],
            chance=60.0, cooldown=600, battle_types=["wild"],
            min_level=31, max_level=60, order=4,
        ),
        Reward(
            id="tier3_reward_ultraball",
            type="item",
            message="You received an Ultra Ball for winning!",
            item_stack=[_ball("cobblemon:ultra_ball", 1)],
            chance=40.0, cooldown=900, battle_types=["wild"],
            min_level=61, max_level=100, order=4,
        ),
    ]

    lost = [
        _deposit(
            "lost_consolation", 5, "dollars",
            "Better luck next time, %player%. Here is <green>$5</green>.",
            battle_types=["wild", "npc", "pvp"],
        ),
    ]

    forfeit = [
        _deposit(
            "forfeit_consolation_dollars", 10, "dollars",
            "You received <green>$10</green> as a consolation for forfeiting!",
            battle_types=["wild", "npc", "pvp"], order=1,
        ),
        Reward(
            id="forfeit_potion",
            type="item",
            message="You received a Consolation Potion for forfeiting!",
            item_stack=[WeightedItem(value='{"id": "minecraft:potion", "count": 1}', weight=1)],
            chance=50.0, cooldown=300,
            cooldown_message="You need to wait %time% seconds before receiving another Consolation Potion.",
            battle_types=["wild", "npc", "pvp"], order=2,
        ),
    ]

    captured = [
        _deposit(
            "capture_rare_type_bonus", 150, "dollars",
            "You received a <gold>Rare Type Bonus</gold> of <green>$150</green>!",
            battle_types=["wild"], conditions=["type:dragon", "type:ghost", "type:fairy"],
            order=1, excludes=["capture_bonus_dollars"],
        ),
        _deposit(
            "capture_bonus_dollars", 50, "dollars",
            "You received <green>$50</green> for capturing a %pokemon%!",
            battle_types=["wild"], order=2,
        ),
        Reward(
            id="pikachu_thunderstone",
            type="item",
            message="You captured a Pikachu and received a Thunder Stone!",
            item_stack=[WeightedItem(value='{"id": "cobblemon:thunder_stone", "count": 1}', weight=1)],
            cooldown=86400,
            cooldown_message="You can only receive one Thunder Stone per day. Please wait %time% seconds.",
            battle_types=["wild"], conditions=["pikachu"], order=2,
        ),
    ]

    return RewardConfig(
        debug_enabled=False,
        inventory_full_behavior="drop",
        battle_won_rewards={r.id: r for r in won},
        battle_lost_rewards={r.id: r for r in lost},
        battle_forfeit_rewards={r.id: r for r in forfeit},
        capture_rewards={r.id: r for r in captured},
    )
