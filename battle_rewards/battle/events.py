"""
Host battle lifecycle events.

The host publishes these on the EventBus; BattleTracker.subscribe
wires the handlers.
"""

from enum import Enum, auto


class BattleEvent(Enum):
    """
    Battle lifecycle notifications.

    Event data keys:
        BATTLE_STARTED:     battle_id, participants (list[BattleParticipant])
        CREATURE_SENT_OUT:  creature (Creature)
        CREATURE_CAPTURED:  creature (Creature), player (Player)
        BATTLE_VICTORY:     battle_id, winners (list of participant ids)
        BATTLE_FLED:        battle_id, player_id
        CREATURE_FAINTED:   battle_id, creature (Creature)
    """
    BATTLE_STARTED = auto()
    CREATURE_SENT_OUT = auto()
    CREATURE_CAPTURED = auto()
    BATTLE_VICTORY = auto()
    BATTLE_FLED = auto()
    CREATURE_FAINTED = auto()


class RewardEvent(Enum):
    """
    Reward outcome notifications published by the dispatcher.

    Event data keys: player, reward, trigger, battle_id
    """
    REWARD_GRANTED = auto()
    REWARD_FAILED = auto()
    REWARD_ON_COOLDOWN = auto()
