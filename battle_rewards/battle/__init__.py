"""
Battle module - tracking of in-progress battles.

Provides:
- Battle participants and creatures
- Property snapshots for condition matching
- Battle classification (wild, npc, pvp)
- Lifecycle tracking and terminal triggers
"""

from battle_rewards.battle.models import (
    ActorKind,
    OwnerKind,
    BattleType,
    Creature,
    BattleParticipant,
    BattleState,
)
from battle_rewards.battle.properties import PROPERTY_NAMES, snapshot
from battle_rewards.battle.classify import classify
from battle_rewards.battle.events import BattleEvent, RewardEvent
from battle_rewards.battle.tracker import BattleTracker, BATTLE_TIMEOUT_SECONDS

__all__ = [
    # Models
    "ActorKind",
    "OwnerKind",
    "BattleType",
    "Creature",
    "BattleParticipant",
    "BattleState",
    # Properties
    "PROPERTY_NAMES",
    "snapshot",
    # Classification
    "classify",
    # Events
    "BattleEvent",
    "RewardEvent",
    # Tracker
    "BattleTracker",
    "BATTLE_TIMEOUT_SECONDS",
]
