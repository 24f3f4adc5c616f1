"""
Battle classification.
"""

from __future__ import annotations

from typing import Iterable

from battle_rewards.battle.models import (
    ActorKind,
    BattleParticipant,
    BattleType,
    Creature,
    OwnerKind,
)


def is_npc_owned(creature: Creature | None) -> bool:
    """Check if a creature belongs to an NPC trainer."""
    return creature is not None and creature.owner is OwnerKind.NPC


def classify(participants: Iterable[BattleParticipant]) -> BattleType:
    """
    Decide the battle type from its participants.

    Checked in order, first match wins:
    1. More than one player -> PVP
    2. Any wild actor -> WILD
    3. Any NPC actor, or a non-player actor whose active creature is
       NPC-owned -> NPC
    4. Otherwise WILD
    """
    participants = list(participants)

    player_count = sum(1 for p in participants if p.kind is ActorKind.PLAYER)
    if player_count > 1:
        return BattleType.PVP

    if any(p.kind is ActorKind.WILD for p in participants):
        return BattleType.WILD

    has_npc = any(p.kind is ActorKind.NPC for p in participants)
    has_npc_owner = any(
        p.kind is not ActorKind.PLAYER and is_npc_owned(p.active_creature)
        for p in participants
    )
    if has_npc or has_npc_owner:
        return BattleType.NPC

    return BattleType.WILD
