"""
Battle data - participants, creatures and per-battle state.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from battle_rewards.battle.properties import snapshot
from battle_rewards.host import Player


class ActorKind(Enum):
    """Kind of battle participant."""
    PLAYER = auto()
    WILD = auto()
    NPC = auto()
    OTHER = auto()


class OwnerKind(Enum):
    """Who owns a creature instance."""
    NONE = auto()
    PLAYER = auto()
    NPC = auto()


class BattleType(Enum):
    """
    Battle classification.

    Values are ordered: a battle may only move to a higher rank.
    """
    WILD = 1
    NPC = 2
    PVP = 3

    @property
    def label(self) -> str:
        """Lowercase name used in configuration and messages."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> BattleType:
        return cls[label.strip().upper()]


@dataclass
class Creature:
    """
    A creature instance taking part in a battle.

    Wraps the attributes conditions can be matched against.
    """
    uuid: str
    species: str
    level: int = 1
    types: list[str] = field(default_factory=list)
    current_health: int = 1
    owner: OwnerKind = OwnerKind.NONE

    # Matchable attributes
    shiny: bool = False
    gender: str = ""
    nature: str = ""
    ability: str = ""
    form: str = ""
    friendship: int = 0
    held_item: str = ""
    pokeball: str = ""
    ivs: dict[str, int] = field(default_factory=dict)
    evs: dict[str, int] = field(default_factory=dict)

    @property
    def is_alive(self) -> bool:
        """Check if creature can still fight."""
        return self.current_health > 0


@dataclass
class BattleParticipant:
    """
    One side's actor in a battle.

    For player participants the participant id is the player's uuid.
    """
    participant_id: str
    kind: ActorKind
    creatures: list[Creature] = field(default_factory=list)
    player: Optional[Player] = None

    @property
    def is_player(self) -> bool:
        """Check if this actor is a player with a resolvable identity."""
        return self.kind is ActorKind.PLAYER and self.player is not None

    @property
    def active_creature(self) -> Optional[Creature]:
        """The creature currently sent out (first in the list)."""
        return self.creatures[0] if self.creatures else None

    @property
    def has_living_creature(self) -> bool:
        """Check if any creature can still fight."""
        return any(c.is_alive for c in self.creatures)

    def matches(self, identity: str) -> bool:
        """Check whether an id refers to this participant or its player."""
        if self.participant_id == identity:
            return True
        return self.player is not None and self.player.uuid == identity


@dataclass
class BattleState:
    """
    Ephemeral state of one tracked battle.

    All mutation happens while holding `lock`. The registry that owns
    the state never holds its own lock while this one is held.
    """
    battle_id: str
    participants: list[BattleParticipant] = field(default_factory=list)
    battle_type: BattleType = BattleType.WILD

    player_creature: Optional[Creature] = None
    opponent_creature: Optional[Creature] = None
    opponent_properties: dict[str, str] = field(default_factory=dict)

    resolved: bool = False
    captured: bool = False
    last_activity: float = field(default_factory=time.time)

    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def player_participants(self) -> list[BattleParticipant]:
        """Participants that are players with a known identity."""
        return [p for p in self.participants if p.is_player]

    @property
    def opponent_level(self) -> int:
        """Opponent level, 1 when no opponent is known."""
        if self.opponent_creature is None:
            return 1
        return self.opponent_creature.level

    @property
    def creature_ids(self) -> set[str]:
        """Every creature instance id taking part in this battle."""
        return {c.uuid for p in self.participants for c in p.creatures}

    def set_opponent(self, creature: Optional[Creature]) -> None:
        """Replace the opponent creature and recompute its snapshot."""
        self.opponent_creature = creature
        self.opponent_properties = snapshot(creature) if creature is not None else {}

    def set_player_creature(self, creature: Optional[Creature]) -> None:
        self.player_creature = creature

    def upgrade(self, battle_type: BattleType) -> bool:
        """
        Move the classification up to `battle_type`.

        Returns:
            True if the classification changed
        """
        if battle_type.value <= self.battle_type.value:
            return False
        self.battle_type = battle_type
        return True

    def touch(self, now: Optional[float] = None) -> None:
        """Record activity."""
        self.last_activity = time.time() if now is None else now

    def is_stale(self, now: float, timeout: float) -> bool:
        return now - self.last_activity > timeout

    def participant(self, identity: str) -> Optional[BattleParticipant]:
        """Find a participant by participant id or player uuid."""
        for p in self.participants:
            if p.matches(identity):
                return p
        return None
