import os
import random
import sys
from itertools import count

import pytest

# Ensure packages can be imported without installing
sys.path.append(os.getcwd())

from battle_rewards.battle.models import ActorKind, BattleParticipant, Creature, OwnerKind
from battle_rewards.host import Player, RewardHost
from battle_rewards.rewards.models import Reward, RewardConfig


class FakeClock:
    """Controllable time source (epoch seconds)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHost(RewardHost):
    """Host double that records everything the engine asks of it."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []
        self.commands: list[tuple[str, str]] = []
        self.given: list[tuple[str, object]] = []
        self.dropped: list[tuple[str, object]] = []
        self.inventory_full = False
        self.failing_commands: set[str] = set()

    def send_message(self, player, text):
        self.messages.append((player.name, text))

    def execute_command(self, command, player):
        if command in self.failing_commands:
            raise RuntimeError(f"command rejected: {command}")
        self.commands.append((player.name, command))

    def give_item(self, player, stack):
        if self.inventory_full:
            return False
        self.given.append((player.name, stack))
        return True

    def drop_item(self, player, stack):
        self.dropped.append((player.name, stack))

    def commands_for(self, name):
        return [c for n, c in self.commands if n == name]

    def messages_for(self, name):
        return [m for n, m in self.messages if n == name]


class AlwaysRoll(random.Random):
    """RNG whose chance rolls always return the same value."""

    def __init__(self, value: float = 0.0):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class Factory:
    """Builders for battle participants and reward rules."""

    def __init__(self):
        self._ids = count(1)

    def creature(self, species="pikachu", level=10, types=("electric",), owner=OwnerKind.NONE, hp=20, **kwargs):
        return Creature(
            uuid=f"creature-{next(self._ids)}",
            species=species,
            level=level,
            types=list(types),
            owner=owner,
            current_health=hp,
            **kwargs,
        )

    def player(self, name="Ash", dimension="minecraft:overworld", position=(10, 64, -20)):
        return Player(uuid=f"player-{name.lower()}", name=name, dimension=dimension, position=position)

    def player_side(self, player, *creatures):
        if not creatures:
            creatures = (self.creature("charmander", types=("fire",), owner=OwnerKind.PLAYER),)
        return BattleParticipant(
            participant_id=player.uuid,
            kind=ActorKind.PLAYER,
            creatures=list(creatures),
            player=player,
        )

    def wild_side(self, *creatures):
        if not creatures:
            creatures = (self.creature(),)
        return BattleParticipant(
            participant_id=f"wild-{next(self._ids)}",
            kind=ActorKind.WILD,
            creatures=list(creatures),
        )

    def npc_side(self, *creatures, kind=ActorKind.NPC):
        if not creatures:
            creatures = (self.creature("onix", level=30, types=("rock", "ground"), owner=OwnerKind.NPC),)
        return BattleParticipant(
            participant_id=f"npc-{next(self._ids)}",
            kind=kind,
            creatures=list(creatures),
        )

    def reward(self, reward_id, **kwargs):
        kwargs.setdefault("type", "command")
        kwargs.setdefault("command", f"give %player% {reward_id}")
        return Reward(id=reward_id, **kwargs)

    def config(self, won=(), lost=(), forfeit=(), captured=(), **kwargs):
        return RewardConfig(
            battle_won_rewards={r.id: r for r in won},
            battle_lost_rewards={r.id: r for r in lost},
            battle_forfeit_rewards={r.id: r for r in forfeit},
            capture_rewards={r.id: r for r in captured},
            **kwargs,
        )


@pytest.fixture
def make():
    """Fresh builders for each test."""
    return Factory()


@pytest.fixture
def clock():
    """Fake clock starting at a fixed epoch."""
    return FakeClock()


@pytest.fixture
def host():
    """Recording host double."""
    return RecordingHost()


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from reward_engine.core.events import EventBus
    return EventBus()


@pytest.fixture
def always_hit():
    """RNG where every chance roll succeeds (roll of 0)."""
    return AlwaysRoll(0.0)
