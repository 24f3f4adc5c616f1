"""
Battle tracker - registry of active battles and lifecycle handling.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from battle_rewards.battle.classify import classify, is_npc_owned
from battle_rewards.battle.events import BattleEvent
from battle_rewards.battle.models import (
    BattleParticipant,
    BattleState,
    BattleType,
    Creature,
    OwnerKind,
)
from battle_rewards.host import Player
from battle_rewards.rewards.models import Reward, Trigger

if TYPE_CHECKING:
    from battle_rewards.rewards.service import RewardService
    from reward_engine.core.events import Event, EventBus

logger = logging.getLogger(__name__)

# Battles idle for longer than this are evicted
BATTLE_TIMEOUT_SECONDS = 30 * 60


class BattleTracker:
    """
    Tracks in-progress battles and resolves rewards when they end.

    Manages:
    - Battle registry (battle id -> BattleState)
    - Creature index (creature uuid -> battle id)
    - Classification upgrades when NPC creatures appear
    - Terminal triggers: capture, victory, flee
    - Eviction of finished and idle battles

    The registry lock only guards the two maps. Everything done to a
    single battle, including reward resolution, happens under that
    battle's own lock.
    """

    def __init__(
        self,
        rewards: RewardService,
        clock: Callable[[], float] = time.time,
        timeout: float = BATTLE_TIMEOUT_SECONDS,
    ):
        self.rewards = rewards
        self._clock = clock
        self._timeout = timeout

        self._battles: dict[str, BattleState] = {}
        self._creature_index: dict[str, str] = {}
        self._lock = threading.Lock()

    # Registry

    def get(self, battle_id: str) -> Optional[BattleState]:
        """Get a tracked battle."""
        with self._lock:
            return self._battles.get(battle_id)

    def find_battle_by_creature(self, creature_uuid: str) -> Optional[str]:
        """Battle id a creature instance is fighting in."""
        with self._lock:
            return self._creature_index.get(creature_uuid)

    def active_battles(self) -> list[str]:
        with self._lock:
            return list(self._battles)

    def __len__(self) -> int:
        with self._lock:
            return len(self._battles)

    def __contains__(self, battle_id: str) -> bool:
        with self._lock:
            return battle_id in self._battles

    def _register(self, state: BattleState) -> None:
        with self._lock:
            previous = self._battles.get(state.battle_id)
            if previous is not None:
                self._unindex(previous)
            self._battles[state.battle_id] = state
            for creature_id in state.creature_ids:
                self._creature_index[creature_id] = state.battle_id

    def _remove(self, state: BattleState) -> bool:
        """Remove a battle if it is still the registered state for its id."""
        with self._lock:
            if self._battles.get(state.battle_id) is not state:
                return False
            del self._battles[state.battle_id]
            self._unindex(state)
            return True

    def _unindex(self, state: BattleState) -> None:
        # Caller holds self._lock
        for creature_id in state.creature_ids:
            if self._creature_index.get(creature_id) == state.battle_id:
                del self._creature_index[creature_id]

    def _state_for_creature(self, creature_uuid: str) -> Optional[BattleState]:
        with self._lock:
            battle_id = self._creature_index.get(creature_uuid)
            if battle_id is None:
                return None
            return self._battles.get(battle_id)

    # Lifecycle

    def on_battle_start(self, battle_id: str, participants: Iterable[BattleParticipant]) -> BattleState:
        """
        Start tracking a battle.

        Starting an id that is already tracked replaces the old state.
        """
        state = BattleState(battle_id=battle_id, participants=list(participants), last_activity=self._clock())

        with state.lock:
            state.battle_type = classify(state.participants)
            for participant in state.participants:
                creature = participant.active_creature
                if creature is None:
                    continue
                if participant.is_player:
                    state.set_player_creature(creature)
                else:
                    state.set_opponent(creature)

        self._register(state)
        logger.debug("Battle %s started: %s battle", battle_id, state.battle_type.name)
        return state

    def on_creature_changed(self, creature: Creature) -> bool:
        """
        Record a creature being sent out.

        Returns:
            True if the creature belongs to a tracked battle
        """
        state = self._state_for_creature(creature.uuid)
        if state is None:
            return False

        with state.lock:
            if state.resolved:
                return False

            self._replace_creature(state, creature)
            if creature.owner is OwnerKind.PLAYER:
                state.set_player_creature(creature)
            else:
                state.set_opponent(creature)
                if is_npc_owned(creature) and state.upgrade(BattleType.NPC):
                    logger.debug("Battle %s upgraded to NPC battle", state.battle_id)
            state.touch(self._clock())
        return True

    def on_capture(self, creature: Creature, player: Player) -> list[Reward]:
        """
        Resolve a capture.

        A capture outside any tracked battle is resolved against a
        one-off WILD battle state.

        Returns:
            Rewards granted to the capturing player
        """
        state = self._state_for_creature(creature.uuid)
        if state is None:
            return self._capture_ambient(creature, player)

        with state.lock:
            if state.resolved or state.captured:
                return []

            logger.debug("Creature %s captured in battle %s", creature.species, state.battle_id)
            state.captured = True
            if state.opponent_creature is None or state.opponent_creature.uuid != creature.uuid:
                state.set_opponent(creature)
            state.touch(self._clock())
            try:
                granted = self._resolve(player, state, Trigger.CAPTURED)
            finally:
                state.resolved = True

        self._remove(state)
        return granted

    def _capture_ambient(self, creature: Creature, player: Player) -> list[Reward]:
        logger.debug("Creature %s captured outside a tracked battle", creature.species)
        state = BattleState(
            battle_id=f"capture:{creature.uuid}",
            battle_type=BattleType.WILD,
            captured=True,
            last_activity=self._clock(),
        )
        state.set_opponent(creature)
        with state.lock:
            try:
                return self._resolve(player, state, Trigger.CAPTURED)
            finally:
                state.resolved = True

    def on_victory(self, battle_id: str, winner_ids: Iterable[str]) -> dict[str, Trigger]:
        """
        Resolve a finished battle.

        Winners get BattleWon. Other players get BattleForfeit if they
        still had a creature able to fight, BattleLost otherwise.

        Returns:
            Player uuid -> trigger resolved for that player
        """
        state = self.get(battle_id)
        if state is None:
            return {}

        winner_ids = set(winner_ids)
        outcomes: dict[str, Trigger] = {}

        with state.lock:
            if state.captured or state.resolved:
                return {}
            state.resolved = True

            winners: list[BattleParticipant] = []
            losers: list[BattleParticipant] = []
            for participant in state.player_participants:
                if any(participant.matches(w) for w in winner_ids):
                    winners.append(participant)
                else:
                    losers.append(participant)

            for participant in winners:
                if losers:
                    state.set_opponent(losers[0].active_creature)
                self._resolve(participant.player, state, Trigger.BATTLE_WON)
                outcomes[participant.player.uuid] = Trigger.BATTLE_WON

            for participant in losers:
                if winners:
                    state.set_opponent(winners[0].active_creature)
                trigger = Trigger.BATTLE_FORFEIT if participant.has_living_creature else Trigger.BATTLE_LOST
                self._resolve(participant.player, state, trigger)
                outcomes[participant.player.uuid] = trigger

        logger.debug("Finalized %s battle %s", state.battle_type.name, battle_id)
        self._remove(state)
        return outcomes

    def on_fled(self, battle_id: str, fleeing_player_id: str) -> dict[str, Trigger]:
        """
        Resolve a battle a player ran from.

        The fleeing player forfeits. In PVP everyone else wins.

        Returns:
            Player uuid -> trigger resolved for that player
        """
        state = self.get(battle_id)
        if state is None:
            return {}

        outcomes: dict[str, Trigger] = {}

        with state.lock:
            if state.captured or state.resolved:
                return {}
            state.resolved = True

            fleeing = state.participant(fleeing_player_id)
            for participant in state.player_participants:
                if participant is fleeing:
                    self._resolve(participant.player, state, Trigger.BATTLE_FORFEIT)
                    outcomes[participant.player.uuid] = Trigger.BATTLE_FORFEIT
                elif state.battle_type is BattleType.PVP:
                    if fleeing is not None:
                        state.set_opponent(fleeing.active_creature)
                    self._resolve(participant.player, state, Trigger.BATTLE_WON)
                    outcomes[participant.player.uuid] = Trigger.BATTLE_WON

        self._remove(state)
        return outcomes

    def on_fainted(self, battle_id: str, creature: Creature) -> None:
        """Note a fainted creature (activity only)."""
        state = self.get(battle_id)
        if state is None:
            return
        with state.lock:
            state.touch(self._clock())
        logger.debug("Creature %s fainted in battle %s", creature.species, battle_id)

    def sweep(self) -> int:
        """
        Evict resolved and idle battles.

        Takes a snapshot of the registry first and removes afterwards;
        a battle resolving during the sweep is caught next time.

        Returns:
            Number of battles removed
        """
        now = self._clock()
        with self._lock:
            battles = list(self._battles.values())

        removed = 0
        for state in battles:
            if state.resolved or state.is_stale(now, self._timeout):
                if self._remove(state):
                    removed += 1

        if removed:
            logger.debug("Swept %d battles, %d still active", removed, len(self))
        return removed

    def _resolve(self, player: Player, state: BattleState, trigger: Trigger) -> list[Reward]:
        logger.debug("Granting '%s' to %s", trigger, player.name)
        return self.rewards.resolve(player, state, trigger)

    @staticmethod
    def _replace_creature(state: BattleState, creature: Creature) -> None:
        """Swap in the latest copy of a creature by uuid."""
        for participant in state.participants:
            for i, existing in enumerate(participant.creatures):
                if existing.uuid == creature.uuid:
                    participant.creatures[i] = creature
                    return

    # Event bus wiring

    def subscribe(self, event_bus: EventBus) -> None:
        """Listen for host battle events."""
        event_bus.subscribe(BattleEvent.BATTLE_STARTED, self._handle_started)
        event_bus.subscribe(BattleEvent.CREATURE_SENT_OUT, self._handle_sent_out)
        event_bus.subscribe(BattleEvent.CREATURE_CAPTURED, self._handle_captured)
        event_bus.subscribe(BattleEvent.BATTLE_VICTORY, self._handle_victory)
        event_bus.subscribe(BattleEvent.BATTLE_FLED, self._handle_fled)
        event_bus.subscribe(BattleEvent.CREATURE_FAINTED, self._handle_fainted)

    def unsubscribe(self, event_bus: EventBus) -> None:
        event_bus.unsubscribe(BattleEvent.BATTLE_STARTED, self._handle_started)
        event_bus.unsubscribe(BattleEvent.CREATURE_SENT_OUT, self._handle_sent_out)
        event_bus.unsubscribe(BattleEvent.CREATURE_CAPTURED, self._handle_captured)
        event_bus.unsubscribe(BattleEvent.BATTLE_VICTORY, self._handle_victory)
        event_bus.unsubscribe(BattleEvent.BATTLE_FLED, self._handle_fled)
        event_bus.unsubscribe(BattleEvent.CREATURE_FAINTED, self._handle_fainted)

    def _handle_started(self, event: Event) -> None:
        self.on_battle_start(event["battle_id"], event["participants"])

    def _handle_sent_out(self, event: Event) -> None:
        self.on_creature_changed(event["creature"])

    def _handle_captured(self, event: Event) -> None:
        self.on_capture(event["creature"], event["player"])

    def _handle_victory(self, event: Event) -> None:
        self.on_victory(event["battle_id"], event.get("winners", ()))

    def _handle_fled(self, event: Event) -> None:
        self.on_fled(event["battle_id"], event["player_id"])

    def _handle_fainted(self, event: Event) -> None:
        self.on_fainted(event["battle_id"], event["creature"])
