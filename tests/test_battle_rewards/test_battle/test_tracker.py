import threading

import pytest
from battle_rewards.battle.events import BattleEvent
from battle_rewards.battle.models import BattleType, OwnerKind
from battle_rewards.battle.tracker import BATTLE_TIMEOUT_SECONDS, BattleTracker
from battle_rewards.rewards.cooldowns import CooldownTracker
from battle_rewards.rewards.dispatcher import RewardDispatcher
from battle_rewards.rewards.models import Trigger
from battle_rewards.rewards.selector import RewardSelector
from battle_rewards.rewards.service import RewardService

def build_tracker(config, host, clock, rng):
    cooldowns = CooldownTracker(clock=clock)
    selector = RewardSelector(lambda: config, rng=rng)
    dispatcher = RewardDispatcher(host, cooldowns, lambda: config, rng=rng)
    return BattleTracker(RewardService(selector, dispatcher), clock=clock)

@pytest.fixture
def config(make):
    return make.config(
        won=[make.reward("won", message="won a %battleType% battle")],
        lost=[make.reward("lost")],
        forfeit=[make.reward("forfeit")],
        captured=[make.reward("captured", message="caught %pokemon% in a %battleType% battle")],
    )

@pytest.fixture
def tracker(config, host, clock, always_hit):
    return build_tracker(config, host, clock, always_hit)

@pytest.fixture
def ash(make):
    return make.player("Ash")

@pytest.fixture
def gary(make):
    return make.player("Gary")

def test_battle_start_tracks_state(tracker, make, ash):
    wild = make.creature("pidgey", level=4, types=("normal", "flying"))
    mine = make.creature("bulbasaur", owner=OwnerKind.PLAYER)
    state = tracker.on_battle_start("b1", [make.player_side(ash, mine), make.wild_side(wild)])

    assert tracker.get("b1") is state
    assert "b1" in tracker
    assert len(tracker) == 1
    assert state.battle_type is BattleType.WILD
    assert state.player_creature is mine
    assert state.opponent_creature is wild
    assert state.opponent_properties["species"] == "pidgey"
    assert tracker.find_battle_by_creature(wild.uuid) == "b1"
    assert tracker.find_battle_by_creature(mine.uuid) == "b1"

def test_restarting_battle_replaces_index(tracker, make, ash):
    old = make.creature("rattata")
    tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side(old)])
    new = make.creature("spearow")
    tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side(new)])

    assert tracker.find_battle_by_creature(old.uuid) is None
    assert tracker.find_battle_by_creature(new.uuid) == "b1"

def test_npc_creature_sent_out_upgrades_classification(tracker, make, ash, clock):
    first = make.creature("rattata")
    second = make.creature("onix", level=30, owner=OwnerKind.NPC)
    state = tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side(first, second)])
    assert state.battle_type is BattleType.WILD

    clock.advance(5)
    assert tracker.on_creature_changed(second)

    assert state.battle_type is BattleType.NPC
    assert state.opponent_creature is second
    assert state.opponent_level == 30
    assert state.last_activity == clock.now

def test_npc_creature_does_not_downgrade_pvp(tracker, make, ash, gary):
    odd = make.creature("onix", owner=OwnerKind.NPC)
    state = tracker.on_battle_start("b1", [make.player_side(ash), make.player_side(gary, odd)])

    tracker.on_creature_changed(odd)

    assert state.battle_type is BattleType.PVP

def test_player_creature_swap(tracker, make, ash):
    lead = make.creature("charmander", owner=OwnerKind.PLAYER)
    backup = make.creature("squirtle", owner=OwnerKind.PLAYER)
    state = tracker.on_battle_start("b1", [make.player_side(ash, lead, backup), make.wild_side()])

    tracker.on_creature_changed(backup)

    assert state.player_creature is backup

def test_unknown_creature_is_ignored(tracker, make):
    assert not tracker.on_creature_changed(make.creature("mew"))

def test_victory_grants_won_and_removes(tracker, make, ash, host):
    wild = make.creature("pidgey")
    tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side(wild)])

    outcomes = tracker.on_victory("b1", [ash.uuid])

    assert outcomes == {ash.uuid: Trigger.BATTLE_WON}
    assert host.commands_for("Ash") == ["give Ash won"]
    assert host.messages_for("Ash") == ["won a wild battle"]
    assert "b1" not in tracker
    assert tracker.find_battle_by_creature(wild.uuid) is None

def test_loser_with_living_creature_forfeits(tracker, make, ash, host):
    tracker.on_battle_start("b1", [make.player_side(ash), make.npc_side()])

    outcomes = tracker.on_victory("b1", ["npc-trainer"])

    assert outcomes == {ash.uuid: Trigger.BATTLE_FORFEIT}
    assert host.commands_for("Ash") == ["give Ash forfeit"]

def test_loser_without_living_creature_loses(tracker, make, ash, host):
    fainted = make.creature("magikarp", owner=OwnerKind.PLAYER, hp=0)
    tracker.on_battle_start("b1", [make.player_side(ash, fainted), make.npc_side()])

    outcomes = tracker.on_victory("b1", [])

    assert outcomes == {ash.uuid: Trigger.BATTLE_LOST}
    assert host.commands_for("Ash") == ["give Ash lost"]

def test_pvp_opponent_swap_matches_conditions(make, host, clock, always_hit, ash, gary):
    config = make.config(
        won=[make.reward("beat_charmander", conditions=["charmander"])],
        lost=[make.reward("lost_to_squirtle", conditions=["squirtle"])],
    )
    tracker = build_tracker(config, host, clock, always_hit)
    ash_mon = make.creature("charmander", owner=OwnerKind.PLAYER, hp=0)
    gary_mon = make.creature("squirtle", owner=OwnerKind.PLAYER)
    tracker.on_battle_start("b1", [make.player_side(ash, ash_mon), make.player_side(gary, gary_mon)])

    tracker.on_victory("b1", [gary.uuid])

    assert host.commands_for("Gary") == ["give Gary beat_charmander"]
    assert host.commands_for("Ash") == ["give Ash lost_to_squirtle"]

def test_pvp_flee(tracker, make, ash, gary, host):
    tracker.on_battle_start("b1", [make.player_side(ash), make.player_side(gary)])

    outcomes = tracker.on_fled("b1", ash.uuid)

    assert outcomes == {ash.uuid: Trigger.BATTLE_FORFEIT, gary.uuid: Trigger.BATTLE_WON}
    assert host.commands_for("Ash") == ["give Ash forfeit"]
    assert host.commands_for("Gary") == ["give Gary won"]
    assert "b1" not in tracker

def test_wild_flee_only_forfeits(tracker, make, ash, host):
    tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side()])

    outcomes = tracker.on_fled("b1", ash.uuid)

    assert outcomes == {ash.uuid: Trigger.BATTLE_FORFEIT}
    assert host.commands == [("Ash", "give Ash forfeit")]

def test_capture_in_battle(tracker, make, ash, host):
    lead = make.creature("rattata")
    caught = make.creature("abra", types=("psychic",))
    tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side(lead, caught)])

    granted = tracker.on_capture(caught, ash)

    assert [r.id for r in granted] == ["captured"]
    assert host.messages_for("Ash") == ["caught abra in a wild battle"]
    assert "b1" not in tracker
    assert tracker.find_battle_by_creature(lead.uuid) is None

def test_captured_battle_ignores_victory_and_flee(tracker, make, ash, host):
    state = tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side()])
    state.captured = True

    assert tracker.on_victory("b1", [ash.uuid]) == {}
    assert tracker.on_fled("b1", ash.uuid) == {}
    assert host.commands == []

def test_victory_after_capture_grants_nothing(tracker, make, ash, host):
    wild = make.creature("abra")
    tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side(wild)])
    tracker.on_capture(wild, ash)

    assert tracker.on_victory("b1", [ash.uuid]) == {}
    assert tracker.on_fled("b1", ash.uuid) == {}
    assert host.commands == [("Ash", "give Ash captured")]

def test_reused_reward_id_across_triggers_does_not_share_cooldown(make, host, clock, always_hit, ash):
    config = make.config(
        captured=[make.reward("bonus", command="capture-bonus %player%", cooldown=600)],
        won=[make.reward("bonus", command="won-bonus %player%", cooldown=600)],
    )
    tracker = build_tracker(config, host, clock, always_hit)

    tracker.on_capture(make.creature("abra"), ash)
    clock.advance(5)
    tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side()])
    tracker.on_victory("b1", [ash.uuid])

    assert host.commands_for("Ash") == ["capture-bonus Ash", "won-bonus Ash"]
    assert host.messages == []

def test_ambient_capture(tracker, make, ash, host):
    roaming = make.creature("ditto", level=20)

    granted = tracker.on_capture(roaming, ash)

    assert [r.id for r in granted] == ["captured"]
    assert host.messages_for("Ash") == ["caught ditto in a wild battle"]
    assert len(tracker) == 0

def test_unknown_battle_ids_are_ignored(tracker, ash, host):
    assert tracker.on_victory("missing", [ash.uuid]) == {}
    assert tracker.on_fled("missing", ash.uuid) == {}
    tracker.on_fainted("missing", None)
    assert host.commands == []

def test_fainted_touches_activity(tracker, make, ash, clock):
    wild = make.creature()
    state = tracker.on_battle_start("b1", [make.player_side(ash), make.wild_side(wild)])
    clock.advance(60)

    tracker.on_fainted("b1", wild)

    assert state.last_activity == clock.now

def test_sweep_removes_resolved_and_stale(tracker, make, ash, gary, clock):
    resolved = tracker.on_battle_start("done", [make.player_side(ash), make.wild_side()])
    resolved.resolved = True
    stale_creature = make.creature("zubat")
    tracker.on_battle_start("stale", [make.player_side(gary), make.wild_side(stale_creature)])

    clock.advance(BATTLE_TIMEOUT_SECONDS - 10)
    tracker.on_battle_start("fresh", [make.player_side(make.player("Misty")), make.wild_side()])
    clock.advance(20)

    assert tracker.sweep() == 2
    assert tracker.active_battles() == ["fresh"]
    assert tracker.find_battle_by_creature(stale_creature.uuid) is None

    # Nothing changed, nothing more to remove
    assert tracker.sweep() == 0
    assert tracker.active_battles() == ["fresh"]

def test_event_bus_wiring(tracker, make, ash, host, event_bus):
    tracker.subscribe(event_bus)
    wild = make.creature("oddish")

    event_bus.publish(BattleEvent.BATTLE_STARTED, battle_id="b1",
                      participants=[make.player_side(ash), make.wild_side(wild)])
    event_bus.publish(BattleEvent.CREATURE_FAINTED, battle_id="b1", creature=wild)
    event_bus.publish(BattleEvent.BATTLE_VICTORY, battle_id="b1", winners=[ash.uuid])

    assert host.commands_for("Ash") == ["give Ash won"]

    tracker.unsubscribe(event_bus)
    event_bus.publish(BattleEvent.CREATURE_CAPTURED, creature=make.creature(), player=ash)
    assert host.commands_for("Ash") == ["give Ash won"]

def test_racing_terminal_triggers_resolve_once(tracker, make, ash, gary, host):
    for i in range(20):
        battle_id = f"race-{i}"
        tracker.on_battle_start(battle_id, [make.player_side(ash), make.player_side(gary)])
        results = []
        barrier = threading.Barrier(2)

        def victory():
            barrier.wait()
            results.append(tracker.on_victory(battle_id, [ash.uuid]))

        def flee():
            barrier.wait()
            results.append(tracker.on_fled(battle_id, gary.uuid))

        threads = [threading.Thread(target=victory), threading.Thread(target=flee)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for r in results if r) == 1
        assert battle_id not in tracker

    # Every battle paid out exactly one Won (Ash) and one Forfeit (Gary)
    assert host.commands_for("Ash") == ["give Ash won"] * 20
    assert host.commands_for("Gary") == ["give Gary forfeit"] * 20
