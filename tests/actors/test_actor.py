"""
Tests for the shared actor model.
"""

import pytest
from actors.main import Actor
from core.constants import PlayerState, StatusEffectType


@pytest.fixture
def actor(registry):
    return Actor(name="Dummy", max_hp=50, attack_power=10, max_mp=20, registry=registry)


def test_take_damage_returns_actual_amount(actor):
    assert actor.take_damage(20) == 20
    assert actor.hp == 30
    assert actor.take_damage(100) == 30
    assert actor.hp == 0


def test_negative_damage_is_clamped(actor, mocker):
    mocker.patch("core.error_handling.log_warning")
    assert actor.take_damage(-10) == 0
    assert actor.hp == 50


def test_health_stays_in_range(actor, seeded_random):
    for _ in range(500):
        if seeded_random.random() < 0.5:
            actor.take_damage(seeded_random.randint(0, 40))
        else:
            actor.heal(seeded_random.randint(0, 40))
        assert 0 <= actor.hp <= actor.max_hp


def test_damage_received_modifier_is_floored(actor):
    actor.status_effects.add_effect(StatusEffectType.WEAKNESS)
    assert actor.take_damage(7) == 10


def test_reaching_zero_knocks_out(actor):
    actor.take_damage(50)
    assert actor.is_knocked_out()
    assert actor.is_defeated()
    assert not actor.can_act()
    assert actor.get_player_state() == PlayerState.KNOCKED_OUT


def test_heal_from_zero_wakes_up(actor):
    actor.take_damage(50)
    assert actor.heal(10) == 10
    assert not actor.is_knocked_out()


def test_heal_at_full_health_does_nothing(actor):
    assert actor.heal(10) == 0
    actor.take_damage(5)
    assert actor.heal(10) == 5


def test_heal_from_damage_floors(actor):
    actor.take_damage(20)
    assert actor.heal_from_damage(11, 0.5) == 5
    assert actor.heal_from_damage(0, 0.5) == 0


def test_gain_max_hp_raises_both(actor):
    actor.take_damage(10)
    actor.gain_max_hp(15)
    assert actor.max_hp == 65
    assert actor.hp == 55


def test_lose_max_hp_clamps_current(actor):
    assert actor.lose_max_hp(30) == 30
    assert actor.max_hp == 20
    assert actor.hp == 20


def test_lose_all_max_hp_dooms(actor):
    actor.take_damage(50)
    assert actor.lose_max_hp(500) == 50
    assert actor.max_hp == 0
    assert actor.is_doomed()
    assert not actor.is_knocked_out()
    assert actor.get_player_state() == PlayerState.DOOMED


def test_consume_mp(actor):
    assert actor.consume_mp(15)
    assert actor.mp == 5
    assert not actor.consume_mp(10)
    assert actor.mp == 0
    assert actor.status_effects.is_exhausted()
    assert not actor.can_use_skills()


def test_mana_pools_are_clamped(actor):
    assert actor.lose_mp(100) == 20
    assert actor.recover_mp(100) == 20
    assert actor.lose_max_mp(5) == 5
    assert actor.mp == 15
    assert actor.gain_max_mp(5) == 5
    assert actor.mp == 20


def test_attack_power_modifier_is_floored(actor):
    actor.attack_power = 7
    actor.status_effects.add_effect(StatusEffectType.SLOW)
    assert actor.get_attack_power() == 3


def test_stun_blocks_acting_until_turn_start(actor):
    actor.stun(1)
    assert not actor.can_act()
    assert actor.is_stunned()
    actor.start_turn()
    assert actor.can_act()


def test_start_turn_regenerates_mana(actor):
    actor.lose_mp(20)
    actor.start_turn()
    assert actor.mp == 2


def test_no_regeneration_while_eaten(actor):
    actor.lose_mp(20)
    actor.status_effects.add_effect(StatusEffectType.EATEN)
    actor.start_turn()
    assert actor.mp == 0


def test_hold_predicates(actor):
    actor.status_effects.add_effect(StatusEffectType.COCOON)
    assert actor.is_cocoon()
    assert actor.is_any_restrained()
    assert not actor.is_restrained()


def test_reset_battle_state(actor):
    actor.display_name = "Dummy Mk II"
    actor.lose_max_hp(10)
    actor.attack_power = 99
    actor.status_effects.add_effect(StatusEffectType.POISON)
    actor.reset_battle_state()
    assert actor.display_name == "Dummy"
    assert actor.max_hp == actor.hp == 50
    assert actor.attack_power == 10
    assert len(actor.status_effects) == 0


def test_snapshot_round_trip(actor):
    actor.take_damage(12)
    actor.status_effects.add_effect(StatusEffectType.SLOW)
    snapshot = actor.to_snapshot()
    actor.full_restore()
    actor.restore_snapshot(snapshot.model_dump())
    assert actor.hp == 38
    assert actor.status_effects.has_effect(StatusEffectType.SLOW)


def test_restore_snapshot_clamps(actor):
    snapshot = actor.to_snapshot().model_copy(update={"hp": 999, "mp": -3})
    actor.restore_snapshot(snapshot)
    assert actor.hp == actor.max_hp
    assert actor.mp == 0
