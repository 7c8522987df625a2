"""
Tests for the action executor.
"""

import pytest
from actions.action_executor import ActionExecutor
from actions.action_factory import (
    basic_attack,
    devour_attack,
    eat_attack,
    finishing_move,
    restraint_attack,
    skip_action,
    status_attack,
)
from actions.base_action import (
    ActionDescription,
    ApplyStatusEffect,
    DamageParameter,
    RemoveStatusEffect,
)
from actors.main import Actor
from core.constants import (
    AccuracyType,
    ActionOutcome,
    ActionTarget,
    PlayerState,
    StatusEffectType,
    TargetStatus,
    ValueType,
)


def fixed(value):
    """A damage formula returning a constant magnitude."""
    return lambda user, target, user_mult, target_mult: value * user_mult


def strike(magnitude=20, **kwargs):
    """A certain-hit, no-critical, no-variance health attack."""
    kwargs.setdefault("accuracy", 1.0)
    kwargs.setdefault("critical_rate", 0.0)
    kwargs.setdefault(
        "damage_parameters",
        [DamageParameter(formula=fixed(magnitude), fluctuation=0.0)],
    )
    return ActionDescription(name="Strike", **kwargs)


@pytest.fixture
def executor():
    return ActionExecutor()


@pytest.fixture
def attacker(registry):
    return Actor(name="A", max_hp=100, attack_power=10, registry=registry)


@pytest.fixture
def defender(registry):
    return Actor(name="B", max_hp=50, attack_power=10, registry=registry)


# =============================================================================
# End-to-end scenarios
# =============================================================================


def test_plain_hit(executor, attacker, defender):
    result = executor.execute(strike(), attacker, defender)
    assert defender.hp == 30
    assert result.outcome == ActionOutcome.PERFORMED
    assert result.hits == 1
    assert result.criticals == 0
    assert [c.change for c in result.results[0].target_value_changes] == [-20]


def test_hit_respects_damage_received_modifier(executor, attacker, defender):
    executor.execute(strike(), attacker, defender)
    defender.status_effects.add_effect(StatusEffectType.EXHAUSTED)
    result = executor.execute(strike(), attacker, defender)
    assert result.total_target_change() == -30
    assert defender.hp == 0


# =============================================================================
# Hit checks
# =============================================================================


def test_miss_skips_everything(executor, attacker, defender):
    action = strike(
        accuracy=0.0,
        extra_effects=[ApplyStatusEffect(status=StatusEffectType.POISON)],
    )
    result = executor.execute(action, attacker, defender)
    assert result.is_miss
    assert result.misses == 1
    assert defender.hp == 50
    assert not defender.status_effects.has_effect(StatusEffectType.POISON)
    assert "A's Strike missed!" in result.messages


def test_evade_never_misses_knocked_out_target(executor, attacker, defender):
    defender.take_damage(50)
    assert defender.is_knocked_out()
    action = strike(accuracy=0.05, accuracy_type=AccuracyType.EVADE, damage_parameters=[])
    for _ in range(500):
        assert not executor.execute(action, attacker, defender).is_miss


def test_evade_uses_accuracy_modifier(executor, attacker, defender):
    attacker.status_effects.add_effect(StatusEffectType.SHRUNK)
    action = strike(accuracy=1.0, accuracy_type=AccuracyType.EVADE, damage_parameters=[])
    trials = 4000
    hits = sum(executor.execute(action, attacker, defender).hits for _ in range(trials))
    assert hits / trials == pytest.approx(0.25, abs=0.03)


def test_invincible_target_evades(executor, attacker, defender):
    defender.status_effects.add_effect(StatusEffectType.INVINCIBLE)
    result = executor.execute(strike(), attacker, defender)
    assert result.results[0].evaded
    assert result.is_miss
    assert defender.hp == 50


def test_repetitions_roll_independently(executor, attacker, defender):
    result = executor.execute(strike(magnitude=5, repeat_count=3), attacker, defender)
    assert len(result.results) == 3
    assert result.hits == 3
    assert defender.hp == 35


def test_critical_uses_custom_multiplier(executor, attacker, defender):
    action = strike(
        magnitude=10,
        critical_rate=1.0,
        critical_multiplier=lambda user, target: 2.0,
    )
    result = executor.execute(action, attacker, defender)
    assert result.criticals == 1
    assert defender.hp == 30


def test_default_critical_triples(executor, attacker, defender):
    action = strike(magnitude=10, critical_rate=1.0)
    executor.execute(action, attacker, defender)
    assert defender.hp == 20


# =============================================================================
# Damage parameters
# =============================================================================


def test_leech_heals_floor_of_half(executor, attacker, defender):
    attacker.take_damage(50)
    action = strike(
        magnitude=10,
        damage_parameters=[
            DamageParameter(formula=fixed(11), absorb_ratio=0.5, fluctuation=0.0)
        ],
    )
    result = executor.execute(action, attacker, defender)
    assert result.total_user_change() == 5
    assert attacker.hp == 55


def test_leech_heals_nothing_on_miss(executor, attacker, defender):
    attacker.take_damage(50)
    action = strike(
        accuracy=0.0,
        damage_parameters=[
            DamageParameter(formula=fixed(10), absorb_ratio=0.5, fluctuation=0.0)
        ],
    )
    result = executor.execute(action, attacker, defender)
    assert result.total_user_change() == 0
    assert attacker.hp == 50


def test_expression_formula(executor, attacker, defender):
    defender.defense = 4
    action = strike(
        damage_parameters=[
            DamageParameter(formula="[USER_ATK] * [USER_MULT] - [TARGET_DEF]", fluctuation=0.0)
        ],
    )
    executor.execute(action, attacker, defender)
    assert defender.hp == 44


def test_default_formula_never_below_one(executor, attacker, defender):
    defender.defense = 100
    action = strike(damage_parameters=[DamageParameter(fluctuation=0.0)])
    executor.execute(action, attacker, defender)
    assert defender.hp == 49


def test_heal_parameter_on_self(executor, attacker, defender):
    attacker.take_damage(30)
    action = strike(
        target=ActionTarget.SELF,
        damage_parameters=[
            DamageParameter(value_type=ValueType.HEAL, formula=fixed(12), fluctuation=0.0)
        ],
    )
    result = executor.execute(action, attacker, defender)
    assert attacker.hp == 82
    assert defender.hp == 50
    assert result.total_target_change() == 12


def test_mana_drain(executor, attacker, registry):
    caster = Actor(name="C", max_hp=40, attack_power=5, max_mp=30, registry=registry)
    action = strike(
        damage_parameters=[
            DamageParameter(target_status=TargetStatus.MP, formula=fixed(8), fluctuation=0.0)
        ],
    )
    result = executor.execute(action, attacker, caster)
    assert caster.mp == 22
    assert result.total_target_change(TargetStatus.MP) == -8


@pytest.mark.parametrize("drain, absorbed", [(7, 4), (5, 3), (8, 4)])
def test_mana_leech_rounds_half_up(executor, registry, drain, absorbed):
    drainer = Actor(name="D", max_hp=40, attack_power=5, max_mp=30, registry=registry)
    drainer.lose_mp(20)
    victim = Actor(name="V", max_hp=40, attack_power=5, max_mp=30, registry=registry)
    action = strike(
        damage_parameters=[
            DamageParameter(
                target_status=TargetStatus.MP,
                formula=fixed(drain),
                absorb_ratio=0.5,
                fluctuation=0.0,
            )
        ],
    )
    result = executor.execute(action, drainer, victim)
    assert victim.mp == 30 - drain
    assert result.total_user_change(TargetStatus.MP) == absorbed
    assert drainer.mp == 10 + absorbed


def test_mp_cost_shortfall_exhausts(executor, attacker, defender):
    result = executor.execute(strike(mp_cost=5), attacker, defender)
    assert not result.mp_paid
    assert attacker.status_effects.is_exhausted()


# =============================================================================
# Status effects
# =============================================================================


def test_extra_effects_roll_independently(executor, attacker, defender):
    action = strike(
        extra_effects=[
            ApplyStatusEffect(status=StatusEffectType.POISON, probability=1.0, duration=2, value=6),
            ApplyStatusEffect(status=StatusEffectType.SLOW, probability=0.0),
        ],
    )
    result = executor.execute(action, attacker, defender)
    poison = defender.status_effects.get_effect(StatusEffectType.POISON)
    assert poison.remaining_duration == 2
    assert poison.potency == 6
    assert not defender.status_effects.has_effect(StatusEffectType.SLOW)
    assert result.added_states() == ["poison"]


def test_remove_status_effect(executor, attacker, defender):
    defender.status_effects.add_effect(StatusEffectType.DEFENDING)
    action = strike(
        damage_parameters=[],
        extra_effects=[RemoveStatusEffect(status="defending")],
    )
    result = executor.execute(action, attacker, defender)
    assert not defender.status_effects.has_effect(StatusEffectType.DEFENDING)
    assert result.removed_states() == ["defending"]


def test_status_attack_builder(executor, attacker, player):
    action = status_attack("Fire Breath", StatusEffectType.FIRE, chance=1.0, accuracy=1.0, critical_rate=0.0)
    executor.execute(action, attacker, player)
    assert player.status_effects.has_effect(StatusEffectType.FIRE)


def test_capture_sequence(executor, adversary, player):
    grab = restraint_attack("Grab", accuracy=1.0)
    swallow = eat_attack("Swallow", accuracy=1.0)
    digest = devour_attack("Digest", max_hp_drain=10.0, critical_rate=0.0)
    finish = finishing_move("Finish")

    executor.execute(grab, adversary, player)
    assert player.get_player_state() == PlayerState.RESTRAINED

    executor.execute(swallow, adversary, player)
    assert player.get_player_state() == PlayerState.EATEN
    assert not player.is_restrained()

    start_max_hp = adversary.max_hp
    while player.max_hp > 0:
        executor.execute(digest, adversary, player)
    assert player.get_player_state() == PlayerState.DOOMED
    assert adversary.max_hp == start_max_hp + 100

    result = executor.execute(finish, adversary, player)
    assert result.hits == 1
    assert player.get_player_state() == PlayerState.DEAD
    assert not player.is_doomed()


def test_devour_is_gated_on_eaten(adversary, player):
    digest = devour_attack("Digest")
    assert not digest.is_eligible(adversary, player, 1)
    player.status_effects.add_effect(StatusEffectType.EATEN)
    assert digest.is_eligible(adversary, player, 1)


# =============================================================================
# Hooks and outcomes
# =============================================================================


def test_skip_action(executor, attacker, defender):
    result = executor.execute(skip_action("Wait", messages=["<USER> waits."]), attacker, defender)
    assert result.outcome == ActionOutcome.SKIPPED
    assert result.results == []
    assert result.messages == ["A waits."]


def test_pre_use_hook_can_cancel(executor, attacker, defender):
    action = strike(on_pre_use=lambda action, user, target, turn: None)
    result = executor.execute(action, attacker, defender)
    assert result.outcome == ActionOutcome.CANCELLED
    assert defender.hp == 50


def test_pre_use_hook_can_replace(executor, attacker, defender):
    action = strike(on_pre_use=lambda action, user, target, turn: strike(magnitude=5))
    executor.execute(action, attacker, defender)
    assert defender.hp == 45


def test_on_use_and_custom_function(executor, attacker, defender):
    def sleep_if_exhausted(user, target, single):
        if target.status_effects.is_exhausted():
            target.status_effects.add_effect(StatusEffectType.SLEEP)
            single.target_added_states.append("sleep")
        return single

    defender.status_effects.add_effect(StatusEffectType.EXHAUSTED)
    action = strike(
        custom_function=sleep_if_exhausted,
        on_use=lambda user, target, turn: [f"Turn {turn} is over."],
    )
    result = executor.execute(action, attacker, defender, turn=4)
    assert defender.status_effects.has_effect(StatusEffectType.SLEEP)
    assert result.added_states() == ["sleep"]
    assert result.messages[-1] == "Turn 4 is over."


def test_messages_are_formatted(executor, attacker, defender):
    action = strike(messages=["<USER> uses <SKILL> on <TARGET>!"])
    result = executor.execute(action, attacker, defender)
    assert result.messages[0] == "A uses Strike on B!"
    assert "B takes 20 damage!" in result.messages


def test_basic_attack_builder_leech(executor, adversary, player):
    bite = basic_attack("Bite", heal_ratio=0.5, accuracy=1.0, critical_rate=0.0)
    assert bite.accuracy_type == AccuracyType.EVADE
    adversary.take_damage(40)
    result = executor.execute(bite, adversary, player)
    dealt = -result.total_target_change()
    assert dealt > 0
    assert result.total_user_change() == dealt // 2
