"""
Tests for the adversary decision policy.
"""

from collections import Counter

import pytest
from actions.action_factory import (
    basic_attack,
    devour_attack,
    eat_attack,
    finishing_move,
    restraint_attack,
)
from actors.adversary import Adversary
from combat.npc_ai import (
    DecisionPolicy,
    PriorityRule,
    ScratchState,
    default_select,
    filter_eligible_actions,
    hp_ratio,
    weighted_choice,
)
from core.constants import StatusEffectType


@pytest.fixture
def lamia(registry):
    return Adversary(
        name="Lamia",
        max_hp=120,
        attack_power=15,
        registry=registry,
        repertoire=[
            basic_attack("Tail Slap", weight=2),
            restraint_attack("Coil", weight=1),
            eat_attack("Swallow", weight=1),
            devour_attack("Digest", weight=1),
            finishing_move("Final Squeeze", weight=1),
        ],
    )


# =============================================================================
# Scratch State
# =============================================================================


def test_scratch_state_defaults_on_miss():
    scratch = ScratchState()
    assert scratch.get("phase", 0) == 0
    assert not scratch.has("phase")


def test_scratch_state_counters():
    scratch = ScratchState({"times_restrained": 2})
    assert scratch.increment("times_restrained") == 3
    assert scratch.decrement("cooldown") == 0
    scratch.set("phase", "angry")
    assert scratch.to_dict() == {"times_restrained": 3, "cooldown": 0, "phase": "angry"}
    scratch.remove("phase")
    assert "phase" not in scratch
    scratch.clear()
    assert scratch.to_dict() == {}


# =============================================================================
# Filtering and Weighted Choice
# =============================================================================


def test_filter_by_player_state(lamia, player):
    names = [a.name for a in filter_eligible_actions(lamia.repertoire, lamia, player, 1)]
    assert names == ["Tail Slap", "Coil"]

    player.status_effects.add_effect(StatusEffectType.RESTRAINED)
    names = [a.name for a in filter_eligible_actions(lamia.repertoire, lamia, player, 1)]
    assert names == ["Tail Slap", "Swallow"]

    player.status_effects.remove_effect(StatusEffectType.RESTRAINED)
    player.status_effects.add_effect(StatusEffectType.EATEN)
    names = [a.name for a in filter_eligible_actions(lamia.repertoire, lamia, player, 1)]
    assert names == ["Tail Slap", "Digest"]

    player.status_effects.add_effect(StatusEffectType.DOOMED)
    names = [a.name for a in filter_eligible_actions(lamia.repertoire, lamia, player, 1)]
    assert names == ["Tail Slap", "Final Squeeze"]


def test_filter_by_usage_gate(lamia, player):
    lamia.repertoire[0] = basic_attack("Tail Slap", can_use=lambda user, opponent, turn: turn % 2 == 0)
    names = [a.name for a in filter_eligible_actions(lamia.repertoire, lamia, player, 1)]
    assert "Tail Slap" not in names
    names = [a.name for a in filter_eligible_actions(lamia.repertoire, lamia, player, 2)]
    assert "Tail Slap" in names


def test_weighted_distribution():
    actions = [
        basic_attack("Light", weight=1),
        basic_attack("Medium", weight=2),
        basic_attack("Heavy", weight=7),
    ]
    draws = 10000
    counts = Counter(weighted_choice(actions).name for _ in range(draws))
    assert counts["Light"] / draws == pytest.approx(0.1, abs=0.02)
    assert counts["Medium"] / draws == pytest.approx(0.2, abs=0.02)
    assert counts["Heavy"] / draws == pytest.approx(0.7, abs=0.02)


def test_zero_weight_is_never_chosen():
    actions = [basic_attack("Never", weight=0), basic_attack("Always", weight=1)]
    assert all(weighted_choice(actions).name == "Always" for _ in range(500))


def test_weighted_choice_with_nothing_positive():
    assert weighted_choice([]) is None
    assert weighted_choice([basic_attack("Never", weight=0)]) is None


def test_default_select_respects_filter(lamia, player):
    player.status_effects.add_effect(StatusEffectType.EATEN)
    for _ in range(100):
        assert default_select(lamia, player, 1).name in ("Tail Slap", "Digest")


def test_hp_ratio(player):
    player.take_damage(25)
    assert hp_ratio(player) == 0.75
    assert hp_ratio(player, missing=True) == 0.25


# =============================================================================
# Priority Rules
# =============================================================================


def test_priority_rule_short_circuits(lamia, player):
    lamia.policy = DecisionPolicy(
        [
            PriorityRule(
                name="swallow-when-held",
                condition=lambda adversary, opponent, turn: opponent.is_restrained(),
                action_name="Swallow",
            )
        ]
    )
    player.status_effects.add_effect(StatusEffectType.RESTRAINED)
    for turn in range(20):
        assert lamia.select_action(player, turn).action.name == "Swallow"


def test_priority_rule_skips_ineligible_action(lamia, player):
    lamia.policy = DecisionPolicy(
        [
            PriorityRule(
                name="always-swallow",
                condition=lambda adversary, opponent, turn: True,
                action_name="Swallow",
            )
        ]
    )
    for turn in range(50):
        assert lamia.select_action(player, turn).action.name in ("Tail Slap", "Coil")


def test_priority_rule_cooldown(lamia, player):
    lamia.repertoire = [basic_attack("Tail Slap", weight=1), basic_attack("Crush", weight=0)]
    policy = DecisionPolicy(
        [
            PriorityRule(
                name="crush",
                condition=lambda adversary, opponent, turn: True,
                action_name="Crush",
                cooldown=2,
            )
        ]
    )
    picks = [policy(lamia, player, turn).name for turn in range(7)]
    assert picks == ["Crush", "Tail Slap", "Tail Slap", "Crush", "Tail Slap", "Tail Slap", "Crush"]
    assert lamia.scratch.get("cooldown:crush", 0) == 2


def test_priority_rule_probability(lamia, player, seeded_random, mocker):
    mocker.patch.object(seeded_random, "random", side_effect=[0.9, 0.0, 0.1])
    lamia.repertoire = [basic_attack("Tail Slap", weight=1), basic_attack("Crush", weight=0)]
    policy = DecisionPolicy(
        [
            PriorityRule(
                name="crush",
                condition=lambda adversary, opponent, turn: True,
                action_name="Crush",
                probability=0.5,
            )
        ]
    )
    # First selection: the rule draw (0.9) fails, the weighted draw (0.0) picks Tail Slap.
    assert policy(lamia, player, 1).name == "Tail Slap"
    # Second selection: the rule draw (0.1) fires.
    assert policy(lamia, player, 2).name == "Crush"
