"""
Tests for the derived player state and the built-in catalogue.
"""

import pytest
from core.constants import PlayerState, StatusEffectType
from effects.catalogue import builtin_definitions
from effects.effect_registry import default_registry
from effects.player_state import derive_player_state
from effects.status_effect import StatusEffectDefinition


@pytest.mark.parametrize(
    "kinds, expected",
    [
        (set(), PlayerState.NORMAL),
        ({"slow", "poison"}, PlayerState.NORMAL),
        ({"knocked-out"}, PlayerState.KNOCKED_OUT),
        ({"restrained"}, PlayerState.RESTRAINED),
        ({"cocoon"}, PlayerState.RESTRAINED),
        ({"restrained", "knocked-out"}, PlayerState.RESTRAINED),
        ({"eaten", "restrained"}, PlayerState.EATEN),
        ({"doomed", "eaten"}, PlayerState.DOOMED),
        ({"dead", "doomed"}, PlayerState.DEAD),
    ],
)
def test_derive_player_state(kinds, expected):
    assert derive_player_state(kinds) == expected


def test_player_state_follows_effects(player):
    assert player.get_player_state() == PlayerState.NORMAL
    player.status_effects.add_effect(StatusEffectType.RESTRAINED)
    assert player.get_player_state() == PlayerState.RESTRAINED
    player.status_effects.remove_effect(StatusEffectType.RESTRAINED)
    player.status_effects.add_effect(StatusEffectType.EATEN)
    assert player.get_player_state() == PlayerState.EATEN


def test_catalogue_covers_every_builtin_kind():
    kinds = {definition.kind for definition in builtin_definitions()}
    assert kinds == {kind.value for kind in StatusEffectType}


@pytest.mark.parametrize(
    "kind",
    [StatusEffectType.RESTRAINED, StatusEffectType.COCOON, StatusEffectType.EATEN],
)
def test_holds_forbid_skills_but_allow_struggling(player, kind):
    player.status_effects.add_effect(kind)
    assert player.can_act()
    assert not player.can_use_skills()


def test_default_registry_is_shared():
    assert default_registry() is default_registry()
    assert StatusEffectType.POISON in default_registry()


def test_definition_rejects_bad_duration():
    with pytest.raises(ValueError):
        StatusEffectDefinition(kind="broken", name="Broken", duration=-4)
