"""
Action factory module for the simulator.

Builds action descriptions from plain content data and offers builders for
the common action kinds, so adversary repertoires read like data tables.
"""

from typing import Any

from catchery import log_warning
from pydantic import ValidationError

from core.constants import (
    AccuracyType,
    ActionType,
    PlayerState,
    TargetStatus,
    ValueType,
)
from core.error_handling import ContentError

from actions.base_action import (
    ActionDescription,
    ApplyStatusEffect,
    DamageParameter,
)


def create_action(data: dict[str, Any]) -> ActionDescription:
    """
    Creates an action from a dictionary.

    Enum fields accept their string values, damage formulas may be
    expression strings.

    Args:
        data (dict[str, Any]): The action data.

    Returns:
        ActionDescription: The validated action.

    Raises:
        ContentError: If the data does not describe a valid action.

    """
    try:
        return ActionDescription.model_validate(data)
    except ValidationError as e:
        raise ContentError(
            f"Invalid action '{data.get('name', '<unnamed>')}': {e.error_count()} error(s)",
            {"errors": e.errors(include_url=False)},
        ) from e


def load_repertoire(entries: list[dict[str, Any]], strict: bool = False) -> list[ActionDescription]:
    """
    Builds a repertoire from a list of action dictionaries.

    Args:
        entries (list[dict[str, Any]]): The raw actions, in repertoire order.
        strict (bool): Raise on the first invalid entry instead of skipping it.

    Returns:
        list[ActionDescription]: The valid actions, in order.

    Raises:
        ContentError: If strict and an entry is invalid.

    """
    repertoire: list[ActionDescription] = []
    for index, entry in enumerate(entries):
        try:
            repertoire.append(create_action(entry))
        except ContentError as e:
            if strict:
                raise
            log_warning(f"Skipping invalid action #{index}: {e}", {"index": index})
    return repertoire


# =============================================================================
# Builders
# =============================================================================


def hp_damage(
    user_multiplier: float = 1.0,
    formula: Any = None,
    absorb_ratio: float = 0.0,
    fluctuation: float | None = None,
) -> DamageParameter:
    """Shorthand for the usual health damage parameter."""
    extra: dict[str, Any] = {}
    if fluctuation is not None:
        extra["fluctuation"] = fluctuation
    return DamageParameter(
        target_status=TargetStatus.HP,
        value_type=ValueType.DAMAGE,
        formula=formula,
        user_multiplier=user_multiplier,
        absorb_ratio=absorb_ratio,
        **extra,
    )


def basic_attack(
    name: str,
    weight: float = 1.0,
    user_multiplier: float = 1.0,
    heal_ratio: float = 0.0,
    **kwargs: Any,
) -> ActionDescription:
    """
    A plain attack against health, resolved in evade mode.

    Args:
        name (str): Name of the action.
        weight (float): Selection weight.
        user_multiplier (float): Scales the user's attack power.
        heal_ratio (float): Share of the damage the user heals.
        **kwargs: Any other ActionDescription field.

    Returns:
        ActionDescription: The action.

    """
    kwargs.setdefault("accuracy_type", AccuracyType.EVADE)
    kwargs.setdefault("damage_parameters", [hp_damage(user_multiplier, absorb_ratio=heal_ratio)])
    return ActionDescription(name=name, kind=ActionType.ATTACK, weight=weight, **kwargs)


def status_attack(
    name: str,
    status: str,
    chance: float = 1.0,
    duration: int | None = None,
    weight: float = 1.0,
    user_multiplier: float = 1.0,
    deals_damage: bool = True,
    **kwargs: Any,
) -> ActionDescription:
    """An attack that may also inflict a status effect."""
    kwargs.setdefault("accuracy_type", AccuracyType.EVADE)
    if deals_damage:
        kwargs.setdefault("damage_parameters", [hp_damage(user_multiplier)])
    extra = list(kwargs.pop("extra_effects", []))
    extra.insert(
        0, ApplyStatusEffect(status=status, probability=chance, duration=duration)
    )
    return ActionDescription(
        name=name,
        kind=ActionType.STATUS_ATTACK,
        weight=weight,
        extra_effects=extra,
        **kwargs,
    )


def restraint_attack(name: str, weight: float = 1.0, **kwargs: Any) -> ActionDescription:
    """Grabs a free opponent, leaving it restrained."""
    kwargs.setdefault("accuracy_type", AccuracyType.EVADE)
    kwargs.setdefault("player_state_condition", PlayerState.NORMAL)
    return ActionDescription(name=name, kind=ActionType.RESTRAINT_ATTACK, weight=weight, **kwargs)


def eat_attack(name: str, weight: float = 1.0, **kwargs: Any) -> ActionDescription:
    """Swallows an opponent that is already restrained."""
    kwargs.setdefault("accuracy_type", AccuracyType.EVADE)
    kwargs.setdefault("player_state_condition", PlayerState.RESTRAINED)
    return ActionDescription(name=name, kind=ActionType.EAT_ATTACK, weight=weight, **kwargs)


def devour_attack(
    name: str,
    max_hp_drain: float = 1.0,
    mp_drain: float = 0.5,
    weight: float = 1.0,
    **kwargs: Any,
) -> ActionDescription:
    """
    Drains a swallowed opponent: its maximum health flows into the user's,
    and its mana is drained.

    Args:
        name (str): Name of the action.
        max_hp_drain (float): Scales the user's attack power for the max-health drain.
        mp_drain (float): Scales the user's attack power for the mana drain.
        weight (float): Selection weight.
        **kwargs: Any other ActionDescription field.

    Returns:
        ActionDescription: The action.

    """
    kwargs.setdefault("accuracy", 1.0)
    kwargs.setdefault("player_state_condition", PlayerState.EATEN)
    kwargs.setdefault(
        "damage_parameters",
        [
            DamageParameter(
                target_status=TargetStatus.MAX_HP,
                user_multiplier=max_hp_drain,
                absorb_ratio=1.0,
            ),
            DamageParameter(
                target_status=TargetStatus.MP,
                user_multiplier=mp_drain,
            ),
        ],
    )
    return ActionDescription(name=name, kind=ActionType.DEVOUR_ATTACK, weight=weight, **kwargs)


def finishing_move(name: str, weight: float = 1.0, **kwargs: Any) -> ActionDescription:
    """Ends the fight against a doomed opponent."""
    kwargs.setdefault("player_state_condition", PlayerState.DOOMED)
    return ActionDescription(name=name, kind=ActionType.FINISHING_MOVE, weight=weight, **kwargs)


def skip_action(name: str = "Wait", **kwargs: Any) -> ActionDescription:
    """An action that does nothing."""
    return ActionDescription(name=name, kind=ActionType.SKIP, **kwargs)
