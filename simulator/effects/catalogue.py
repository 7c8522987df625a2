"""
Built-in status effect catalogue.

Core states (knocked out, restrained, eaten, doomed, dead) drive the player
state machine; the battle effects are the common buffs and debuffs actions
hand out. Content can register more kinds next to these.
"""

from typing import Any

from core.constants import PERMANENT_DURATION, EffectCategory, StatusEffectType
from effects.status_effect import (
    EffectMessages,
    EffectModifiers,
    StatusEffectDefinition,
    StatusEffectInstance,
)

# Share of maximum health a cocoon squeezes out of its victim each round.
COCOON_MAX_HP_RATIO = 0.05


# ==============================================================================
# TICK AND LIFECYCLE HOOKS
# ==============================================================================


def potency_damage_tick(actor: Any, instance: StatusEffectInstance) -> None:
    """Deals the instance potency as damage to its owner."""
    actor.take_damage(instance.potency or 0)


def max_hp_drain_tick(actor: Any, instance: StatusEffectInstance) -> None:
    """Shrinks the owner's maximum health by a share of itself."""
    reduction = int(actor.max_hp * COCOON_MAX_HP_RATIO)
    if reduction > 0:
        actor.lose_max_hp(reduction)


def refill_mp_tick(actor: Any, instance: StatusEffectInstance) -> None:
    """Fills the owner's mana to its maximum."""
    actor.recover_mp(actor.max_mp - actor.mp)


def reset_struggle_on_apply(actor: Any, instance: StatusEffectInstance) -> None:
    """A fresh hold starts the owner's escape attempts from scratch."""
    reset = getattr(actor, "reset_struggle", None)
    if callable(reset):
        reset()


# ==============================================================================
# DEFINITIONS
# ==============================================================================


def _definition(
    kind: StatusEffectType,
    name: str,
    description: str,
    duration: int,
    category: EffectCategory,
    **kwargs: Any,
) -> StatusEffectDefinition:
    return StatusEffectDefinition(
        kind=kind.value,
        name=name,
        description=description,
        duration=duration,
        category=category,
        **kwargs,
    )


def builtin_definitions() -> list[StatusEffectDefinition]:
    """
    Returns the built-in effect definitions.

    Returns:
        list[StatusEffectDefinition]: One definition per built-in kind.

    """
    debuff = EffectCategory.DEBUFF
    buff = EffectCategory.BUFF
    neutral = EffectCategory.NEUTRAL
    no_action = EffectModifiers(can_act=False)
    held = EffectModifiers(can_use_skills=False)
    return [
        # Core states.
        _definition(
            StatusEffectType.DEAD,
            "Dead",
            "Cannot resist any longer.",
            PERMANENT_DURATION,
            neutral,
            modifiers=no_action,
        ),
        _definition(
            StatusEffectType.DOOMED,
            "Doomed",
            "Awaiting a finishing move.",
            PERMANENT_DURATION,
            neutral,
            modifiers=no_action,
        ),
        _definition(
            StatusEffectType.KNOCKED_OUT,
            "Knocked out",
            "Cannot act for five turns.",
            5,
            debuff,
            modifiers=no_action,
            messages=EffectMessages(
                on_apply="{name} collapses!",
                on_remove="{name} comes to.",
            ),
        ),
        _definition(
            StatusEffectType.EXHAUSTED,
            "Exhausted",
            "No skills, halved attack, takes 1.5x damage.",
            4,
            debuff,
            modifiers=EffectModifiers(
                attack_power=0.5,
                damage_received=1.5,
                struggle_rate=0.5,
                can_use_skills=False,
            ),
        ),
        _definition(
            StatusEffectType.RESTRAINED,
            "Restrained",
            "Held in place until breaking free.",
            PERMANENT_DURATION,
            debuff,
            modifiers=held,
            on_apply=reset_struggle_on_apply,
        ),
        _definition(
            StatusEffectType.COCOON,
            "Cocoon",
            "Wrapped up and slowly shrinking.",
            PERMANENT_DURATION,
            debuff,
            modifiers=held,
            on_apply=reset_struggle_on_apply,
            on_tick=max_hp_drain_tick,
        ),
        _definition(
            StatusEffectType.EATEN,
            "Eaten",
            "Swallowed whole.",
            PERMANENT_DURATION,
            debuff,
            modifiers=held,
        ),
        # Battle effects.
        _definition(
            StatusEffectType.DEFENDING,
            "Defending",
            "Halves incoming damage for one turn.",
            1,
            buff,
            modifiers=EffectModifiers(damage_received=0.5),
        ),
        _definition(
            StatusEffectType.STUNNED,
            "Stunned",
            "Cannot act.",
            3,
            debuff,
            modifiers=no_action,
        ),
        _definition(
            StatusEffectType.FIRE,
            "Burning",
            "Takes fire damage every turn.",
            2,
            debuff,
            stackable=True,
            potency=8,
            on_tick=potency_damage_tick,
            messages=EffectMessages(on_tick="{name} burns for {damage} damage!"),
        ),
        _definition(
            StatusEffectType.POISON,
            "Poisoned",
            "Takes poison damage every turn.",
            3,
            debuff,
            stackable=True,
            potency=3,
            on_tick=potency_damage_tick,
            messages=EffectMessages(on_tick="{name} suffers {damage} poison damage!"),
        ),
        _definition(
            StatusEffectType.CHARM,
            "Charmed",
            "Struggling feels pointless.",
            3,
            debuff,
            modifiers=EffectModifiers(struggle_rate=0.5),
        ),
        _definition(
            StatusEffectType.SLOW,
            "Slowed",
            "Attack power halved.",
            2,
            debuff,
            modifiers=EffectModifiers(attack_power=0.5),
        ),
        _definition(
            StatusEffectType.INVINCIBLE,
            "Invincible",
            "Evades every attack.",
            3,
            buff,
            modifiers=EffectModifiers(damage_received=0.0),
        ),
        _definition(
            StatusEffectType.ENERGIZED,
            "Energized",
            "Mana refills every turn.",
            3,
            buff,
            on_tick=refill_mp_tick,
        ),
        _definition(
            StatusEffectType.SLIMED,
            "Slimed",
            "Covered in slime, hard to wriggle free.",
            3,
            debuff,
            modifiers=EffectModifiers(struggle_rate=0.5),
        ),
        _definition(
            StatusEffectType.SHRUNK,
            "Shrunk",
            "Tiny and fragile.",
            3,
            debuff,
            modifiers=EffectModifiers(
                attack_power=0.25,
                damage_received=2.0,
                struggle_rate=0.1,
                accuracy=0.25,
            ),
        ),
        _definition(
            StatusEffectType.PARALYSIS,
            "Paralyzed",
            "Cannot move.",
            3,
            debuff,
            modifiers=no_action,
        ),
        _definition(
            StatusEffectType.WEAKNESS,
            "Weakened",
            "Hits softer and bruises easier.",
            3,
            debuff,
            modifiers=EffectModifiers(attack_power=0.5, damage_received=1.5),
        ),
        _definition(
            StatusEffectType.CONFUSION,
            "Confused",
            "Attacks often go astray.",
            3,
            debuff,
            modifiers=EffectModifiers(accuracy=0.5),
        ),
        _definition(
            StatusEffectType.SLEEP,
            "Asleep",
            "Fast asleep.",
            3,
            debuff,
            modifiers=no_action,
        ),
        _definition(
            StatusEffectType.MAGIC_SEAL,
            "Sealed",
            "Cannot use skills.",
            3,
            debuff,
            modifiers=EffectModifiers(can_use_skills=False),
        ),
    ]
