"""
Combat math module for the simulator.

Pure functions deciding hit/miss, critical hits and damage variance from
scalar inputs. All draws go through the shared random source in core.utils.
"""

from collections.abc import Callable

from pydantic import BaseModel, Field

from core.constants import (
    CRITICAL_MULTIPLIER,
    DEFAULT_CRITICAL_RATE,
    DEFAULT_HIT_RATE,
    DEFAULT_VARIANCE,
)
from core.logging import log_debug
from core.utils import clamp, get_random


class AttackResult(BaseModel):
    """Outcome of a single attack roll."""

    final_value: int = Field(
        0,
        description="The magnitude after critical and variance, 0 on a miss.",
    )
    is_miss: bool = Field(
        False,
        description="Whether the attack missed.",
    )
    is_critical: bool = Field(
        False,
        description="Whether the attack was a critical hit.",
    )


def effective_hit_rate(
    hit_rate: float | None = None,
    accuracy_modifier: float = 1.0,
    target_incapacitated: bool = False,
) -> float:
    """
    Computes the probability that an attack lands.

    Args:
        hit_rate (float | None): The action's hit rate, None for the default.
        accuracy_modifier (float): The attacker's compound accuracy modifier.
        target_incapacitated (bool): Whether the defender cannot dodge.

    Returns:
        float: The hit probability in [0, 1].

    """
    if target_incapacitated:
        return 1.0
    base = DEFAULT_HIT_RATE if hit_rate is None else hit_rate
    return clamp(base * accuracy_modifier, 0.0, 1.0)


def roll_hit(hit_rate: float) -> bool:
    """Returns True when a uniform draw lands below the hit rate."""
    return get_random().random() < hit_rate


def roll_critical(critical_rate: float | None = None) -> bool:
    """
    Rolls for a critical hit.

    Args:
        critical_rate (float | None): Critical probability, None for the default.

    Returns:
        bool: True on a critical hit.

    """
    rate = DEFAULT_CRITICAL_RATE if critical_rate is None else critical_rate
    if rate <= 0:
        return False
    return get_random().random() < rate


def variance_factor(variance: float = DEFAULT_VARIANCE) -> float:
    """
    Draws the multiplicative variance factor.

    The factor is the sum of two independent draws, one over [0, +v) and one
    over (-v, 0], added to 1. The result lies in (1 - v, 1 + v) and is
    concentrated around 1 rather than uniform.

    Args:
        variance (float): Half-width of the band, e.g. 0.2 for +/- 20%.

    Returns:
        float: The factor to multiply the magnitude by.

    """
    variance = abs(variance)
    if variance == 0:
        return 1.0
    rng = get_random()
    return 1.0 + rng.random() * variance + rng.random() * -variance


def apply_variance(value: float, variance: float = DEFAULT_VARIANCE) -> int:
    """
    Scales a magnitude by a variance factor and rounds it.

    Positive inputs never round down to zero, so a landed hit always counts.

    Args:
        value (float): The magnitude before variance.
        variance (float): Half-width of the band.

    Returns:
        int: The rounded magnitude, never negative.

    """
    if value <= 0:
        return 0
    return max(1, round(value * variance_factor(variance)))


def calculate_attack_result(
    base_value: float,
    hit_rate: float | None = None,
    critical_rate: float | None = None,
    accuracy_modifier: float = 1.0,
    target_incapacitated: bool = False,
    variance: float = DEFAULT_VARIANCE,
    critical_multiplier: float | Callable[[], float] = CRITICAL_MULTIPLIER,
) -> AttackResult:
    """
    Resolves one attack roll: hit check, critical check, then variance.

    Args:
        base_value (float): The magnitude before any roll.
        hit_rate (float | None): Hit probability, None for the default.
        critical_rate (float | None): Critical probability, None for the default.
        accuracy_modifier (float): The attacker's compound accuracy modifier.
        target_incapacitated (bool): The defender cannot dodge, so no miss.
        variance (float): Half-width of the variance band.
        critical_multiplier (float | Callable[[], float]): Multiplier applied
            on a critical, or a function returning it.

    Returns:
        AttackResult: The resolved roll.

    """
    if base_value <= 0:
        return AttackResult(final_value=0, is_miss=False, is_critical=False)

    chance = effective_hit_rate(hit_rate, accuracy_modifier, target_incapacitated)
    if not roll_hit(chance):
        log_debug("Attack missed", {"hit_rate": round(chance, 3)})
        return AttackResult(final_value=0, is_miss=True, is_critical=False)

    is_critical = roll_critical(critical_rate)
    value = base_value
    if is_critical:
        multiplier = critical_multiplier() if callable(critical_multiplier) else critical_multiplier
        value *= multiplier

    final_value = apply_variance(value, variance)
    log_debug(
        "Attack landed",
        {"base": base_value, "final": final_value, "critical": is_critical},
    )
    return AttackResult(final_value=final_value, is_miss=False, is_critical=is_critical)
