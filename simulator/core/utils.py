"""
Utilities module for the simulator.

Provides the shared random source every combat roll draws from, the
singleton metaclass, and a few small numeric helpers.
"""

from __future__ import annotations

import random
from typing import Any, Generic

from typing_extensions import TypeVar

# ---- Random Source ----

_rng: random.Random = random.Random()


def get_random() -> random.Random:
    """
    Returns the random source used by every combat roll.

    Returns:
        random.Random: The shared random number generator.

    """
    return _rng


def set_random(rng: random.Random) -> None:
    """
    Replaces the shared random source, e.g. with a scripted one in tests.

    Args:
        rng (random.Random): The generator to use from now on.

    """
    global _rng
    _rng = rng


def set_random_seed(seed: int | None) -> None:
    """
    Re-seeds the shared random source so that a combat becomes reproducible.

    Args:
        seed (int | None): The seed, None to seed from system entropy.

    """
    _rng.seed(seed)


def roll() -> float:
    """Draws a uniform float in [0, 1) from the shared source."""
    return _rng.random()


# ---- Singleton Metaclass ----


_T = TypeVar("_T")


class Singleton(type, Generic[_T]):
    """Metaclass that returns the same instance every time."""

    _instances: dict[Singleton[_T], _T] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> _T:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---- Numeric Helpers ----


def clamp(value: float, minimum: float, maximum: float) -> float:
    """
    Clamps a value into the inclusive range [minimum, maximum].

    Args:
        value (float): The value to clamp.
        minimum (float): Lower bound.
        maximum (float): Upper bound.

    Returns:
        float: The clamped value.

    """
    return max(minimum, min(maximum, value))


def percentage(current: int, maximum: int) -> float:
    """Returns current/maximum as a percentage, 0 when maximum is not positive."""
    if maximum <= 0:
        return 0.0
    return current / maximum * 100.0
