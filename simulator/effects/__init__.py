"""
Status effect engine.

Effect definitions and their registry, the per-actor manager of active
instances, and the derived player state.
"""

from .status_effect import (
    EffectMessages,
    EffectModifiers,
    StatusEffectDefinition,
    StatusEffectInstance,
    effect_key,
)
from .effect_registry import (
    DefaultEffectRegistry,
    StatusEffectRegistry,
    default_registry,
)
from .effect_manager import EffectManagerSnapshot, StatusEffectManager
from .player_state import derive_player_state
