"""
Derived player state.

The player state is never stored: it is recomputed from the active effect
kinds whenever someone asks, so it cannot drift from the effects themselves.
"""

from collections.abc import Iterable

from core.constants import PlayerState, StatusEffectType
from effects.status_effect import effect_key

# Checked in order, the first kind present wins.
_STATE_PRIORITY: list[tuple[StatusEffectType, PlayerState]] = [
    (StatusEffectType.DEAD, PlayerState.DEAD),
    (StatusEffectType.DOOMED, PlayerState.DOOMED),
    (StatusEffectType.EATEN, PlayerState.EATEN),
    (StatusEffectType.RESTRAINED, PlayerState.RESTRAINED),
    (StatusEffectType.COCOON, PlayerState.RESTRAINED),
    (StatusEffectType.KNOCKED_OUT, PlayerState.KNOCKED_OUT),
]


def derive_player_state(kinds: Iterable[str]) -> PlayerState:
    """
    Computes the player state from a set of active effect kinds.

    Args:
        kinds (Iterable[str]): The kinds currently active on the actor.

    Returns:
        PlayerState: The most advanced state the kinds imply.

    """
    active = {effect_key(kind) for kind in kinds}
    for kind, state in _STATE_PRIORITY:
        if kind.value in active:
            return state
    return PlayerState.NORMAL
