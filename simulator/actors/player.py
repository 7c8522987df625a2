"""
Player module for the simulator.

The player is an actor driven by human input. On top of the shared actor
model it can struggle out of holds, brace for impact, catch its breath, and
comes back from being knocked out once the effect wears off.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.constants import (
    KNOCKOUT_RECOVERY_RATIO,
    STAY_STILL_HEAL_RATIO,
    STAY_STILL_MP_RATIO,
    STRUGGLE_BASE_RATE,
    STRUGGLE_RATE_CAP,
    STRUGGLE_RATE_STEP,
    StatusEffectType,
)
from core.logging import log_debug
from core.utils import get_random

from .main import Actor


class StruggleResult(BaseModel):
    """Outcome of one attempt to break free."""

    success: bool = Field(
        description="True if the player broke free.",
    )
    chance: float = Field(
        0.0,
        description="The success chance the attempt rolled against.",
    )
    messages: list[str] = Field(
        default_factory=list,
        description="Log lines for presentation.",
    )


class Player(Actor):
    """
    The player-controlled actor.

    Attributes:
        struggle_attempts (int):
            Failed escape attempts since the current hold started.

    """

    def __init__(self, name: str = "Player", max_hp: int = 100, attack_power: int = 10, **kwargs: Any) -> None:
        self.struggle_attempts = 0
        super().__init__(name=name, max_hp=max_hp, attack_power=attack_power, **kwargs)

    # ============================================================================
    # STRUGGLE
    # ============================================================================

    def reset_struggle(self) -> None:
        self.struggle_attempts = 0

    def struggle_chance(self) -> float:
        """
        The chance the next escape attempt succeeds.

        Starts at 20% and grows by 20% per earlier attempt. The struggle
        modifier of the active effects scales it, and the result is capped
        at 90%.

        Returns:
            float: The chance in [0, 1].

        """
        attempts = self.struggle_attempts + 1
        base = STRUGGLE_BASE_RATE + (attempts - 1) * STRUGGLE_RATE_STEP
        return min(base * self.status_effects.get_struggle_modifier(), STRUGGLE_RATE_CAP)

    def attempt_struggle(self, captor: Any = None) -> StruggleResult:
        """
        Tries to break out of a hold (restrained, cocoon or swallowed).

        On success the hold effects are removed, the counter resets and the
        captor, if given, gets to react (adversaries are stunned).

        Args:
            captor (Adversary | None): The actor holding the player.

        Returns:
            StruggleResult: Whether it worked, and log lines.

        """
        if not self.is_any_restrained():
            return StruggleResult(success=False, messages=[f"{self.display_name} is not held."])

        chance = self.struggle_chance()
        self.struggle_attempts += 1
        success = get_random().random() < chance
        log_debug(
            f"{self.display_name} struggles",
            {"attempt": self.struggle_attempts, "chance": round(chance, 3), "success": success},
        )
        if not success:
            return StruggleResult(
                success=False,
                chance=chance,
                messages=[f"{self.display_name} struggles, but cannot break free."],
            )

        self.reset_struggle()
        for kind in (StatusEffectType.RESTRAINED, StatusEffectType.COCOON, StatusEffectType.EATEN):
            self.status_effects.remove_effect(kind)
        messages = [f"{self.display_name} breaks free!"]
        if captor is not None:
            messages.extend(captor.on_restraint_broken())
        return StruggleResult(success=True, chance=chance, messages=messages)

    # ============================================================================
    # OTHER ACTIONS
    # ============================================================================

    def defend(self) -> list[str]:
        """Braces for impact, halving incoming damage until the next round."""
        self.status_effects.add_effect(StatusEffectType.DEFENDING)
        return [f"{self.display_name} takes a defensive stance."]

    def stay_still(self) -> list[str]:
        """Catches a breath, recovering a small share of health and mana."""
        healed = self.heal(int(self.max_hp * STAY_STILL_HEAL_RATIO))
        recovered = self.recover_mp(int(self.max_mp * STAY_STILL_MP_RATIO))
        messages = [f"{self.display_name} stays still and recovers {healed} HP."]
        if recovered > 0:
            messages.append(f"{self.display_name} recovers {recovered} MP.")
        return messages

    # ============================================================================
    # TURN PROCESSING
    # ============================================================================

    def process_round_end(self) -> list[str]:
        """
        Ticks the status effects, then brings the player back to half health
        if being knocked out wore off this round.

        Returns:
            list[str]: Log lines.

        """
        was_knocked_out = self.is_knocked_out()
        messages = super().process_round_end()
        if was_knocked_out and not self.is_knocked_out() and self.hp == 0 and not self.is_doomed():
            healed = self.heal(int(self.max_hp * KNOCKOUT_RECOVERY_RATIO))
            messages.append(f"{self.display_name} regains consciousness and recovers {healed} HP!")
        return messages

    def reset_battle_state(self) -> None:
        super().reset_battle_state()
        self.reset_struggle()
