"""
Adversary module for the simulator.

An adversary is an actor driven by a decision policy instead of human input.
It owns its action repertoire, its scratch state, and, for multi-form
adversaries, the list of forms it changes into when its health runs out.
"""

from collections.abc import Callable
from typing import Any

from actions.action_factory import skip_action
from actions.base_action import ActionDescription
from combat.npc_ai import (
    FORM_INDEX_KEY,
    TRANSFORMATION_ARMED_KEY,
    ActionSelection,
    AdversaryForm,
    ScratchState,
    ScratchValue,
    default_select,
    transformation_action,
)
from core.constants import RESTRAINT_BREAK_STUN_TURNS, SelectionOutcome
from core.error_handling import NoEligibleActionError
from core.logging import log_debug

from .main import Actor

Policy = Callable[[Any, Any, int], ActionDescription | None]


class Adversary(Actor):
    """
    A policy-driven actor.

    Attributes:
        repertoire (list[ActionDescription]):
            The actions the adversary can choose from, in order.
        policy (Policy | None):
            Called with (adversary, opponent, turn), None for the plain
            weighted draw.
        fallback_action (ActionDescription | None):
            Used when nothing in the repertoire is eligible.
        scratch (ScratchState):
            Memory private to this adversary and its policy.
        forms (list[AdversaryForm]):
            The forms still ahead of a multi-form adversary, in order.

    """

    def __init__(
        self,
        name: str,
        max_hp: int,
        attack_power: int,
        repertoire: list[ActionDescription] | None = None,
        policy: Policy | None = None,
        fallback_action: ActionDescription | None = None,
        scratch: dict[str, ScratchValue] | None = None,
        forms: list[AdversaryForm] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name=name, max_hp=max_hp, attack_power=attack_power, **kwargs)
        self.repertoire: list[ActionDescription] = list(repertoire or [])
        self.initial_repertoire = list(self.repertoire)
        self.policy = policy
        self.fallback_action = fallback_action
        self.scratch = ScratchState(scratch)
        self.forms: list[AdversaryForm] = list(forms or [])

    # ============================================================================
    # FORMS
    # ============================================================================

    @property
    def form_index(self) -> int:
        return int(self.scratch.get(FORM_INDEX_KEY, 0))

    def has_next_form(self) -> bool:
        return self.form_index < len(self.forms)

    def is_transformation_armed(self) -> bool:
        return bool(self.scratch.get(TRANSFORMATION_ARMED_KEY, False))

    def _on_health_depleted(self) -> None:
        # Adversaries are never knocked out, a spare form arms the transformation.
        if self.has_next_form() and not self.is_transformation_armed():
            self.scratch.set(TRANSFORMATION_ARMED_KEY, True)
            log_debug(f"{self.name} is about to transform", {"form": self.form_index + 1})

    def apply_form(self, form: AdversaryForm) -> None:
        """
        Takes the baseline stats of a form.

        Args:
            form (AdversaryForm): The form to take.

        """
        self.display_name = form.display_name
        self.max_hp = form.max_hp
        self.hp = form.max_hp
        self.attack_power = form.attack_power
        self.stun_turns = 0
        if form.repertoire is not None:
            self.repertoire = list(form.repertoire)

    # ============================================================================
    # CAPABILITIES
    # ============================================================================

    def can_act(self) -> bool:
        if self.is_transformation_armed():
            return True
        return super().can_act()

    def is_defeated(self) -> bool:
        if self.is_transformation_armed():
            return False
        return self.hp <= 0 or super().is_defeated()

    def on_restraint_broken(self) -> list[str]:
        """Reacts to the opponent breaking free: the adversary is stunned."""
        self.stun(RESTRAINT_BREAK_STUN_TURNS)
        return [f"{self.display_name} is stunned!"]

    # ============================================================================
    # ACTION SELECTION
    # ============================================================================

    def select_action(self, opponent: Any, turn: int) -> ActionSelection:
        """
        Picks the action for this turn.

        An adversary that cannot act gets a no-op flagged as such. An armed
        transformation preempts the policy. Otherwise the policy (or the
        plain weighted draw) runs, and the fallback covers an empty result.

        Args:
            opponent (Actor): The actor the adversary is fighting.
            turn (int): The current turn number.

        Returns:
            ActionSelection: The chosen action and how it was reached.

        Raises:
            NoEligibleActionError: If nothing is eligible and there is no fallback.

        """
        if not self.can_act():
            return ActionSelection(action=skip_action(), outcome=SelectionOutcome.CANNOT_ACT)

        if self.is_transformation_armed():
            return ActionSelection(action=transformation_action())

        policy = self.policy or default_select
        action = policy(self, opponent, turn)
        if action is not None:
            return ActionSelection(action=action)

        if self.fallback_action is None:
            raise NoEligibleActionError(
                f"{self.name} has no eligible action and no fallback",
                {
                    "adversary": self.name,
                    "turn": turn,
                    "player_state": opponent.get_player_state().value,
                    "repertoire": [a.name for a in self.repertoire],
                },
            )
        log_debug(f"{self.name} falls back to {self.fallback_action.name}", {"turn": turn})
        return ActionSelection(action=self.fallback_action, outcome=SelectionOutcome.FALLBACK)

    # ============================================================================
    # RESET
    # ============================================================================

    def reset_battle_state(self) -> None:
        super().reset_battle_state()
        self.repertoire = list(self.initial_repertoire)
        self.scratch.clear()
