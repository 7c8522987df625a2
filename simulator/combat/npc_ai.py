"""
Adversary decision policy module for the simulator.

Picks an adversary's action each turn: filter the repertoire by the
opponent's state and the usage gates, give priority rules a chance to
short-circuit, then draw by weight. Adversaries remember cooldowns, phases
and counters in their own scratch state.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import TypeVar

from actions.base_action import ActionDescription
from core.constants import ActionType, SelectionOutcome
from core.logging import log_debug
from core.utils import get_random

T = TypeVar("T")

ScratchValue = int | float | str | bool | None

# Scratch keys used by multi-form adversaries.
FORM_INDEX_KEY = "form_index"
TRANSFORMATION_ARMED_KEY = "transformation_armed"


# =============================================================================
# Scratch State
# =============================================================================


class ScratchState:
    """
    Open-ended key/value memory owned by one adversary.

    Reads take a default that is returned when the key was never written.
    """

    def __init__(self, initial: dict[str, ScratchValue] | None = None) -> None:
        self._values: dict[str, ScratchValue] = dict(initial or {})

    def get(self, key: str, default: T) -> T:
        return self._values.get(key, default)  # type: ignore[return-value]

    def set(self, key: str, value: ScratchValue) -> None:
        self._values[key] = value

    def has(self, key: str) -> bool:
        return key in self._values

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def increment(self, key: str, amount: int = 1) -> int:
        """Adds to a counter (0 if unset) and returns the new value."""
        value = int(self.get(key, 0)) + amount
        self._values[key] = value
        return value

    def decrement(self, key: str, amount: int = 1) -> int:
        """Subtracts from a counter, never going below 0."""
        value = max(0, int(self.get(key, 0)) - amount)
        self._values[key] = value
        return value

    def clear(self) -> None:
        self._values.clear()

    def to_dict(self) -> dict[str, ScratchValue]:
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __repr__(self) -> str:
        return f"ScratchState({self._values!r})"


# =============================================================================
# Selection Models
# =============================================================================


class ActionSelection(BaseModel):
    """
    The action an adversary settled on, and how it got there.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    action: ActionDescription = Field(
        description="The action to execute.",
    )
    outcome: SelectionOutcome = Field(
        SelectionOutcome.SELECTED,
        description="Selected normally, taken as fallback, or forced because the adversary cannot act.",
    )

    @property
    def can_act(self) -> bool:
        return self.outcome != SelectionOutcome.CANNOT_ACT


class PriorityRule(BaseModel):
    """
    A rule that bypasses the weighted draw.

    When the condition holds and the named action is eligible, the action is
    forced with the given probability. A cooldown keeps the rule quiet for
    that many selections after it fires.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(
        description="Name of the rule, also its cooldown key.",
    )
    condition: Callable[[Any, Any, int], bool] = Field(
        description="Called with (adversary, opponent, turn).",
    )
    action_name: str = Field(
        description="Name of the action to force.",
    )
    probability: float = Field(
        1.0,
        ge=0.0,
        le=1.0,
        description="Chance the rule fires when its condition holds.",
    )
    cooldown: int = Field(
        0,
        ge=0,
        description="Selections to wait after firing.",
    )

    @property
    def cooldown_key(self) -> str:
        return f"cooldown:{self.name}"


class AdversaryForm(BaseModel):
    """
    Baseline stats of one form of a multi-form adversary.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    display_name: str = Field(
        description="Name shown while in this form.",
    )
    max_hp: int = Field(
        gt=0,
        description="Maximum (and starting) health of the form.",
    )
    attack_power: int = Field(
        ge=0,
        description="Attack power of the form.",
    )
    messages: list[str] = Field(
        default_factory=list,
        description="Lines announcing the transformation, using <USER> and <TARGET>.",
    )
    repertoire: list[ActionDescription] | None = Field(
        None,
        description="Replacement repertoire for this form, None to keep the current one.",
    )


# =============================================================================
# Support Functions
# =============================================================================


def hp_ratio(actor: Any, missing: bool = False) -> float:
    """
    Helper function to calculate HP ratio.

    Args:
        actor (Actor):
            The actor whose HP ratio to calculate.
        missing (bool):
            If True, returns the missing HP ratio (1 - current HP / max HP).

    Returns:
        float:
            The HP ratio (0.0 to 1.0), or missing HP ratio if specified.

    """
    ratio = (actor.hp / actor.max_hp) if actor.max_hp > 0 else 0.0
    return 1.0 - ratio if missing else ratio


def find_action(actions: list[ActionDescription], name: str) -> ActionDescription | None:
    for action in actions:
        if action.name == name:
            return action
    return None


def filter_eligible_actions(
    actions: list[ActionDescription],
    adversary: Any,
    opponent: Any,
    turn: int,
) -> list[ActionDescription]:
    """
    Keeps the actions whose state precondition and usage gate allow them.

    Args:
        actions (list[ActionDescription]):
            The repertoire, in order.
        adversary (Adversary):
            The adversary choosing.
        opponent (Actor):
            The opponent whose state is checked.
        turn (int):
            The current turn number.

    Returns:
        list[ActionDescription]:
            The eligible actions, in repertoire order.

    """
    return [action for action in actions if action.is_eligible(adversary, opponent, turn)]


def weighted_choice(actions: list[ActionDescription]) -> ActionDescription | None:
    """
    Draws an action with probability proportional to its weight.

    Actions with a weight of 0 are never drawn.

    Args:
        actions (list[ActionDescription]):
            The candidates.

    Returns:
        ActionDescription | None:
            The drawn action, None if no candidate has a positive weight.

    """
    candidates = [action for action in actions if action.weight > 0]
    if not candidates:
        return None
    total = sum(action.weight for action in candidates)
    remaining = get_random().random() * total
    for action in candidates:
        remaining -= action.weight
        if remaining <= 0:
            return action
    # Float rounding can leave a sliver past the last weight.
    return candidates[-1]


def default_select(adversary: Any, opponent: Any, turn: int) -> ActionDescription | None:
    """The plain policy: filter the repertoire, then draw by weight."""
    eligible = filter_eligible_actions(adversary.repertoire, adversary, opponent, turn)
    return weighted_choice(eligible)


# =============================================================================
# Decision Policy
# =============================================================================


class DecisionPolicy:
    """
    A decision policy made of priority rules layered over the weighted draw.

    Policies are called with (adversary, opponent, turn) and return an
    action or None when nothing is eligible.
    """

    def __init__(self, rules: list[PriorityRule] | None = None) -> None:
        self.rules: list[PriorityRule] = list(rules or [])

    def __call__(self, adversary: Any, opponent: Any, turn: int) -> ActionDescription | None:
        eligible = filter_eligible_actions(adversary.repertoire, adversary, opponent, turn)
        scratch: ScratchState = adversary.scratch
        waiting = {rule.cooldown_key for rule in self.rules if scratch.get(rule.cooldown_key, 0) > 0}
        try:
            return self._select(eligible, waiting, adversary, opponent, turn)
        finally:
            for key in waiting:
                scratch.decrement(key)

    def _select(
        self,
        eligible: list[ActionDescription],
        waiting: set[str],
        adversary: Any,
        opponent: Any,
        turn: int,
    ) -> ActionDescription | None:
        scratch: ScratchState = adversary.scratch
        for rule in self.rules:
            if rule.cooldown_key in waiting:
                continue
            if not rule.condition(adversary, opponent, turn):
                continue
            action = find_action(eligible, rule.action_name)
            if action is None:
                continue
            if get_random().random() >= rule.probability:
                continue
            if rule.cooldown > 0:
                scratch.set(rule.cooldown_key, rule.cooldown)
            log_debug(
                f"Priority rule '{rule.name}' forced {action.name}",
                {"adversary": adversary.name, "turn": turn},
            )
            return action
        return weighted_choice(eligible)


# =============================================================================
# Transformation
# =============================================================================


def advance_form(adversary: Any, opponent: Any, turn: int) -> list[str]:
    """
    Moves a multi-form adversary into its next form.

    The adversary takes the new form's baseline stats, and its opponent is
    fully restored as part of the transformation.

    Args:
        adversary (Adversary): The transforming adversary.
        opponent (Actor): Its opponent.
        turn (int): The current turn number.

    Returns:
        list[str]: Log lines.

    """
    index = int(adversary.scratch.get(FORM_INDEX_KEY, 0))
    form: AdversaryForm = adversary.forms[index]
    adversary.scratch.set(FORM_INDEX_KEY, index + 1)
    adversary.scratch.set(TRANSFORMATION_ARMED_KEY, False)

    adversary.apply_form(form)
    opponent.heal(opponent.max_hp)
    opponent.recover_mp(opponent.max_mp)

    log_debug(
        f"{adversary.name} transformed",
        {"form": index + 1, "display_name": form.display_name, "turn": turn},
    )
    messages = [
        line.replace("<USER>", adversary.display_name).replace("<TARGET>", opponent.display_name)
        for line in form.messages
    ]
    messages.append(f"{opponent.display_name} is fully restored!")
    messages.append(f"{adversary.display_name} rises again!")
    return messages


def transformation_action(name: str = "Transformation") -> ActionDescription:
    """
    The one-shot action a multi-form adversary uses to change form.

    Args:
        name (str): Name of the action.

    Returns:
        ActionDescription: A no-roll action whose use hook advances the form.

    """
    return ActionDescription(
        name=name,
        kind=ActionType.TRANSFORM,
        description="Changes into the next form.",
        messages=["<USER> begins to transform..."],
        on_use=advance_form,
    )
