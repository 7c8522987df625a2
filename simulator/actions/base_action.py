"""
Base action module for the simulator.

Defines the declarative description of a combat move: its kind, the damage
parameters it writes into resource pools, the status effects it applies or
removes, its accuracy and gating, and the optional hooks for one-off
behavior. Descriptions are plain values; the executor resolves them.
"""

from collections.abc import Callable
from typing import Annotated, Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.constants import (
    DEFAULT_CRITICAL_RATE,
    DEFAULT_HIT_RATE,
    DEFAULT_VARIANCE,
    AccuracyType,
    ActionTarget,
    ActionType,
    PlayerState,
    TargetStatus,
    ValueType,
)
from core.expression import build_formula_variables, evaluate_expression
from effects.status_effect import effect_key

# (user, target, user multiplier, target multiplier) -> base magnitude.
DamageFormula: TypeAlias = Callable[[Any, Any, float, float], float]


def default_damage_formula(
    user: Any, target: Any, user_mult: float = 1.0, target_mult: float = 1.0
) -> float:
    """Attack power against defense, never below 1."""
    return max(1.0, user.get_attack_power() * user_mult - target.defense * target_mult)


class DamageParameter(BaseModel):
    """
    One resource change an action makes on hit.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    target_status: TargetStatus = Field(
        TargetStatus.HP,
        description="The pool of the target to change.",
    )
    value_type: ValueType = Field(
        ValueType.DAMAGE,
        description="Whether the pool is reduced or restored.",
    )
    formula: DamageFormula | str | None = Field(
        None,
        description=(
            "Base magnitude: a function of (user, target, user_mult, "
            "target_mult), an expression string, or None for the default."
        ),
    )
    user_multiplier: float = Field(
        1.0,
        description="Scales the user side of the formula, e.g. 1.5 for a strong skill.",
    )
    target_multiplier: float = Field(
        1.0,
        description="Scales the target side of the formula.",
    )
    absorb_ratio: float = Field(
        0.0,
        ge=0.0,
        description="Share of the applied change credited to the user's same pool.",
    )
    fluctuation: float = Field(
        DEFAULT_VARIANCE,
        ge=0.0,
        description="Half-width of the variance band.",
    )

    def base_value(self, user: Any, target: Any, critical_multiplier: float = 1.0) -> float:
        """
        Evaluates the formula.

        Args:
            user (Actor): The actor performing the action.
            target (Actor): The actor receiving the change.
            critical_multiplier (float): Extra multiplier on the user side,
                above 1 only on critical hits.

        Returns:
            float: The base magnitude before variance.

        """
        user_mult = self.user_multiplier * critical_multiplier
        target_mult = self.target_multiplier
        if self.formula is None:
            return default_damage_formula(user, target, user_mult, target_mult)
        if isinstance(self.formula, str):
            variables = build_formula_variables(user, target, user_mult, target_mult)
            return evaluate_expression(self.formula, variables)
        return float(self.formula(user, target, user_mult, target_mult))


class ApplyStatusEffect(BaseModel):
    """Adds a status effect to the target with some probability."""

    type: Literal["apply"] = "apply"
    status: str = Field(
        description="The effect kind to add.",
    )
    probability: float = Field(
        1.0,
        ge=0.0,
        le=1.0,
        description="Chance the effect is added.",
    )
    duration: int | None = Field(
        None,
        ge=-1,
        description="Duration override, None for the effect default.",
    )
    value: int | None = Field(
        None,
        description="Potency override, None for the effect default.",
    )

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> str:
        return effect_key(value)


class RemoveStatusEffect(BaseModel):
    """Removes a status effect from the target with some probability."""

    type: Literal["remove"] = "remove"
    status: str = Field(
        description="The effect kind to remove.",
    )
    probability: float = Field(
        1.0,
        ge=0.0,
        le=1.0,
        description="Chance the effect is removed.",
    )

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> str:
        return effect_key(value)


ExtraEffect: TypeAlias = Annotated[
    ApplyStatusEffect | RemoveStatusEffect,
    Field(discriminator="type"),
]


class ActionDescription(BaseModel):
    """
    Declarative description of a combat move.

    The hooks are optional plain functions; the executor stays a single code
    path whatever they do.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(
        description="Name of the action.",
    )
    kind: ActionType = Field(
        ActionType.ATTACK,
        description="Kind tag deciding the built-in side effects.",
    )
    description: str = Field(
        "",
        description="Description of the action.",
    )
    target: ActionTarget = Field(
        ActionTarget.ENEMY,
        description="Whether the action hits the opponent or the user.",
    )
    messages: list[str] = Field(
        default_factory=list,
        description="Announcement templates using <USER>, <TARGET> and <SKILL>.",
    )
    mp_cost: int = Field(
        0,
        ge=0,
        description="Mana spent by the user.",
    )
    repeat_count: int = Field(
        1,
        ge=1,
        description="Number of independent repetitions.",
    )
    accuracy: float = Field(
        DEFAULT_HIT_RATE,
        ge=0.0,
        le=1.0,
        description="Base hit probability.",
    )
    accuracy_type: AccuracyType = Field(
        AccuracyType.FIXED,
        description="How the hit check is resolved.",
    )
    critical_rate: float = Field(
        DEFAULT_CRITICAL_RATE,
        ge=0.0,
        le=1.0,
        description="Critical hit probability.",
    )
    damage_parameters: list[DamageParameter] = Field(
        default_factory=list,
        description="Resource changes made on hit, in order.",
    )
    extra_effects: list[ExtraEffect] = Field(
        default_factory=list,
        description="Status effects added or removed on hit, in order.",
    )
    player_state_condition: PlayerState | None = Field(
        None,
        description="Only eligible while the opponent is in this state.",
    )
    weight: float = Field(
        1.0,
        ge=0.0,
        description="Selection weight inside a repertoire.",
    )
    can_use: Callable[[Any, Any, int], bool] | None = Field(
        None,
        description="Gate called with (user, opponent, turn).",
    )
    on_pre_use: Callable[[Any, Any, Any, int], Any] | None = Field(
        None,
        description=(
            "Called with (action, user, opponent, turn) before execution; "
            "returns the action to run, or None to call it off."
        ),
    )
    on_use: Callable[[Any, Any, int], list[str] | None] | None = Field(
        None,
        description="Called with (user, opponent, turn) after execution, may return log lines.",
    )
    custom_function: Callable[[Any, Any, Any], Any] | None = Field(
        None,
        description="Called with (user, target, single result) last on every landed repetition.",
    )
    critical_multiplier: Callable[[Any, Any], float] | None = Field(
        None,
        description="Replaces the fixed critical multiplier, called with (user, target).",
    )

    def is_eligible(self, user: Any, opponent: Any, turn: int) -> bool:
        """
        Checks the state precondition and the usage gate.

        Args:
            user (Actor): The actor that would use the action.
            opponent (Actor): The opponent whose state is checked.
            turn (int): The current turn number.

        Returns:
            bool: True if the action may be selected.

        """
        if (
            self.player_state_condition is not None
            and opponent.get_player_state() != self.player_state_condition
        ):
            return False
        if self.can_use is not None and not self.can_use(user, opponent, turn):
            return False
        return True

    def format_message(self, template: str, user: Any, target: Any) -> str:
        return (
            template.replace("<USER>", user.display_name)
            .replace("<TARGET>", target.display_name)
            .replace("<SKILL>", self.name)
        )

    def format_messages(self, user: Any, target: Any) -> list[str]:
        return [self.format_message(template, user, target) for template in self.messages]
