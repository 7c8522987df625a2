"""
Action result module for the simulator.

Structured records of what an action execution did: per repetition whether
it landed, which pools changed by how much, and which effects came and went.
"""

from pydantic import BaseModel, Field

from core.constants import ActionOutcome, ActionType, TargetStatus


class ValueChange(BaseModel):
    """A signed change applied to one resource pool."""

    target_status: TargetStatus = Field(
        description="The pool that changed.",
    )
    change: int = Field(
        description="Negative for damage, positive for healing or gains.",
    )


class SingleActionResult(BaseModel):
    """
    The outcome of one repetition of an action.
    """

    success: bool = Field(
        description="True if the repetition landed.",
    )
    critical_hit: bool = Field(
        False,
        description="True if the repetition was a critical hit.",
    )
    evaded: bool = Field(
        False,
        description="True if the target avoided it outright (e.g. invincible).",
    )
    user_value_changes: list[ValueChange] = Field(
        default_factory=list,
        description="Changes credited to the user (leech).",
    )
    target_value_changes: list[ValueChange] = Field(
        default_factory=list,
        description="Changes applied to the target.",
    )
    target_added_states: list[str] = Field(
        default_factory=list,
        description="Effect kinds added to the target.",
    )
    target_removed_states: list[str] = Field(
        default_factory=list,
        description="Effect kinds removed from the target.",
    )

    @property
    def is_miss(self) -> bool:
        return not self.success

    def target_change(self, status: TargetStatus = TargetStatus.HP) -> int:
        return sum(c.change for c in self.target_value_changes if c.target_status == status)

    def user_change(self, status: TargetStatus = TargetStatus.HP) -> int:
        return sum(c.change for c in self.user_value_changes if c.target_status == status)


class ActionResult(BaseModel):
    """
    The complete outcome of executing an action.

    A cancelled action (its pre-use hook called it off) and a skipped one
    (a no-op kind) carry no repetitions. A performed action that missed every
    time carries repetitions that all report ``success=False``.
    """

    action_name: str = Field(
        description="Name of the executed action.",
    )
    kind: ActionType = Field(
        description="Kind of the executed action.",
    )
    outcome: ActionOutcome = Field(
        ActionOutcome.PERFORMED,
        description="Whether the action was performed, cancelled or skipped.",
    )
    mp_paid: bool = Field(
        True,
        description="False if the user could not pay the full mana cost.",
    )
    results: list[SingleActionResult] = Field(
        default_factory=list,
        description="One record per repetition.",
    )
    messages: list[str] = Field(
        default_factory=list,
        description="Log lines for presentation, in order.",
    )

    @property
    def hits(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def misses(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @property
    def criticals(self) -> int:
        return sum(1 for result in self.results if result.critical_hit)

    @property
    def is_miss(self) -> bool:
        """True when the action was performed and every repetition missed."""
        return self.outcome == ActionOutcome.PERFORMED and bool(self.results) and self.hits == 0

    def total_target_change(self, status: TargetStatus = TargetStatus.HP) -> int:
        return sum(result.target_change(status) for result in self.results)

    def total_user_change(self, status: TargetStatus = TargetStatus.HP) -> int:
        return sum(result.user_change(status) for result in self.results)

    def added_states(self) -> list[str]:
        return [kind for result in self.results for kind in result.target_added_states]

    def removed_states(self) -> list[str]:
        return [kind for result in self.results for kind in result.target_removed_states]
