"""
Combat module of the combat simulator.

Hit, critical and variance math, and the adversary decision policy that
picks which action to resolve each turn.
"""

from .combat_math import (
    AttackResult,
    apply_variance,
    calculate_attack_result,
    effective_hit_rate,
    roll_critical,
    roll_hit,
    variance_factor,
)
from .npc_ai import (
    ActionSelection,
    AdversaryForm,
    DecisionPolicy,
    PriorityRule,
    ScratchState,
    advance_form,
    default_select,
    filter_eligible_actions,
    transformation_action,
    weighted_choice,
)
