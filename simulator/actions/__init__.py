"""
Action resolution engine.

Declarative action descriptions, the executor that resolves them, and the
structured results it produces.
"""

from .base_action import (
    ActionDescription,
    ApplyStatusEffect,
    DamageParameter,
    RemoveStatusEffect,
    default_damage_formula,
)
from .action_result import ActionResult, SingleActionResult, ValueChange
from .action_executor import ActionExecutor
from .action_factory import (
    basic_attack,
    create_action,
    devour_attack,
    eat_attack,
    finishing_move,
    load_repertoire,
    restraint_attack,
    skip_action,
    status_attack,
)
