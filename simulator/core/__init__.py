"""
Core module of the combat simulator.

Tunable constants and enumerations, the shared random source, logging,
error types and the formula expression evaluator. Content loading lives in
``core.content`` and is imported from there.
"""

from .constants import (
    AccuracyType,
    ActionOutcome,
    ActionTarget,
    ActionType,
    EffectCategory,
    PlayerState,
    SelectionOutcome,
    StatusEffectType,
    TargetStatus,
    ValueType,
)
from .logging import (
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
    setup_logging,
)
from .utils import (
    Singleton,
    clamp,
    get_random,
    percentage,
    roll,
    set_random,
    set_random_seed,
)
from .error_handling import (
    CombatError,
    ContentError,
    NoEligibleActionError,
    ensure_duration,
    ensure_non_negative_int,
    ensure_probability,
)
from .expression import (
    VarInfo,
    build_formula_variables,
    evaluate_expression,
    substitute_variables,
)

__all__ = [
    # Import from constants.py
    "AccuracyType",
    "ActionOutcome",
    "ActionTarget",
    "ActionType",
    "EffectCategory",
    "PlayerState",
    "SelectionOutcome",
    "StatusEffectType",
    "TargetStatus",
    "ValueType",
    # Import from logging.py
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "setup_logging",
    # Import from utils.py
    "Singleton",
    "clamp",
    "get_random",
    "percentage",
    "roll",
    "set_random",
    "set_random_seed",
    # Import from error_handling.py
    "CombatError",
    "ContentError",
    "NoEligibleActionError",
    "ensure_duration",
    "ensure_non_negative_int",
    "ensure_probability",
    # Import from expression.py
    "VarInfo",
    "build_formula_variables",
    "evaluate_expression",
    "substitute_variables",
]
