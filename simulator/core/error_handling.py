"""
Error types and clamping helpers for the combat core.

Content-authoring mistakes (unknown effect kinds, broken formulas, an
adversary with nothing to do) raise. Out-of-range numbers coming out of
formulas are clamped at the lowest level and logged instead.
"""

from typing import Any, Optional

from core.constants import PERMANENT_DURATION
from core.logging import log_warning


class CombatError(Exception):
    """Base class for every error raised by the combat core."""


class ContentError(CombatError):
    """Raised when content data is malformed or refers to unknown things."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context: dict[str, Any] = context or {}


class NoEligibleActionError(ContentError):
    """Raised when an adversary has no eligible action and no fallback."""


# ==============================================================================
# CLAMPING HELPERS
# ==============================================================================


def ensure_non_negative_int(
    value: Any, param_name: str, context: Optional[dict[str, Any]] = None
) -> int:
    """
    Ensures a value is a non-negative integer, correcting if needed.
    Logs a warning for invalid values but continues execution.

    Args:
        value: The value to ensure is a non-negative integer
        param_name: Human-readable parameter name for error messages
        context: Additional context for logging

    Returns:
        int: The corrected integer value
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        log_warning(
            f"{param_name} must be a number, got: {type(value).__name__}, using 0",
            {**(context or {}), "param_name": param_name, "value": value},
        )
        return 0
    if value < 0:
        log_warning(
            f"{param_name} must be non-negative, got: {value}, clamping to 0",
            {**(context or {}), "param_name": param_name, "value": value},
        )
        return 0
    return int(value)


def ensure_duration(
    value: Any, param_name: str = "duration", context: Optional[dict[str, Any]] = None
) -> int:
    """
    Ensures a value is a valid effect duration: either the permanent sentinel
    or a non-negative integer.

    Args:
        value: The duration to validate
        param_name: Human-readable parameter name for error messages
        context: Additional context for logging

    Returns:
        int: The corrected duration
    """
    if value == PERMANENT_DURATION and not isinstance(value, bool):
        return PERMANENT_DURATION
    return ensure_non_negative_int(value, param_name, context)


def ensure_probability(
    value: Any, param_name: str, context: Optional[dict[str, Any]] = None
) -> float:
    """
    Ensures a value is a probability in [0, 1], clamping if needed.

    Args:
        value: The value to validate
        param_name: Human-readable parameter name for error messages
        context: Additional context for logging

    Returns:
        float: The clamped probability
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        log_warning(
            f"{param_name} must be a number, got: {type(value).__name__}, using 0",
            {**(context or {}), "param_name": param_name, "value": value},
        )
        return 0.0
    if value < 0.0 or value > 1.0:
        clamped = max(0.0, min(1.0, float(value)))
        log_warning(
            f"{param_name} must be between 0 and 1, got: {value}, clamping to {clamped}",
            {**(context or {}), "param_name": param_name, "value": value},
        )
        return clamped
    return float(value)
