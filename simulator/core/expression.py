"""
Formula expression module for the simulator.

Evaluates damage formulas written as strings in content data, e.g.
``"[USER_ATK] * [USER_MULT] - [TARGET_DEF] * [TARGET_MULT]"`` or
``"[USER_ATK] + 1d6"``. Variables are substituted, dice are rolled through
the shared random source, and only plain arithmetic is evaluated.
"""

import ast
import operator
import re
from typing import Any

from pydantic import BaseModel, Field

from core.error_handling import ContentError
from core.logging import log_debug
from core.utils import get_random


class VarInfo(BaseModel):
    """Class to hold variable information."""

    name: str = Field(description="Variable name")
    value: float = Field(description="Variable value")

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string")
        # Normalize name to uppercase.
        self.name = self.name.upper().strip()

    def replace_in_expr(self, expr: str) -> str:
        """
        Replaces occurrences of the variable in the expression with its value.

        Args:
            expr (str): The expression to perform replacements in.

        Returns:
            str: The expression with variable replaced by its value.

        """
        if not expr:
            return expr
        return expr.replace(f"[{self.name}]", repr(float(self.value)))


DICE_TERM = re.compile(r"\b(\d*)D(\d+)\b")
UNRESOLVED_VARIABLE = re.compile(r"\[[A-Z0-9_]+\]")

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}
_UNARY_OPERATORS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}
_FUNCTIONS = {
    "MIN": min,
    "MAX": max,
    "ABS": abs,
    "FLOOR": lambda x: float(int(x // 1)),
}


# ---- Variable Substitution ----
def substitute_variables(expr: str, variables: list[VarInfo] | None = None) -> str:
    """
    Substitutes variables in the expression with their corresponding values.

    Args:
        expr (str): The expression to substitute variables in.
        variables (list[VarInfo] | None): The variables to substitute.

    Returns:
        str: The expression with variables substituted.

    """
    expr = expr.upper().strip()
    for variable in variables or []:
        expr = variable.replace_in_expr(expr)
    return expr


# ---- Dice Rolling ----
def roll_dice_terms(expr: str) -> str:
    """
    Replaces every dice term (``2D6``, ``D4``) with the sum of its rolls.

    Args:
        expr (str): An upper-cased expression.

    Returns:
        str: The expression with dice replaced by numbers.

    """

    def _roll(match: re.Match[str]) -> str:
        count_str, sides_str = match.groups()
        count = int(count_str) if count_str else 1
        sides = int(sides_str)
        if count <= 0 or sides <= 0 or count > 100 or sides > 1000:
            raise ContentError(
                f"Invalid dice term '{match.group()}'",
                {"count": count, "sides": sides},
            )
        rng = get_random()
        rolls = [rng.randint(1, sides) for _ in range(count)]
        log_debug(f"Rolled {match.group()}", {"rolls": rolls})
        return str(sum(rolls))

    return DICE_TERM.sub(_roll, expr)


# ---- Evaluation ----
def _evaluate_node(node: ast.AST, expr: str) -> float:
    if isinstance(node, ast.Expression):
        return _evaluate_node(node.body, expr)
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)):
        return float(node.value)
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate_node(node.left, expr)
        right = _evaluate_node(node.right, expr)
        try:
            return float(_BINARY_OPERATORS[type(node.op)](left, right))
        except ZeroDivisionError:
            return 0.0
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return float(_UNARY_OPERATORS[type(node.op)](_evaluate_node(node.operand, expr)))
    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in _FUNCTIONS
        and not node.keywords
    ):
        args = [_evaluate_node(arg, expr) for arg in node.args]
        return float(_FUNCTIONS[node.func.id](*args))
    raise ContentError(f"Unsupported element in formula '{expr}'", {"node": type(node).__name__})


def evaluate_expression(expr: str, variables: list[VarInfo] | None = None) -> float:
    """
    Evaluates a formula expression.

    Args:
        expr (str): The formula, e.g. "[USER_ATK] * 1.5 + 1d4".
        variables (list[VarInfo] | None): Values for the bracketed variables.

    Returns:
        float: The value of the expression.

    Raises:
        ContentError: If the expression references unknown variables or
            contains anything other than arithmetic.

    """
    if not expr or not expr.strip():
        raise ContentError("Empty formula expression")
    processed = substitute_variables(expr, variables)
    unresolved = UNRESOLVED_VARIABLE.findall(processed)
    if unresolved:
        raise ContentError(
            f"Unknown variables in formula '{expr}'", {"unresolved": unresolved}
        )
    processed = roll_dice_terms(processed)
    try:
        tree = ast.parse(processed, mode="eval")
    except SyntaxError as e:
        raise ContentError(f"Invalid formula '{expr}'", {"processed": processed}) from e
    return _evaluate_node(tree, expr)


def build_formula_variables(
    user: Any, target: Any, user_mult: float = 1.0, target_mult: float = 1.0
) -> list[VarInfo]:
    """
    Builds the variables available to damage formulas.

    Args:
        user (Actor): The actor performing the action.
        target (Actor): The actor receiving the action.
        user_mult (float): Multiplier on the user side (critical aware).
        target_mult (float): Multiplier on the target side.

    Returns:
        list[VarInfo]: The variables for `evaluate_expression`.

    """
    return [
        VarInfo(name="USER_ATK", value=user.get_attack_power()),
        VarInfo(name="USER_HP", value=user.hp),
        VarInfo(name="USER_MAX_HP", value=user.max_hp),
        VarInfo(name="USER_MP", value=user.mp),
        VarInfo(name="USER_MAX_MP", value=user.max_mp),
        VarInfo(name="USER_MULT", value=user_mult),
        VarInfo(name="TARGET_ATK", value=target.get_attack_power()),
        VarInfo(name="TARGET_HP", value=target.hp),
        VarInfo(name="TARGET_MAX_HP", value=target.max_hp),
        VarInfo(name="TARGET_MP", value=target.mp),
        VarInfo(name="TARGET_MAX_MP", value=target.max_mp),
        VarInfo(name="TARGET_DEF", value=target.defense),
        VarInfo(name="TARGET_MULT", value=target_mult),
    ]
