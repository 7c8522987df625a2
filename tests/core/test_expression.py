"""
Tests for formula expressions.
"""

import pytest
from core.error_handling import ContentError
from core.expression import (
    VarInfo,
    build_formula_variables,
    evaluate_expression,
    roll_dice_terms,
    substitute_variables,
)


def test_var_info_normalizes_name():
    var = VarInfo(name=" user_atk ", value=12)
    assert var.name == "USER_ATK"


def test_substitute_variables():
    expr = substitute_variables("[user_atk] * 2", [VarInfo(name="USER_ATK", value=7)])
    assert expr == "7.0 * 2"


def test_evaluate_plain_arithmetic():
    assert evaluate_expression("2 + 3 * 4") == 14.0
    assert evaluate_expression("-(2 ** 3) // 3") == -3.0


def test_evaluate_with_variables_and_functions():
    variables = [VarInfo(name="USER_ATK", value=10), VarInfo(name="TARGET_DEF", value=25)]
    assert evaluate_expression("MAX(1, [USER_ATK] - [TARGET_DEF])", variables) == 1.0
    assert evaluate_expression("floor([USER_ATK] / 3)", variables) == 3.0


def test_evaluate_division_by_zero_is_zero():
    assert evaluate_expression("5 / 0") == 0.0


def test_dice_terms_roll_within_range():
    for _ in range(200):
        value = int(roll_dice_terms("2D6"))
        assert 2 <= value <= 12


def test_dice_inside_formula():
    for _ in range(100):
        assert 11 <= evaluate_expression("10 + 1d4") <= 14


def test_invalid_dice_term():
    with pytest.raises(ContentError):
        roll_dice_terms("0D6")


def test_unknown_variable_raises():
    with pytest.raises(ContentError):
        evaluate_expression("[MISSING] + 1")


def test_code_is_rejected():
    with pytest.raises(ContentError):
        evaluate_expression("__import__('os')")


def test_empty_expression_raises():
    with pytest.raises(ContentError):
        evaluate_expression("   ")


def test_build_formula_variables(player, target):
    target.defense = 4
    variables = {var.name: var.value for var in build_formula_variables(player, target, 1.5, 0.5)}
    assert variables["USER_ATK"] == 10
    assert variables["USER_MULT"] == 1.5
    assert variables["TARGET_DEF"] == 4
    assert variables["TARGET_MULT"] == 0.5
    assert variables["TARGET_MAX_HP"] == 50
