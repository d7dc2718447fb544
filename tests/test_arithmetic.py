import math
from decimal import Decimal

import pytest

from calculator.parser import BinaryOperation, BinaryOperator, Module, parse
from calculator.runtime import CalcRuntimeError, evaluate, evaluate_expression
from calculator.settings import Settings
from calculator.tokenizer import tokenize
from calculator.value import FixedDecimal, Float, Integer, Value


def run(code: str, settings: Settings = Settings()) -> Value:
    tokens = tokenize(code)
    ast = parse(tokens, settings)
    results = evaluate(ast, settings)
    return results[-1]


@pytest.mark.parametrize(
    "code, expected_ret_val",
    [
        pytest.param("1", Integer(1)),
        pytest.param("-1", Integer(-1)),
        pytest.param("1+2", Integer(3)),
        pytest.param("(1+2)", Integer(3)),
        pytest.param("-(1+2)", Integer(-3)),
        pytest.param("(((1)))", Integer(1)),
        pytest.param("--2", Integer(2)),
        pytest.param("-2 + 1", Integer(-1)),
        # one precedence level, chained to the right
        pytest.param("2 * 3 + 4", Integer(14)),
        pytest.param("1 + 4 * 5", Integer(21)),
        pytest.param("10 - 2 - 3", Integer(11)),
        pytest.param("(10 - 2) - 3", Integer(5)),
        pytest.param("10 / 5 / 2", Float(4.0)),
        # division always yields a float
        pytest.param("10/2", Float(5.0)),
        pytest.param("1 / 4", Float(0.25)),
        pytest.param("1.5 + 1", Float(2.5)),
        pytest.param("1 + 1.5", Float(2.5)),
        pytest.param("0.5 * 0.5", Float(0.25)),
        pytest.param("3 - 0.5", Float(2.5)),
        # power goes through the constant construction rule
        pytest.param("2 ^ 3", Integer(8)),
        pytest.param("4 ^ 0.5", Integer(2)),
        pytest.param("2 ^ -1", Float(0.5)),
        pytest.param("2 ^ 40", Float(1099511627776.0)),
        # absolute value
        pytest.param("|1 - 5|", Integer(4)),
        pytest.param("|-2.5|", Float(2.5)),
        pytest.param("|2 - 5| * 2", Integer(6)),
        # 32-bit integers
        pytest.param("2147483647 + 1", Integer(-2147483648)),
        pytest.param("65536 * 65536", Integer(0)),
    ],
)
def test_eval_arithmetic(code: str, expected_ret_val: Value) -> None:
    assert run(code) == expected_ret_val


@pytest.mark.parametrize(
    "code, errmsg",
    [
        pytest.param("10/0", "Cannot divide by 0"),
        pytest.param("1.5 / 0.0", "Cannot divide by 0"),
        pytest.param("1 / (2 - 2)", "Cannot divide by 0"),
        pytest.param("0 ^ -1", "Power failed"),
        pytest.param("-8 ^ 0.5", "Power failed"),
    ],
)
def test_eval_errors(code: str, errmsg: str) -> None:
    with pytest.raises(CalcRuntimeError, match=errmsg):
        run(code)


def test_reducing_value_returns_it_unchanged() -> None:
    value = Integer(3)
    assert evaluate_expression(value) is value
    assert evaluate_expression(evaluate_expression(value)) is value


@pytest.mark.parametrize("literal", ["0", "7", "42", "2147483647", "1000000"])
def test_integer_literal_round_trip(literal: str) -> None:
    assert run(literal).pretty() == literal


def test_pow_of_large_result_is_float() -> None:
    res = run("2 ^ 0.5")
    assert isinstance(res, Float)
    assert res.v == pytest.approx(math.sqrt(2))


@pytest.mark.parametrize(
    "code, precision, expected",
    [
        # literals are rounded to significant digits, results truncated to fraction digits
        pytest.param("1.005 + 1.005", 2, FixedDecimal(Decimal("2.00"), 2)),
        pytest.param("1.5 / 3", 4, FixedDecimal(Decimal("0.5000"), 4)),
        pytest.param("10 / 3.0", 2, FixedDecimal(Decimal("3.33"), 2)),
        pytest.param("2 / 3.0", 2, FixedDecimal(Decimal("0.66"), 2)),
        pytest.param("1 - 2.5", 3, FixedDecimal(Decimal("-1.500"), 3)),
        pytest.param("1.25 * 2", 3, FixedDecimal(Decimal("2.500"), 3)),
        pytest.param("2 ^ 3", 3, FixedDecimal(Decimal("8"), 3)),
        pytest.param("pi", 3, FixedDecimal(Decimal("3.14"), 3)),
        # absolute value is re-boxed at the active precision
        pytest.param("|2 - 5|", 2, FixedDecimal(Decimal("3"), 2)),
        pytest.param("|-1.5|", 2, FixedDecimal(Decimal("1.5"), 2)),
        # operands far wider than the default decimal context
        pytest.param("1.5 * 10 ^ 110", 2, FixedDecimal(Decimal("15" + "0" * 109 + ".00"), 2)),
        pytest.param("(10 ^ 120) / 4.0", 2, FixedDecimal(Decimal("25" + "0" * 118 + ".00"), 2)),
        pytest.param("(10 ^ 150) + 0.5", 3, FixedDecimal(Decimal("1" + "0" * 150 + ".500"), 3)),
    ],
)
def test_eval_fixed_precision(code: str, precision: int, expected: FixedDecimal) -> None:
    res = run(code, Settings(precision=precision))
    assert isinstance(res, FixedDecimal)
    assert res.precision == expected.precision
    assert res.v == expected.v
    assert res.pretty() == str(expected.v)


def test_fixed_precision_truncates_instead_of_rounding() -> None:
    res = run("2 / 3.0", Settings(precision=2))
    assert res.pretty() == "0.66"


def test_integers_stay_integers_under_fixed_precision() -> None:
    assert run("1 + 2", Settings(precision=2)) == Integer(3)
    assert run("10 / 4", Settings(precision=2)) == Float(2.5)


def test_right_precision_tag_wins() -> None:
    expr = BinaryOperation(
        operator=BinaryOperator.ADD,
        left=FixedDecimal(Decimal("1.5"), 2),
        right=FixedDecimal(Decimal("2.25"), 5),
    )
    res = evaluate_expression(expr, Settings(precision=3))
    assert res == FixedDecimal(Decimal("3.750"), 5)

    res = evaluate_expression(expr, Settings())
    assert isinstance(res, FixedDecimal)
    assert res.precision == 5
    assert res.pretty() == "3.75"


def test_fixed_operand_with_float_keeps_its_tag() -> None:
    expr = BinaryOperation(operator=BinaryOperator.MUL, left=Float(0.5), right=FixedDecimal(Decimal("3"), 4))
    res = evaluate_expression(expr, Settings())
    assert res == FixedDecimal(Decimal("1.5"), 4)


def test_module_does_not_keep_fixed_decimal_without_precision() -> None:
    res = evaluate_expression(Module(FixedDecimal(Decimal("-1.5"), 2)), Settings())
    assert res == Float(1.5)


def test_unreducible_node_is_an_error() -> None:
    with pytest.raises(CalcRuntimeError, match="Not calculated expression"):
        evaluate_expression(BinaryOperation(BinaryOperator.ADD, Integer(1), "x"))  # type: ignore
