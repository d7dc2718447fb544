import decimal
import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Type

from calculator.builtins import BUILTIN_CONSTANTS, BUILTIN_FUNCS
from calculator.parser import (
    BinaryFunction,
    BinaryOperation,
    BinaryOperator,
    Expression,
    Module,
    SymbolConstant,
    UnaryFunction,
    pretty_print,
)
from calculator.settings import Settings
from calculator.utils import CalculatorError
from calculator.value import FixedDecimal, Float, Integer, Value, number_to_value, wrap_int

logger = logging.getLogger(__name__)

# extra digits kept by fixed decimal arithmetic beyond what the operands and precision need
GUARD_DIGITS = 28


@dataclass
class CalcRuntimeError(CalculatorError):
    pass


def evaluate(expressions: list[Expression], settings: Settings = Settings()) -> list[Value]:
    results: list[Value] = []
    for expression in expressions:
        res = evaluate_expression(expression, settings)
        logger.debug(f"{pretty_print(expression)} => {res.pretty()}")
        results.append(res)
    return results


def evaluate_expression(expression: Expression, settings: Settings = Settings()) -> Value:
    """Reduces the tree bottom-up to a single value; a value reduces to itself"""
    if isinstance(expression, Value):
        return expression
    elif isinstance(expression, BinaryOperation):
        left_res = evaluate_expression(expression.left, settings)
        right_res = evaluate_expression(expression.right, settings)
        if expression.operator is BinaryOperator.ADD:
            return eval_binary_operation(add_impls, a=left_res, b=right_res, op_name="Addition", settings=settings)
        elif expression.operator is BinaryOperator.SUB:
            return eval_binary_operation(sub_impls, a=left_res, b=right_res, op_name="Subtraction", settings=settings)
        elif expression.operator is BinaryOperator.MUL:
            return eval_binary_operation(mul_impls, a=left_res, b=right_res, op_name="Multiplication", settings=settings)
        elif expression.operator is BinaryOperator.DIV:
            if right_res.number == 0:
                raise CalcRuntimeError("Cannot divide by 0 (zero)")
            return eval_binary_operation(div_impls, a=left_res, b=right_res, op_name="Division", settings=settings)
        elif expression.operator is BinaryOperator.POW:
            return eval_binary_operation(pow_impls, a=left_res, b=right_res, op_name="Power", settings=settings)
        else:
            raise CalcRuntimeError(f"Unexpected binary operator: {expression.operator}")
    elif isinstance(expression, Module):
        operand = evaluate_expression(expression.operand, settings)
        return number_to_value(abs(operand.to_float()), settings)
    elif isinstance(expression, SymbolConstant):
        if expression.name not in BUILTIN_CONSTANTS:
            raise CalcRuntimeError(f"Unknown symbol: {expression.name!r}")
        return number_to_value(BUILTIN_CONSTANTS[expression.name], settings)
    elif isinstance(expression, UnaryFunction):
        argument = evaluate_expression(expression.argument, settings)
        return call_builtin_func(expression.name, [argument], settings)
    elif isinstance(expression, BinaryFunction):
        first = evaluate_expression(expression.first, settings)
        second = evaluate_expression(expression.second, settings)
        return call_builtin_func(expression.name, [first, second], settings)
    else:
        raise CalcRuntimeError(f"Not calculated expression can't be used: {expression!r}")


def call_builtin_func(name: str, args: list[Value], settings: Settings) -> Value:
    func = BUILTIN_FUNCS.get(name)
    if func is None:
        raise CalcRuntimeError(f"Unknown symbol: {name!r}")
    if func.arity != len(args):
        raise CalcRuntimeError(f"{name!r} takes {func.arity} argument(s), got {len(args)}")
    try:
        res = func.fn(*(arg.to_float() for arg in args))
    except (ArithmeticError, ValueError) as e:
        raise CalcRuntimeError(f"{name!r} failed: {e}") from e
    return number_to_value(res, settings)


BinaryOperationImpl = Callable[[Value, Value, Settings], Value]
BinaryOperationImplTable = list[tuple[tuple[Type[Value], Type[Value]], BinaryOperationImpl]]


def eval_binary_operation(
    table: BinaryOperationImplTable, a: Value, b: Value, op_name: str, settings: Settings
) -> Value:
    for (type_a, type_b), impl in table:
        if isinstance(a, type_a) and isinstance(b, type_b):
            try:
                return impl(a, b, settings)
            except (ArithmeticError, ValueError) as e:
                raise CalcRuntimeError(f"{op_name} failed: {e}") from e
    else:
        raise CalcRuntimeError(f"{op_name} is not defined for {a.type_name()} and {b.type_name()}")


def to_decimal(value: Value) -> Decimal:
    if isinstance(value, FixedDecimal):
        return value.v
    elif isinstance(value, Float):
        return Decimal(repr(value.v))
    else:
        return Decimal(value.number)


def truncate(v: Decimal, settings: Settings) -> Decimal:
    if settings.precision is None:
        return v
    return v.quantize(Decimal(1).scaleb(-settings.precision), rounding=decimal.ROUND_DOWN)


def digit_span(v: Decimal) -> int:
    """Digits needed to hold v exactly, integer part and fraction part together"""
    if not v.is_finite():
        return 1
    return max(v.adjusted(), 0) + 1 + max(-v.as_tuple().exponent, 0)  # type: ignore


def working_precision(x: Decimal, y: Decimal, settings: Settings, quotient: bool) -> int:
    fraction_digits = settings.precision or 0
    if quotient:
        # integer digits of x / y, then the kept fraction digits
        integer_digits = max(x.adjusted() - y.adjusted(), 0) + 2
        return integer_digits + fraction_digits + GUARD_DIGITS
    # sums, differences and products of the operands fit exactly
    return digit_span(x) + digit_span(y) + fraction_digits + GUARD_DIGITS


def fixed_impl(op: Callable[[Decimal, Decimal], Decimal], quotient: bool = False) -> BinaryOperationImpl:
    """Fixed decimal arithmetic; the right operand's precision tag wins when both are fixed"""

    def impl(a: Value, b: Value, settings: Settings) -> Value:
        precision = b.precision if isinstance(b, FixedDecimal) else a.precision  # type: ignore
        x, y = to_decimal(a), to_decimal(b)
        with decimal.localcontext() as ctx:
            ctx.prec = working_precision(x, y, settings, quotient)
            ctx.rounding = decimal.ROUND_DOWN
            return FixedDecimal(truncate(op(x, y), settings), precision=precision)

    return impl


add_impls: BinaryOperationImplTable = [
    ((Integer, Integer), lambda a, b, s: Integer(wrap_int(a.v + b.v))),  # type: ignore
    ((FixedDecimal, Value), fixed_impl(lambda x, y: x + y)),
    ((Value, FixedDecimal), fixed_impl(lambda x, y: x + y)),
    ((Value, Value), lambda a, b, s: Float(a.to_float() + b.to_float())),
]
sub_impls: BinaryOperationImplTable = [
    ((Integer, Integer), lambda a, b, s: Integer(wrap_int(a.v - b.v))),  # type: ignore
    ((FixedDecimal, Value), fixed_impl(lambda x, y: x - y)),
    ((Value, FixedDecimal), fixed_impl(lambda x, y: x - y)),
    ((Value, Value), lambda a, b, s: Float(a.to_float() - b.to_float())),
]
mul_impls: BinaryOperationImplTable = [
    ((Integer, Integer), lambda a, b, s: Integer(wrap_int(a.v * b.v))),  # type: ignore
    ((FixedDecimal, Value), fixed_impl(lambda x, y: x * y)),
    ((Value, FixedDecimal), fixed_impl(lambda x, y: x * y)),
    ((Value, Value), lambda a, b, s: Float(a.to_float() * b.to_float())),
]
div_impls: BinaryOperationImplTable = [
    ((FixedDecimal, Value), fixed_impl(lambda x, y: x / y, quotient=True)),
    ((Value, FixedDecimal), fixed_impl(lambda x, y: x / y, quotient=True)),
    # integer division included: the quotient is always a float
    ((Value, Value), lambda a, b, s: Float(a.to_float() / b.to_float())),
]
pow_impls: BinaryOperationImplTable = [
    ((Value, Value), lambda a, b, s: number_to_value(math.pow(a.to_float(), b.to_float()), s)),
]
