import abc
import decimal
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from calculator.settings import Settings

INT_BITS = 32

Number = Union[int, float, Decimal]


class Value(abc.ABC):
    """Fully reduced expression node"""

    @classmethod
    @abc.abstractmethod
    def type_name(cls) -> str:
        ...

    @property
    @abc.abstractmethod
    def number(self) -> Number:
        ...

    def pretty(self) -> str:
        return str(self.number)

    def to_float(self) -> float:
        return float(self.number)


@dataclass
class Integer(Value):
    v: int

    @classmethod
    def type_name(cls) -> str:
        return "Integer"

    @property
    def number(self) -> int:
        return self.v


@dataclass
class Float(Value):
    v: float

    @classmethod
    def type_name(cls) -> str:
        return "Float"

    @property
    def number(self) -> float:
        return self.v

    def pretty(self) -> str:
        return repr(self.v)


@dataclass
class FixedDecimal(Value):
    v: Decimal
    precision: int

    @classmethod
    def type_name(cls) -> str:
        return "Fixed decimal"

    @property
    def number(self) -> Decimal:
        return self.v


def wrap_int(v: int) -> int:
    """Two's complement wrap-around of a 32-bit integer"""
    half = 1 << (INT_BITS - 1)
    return (v + half) % (1 << INT_BITS) - half


def fits_int(v: float) -> bool:
    return -(1 << (INT_BITS - 1)) <= v < (1 << (INT_BITS - 1))


def fixed_from_float(v: float, precision: int) -> FixedDecimal:
    # exact binary value rounded to `precision` significant digits
    context = decimal.Context(prec=precision, rounding=decimal.ROUND_HALF_UP)
    return FixedDecimal(context.create_decimal_from_float(v), precision=precision)


def number_to_value(number: Number, settings: Settings) -> Value:
    """Boxes a freshly computed number: fixed decimal under an active precision, else integer when integral"""
    v = float(number)
    if settings.precision is not None:
        return fixed_from_float(v, settings.precision)
    if v.is_integer() and fits_int(v):
        return Integer(int(v))
    return Float(v)
