import inspect
import math
from dataclasses import dataclass
from typing import Callable

BUILTIN_CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}


@dataclass
class BuiltinFunc:
    name: str
    arity: int
    fn: Callable[..., float]


BUILTIN_FUNCS: dict[str, BuiltinFunc] = dict()


def register_builtin_func(name: str):
    def decorator(fn: Callable[..., float]) -> Callable[..., float]:
        arity = len(inspect.signature(fn).parameters)
        BUILTIN_FUNCS[name] = BuiltinFunc(name=name, arity=arity, fn=fn)
        return fn

    return decorator


@register_builtin_func("sin")
def sin_(x: float) -> float:
    return math.sin(x)


@register_builtin_func("cos")
def cos_(x: float) -> float:
    return math.cos(x)


@register_builtin_func("tg")
def tg_(x: float) -> float:
    return math.tan(x)


@register_builtin_func("ctg")
def ctg_(x: float) -> float:
    # reciprocal of the argument itself, not of its tangent
    return 1 / x


@register_builtin_func("sqrt")
def sqrt_(x: float) -> float:
    if x < 0:
        raise ValueError("Negative square roots are not supported")
    return math.sqrt(x)


@register_builtin_func("ln")
def ln_(x: float) -> float:
    return math.log(x)


@register_builtin_func("log")
def log_(value: float, base: float) -> float:
    """'log a b' is the logarithm of a to the base b"""
    return math.log(value) / math.log(base)
