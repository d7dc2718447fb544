import enum
from dataclasses import dataclass


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


@dataclass
class CalculatorError(Exception):
    """Base class for every failure raised while processing one input line"""

    errmsg: str

    def __str__(self) -> str:
        return self.errmsg
