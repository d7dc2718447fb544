import logging
from dataclasses import dataclass, field
from typing import Optional

from calculator.parser import parse
from calculator.runtime import CalcRuntimeError, evaluate
from calculator.settings import Settings, apply_precision_command
from calculator.tokenizer import tokenize
from calculator.utils import CalculatorError
from calculator.value import Value

logger = logging.getLogger(__name__)

BANNER = "Set floating point precision by writing 'fp={integer}' at the start of the line"
PROMPT = "> "


def calculate(code: str, settings: Settings = Settings()) -> Optional[Value]:
    """Runs the whole pipeline on one line; None for a line without expressions"""
    expressions = parse(tokenize(code), settings)
    if not expressions:
        return None
    if len(expressions) > 1:
        raise CalcRuntimeError("ERROR: More than one expression?")
    return evaluate(expressions, settings)[0]


@dataclass
class Session:
    """Read-loop state: owns the precision setting between input lines"""

    settings: Settings = field(default_factory=Settings)

    def handle(self, line: str) -> list[str]:
        output: list[str] = []
        command = apply_precision_command(line, self.settings)
        if command is not None:
            self.settings = command.settings
            output.extend(command.messages)
            if command.remainder is None:
                return output
            line = command.remainder

        try:
            result = calculate(line, self.settings)
        except CalculatorError as e:
            logger.debug(f"Failed to process {line!r}: {e.errmsg}")
            output.append(str(e))
            return output

        if result is not None:
            output.append(result.pretty())
        return output
