import logging
import os
import re
from dataclasses import dataclass, replace
from typing import Optional

logger = logging.getLogger(__name__)

PRECISION_ENV_VAR = "CALCULATOR_PRECISION"
PRECISION_COMMAND = "fp="


def parse_precision(text: str) -> Optional[int]:
    try:
        precision = int(text)
    except ValueError:
        return None
    if precision <= 0:
        return None
    return precision


@dataclass(frozen=True)
class Settings:
    """Per-evaluation configuration; precision is a digit count or None for plain int/float arithmetic"""

    precision: Optional[int] = None

    @property
    def fixed(self) -> bool:
        return self.precision is not None

    def with_precision(self, precision: Optional[int]) -> "Settings":
        return replace(self, precision=precision)

    @classmethod
    def from_env(cls) -> "Settings":
        raw = os.environ.get(PRECISION_ENV_VAR)
        if raw is None:
            return cls()
        precision = parse_precision(raw)
        if precision is None:
            logger.warning(f"Ignoring invalid {PRECISION_ENV_VAR}={raw!r}")
        return cls(precision=precision)


@dataclass
class PrecisionCommandResult:
    settings: Settings
    messages: list[str]
    remainder: Optional[str]


_PRECISION_ARG_RE = re.compile(r"\s*(?P<value>\S+)(?P<rest>.*)", re.DOTALL)


def apply_precision_command(line: str, settings: Settings) -> Optional[PrecisionCommandResult]:
    """Handles lines like 'fp=3 1.5 + 2'.

    Returns None when the line is not a precision command. Otherwise the result holds the
    updated settings, messages for the user and the rest of the line to evaluate (None
    aborts the cycle).
    """
    if not line.startswith(PRECISION_COMMAND):
        return None

    match = _PRECISION_ARG_RE.match(line[len(PRECISION_COMMAND) :])
    precision = parse_precision(match.group("value")) if match else None
    if precision is None:
        messages = ["Couldn't find valid fixed precision value"]
        if settings.fixed:
            messages.append("Resetting precision")
            logger.debug("Precision reset")
        return PrecisionCommandResult(settings=settings.with_precision(None), messages=messages, remainder=None)

    logger.debug(f"Precision set to {precision}")
    rest = match.group("rest") if match else ""
    return PrecisionCommandResult(
        settings=settings.with_precision(precision),
        messages=[f"Setting precision to {precision}"],
        remainder=rest if rest.strip() else None,
    )
