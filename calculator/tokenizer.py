import enum
import logging
import re
from dataclasses import dataclass, replace
from typing import Callable

from calculator.utils import CalculatorError, PrintableEnum
from calculator.value import fits_int

logger = logging.getLogger(__name__)


@dataclass
class TokenizerError(CalculatorError):
    code: str
    error_char_idx: int

    def __str__(self) -> str:
        print_start_idx = max(0, self.error_char_idx - 10)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(self.code), self.error_char_idx + 10)
        print_ellipsis_post = print_end_idx < len(self.code)
        return "\n".join(
            [
                f"[Tokenizer error] {self.errmsg}",
                (
                    ("..." if print_ellipsis_pre else "")
                    + f"{self.code[print_start_idx:print_end_idx]}"
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (self.error_char_idx - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )


class TokenType(PrintableEnum):
    # unresolved, as produced by the scanning rules
    OPERATOR = enum.auto()
    NUMBER = enum.auto()
    ORDER = enum.auto()
    # operators
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    HAT = enum.auto()
    MOD = enum.auto()
    LEFT_PAREN = enum.auto()
    RIGHT_PAREN = enum.auto()
    # literals
    INT = enum.auto()
    DEC = enum.auto()
    # named symbols
    SIN = enum.auto()
    COS = enum.auto()
    TG = enum.auto()
    CTG = enum.auto()
    SQRT = enum.auto()
    LN = enum.auto()
    LOG = enum.auto()
    PI = enum.auto()
    E = enum.auto()
    # end of tokens
    EOT = enum.auto()


OPERATORS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "/": TokenType.SLASH,
    "*": TokenType.STAR,
    "^": TokenType.HAT,
    "|": TokenType.MOD,
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
}

KEYWORDS = {
    "sin": TokenType.SIN,
    "cos": TokenType.COS,
    "tg": TokenType.TG,
    "ctg": TokenType.CTG,
    "sqrt": TokenType.SQRT,
    "log": TokenType.LOG,
    "ln": TokenType.LN,
    "pi": TokenType.PI,
    "e": TokenType.E,
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    line: int = 1
    pos: int = 0
    resolved: bool = False

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"

    def resolve(self, code: str = "") -> "Token":
        """Turns an OPERATOR/NUMBER/ORDER token into its final type, resolving twice is a no-op"""
        if self.resolved:
            return self
        if self.type is TokenType.NUMBER:
            return self._resolve_number(code)
        elif self.type is TokenType.ORDER:
            keyword_type = KEYWORDS.get(self.lexeme.lower())
            if keyword_type is None:
                raise TokenizerError(f"Unrecognized identifier: {self.lexeme!r}", code=code, error_char_idx=self.pos)
            return replace(self, type=keyword_type, resolved=True)
        elif self.type is TokenType.OPERATOR:
            return replace(self, type=OPERATORS[self.lexeme], resolved=True)
        else:
            return replace(self, resolved=True)

    def _resolve_number(self, code: str) -> "Token":
        try:
            if "." in self.lexeme:
                return replace(self, type=TokenType.DEC, lexeme=repr(float(self.lexeme)), resolved=True)
            value = int(self.lexeme)
        except ValueError:
            value = None
        if value is None or not fits_int(value):
            raise TokenizerError(f"Malformed numeric literal: {self.lexeme!r}", code=code, error_char_idx=self.pos)
        return replace(self, type=TokenType.INT, lexeme=str(value), resolved=True)


@dataclass
class ScanRule:
    type: TokenType
    is_single: bool
    accepts: Callable[[str], bool]


def _is_valid_in_number(s: str) -> bool:
    return s.isdecimal() or s == "."


SCAN_RULES = [
    ScanRule(TokenType.OPERATOR, is_single=True, accepts=lambda s: s in OPERATORS),
    ScanRule(TokenType.NUMBER, is_single=False, accepts=_is_valid_in_number),
    ScanRule(TokenType.ORDER, is_single=False, accepts=str.isalpha),
]


def scan(code: str, line: int = 1) -> list[Token]:
    """Splits code into unresolved tokens; characters no rule accepts are skipped"""
    i = 0
    tokens: list[Token] = []
    while i < len(code):
        for rule in SCAN_RULES:
            if not rule.accepts(code[i]):
                continue
            end_idx = i + 1
            if not rule.is_single:
                while end_idx < len(code) and rule.accepts(code[end_idx]):
                    end_idx += 1
            tokens.append(Token(type=rule.type, lexeme=code[i:end_idx], line=line, pos=i))
            i = end_idx
            break
        else:
            i += 1
    return tokens


def tokenize(code: str, line: int = 1) -> list[Token]:
    tokens = [token.resolve(code) for token in scan(code, line=line)]
    logger.debug(f"Tokens: {' '.join(str(t) for t in tokens)}")
    return tokens


def untokenize(tokens: list[Token]) -> str:
    result = " ".join(t.lexeme for t in tokens)

    # ( 1 + 2 ) => (1 + 2)
    result = re.sub(r"\(\s+", "(", result)
    result = re.sub(r"\s+\)", ")", result)

    # 4 ^ 5 => 4^5
    result = re.sub(r"\s*\^\s*", "^", result)
    return result
