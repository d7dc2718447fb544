import enum
import logging
from dataclasses import dataclass, field
from typing import Union

from calculator.settings import Settings
from calculator.tokenizer import Token, TokenType, untokenize
from calculator.utils import CalculatorError, PrintableEnum
from calculator.value import Float, Integer, Value, fixed_from_float

logger = logging.getLogger(__name__)


@dataclass
class ParserError(CalculatorError):
    tokens: list[Token]
    error_token_idx: int
    line: int = 1

    def __str__(self) -> str:
        parsed_tokens = self.tokens[: self.error_token_idx]
        filler_whitespace = " " * len(untokenize(parsed_tokens)) + " "
        return "\n".join(
            [f"Parser error: [{self.line} line] {self.errmsg}", untokenize(self.tokens), filler_whitespace + "^"]
        )


class BinaryOperator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    POW = enum.auto()

    @property
    def symbol(self) -> str:
        return OPERATOR_SYMBOLS[self]


OPERATOR_SYMBOLS = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUB: "-",
    BinaryOperator.MUL: "*",
    BinaryOperator.DIV: "/",
    BinaryOperator.POW: "^",
}

BINARY_OPERATOR_TOKENS = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
    TokenType.HAT: BinaryOperator.POW,
}


@dataclass
class BinaryOperation:
    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


@dataclass
class Module:
    """Absolute value, |operand|"""

    operand: "Expression"


@dataclass
class SymbolConstant:
    name: str


@dataclass
class UnaryFunction:
    name: str
    argument: "Expression"


@dataclass
class BinaryFunction:
    name: str
    first: "Expression"
    second: "Expression"


Expression = Union[Value, BinaryOperation, Module, SymbolConstant, UnaryFunction, BinaryFunction]

CONSTANT_SYMBOLS = (TokenType.PI, TokenType.E)
UNARY_FUNCTION_SYMBOLS = (TokenType.SIN, TokenType.COS, TokenType.TG, TokenType.CTG, TokenType.SQRT, TokenType.LN)
BINARY_FUNCTION_SYMBOLS = (TokenType.LOG,)


def symbol_name(token_type: TokenType) -> str:
    return token_type.name.lower()


@dataclass
class _TokenCursor:
    tokens: list[Token]
    idx: int = 0
    last: Token = field(default_factory=lambda: Token(type=TokenType.EOT, lexeme="EOT"))

    def exhausted(self) -> bool:
        return self.idx >= len(self.tokens)

    def peek(self) -> Token:
        if self.exhausted():
            return Token(type=TokenType.EOT, lexeme="EOT", line=self.last.line)
        return self.tokens[self.idx]

    def match(self, *types: TokenType) -> bool:
        if self.peek().type not in types:
            return False
        self.last = self.tokens[self.idx]
        self.idx += 1
        return True

    def consume(self, type_: TokenType, errmsg: str) -> Token:
        if not self.match(type_):
            raise self.error(errmsg)
        return self.last

    def error(self, errmsg: str) -> ParserError:
        return ParserError(errmsg, tokens=self.tokens, error_token_idx=self.idx, line=self.last.line)


def parse(tokens: list[Token], settings: Settings = Settings()) -> list[Expression]:
    """Builds one tree per top-level expression; the buffer is read through a cursor and left intact"""
    cursor = _TokenCursor(tokens=[t.resolve() for t in tokens])
    result: list[Expression] = []
    while not cursor.exhausted():
        result.append(_consume_node(cursor, settings))
    logger.debug(f"Parsed {len(result)} expression(s): {'; '.join(pretty_print(e) for e in result)}")
    return result


def _consume_node(cursor: _TokenCursor, settings: Settings) -> Expression:
    # all binary operators share one precedence level and chain to the right
    expr = _consume_unary(cursor, settings)
    if cursor.match(*BINARY_OPERATOR_TOKENS):
        operator = BINARY_OPERATOR_TOKENS[cursor.last.type]
        expr = BinaryOperation(operator=operator, left=expr, right=_consume_node(cursor, settings))
    return expr


def _consume_unary(cursor: _TokenCursor, settings: Settings) -> Expression:
    if cursor.match(TokenType.LEFT_PAREN):
        expr = _consume_node(cursor, settings)
        cursor.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
        return expr
    elif cursor.match(TokenType.MINUS):
        return BinaryOperation(operator=BinaryOperator.SUB, left=Integer(0), right=_consume_unary(cursor, settings))
    elif cursor.match(TokenType.MOD):
        expr = _consume_node(cursor, settings)
        cursor.consume(TokenType.MOD, "Expected '|' after expression")
        return Module(expr)
    elif cursor.match(TokenType.INT):
        return Integer(int(cursor.last.lexeme))
    elif cursor.match(TokenType.DEC):
        if settings.precision is not None:
            return fixed_from_float(float(cursor.last.lexeme), settings.precision)
        return Float(float(cursor.last.lexeme))
    elif cursor.match(*CONSTANT_SYMBOLS):
        return SymbolConstant(symbol_name(cursor.last.type))
    elif cursor.match(*UNARY_FUNCTION_SYMBOLS):
        name = symbol_name(cursor.last.type)
        return UnaryFunction(name, argument=_consume_node(cursor, settings))
    elif cursor.match(*BINARY_FUNCTION_SYMBOLS):
        name = symbol_name(cursor.last.type)
        first = _consume_node(cursor, settings)
        second = _consume_node(cursor, settings)
        return BinaryFunction(name, first=first, second=second)
    else:
        token = cursor.peek()
        if token.type is TokenType.EOT:
            raise cursor.error("Unexpected end of expression")
        raise cursor.error(f"Unexpected token {token.lexeme!r}")


def pretty_print(expression: Expression) -> str:
    if isinstance(expression, Value):
        return expression.pretty()
    elif isinstance(expression, BinaryOperation):
        return f"{pretty_print(expression.left)} {expression.operator.symbol} {pretty_print(expression.right)}"
    elif isinstance(expression, Module):
        return f"|{pretty_print(expression.operand)}|"
    elif isinstance(expression, SymbolConstant):
        return expression.name
    elif isinstance(expression, UnaryFunction):
        return f"{expression.name} {pretty_print(expression.argument)}"
    elif isinstance(expression, BinaryFunction):
        return f"{expression.name} {pretty_print(expression.first)} {pretty_print(expression.second)}"
    else:
        raise TypeError(f"Unexpected expression type: {expression}")
