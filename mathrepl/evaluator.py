import enum
import logging
import math
from dataclasses import replace
from typing import NamedTuple, Optional, Type

from mathrepl.errors import ErrorKind, EvaluationError
from mathrepl.symbols import SymbolTable
from mathrepl.tokenizer import Token, TokenType, next_token
from mathrepl.utils import PrintableEnum
from mathrepl.value import BinaryOperationImpl, ErrorValue, Real, UnaryOperationImpl, Value

logger = logging.getLogger(__name__)

STACK_CAPACITY = 64


class Precedence(NamedTuple):
    left: int
    right: int


PRECEDENCE = {
    TokenType.EOL: Precedence(1, 0),
    TokenType.SENTINEL: Precedence(0, 0),
    TokenType.BRACKET_CLOSE: Precedence(1, 0),
    TokenType.BRACKET_OPEN: Precedence(99, 0),
    TokenType.MINUS: Precedence(59, 59),
    TokenType.PLUS: Precedence(50, 50),
    TokenType.SUB: Precedence(50, 50),
    TokenType.STAR: Precedence(55, 55),
    TokenType.SLASH: Precedence(55, 55),
    TokenType.CARET: Precedence(61, 60),
    TokenType.BANG: Precedence(62, 62),
}
UNKNOWN_PRECEDENCE = Precedence(255, 255)


def get_precedence(token_type: TokenType) -> Precedence:
    return PRECEDENCE.get(token_type, UNKNOWN_PRECEDENCE)


BinaryOperationImplTable = list[tuple[tuple[Type[Value], Type[Value]], BinaryOperationImpl]]


def eval_binary_operation(table: BinaryOperationImplTable, a: Value, b: Value) -> Value:
    for (type_a, type_b), impl in table:
        if isinstance(a, type_a) and isinstance(b, type_b):
            return impl(a, b)
    else:
        return ErrorValue(ErrorKind.WRONG_DATA_TYPE)


def _div(a: Real, b: Real) -> Value:
    if b.v == 0.0:
        return ErrorValue(ErrorKind.DIVIDE_BY_ZERO)
    return Real(a.v / b.v)


def _pow(a: Real, b: Real) -> Value:
    # only non-negative bases, even when the exponent is an integer
    if a.v < 0.0:
        return ErrorValue(ErrorKind.NEGATIVE_POWER_BASE)
    try:
        return Real(a.v**b.v)
    except OverflowError:
        return Real(math.inf)
    except ZeroDivisionError:
        # zero base, negative exponent: -0.0 keeps its sign for odd integer exponents
        if b.v.is_integer() and b.v % 2 == 1:
            return Real(math.copysign(math.inf, a.v))
        return Real(math.inf)


add_impls: BinaryOperationImplTable = [((Real, Real), lambda a, b: Real(a.v + b.v))]  # type: ignore
sub_impls: BinaryOperationImplTable = [((Real, Real), lambda a, b: Real(a.v - b.v))]  # type: ignore
mul_impls: BinaryOperationImplTable = [((Real, Real), lambda a, b: Real(a.v * b.v))]  # type: ignore
div_impls: BinaryOperationImplTable = [((Real, Real), _div)]  # type: ignore
pow_impls: BinaryOperationImplTable = [((Real, Real), _pow)]  # type: ignore

BINARY_OPERATION_IMPLS: dict[TokenType, BinaryOperationImplTable] = {
    TokenType.PLUS: add_impls,
    TokenType.SUB: sub_impls,
    TokenType.STAR: mul_impls,
    TokenType.SLASH: div_impls,
    TokenType.CARET: pow_impls,
}

UnaryOperationImplTable = list[tuple[Type[Value], UnaryOperationImpl]]


def eval_unary_operation(table: UnaryOperationImplTable, operand: Value) -> Value:
    for operand_type, impl in table:
        if isinstance(operand, operand_type):
            return impl(operand)
    else:
        return ErrorValue(ErrorKind.WRONG_DATA_TYPE)


def _factorial(a: Real) -> Value:
    if a.v < 0.0:
        return ErrorValue(ErrorKind.FACTORIAL_OF_NEGATIVE)
    try:
        return Real(math.gamma(1.0 + a.v))
    except OverflowError:
        return Real(math.inf)


neg_impls: UnaryOperationImplTable = [(Real, lambda a: Real(-a.v))]  # type: ignore
factorial_impls: UnaryOperationImplTable = [(Real, _factorial)]  # type: ignore


class ParserState(PrintableEnum):
    EXPECTING_VALUE = enum.auto()
    EXPECTING_OPERATOR = enum.auto()
    DONE = enum.auto()


class _Evaluation:
    """State of a single ``evaluate`` call: cursor, operator stack and value stack"""

    def __init__(self, line: str, symbols: SymbolTable) -> None:
        self.line = line
        self.symbols = symbols
        self.i = 0
        self.operators: list[Token] = [Token(type=TokenType.SENTINEL, lexeme="", pos=0, end=0)]
        self.values: list[Value] = []
        self.result: Optional[Value] = None

    def error(self, kind: ErrorKind, pos: int) -> EvaluationError:
        return EvaluationError(kind, line=self.line, column=pos)

    def read_token(self) -> Token:
        token, self.i = next_token(self.line, self.i)
        if token.type is TokenType.ERROR:
            if token.error is None:
                raise RuntimeError(f"Error token without error kind: {token}")
            raise self.error(token.error, token.pos)
        return token

    def push_operator(self, token: Token) -> None:
        if len(self.operators) >= STACK_CAPACITY:
            raise self.error(ErrorKind.CAPACITY_EXCEEDED, token.pos)
        self.operators.append(token)

    def push_value(self, value: Value, pos: int) -> None:
        # the operator stack fills first for any parsed line
        if len(self.values) >= STACK_CAPACITY:
            raise self.error(ErrorKind.CAPACITY_EXCEEDED, pos)
        self.values.append(value)

    def expect_value(self) -> ParserState:
        token = self.read_token()
        if token.type is TokenType.BRACKET_OPEN:
            self.push_operator(token)
            return ParserState.EXPECTING_VALUE
        elif token.type is TokenType.PLUS:
            return ParserState.EXPECTING_VALUE
        elif token.type is TokenType.SUB:
            self.push_operator(replace(token, type=TokenType.MINUS))
            return ParserState.EXPECTING_VALUE
        elif token.type is TokenType.IDENTIFIER:
            value = self.symbols.lookup(token.lexeme)
            if isinstance(value, ErrorValue):
                raise self.error(value.kind, token.pos)
            self.push_value(value, token.pos)
            return ParserState.EXPECTING_OPERATOR
        elif token.type is TokenType.NUMBER:
            if token.number is None:
                raise RuntimeError(f"Number token without value: {token}")
            self.push_value(Real(token.number), token.pos)
            return ParserState.EXPECTING_OPERATOR
        else:
            raise self.error(ErrorKind.EXPECTED_VALUE, token.pos)

    def expect_operator(self) -> ParserState:
        token = self.read_token()
        left_precedence = get_precedence(token.type).left
        while get_precedence(self.operators[-1].type).right >= left_precedence:
            self.apply(self.operators.pop())

        if token.type in BINARY_OPERATION_IMPLS:
            self.push_operator(token)
            return ParserState.EXPECTING_VALUE
        elif token.type is TokenType.BANG:
            result = eval_unary_operation(factorial_impls, self.values[-1])
            if isinstance(result, ErrorValue):
                raise self.error(result.kind, token.pos)
            self.values[-1] = result
            return ParserState.EXPECTING_OPERATOR
        elif token.type is TokenType.EOL:
            if len(self.operators) != 1:
                raise self.error(ErrorKind.PARENTHESIS_NOT_CLOSED, token.pos)
            self.result = self.values[0]
            return ParserState.DONE
        elif token.type is TokenType.BRACKET_CLOSE:
            if self.operators[-1].type is not TokenType.BRACKET_OPEN:
                raise self.error(ErrorKind.MISMATCHED_PARENTHESIS, token.pos)
            self.operators.pop()
            return ParserState.EXPECTING_OPERATOR
        else:
            raise self.error(ErrorKind.EXPECTED_OPERATOR, token.pos)

    def apply(self, operator: Token) -> None:
        if operator.type is TokenType.MINUS:
            result = eval_unary_operation(neg_impls, self.values[-1])
        elif operator.type in BINARY_OPERATION_IMPLS:
            right = self.values.pop()
            result = eval_binary_operation(BINARY_OPERATION_IMPLS[operator.type], self.values[-1], right)
        else:
            raise RuntimeError(f"Broken parser: unexpected operator on stack: {operator}")
        if isinstance(result, ErrorValue):
            raise self.error(result.kind, operator.pos)
        self.values[-1] = result


def evaluate(line: str, symbols: SymbolTable) -> Value:
    """Evaluates a single line in one left-to-right pass.

    Returns the resulting value (a ``Real`` unless an identifier resolved to
    something else), raises ``EvaluationError`` on the first error found.
    """
    evaluation = _Evaluation(line, symbols)
    state = ParserState.EXPECTING_VALUE
    try:
        while state is not ParserState.DONE:
            if state is ParserState.EXPECTING_VALUE:
                state = evaluation.expect_value()
            else:
                state = evaluation.expect_operator()
    except EvaluationError as e:
        logger.debug("%r: %s at column %d", line, e.errmsg, e.column)
        raise

    if evaluation.result is None:
        raise RuntimeError(f"Broken parser: no result for {line!r}")
    logger.debug("%r = %s", line, evaluation.result)
    return evaluation.result
