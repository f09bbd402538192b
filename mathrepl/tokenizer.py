import enum
import math
import re
from dataclasses import dataclass
from typing import Optional

from mathrepl.errors import ErrorKind
from mathrepl.utils import PrintableEnum, is_ascii_alnum, is_ascii_digit, is_ascii_letter

MAX_IDENTIFIER_LENGTH = 64


class TokenType(PrintableEnum):
    EOL = enum.auto()
    ERROR = enum.auto()
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()
    IDENTIFIER = enum.auto()
    NUMBER = enum.auto()
    MINUS = enum.auto()  # unary, only ever produced by the evaluator
    PLUS = enum.auto()
    SUB = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    CARET = enum.auto()
    BANG = enum.auto()
    SENTINEL = enum.auto()


@dataclass
class Token:
    type: TokenType
    lexeme: str
    pos: int
    end: int
    number: Optional[float] = None
    error: Optional[ErrorKind] = None

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


SINGLE_CHAR_TOKENS = {
    "(": TokenType.BRACKET_OPEN,
    ")": TokenType.BRACKET_CLOSE,
    "+": TokenType.PLUS,
    "-": TokenType.SUB,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "!": TokenType.BANG,
}

# Longest leading float literal, same as what strtod() accepts after a digit
_HEX_NUMBER = re.compile(r"0[xX](?:[0-9a-fA-F]+(?:\.[0-9a-fA-F]*)?|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?")
_DEC_NUMBER = re.compile(r"[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?")


def _decode_number(line: str, i: int) -> tuple[float, int]:
    match = _HEX_NUMBER.match(line, i)
    if match is not None:
        try:
            return float.fromhex(match.group()), match.end()
        except OverflowError:
            return math.inf, match.end()
    match = _DEC_NUMBER.match(line, i)
    if match is None:
        raise RuntimeError(f"Number expected at index {i} of {line!r}")
    return float(match.group()), match.end()


def next_token(line: str, i: int) -> tuple[Token, int]:
    """Reads exactly one token starting at ``i``, returns it with the index past it.

    Blanks before the token are skipped; the token's ``pos`` is the index of its
    first character. End of string and newline both produce an EOL token.
    """
    while i < len(line) and line[i] in " \t":
        i += 1
    start = i

    if i >= len(line) or line[i] == "\n":
        end = min(i + 1, len(line))
        return Token(type=TokenType.EOL, lexeme=line[start:end], pos=start, end=end), end

    c = line[i]
    if is_ascii_digit(c):
        number, end = _decode_number(line, i)
        return Token(type=TokenType.NUMBER, lexeme=line[start:end], pos=start, end=end, number=number), end
    elif c in SINGLE_CHAR_TOKENS:
        return Token(type=SINGLE_CHAR_TOKENS[c], lexeme=c, pos=start, end=i + 1), i + 1
    elif is_ascii_letter(c):
        ident_end_idx = i + 1
        while ident_end_idx < len(line) and is_ascii_alnum(line[ident_end_idx]):
            ident_end_idx += 1
        lexeme = line[start:ident_end_idx]
        if len(lexeme) > MAX_IDENTIFIER_LENGTH:
            token = Token(
                type=TokenType.ERROR, lexeme=lexeme, pos=start, end=ident_end_idx, error=ErrorKind.IDENTIFIER_TOO_LONG
            )
        else:
            token = Token(type=TokenType.IDENTIFIER, lexeme=lexeme, pos=start, end=ident_end_idx)
        return token, ident_end_idx
    else:
        return Token(type=TokenType.ERROR, lexeme=c, pos=start, end=i + 1, error=ErrorKind.UNRECOGNIZED_TOKEN), i + 1


def tokenize(line: str) -> list[Token]:
    """All tokens of the line up to and including the first EOL"""
    i = 0
    tokens: list[Token] = []
    while True:
        token, i = next_token(line, i)
        tokens.append(token)
        if token.type is TokenType.EOL:
            return tokens
