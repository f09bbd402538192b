import enum
from dataclasses import dataclass

from mathrepl.utils import PrintableEnum


class ErrorKind(PrintableEnum):
    UNRECOGNIZED_TOKEN = enum.auto()
    IDENTIFIER_TOO_LONG = enum.auto()
    IDENTIFIER_NOT_FOUND = enum.auto()
    EXPECTED_VALUE = enum.auto()
    EXPECTED_OPERATOR = enum.auto()
    WRONG_DATA_TYPE = enum.auto()
    DIVIDE_BY_ZERO = enum.auto()
    NEGATIVE_POWER_BASE = enum.auto()
    FACTORIAL_OF_NEGATIVE = enum.auto()
    PARENTHESIS_NOT_CLOSED = enum.auto()
    MISMATCHED_PARENTHESIS = enum.auto()
    CAPACITY_EXCEEDED = enum.auto()

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self]


ERROR_MESSAGES = {
    ErrorKind.UNRECOGNIZED_TOKEN: "unrecognized token",
    ErrorKind.IDENTIFIER_TOO_LONG: "identifier name too long",
    ErrorKind.IDENTIFIER_NOT_FOUND: "identifier not found",
    ErrorKind.EXPECTED_VALUE: "expected value",
    ErrorKind.EXPECTED_OPERATOR: "expected operator",
    ErrorKind.WRONG_DATA_TYPE: "wrong data type",
    ErrorKind.DIVIDE_BY_ZERO: "divide by zero",
    ErrorKind.NEGATIVE_POWER_BASE: "negative power base",
    ErrorKind.FACTORIAL_OF_NEGATIVE: "factorial of negative number",
    ErrorKind.PARENTHESIS_NOT_CLOSED: "parenthesis not closed",
    ErrorKind.MISMATCHED_PARENTHESIS: "mismatched parenthesis",
    ErrorKind.CAPACITY_EXCEEDED: "expression too complex",
}


@dataclass
class EvaluationError(Exception):
    """First error found while evaluating a line, with the column it points at"""

    kind: ErrorKind
    line: str
    column: int

    @property
    def errmsg(self) -> str:
        return self.kind.message

    def __str__(self) -> str:
        code = self.line.rstrip("\n")
        print_start_idx = max(0, self.column - 10)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(code), self.column + 10)
        print_ellipsis_post = print_end_idx < len(code)
        return "\n".join(
            [
                f"[Evaluation error] {self.errmsg}",
                (
                    ("..." if print_ellipsis_pre else "")
                    + f"{code[print_start_idx:print_end_idx]}"
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (self.column - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )


@dataclass
class CapacityError(Exception):
    errmsg: str
    capacity: int

    def __str__(self) -> str:
        return f"{self.errmsg} (capacity {self.capacity})"
