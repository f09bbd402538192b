import abc
from dataclasses import dataclass
from typing import Callable

from mathrepl.errors import ErrorKind


class Value(abc.ABC):
    @classmethod
    @abc.abstractmethod
    def type_name(cls) -> str:
        ...


UnaryOperationImpl = Callable[[Value], Value]
BinaryOperationImpl = Callable[[Value, Value], Value]


@dataclass
class Void(Value):
    @classmethod
    def type_name(cls) -> str:
        return "Void"


@dataclass
class ErrorValue(Value):
    kind: ErrorKind
    pos: int = 0

    @property
    def errmsg(self) -> str:
        return self.kind.message

    @classmethod
    def type_name(cls) -> str:
        return "Error"


@dataclass
class Real(Value):
    v: float

    @classmethod
    def type_name(cls) -> str:
        return "Real"
