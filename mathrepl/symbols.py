import logging
import math

from mathrepl.errors import CapacityError, ErrorKind
from mathrepl.value import ErrorValue, Real, Value

logger = logging.getLogger(__name__)

SYMBOL_CAPACITY = 64

BUILTIN_CONSTANTS: dict[str, Value] = {
    "e": Real(math.e),
    "pi": Real(math.pi),
}


class SymbolTable:
    """Bounded name -> value store consulted by the evaluator.

    Names are matched exactly (case-sensitive). The table is seeded with
    ``BUILTIN_CONSTANTS`` unless ``seed_builtins`` is false.
    """

    def __init__(self, capacity: int = SYMBOL_CAPACITY, seed_builtins: bool = True) -> None:
        self.capacity = capacity
        self._names: list[str] = []
        self._values: list[Value] = []
        if seed_builtins:
            for name, value in BUILTIN_CONSTANTS.items():
                self.assign(name, value)

    def _index(self, name: str) -> int | None:
        for i, stored_name in enumerate(self._names):
            if stored_name == name:
                return i
        return None

    def lookup(self, name: str) -> Value:
        i = self._index(name)
        if i is None:
            return ErrorValue(ErrorKind.IDENTIFIER_NOT_FOUND)
        return self._values[i]

    def assign(self, name: str, value: Value) -> None:
        i = self._index(name)
        if i is not None:
            self._values[i] = value
        elif len(self._names) >= self.capacity:
            raise CapacityError(f"Symbol table is full, cannot add {name!r}", capacity=self.capacity)
        else:
            self._names.append(str(name))
            self._values.append(value)
        logger.debug("%s = %s", name, value)

    def names(self) -> list[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._index(name) is not None

    def __len__(self) -> int:
        return len(self._names)
