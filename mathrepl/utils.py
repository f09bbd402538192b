import enum
import string


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


def is_ascii_letter(c: str) -> bool:
    return c != "" and c in string.ascii_letters


def is_ascii_digit(c: str) -> bool:
    return c != "" and c in string.digits


def is_ascii_alnum(c: str) -> bool:
    return is_ascii_letter(c) or is_ascii_digit(c)


def is_identifier(s: str) -> bool:
    return bool(s) and is_ascii_letter(s[0]) and all(is_ascii_alnum(c) for c in s)
