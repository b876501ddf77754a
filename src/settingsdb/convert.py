"""Value type system for typed reads and writes.

Values are stored as text. A typed read picks one parse strategy from a
closed set; ``to_text`` produces the canonical text each strategy accepts,
so writing a value and reading it back as the same type round-trips.
"""

from enum import Enum
from typing import Any


class ValueType(Enum):
    STRING = "str"
    INT = "int"
    BOOL = "bool"
    FLOAT = "float"


_TYPE_MAP: dict[type, ValueType] = {
    str: ValueType.STRING,
    int: ValueType.INT,
    bool: ValueType.BOOL,
    float: ValueType.FLOAT,
}

_TRUE_TEXT = "true"
_FALSE_TEXT = "false"


def resolve_type(as_type: type | str) -> ValueType:
    """Map a Python type (or its name) to its parse strategy.

    Raises TypeError for anything outside the supported set.
    """
    if isinstance(as_type, str):
        try:
            return ValueType(as_type)
        except ValueError:
            raise TypeError(f"Unsupported value type: {as_type}") from None

    value_type = _TYPE_MAP.get(as_type)
    if value_type is None:
        raise TypeError(f"Unsupported value type: {getattr(as_type, '__name__', as_type)}")
    return value_type


def python_type(value_type: ValueType) -> type:
    """The Python type a strategy produces."""
    match value_type:
        case ValueType.STRING:
            return str
        case ValueType.INT:
            return int
        case ValueType.BOOL:
            return bool
        case ValueType.FLOAT:
            return float


def _plain_number(raw: str) -> str:
    """Strip whitespace; reject digit separators and non-ASCII digits."""
    text = raw.strip()
    if "_" in text or not text.isascii():
        raise ValueError(f"invalid literal for number: {raw!r}")
    return text


def parse_value(value_type: ValueType, raw: str) -> str | int | bool | float:
    """Parse stored text according to ``value_type``.

    Raises ValueError when the text is not valid for the type.
    """
    match value_type:
        case ValueType.STRING:
            return raw
        case ValueType.INT:
            return int(_plain_number(raw))
        case ValueType.BOOL:
            text = raw.strip().lower()
            if text == _TRUE_TEXT:
                return True
            if text == _FALSE_TEXT:
                return False
            raise ValueError(f"invalid literal for bool: {raw!r}")
        case ValueType.FLOAT:
            return float(_plain_number(raw))


def to_text(value: Any) -> str:
    """Serialize a value to the text form stored in the database."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return _TRUE_TEXT if value else _FALSE_TEXT
    if isinstance(value, float):
        return repr(value)
    return str(value)
