"""Type coercion for typed configuration accessors.

Every coercion returns ``None`` when the value cannot be represented as the
requested kind. Only numeric widening is performed (int -> long -> double);
strings are never parsed into numbers and booleans are never treated as
numbers.
"""

import datetime
from collections.abc import Callable
from typing import Any
from typing import TypeVar

T = TypeVar("T")

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
LONG_MIN = -(2**63)
LONG_MAX = 2**63 - 1
SHORT_MIN = -(2**15)
SHORT_MAX = 2**15 - 1
BYTE_MIN = -(2**7)
BYTE_MAX = 2**7 - 1

_TEXT_SCALARS = (int, float, datetime.date)


def _is_integral(value: Any) -> bool:
    # bool is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool)


def to_boolean(value: Any) -> bool | None:
    """Return value if it is a boolean."""
    return value if isinstance(value, bool) else None


def to_int(value: Any) -> int | None:
    """Return value if it is an integer in the 32-bit range."""
    if _is_integral(value) and INT_MIN <= value <= INT_MAX:
        return value
    return None


def to_long(value: Any) -> int | None:
    """Return value if it is an integer in the 64-bit range."""
    if _is_integral(value) and LONG_MIN <= value <= LONG_MAX:
        return value
    return None


def to_short(value: Any) -> int | None:
    """Return value if it is an integer in the 16-bit range."""
    if _is_integral(value) and SHORT_MIN <= value <= SHORT_MAX:
        return value
    return None


def to_byte(value: Any) -> int | None:
    """Return value if it is an integer in the 8-bit range."""
    if _is_integral(value) and BYTE_MIN <= value <= BYTE_MAX:
        return value
    return None


def to_double(value: Any) -> float | None:
    """Return value as a float if it is a float or a widenable integer."""
    if isinstance(value, float):
        return value
    if to_long(value) is not None:
        return float(value)
    return None


def to_string(value: Any) -> str | None:
    """Return value as text if it is a string or a plain scalar.

    Booleans are rendered the way YAML writes them (``true``/``false``).
    Lists, sections and rich values have no text form.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, _TEXT_SCALARS):
        return str(value)
    return None


def to_character(value: Any) -> str | None:
    """Return value if it is a one-character string."""
    if isinstance(value, str) and len(value) == 1:
        return value
    return None


def coerce_list(values: Any, coerce: Callable[[Any], T | None]) -> list[T]:
    """Coerce every element of a list, skipping elements that do not coerce.

    Args:
        values: Raw stored value
        coerce: Coercion applied to each element

    Returns:
        Coerced elements in order, or an empty list when values is not a list
    """
    if not isinstance(values, list):
        return []
    result = []
    for value in values:
        coerced = coerce(value)
        if coerced is not None:
            result.append(coerced)
    return result
