"""Typed accessors shared by configuration sections and the manager facade.

Every getter follows the same defaulting policy:

- the path is absent (``contains`` is false): the caller's default is returned
- the value is present and coerces to the requested kind: the coerced value
- the value is present but does not coerce: ``None``, even when a default
  was supplied

The last rule is long-standing behaviour that callers rely on to tell
"missing" apart from "wrong type".
"""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol
from typing import TypeVar

from .coercion import coerce_list
from .coercion import to_boolean
from .coercion import to_byte
from .coercion import to_character
from .coercion import to_double
from .coercion import to_int
from .coercion import to_long
from .coercion import to_short
from .coercion import to_string
from .rich import RichValueRegistry

if TYPE_CHECKING:
    from .section import ConfigurationSection

T = TypeVar("T")


class AccessorHost(Protocol):
    """What a class must provide to mix in TypedAccessorMixin."""

    def get(self, path: str, default: Any = None) -> Any: ...

    def contains(self, path: str, ignore_default: bool = False) -> bool: ...

    def _registry(self) -> RichValueRegistry: ...


class TypedAccessorMixin:
    """Typed get/is accessors built on ``get`` and ``contains``.

    Classes using the mixin satisfy ``AccessorHost``.
    """

    def _typed(self: AccessorHost, path: str, coerce: Callable[[Any], T | None], default: T | None) -> T | None:
        if not self.contains(path):
            return default
        return coerce(self.get(path))

    def _typed_list(self: AccessorHost, path: str, coerce: Callable[[Any], T | None]) -> list[T] | None:
        if not self.contains(path):
            return None
        return coerce_list(self.get(path), coerce)

    # ===== Booleans =====

    def is_boolean(self, path: str) -> bool:
        return to_boolean(self.get(path)) is not None

    def get_boolean(self, path: str, default: bool | None = None) -> bool | None:
        return self._typed(path, to_boolean, default)

    def get_boolean_list(self, path: str) -> list[bool] | None:
        return self._typed_list(path, to_boolean)

    # ===== Integers =====

    def is_int(self, path: str) -> bool:
        return to_int(self.get(path)) is not None

    def get_int(self, path: str, default: int | None = None) -> int | None:
        """Get a 32-bit integer value.

        Args:
            path: Path of the value
            default: Returned only when the path is absent

        Returns:
            The integer, default when absent, None when present but not an
            integer in range
        """
        return self._typed(path, to_int, default)

    def get_int_list(self, path: str) -> list[int] | None:
        return self._typed_list(path, to_int)

    def is_long(self, path: str) -> bool:
        return to_long(self.get(path)) is not None

    def get_long(self, path: str, default: int | None = None) -> int | None:
        return self._typed(path, to_long, default)

    def get_long_list(self, path: str) -> list[int] | None:
        return self._typed_list(path, to_long)

    def get_short_list(self, path: str) -> list[int] | None:
        """Get the elements of a list that fit in 16 bits."""
        return self._typed_list(path, to_short)

    def get_byte_list(self, path: str) -> list[int] | None:
        """Get the elements of a list that fit in 8 bits."""
        return self._typed_list(path, to_byte)

    # ===== Floating point =====

    def is_double(self, path: str) -> bool:
        return to_double(self.get(path)) is not None

    def get_double(self, path: str, default: float | None = None) -> float | None:
        """Get a floating point value, widening integers."""
        return self._typed(path, to_double, default)

    def get_double_list(self, path: str) -> list[float] | None:
        return self._typed_list(path, to_double)

    def get_float_list(self, path: str) -> list[float] | None:
        # Python has a single float type
        return self._typed_list(path, to_double)

    # ===== Strings =====

    def is_string(self, path: str) -> bool:
        return to_string(self.get(path)) is not None

    def get_string(self, path: str, default: str | None = None) -> str | None:
        return self._typed(path, to_string, default)

    def get_string_list(self, path: str) -> list[str] | None:
        """Get a list of strings, skipping elements with no text form."""
        return self._typed_list(path, to_string)

    def get_character_list(self, path: str) -> list[str] | None:
        """Get the single-character string elements of a list."""
        return self._typed_list(path, to_character)

    # ===== Lists and sections =====

    def is_list(self, path: str) -> bool:
        return isinstance(self.get(path), list)

    def get_list(self, path: str, default: list | None = None) -> list | None:
        return self._typed(path, lambda value: value if isinstance(value, list) else None, default)

    def get_map_list(self, path: str) -> list[dict] | None:
        """Get the mapping elements of a list value."""
        return self._typed_list(path, lambda value: dict(value) if isinstance(value, Mapping) else None)

    def is_section(self, path: str) -> bool:
        return self.get_section(path) is not None

    def get_section(self, path: str) -> ConfigurationSection | None:
        """Get the nested section at a path, or None."""
        value = self.get(path)
        return value if _is_section(value) else None

    # ===== Rich values =====

    def is_rich(self, path: str, kind: str | type) -> bool:
        return self.get_rich(path, kind) is not None

    def get_rich(self, path: str, kind: str | type, default: Any = None) -> Any:
        """Get a rich value of a registered kind.

        Args:
            path: Path of the value
            kind: Type tag or Python type of the rich value
            default: Returned only when the path is absent

        Returns:
            The rich value; None when no codec is registered for kind or the
            stored value is not of that kind
        """
        if not self.contains(path):
            return default
        codec = self._registry().codec_for(kind)
        if codec is None:
            return None
        value = self.get(path)
        if isinstance(value, codec.value_type):
            return value
        # Tagged data loaded before the codec was registered
        if _is_section(value):
            value = value.to_dict()
        if isinstance(value, Mapping):
            return self._registry().deserialize(value, expected=codec)
        return None


def _is_section(value: Any) -> bool:
    # Imported here: section.py builds on this module
    from .section import ConfigurationSection

    return isinstance(value, ConfigurationSection)
