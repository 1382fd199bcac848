"""Configuration sections: the nodes of a configuration tree."""

from __future__ import annotations

import datetime
import weakref
from collections.abc import Iterable
from collections.abc import Mapping
from typing import TYPE_CHECKING
from typing import Any

from .accessors import TypedAccessorMixin
from .exceptions import ConfigError
from .exceptions import ConfigValidationError
from .metadata import KeyPath
from .paths import PathResolver
from .rich import RichValueRegistry

if TYPE_CHECKING:
    from .document import ConfigurationDocument

_MISSING = object()

SCALAR_TYPES = (bool, int, float, str, bytes, datetime.date)


class ConfigurationSection(TypedAccessorMixin):
    """A node of the configuration tree.

    A section holds ordered entries keyed by segment name. Entry values are
    scalars, lists, rich values or nested sections. Parent and root links are
    weak references; the tree is owned from the root down.

    Sections are created by their document (``create_section``, ``set`` with a
    mapping, loading); they are not meant to be instantiated directly.

    Args:
        parent: Enclosing section
        name: Segment name of this section inside its parent
    """

    def __init__(self, parent: ConfigurationSection, name: str):
        self._entries: dict[str, Any] = {}
        self._name = name
        self._parent = weakref.ref(parent)
        self._root = weakref.ref(parent.root)

    # ===== Tree Navigation =====

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> ConfigurationSection | None:
        return self._parent() if self._parent is not None else None

    @property
    def root(self) -> ConfigurationDocument:
        document = self._root()
        if document is None:
            raise ConfigError(f"Section '{self._name}' is no longer attached to a document")
        return document

    @property
    def path(self) -> str:
        """Full path of this section from the root ("" for the root)."""
        return self._resolver().create_path(self, None)

    def get_default_section(self) -> ConfigurationSection | None:
        """Get the section at this path in the document's defaults, if any."""
        defaults = self.root.defaults
        if defaults is None:
            return None
        value = defaults._lookup(self._segments())
        return value if isinstance(value, ConfigurationSection) else None

    # ===== Reading =====

    def contains(self, path: str, ignore_default: bool = False) -> bool:
        """Check whether a path holds a value.

        Args:
            path: Path relative to this section
            ignore_default: Only look at the primary tree

        Returns:
            True if the value exists in this tree, or in the defaults layer
            unless ignore_default is set
        """
        segments = self._split(path)
        if self._lookup(segments) is not _MISSING:
            return True
        return not ignore_default and self._default_value(segments) is not _MISSING

    def is_set(self, path: str) -> bool:
        """Check whether a path is set, counting defaults only when they are copied."""
        return self.contains(path, ignore_default=not self.root.options.copy_defaults)

    def get(self, path: str, default: Any = None) -> Any:
        """Get the value at a path.

        Reads that miss this tree fall back to the defaults layer. With
        copy_defaults enabled the default value is copied into this tree
        first, which counts as a mutation.

        Args:
            path: Path relative to this section ("" for the section itself)
            default: Returned when neither tree has a value

        Returns:
            The stored value, a default-layer value, or default
        """
        if path == "":
            return self
        segments = self._split(path)
        value = self._lookup(segments)
        if value is not _MISSING:
            return value
        value = self._default_value(segments)
        if value is _MISSING:
            return default
        if self.root.options.copy_defaults and not self._blocked(segments[:-1]):
            self.set(path, value)
            return self._lookup(segments)
        return value

    def get_keys(self, deep: bool = True) -> list[str]:
        """Get the keys of this section in discovery order.

        Args:
            deep: Include the keys of nested sections (pre-order)

        Returns:
            Paths relative to this section, each listed once
        """
        return list(self.get_values(deep))

    def get_values(self, deep: bool = True) -> dict[str, Any]:
        """Get the values of this section keyed by relative path.

        Nested sections appear as ConfigurationSection values; with deep set
        their contents follow them.
        """
        values: dict[str, Any] = {}
        self._map_children(self, "", deep, values)
        return values

    def to_dict(self) -> dict[str, Any]:
        """Return the subtree as plain nested dictionaries."""
        result: dict[str, Any] = {}
        for key, value in self._entries.items():
            result[key] = value.to_dict() if isinstance(value, ConfigurationSection) else _copy_value(value)
        return result

    # ===== Writing =====

    def set(self, path: str, value: Any) -> None:
        """Set the value at a path.

        Missing intermediate sections are created, and anything already at
        the path (including a whole section) is replaced. Setting None
        removes the entry; comments recorded for the path are kept.

        Args:
            path: Path relative to this section
            value: New value, or None to remove

        Raises:
            ConfigValidationError: If the path is empty or the value type is
                not supported
        """
        if not path:
            raise ConfigValidationError("Cannot set a value at an empty path")
        if value is None:
            located = self._resolver().resolve(self, path)
            if located is None:
                return
            section, key = located
            section._entries.pop(key, None)
        else:
            stored = self._convert(value, path)
            section, key = self._resolver().resolve_or_create(self, path)
            section._entries[key] = section._adopt(key, stored)
        self.root._changed()

    def create_section(self, path: str, values: Mapping[str, Any] | None = None) -> ConfigurationSection:
        """Create an empty (or pre-filled) section at a path, replacing what was there.

        Args:
            path: Path relative to this section
            values: Optional mapping copied into the new section

        Returns:
            The new section
        """
        self.set(path, dict(values or {}))
        return self._lookup(self._split(path))

    def clear(self, deep: bool = True) -> None:
        """Remove every value this section held when the call started."""
        for key in list(self.get_values(deep)):
            self.set(key, None)

    # ===== Comments =====

    def set_comments(self, path: str, comments: Iterable[str | None] | None) -> None:
        """Set the comment lines written above a path (None entries are blank lines)."""
        self.root.metadata.set_comments(self._full_path(path), comments)
        self.root._changed()

    def get_comments(self, path: str) -> list[str | None] | None:
        """Get the comment lines above a path, or None when the path holds no value."""
        if not self.contains(path):
            return None
        return self.root.metadata.get_comments(self._full_path(path))

    def set_inline_comments(self, path: str, comments: Iterable[str] | None) -> None:
        """Set the comments written after the value of a path."""
        self.root.metadata.set_inline_comments(self._full_path(path), comments)
        self.root._changed()

    def get_inline_comments(self, path: str) -> list[str | None] | None:
        if not self.contains(path):
            return None
        return self.root.metadata.get_inline_comments(self._full_path(path))

    # ===== Private Helpers =====

    def _registry(self) -> RichValueRegistry:
        return self.root.registry

    def _resolver(self) -> PathResolver:
        return self.root.resolver

    def _split(self, path: str) -> list[str]:
        return self._resolver().split(path)

    def _segments(self) -> KeyPath:
        segments: list[str] = []
        current: ConfigurationSection | None = self
        while current is not None and current.parent is not None:
            segments.append(current.name)
            current = current.parent
        return tuple(reversed(segments))

    def _full_path(self, path: str) -> KeyPath:
        return self._segments() + tuple(self._split(path))

    def _child_section(self, name: str) -> ConfigurationSection | None:
        child = self._entries.get(name)
        return child if isinstance(child, ConfigurationSection) else None

    def _create_child(self, name: str) -> ConfigurationSection:
        child = ConfigurationSection(self, name)
        self._entries[name] = child
        return child

    def _lookup(self, segments: Iterable[str]) -> Any:
        """Walk this tree only, returning _MISSING on any miss."""
        current: Any = self
        for segment in segments:
            if not isinstance(current, ConfigurationSection) or segment not in current._entries:
                return _MISSING
            current = current._entries[segment]
        return current

    def _blocked(self, segments: Iterable[str]) -> bool:
        """Check whether a non-section value sits on the way down a path."""
        current: Any = self
        for segment in segments:
            current = current._entries.get(segment, _MISSING)
            if current is _MISSING:
                return False
            if not isinstance(current, ConfigurationSection):
                return True
        return False

    def _default_value(self, segments: list[str]) -> Any:
        defaults = self.root.defaults
        if defaults is None:
            return _MISSING
        return defaults._lookup(self._segments() + tuple(segments))

    def _convert(self, value: Any, path: str) -> Any:
        """Validate and copy a value before it enters the tree.

        Mappings and sections become _Pending markers that _adopt turns into
        child sections once their parent is known.
        """
        if isinstance(value, ConfigurationSection):
            value = value.to_dict()
        if isinstance(value, Mapping):
            return _Pending({str(key): self._convert(item, path) for key, item in value.items() if item is not None})
        if isinstance(value, (list, tuple)):
            return [self._convert_element(item, path) for item in value]
        if isinstance(value, SCALAR_TYPES) or self._registry().is_rich(value):
            return value
        raise ConfigValidationError(f"Unsupported value type {type(value).__name__} at '{path}'")

    def _convert_element(self, value: Any, path: str) -> Any:
        if isinstance(value, ConfigurationSection):
            return value.to_dict()
        if isinstance(value, Mapping):
            return {str(key): self._convert_element(item, path) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._convert_element(item, path) for item in value]
        if value is None or isinstance(value, SCALAR_TYPES) or self._registry().is_rich(value):
            return value
        raise ConfigValidationError(f"Unsupported list element type {type(value).__name__} at '{path}'")

    def _adopt(self, key: str, stored: Any) -> Any:
        if not isinstance(stored, _Pending):
            return stored
        child = ConfigurationSection(self, key)
        for name, item in stored.values.items():
            child._entries[name] = child._adopt(name, item)
        return child

    def _map_children(self, section: ConfigurationSection, prefix: str, deep: bool, out: dict[str, Any]) -> None:
        separator = self._resolver().separator
        for key, value in section._entries.items():
            path = prefix + key
            out[path] = value
            if deep and isinstance(value, ConfigurationSection):
                self._map_children(value, path + separator, deep, out)

    def __contains__(self, path: str) -> bool:
        return self.contains(path)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r}, keys={list(self._entries)!r})"


class _Pending:
    """A mapping waiting to become a child section."""

    __slots__ = ("values",)

    def __init__(self, values: Mapping[str, Any]):
        self.values = values


def _copy_value(value: Any) -> Any:
    if isinstance(value, list):
        return [_copy_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _copy_value(item) for key, item in value.items()}
    return value
