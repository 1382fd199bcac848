"""Utility functions for custom-config."""

from collections.abc import Mapping
from typing import Any


def _as_dict(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _as_dict(item) for key, item in value.items()}
    return value


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Merge two nested mappings, overlay winning on conflicts.

    Sections present on both sides are merged key by key. Anything else in
    overlay (scalars, lists, a section replacing a scalar) replaces the value
    in base. Nested mappings in the result are fresh dicts, so neither input
    is shared with or modified through the result.

    Args:
        base: Values merged into
        overlay: Values taking precedence

    Returns:
        New merged dictionary

    Examples:
        >>> defaults = {"server": {"port": 25565, "motd": "Hello"}}
        >>> deep_merge(defaults, {"server": {"motd": "Welcome"}, "debug": True})
        {'server': {'port': 25565, 'motd': 'Welcome'}, 'debug': True}

        >>> deep_merge({"worlds": ["world"]}, {"worlds": ["end"]})
        {'worlds': ['end']}
    """
    result = _as_dict(base)
    for key, value in overlay.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = _as_dict(value)
    return result
