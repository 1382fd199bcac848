"""Dotted path handling for configuration sections."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .exceptions import ConfigValidationError

if TYPE_CHECKING:
    from .section import ConfigurationSection


class PathResolver:
    """Parses and resolves paths against a section tree.

    A path is one or more segments joined by a single separator character,
    for example ``server.port`` with the default ``.`` separator.

    Args:
        separator: Single character separating path segments
    """

    def __init__(self, separator: str = "."):
        if not isinstance(separator, str) or len(separator) != 1:
            raise ConfigValidationError(f"Path separator must be a single character, got {separator!r}")
        self.separator = separator

    def split(self, path: str) -> list[str]:
        """Split a path into its segments."""
        return path.split(self.separator)

    def join(self, *segments: str) -> str:
        """Join segments into a path, skipping empty ones."""
        return self.separator.join(segment for segment in segments if segment)

    def resolve(self, section: ConfigurationSection, path: str) -> tuple[ConfigurationSection, str] | None:
        """Resolve a path to the section holding its final segment.

        Args:
            section: Section the path is relative to
            path: Path to resolve

        Returns:
            Tuple of (owning section, final segment), or None when an
            intermediate segment is missing or is not a section
        """
        segments = self.split(path)
        current = section
        for segment in segments[:-1]:
            child = current._child_section(segment)
            if child is None:
                return None
            current = child
        return current, segments[-1]

    def resolve_or_create(self, section: ConfigurationSection, path: str) -> tuple[ConfigurationSection, str]:
        """Resolve a path, creating missing intermediate sections.

        Intermediate entries that exist but are not sections are replaced.

        Args:
            section: Section the path is relative to
            path: Path to resolve

        Returns:
            Tuple of (owning section, final segment)

        Raises:
            ConfigValidationError: If the path is empty
        """
        if not path:
            raise ConfigValidationError("Cannot resolve an empty path for writing")
        segments = self.split(path)
        current = section
        for segment in segments[:-1]:
            child = current._child_section(segment)
            if child is None:
                child = current._create_child(segment)
            current = child
        return current, segments[-1]

    def create_path(
        self,
        section: ConfigurationSection,
        key: str | None,
        relative_to: ConfigurationSection | None = None,
    ) -> str:
        """Build the path of a key inside a section.

        Args:
            section: Section containing the key
            key: Key name (None or empty for the section itself)
            relative_to: Ancestor the path is relative to (default: the root)

        Returns:
            Path string joined with this resolver's separator

        Raises:
            ConfigValidationError: If relative_to is not an ancestor of section
        """
        segments: list[str] = []
        current: ConfigurationSection | None = section
        while current is not None and current is not relative_to:
            if current.parent is not None:
                segments.append(current.name)
            current = current.parent
        if relative_to is not None and current is None:
            raise ConfigValidationError(f"Section '{section.path}' is not inside '{relative_to.path}'")
        segments.reverse()
        if key:
            segments.append(key)
        return self.join(*segments)
