"""Data models for custom-config."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

MIN_INDENT = 2
MAX_INDENT = 9


class PersistMode(Enum):
    """Persistence policy for a ConfigManager.

    Determines when in-memory mutations reach the backend.
    """

    IMMEDIATE = "immediate"
    BATCHED = "batched"


@dataclass
class DocumentOptions:
    """Formatting and lookup options of a configuration document.

    Attributes:
        indent: Indentation width used when saving (2-9)
        width: Preferred maximum line width used when saving
        parse_comments: Whether comments are read on load and written on save
        copy_defaults: Whether reads served by the defaults layer are copied
            into the primary tree
        path_separator: Single character separating path segments
    """

    indent: int = MIN_INDENT
    width: int = 80
    parse_comments: bool = True
    copy_defaults: bool = False
    path_separator: str = "."


@dataclass(frozen=True)
class ConfigPaths:
    """Locations used by a ConfigManager.

    Immutable configuration for where configuration files live.
    Applications inject these paths to define their configuration policy.

    Attributes:
        data_dir: Base directory holding live configuration files (required)
        template_dir: Directory holding bundled template documents
            (optional - None when the application ships no templates)
    """

    data_dir: Path
    template_dir: Path | None = None

    def file_for(self, name: str, directory: str | None = None) -> Path:
        """Return the live file path for a configuration name."""
        base = self.data_dir / directory if directory else self.data_dir
        return base / name

    def template_for(self, name: str, directory: str | None = None) -> Path | None:
        """Return the bundled template path for a configuration name, if any."""
        if self.template_dir is None:
            return None
        base = self.template_dir / directory if directory else self.template_dir
        return base / name
