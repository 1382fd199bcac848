"""Configuration documents: the root of a configuration tree."""

from __future__ import annotations

import logging
import os
import weakref
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import IO
from typing import Any

from .backend import FileBackend
from .backend import PersistenceBackend
from .codec import YamlDocumentCodec
from .exceptions import ConfigParseError
from .exceptions import ConfigValidationError
from .metadata import MetadataStore
from .models import MAX_INDENT
from .models import MIN_INDENT
from .models import DocumentOptions
from .paths import PathResolver
from .rich import RichValueRegistry
from .section import ConfigurationSection
from .utils import deep_merge
from .values import default_registry

logger = logging.getLogger(__name__)

Source = PersistenceBackend | str | os.PathLike | IO[str]


def clamp_indent(indent: int) -> int:
    """Clamp an indentation width to the supported 2-9 range."""
    return min(max(indent, MIN_INDENT), MAX_INDENT)


class ConfigurationDocument(ConfigurationSection):
    """Root section of a configuration tree.

    Owns everything that is document-wide: formatting options, comment
    metadata, the defaults layer, the rich value registry and the codec used
    to load and save the document.

    Every mutation (values, comments, options, loads) calls ``on_change``,
    which is how a ConfigManager persists changes.

    Args:
        options: Formatting and lookup options (default: DocumentOptions())
        registry: Rich value codecs (default: vectors and colors)
        codec: Document codec (default: YamlDocumentCodec)
    """

    def __init__(
        self,
        options: DocumentOptions | None = None,
        registry: RichValueRegistry | None = None,
        codec: YamlDocumentCodec | None = None,
    ):
        self._entries: dict[str, Any] = {}
        self._name = ""
        self._parent = None
        self._root = weakref.ref(self)
        self.options = options if options is not None else DocumentOptions()
        self.options.indent = clamp_indent(self.options.indent)
        self._path_resolver = PathResolver(self.options.path_separator)
        self.registry = registry if registry is not None else default_registry()
        self.codec = codec if codec is not None else YamlDocumentCodec()
        self.metadata = MetadataStore()
        self.defaults: ConfigurationDocument | None = None
        self.on_change: Callable[[], None] | None = None
        self._mute_depth = 0

    @property
    def resolver(self) -> PathResolver:
        if self._path_resolver.separator != self.options.path_separator:
            self._path_resolver = PathResolver(self.options.path_separator)
        return self._path_resolver

    # ===== Change Notification =====

    @contextmanager
    def muted(self) -> Iterator[ConfigurationDocument]:
        """Suppress on_change while the block runs."""
        self._mute_depth += 1
        try:
            yield self
        finally:
            self._mute_depth -= 1

    def _changed(self) -> None:
        if self.on_change is not None and self._mute_depth == 0:
            self.on_change()

    # ===== Loading =====

    def load(self, source: Source) -> None:
        """Replace the document with the contents of a source.

        Args:
            source: A persistence backend, a file path or a text stream

        Raises:
            ConfigFileError: If the source cannot be read
            ConfigParseError: If the contents are not a valid document; the
                document is left unchanged
        """
        if isinstance(source, (str, os.PathLike)):
            raw: bytes | str = FileBackend(Path(source)).read_bytes()
        elif hasattr(source, "read_bytes"):
            raw = source.read_bytes()
        else:
            raw = source.read()

        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ConfigParseError(f"Configuration document is not valid UTF-8: {e}") from e
        self.load_from_string(raw)

    def load_from_string(self, contents: str) -> None:
        """Replace the document with parsed YAML text.

        Raises:
            ConfigParseError: If the text is not a valid document; the
                document is left unchanged
        """
        data, metadata = self.codec.parse(contents, parse_comments=self.options.parse_comments)
        try:
            self._replace_entries(self.registry.revive(data))
        except ConfigValidationError as e:
            raise ConfigParseError(f"Unsupported value in configuration document: {e}") from e
        self.metadata = metadata
        logger.debug(f"Loaded {len(self._entries)} top-level keys")
        self._changed()

    # ===== Saving =====

    def save_to_string(self) -> str:
        """Serialize values and metadata using the current options."""
        return self.codec.serialize(self._to_primitive(self.to_dict()), self.metadata, self.options)

    def save(self, target: Source) -> None:
        """Serialize the document and write it to a target.

        Args:
            target: A persistence backend, a file path or a text stream

        Raises:
            ConfigFileError: If the target cannot be written
        """
        contents = self.save_to_string()
        if isinstance(target, (str, os.PathLike)):
            FileBackend(Path(target)).write_bytes(contents.encode("utf-8"))
        elif hasattr(target, "write_bytes"):
            target.write_bytes(contents.encode("utf-8"))
        else:
            target.write(contents)

    # ===== Defaults =====

    def add_default(self, path: str, value: Any) -> None:
        """Set a single value in the defaults layer, creating it if needed."""
        self._defaults_document().set(path, value)

    def add_defaults(self, values: Mapping[str, Any] | ConfigurationSection) -> None:
        """Deep-merge values into the defaults layer.

        Keys of a plain mapping may be paths; they are expanded into nested
        sections before merging.
        """
        if isinstance(values, ConfigurationSection):
            overlay = values.to_dict()
        else:
            overlay = self._expand_paths(values)
        defaults = self._defaults_document()
        defaults._replace_entries(deep_merge(defaults.to_dict(), overlay))

    def set_defaults(self, defaults: ConfigurationDocument | Mapping[str, Any] | None) -> None:
        """Replace the defaults layer (None removes it)."""
        if defaults is None or isinstance(defaults, ConfigurationDocument):
            self.defaults = defaults
            return
        self.defaults = None
        self.add_defaults(defaults)

    def get_defaults(self) -> ConfigurationDocument | None:
        return self.defaults

    # ===== Options =====

    def set_indent(self, indent: int) -> int:
        """Set the indentation width, clamped to 2-9.

        Returns:
            The indentation actually applied
        """
        clamped = clamp_indent(indent)
        if clamped != indent:
            logger.debug(f"Indent {indent} out of range, using {clamped}")
        self.options.indent = clamped
        self._changed()
        return clamped

    def get_indent(self) -> int:
        return self.options.indent

    def set_width(self, width: int) -> None:
        if width < 1:
            raise ConfigValidationError(f"Line width must be positive, got {width}")
        self.options.width = width
        self._changed()

    def get_width(self) -> int:
        return self.options.width

    def set_path_separator(self, separator: str) -> None:
        """Change the separator used to split paths.

        Raises:
            ConfigValidationError: If separator is not a single character
        """
        PathResolver(separator)
        self.options.path_separator = separator
        if self.defaults is not None:
            self.defaults.options.path_separator = separator
        self._changed()

    def get_path_separator(self) -> str:
        return self.options.path_separator

    def set_parse_comments(self, value: bool) -> None:
        self.options.parse_comments = value
        self._changed()

    def get_parse_comments(self) -> bool:
        return self.options.parse_comments

    def set_copy_defaults(self, value: bool) -> None:
        self.options.copy_defaults = value
        self._changed()

    def get_copy_defaults(self) -> bool:
        return self.options.copy_defaults

    def set_header(self, lines: Iterable[str | None] | None) -> None:
        """Replace the header comment lines (None or empty removes the header)."""
        self.metadata.set_header(lines)
        self._changed()

    def get_header(self) -> list[str | None]:
        return list(self.metadata.header)

    def set_footer(self, lines: Iterable[str | None] | None) -> None:
        """Replace the footer comment lines (None or empty removes the footer)."""
        self.metadata.set_footer(lines)
        self._changed()

    def get_footer(self) -> list[str | None]:
        return list(self.metadata.footer)

    # ===== Private Helpers =====

    def _defaults_document(self) -> ConfigurationDocument:
        if self.defaults is None:
            self.defaults = ConfigurationDocument(
                DocumentOptions(path_separator=self.options.path_separator),
                registry=self.registry,
            )
        return self.defaults

    def _replace_entries(self, data: Mapping[str, Any]) -> None:
        """Rebuild the whole tree from a mapping, leaving it untouched on failure."""
        pending = self._convert(data, "")
        self._entries = {name: self._adopt(name, item) for name, item in pending.values.items()}

    def _expand_paths(self, values: Mapping[str, Any]) -> dict[str, Any]:
        expanded: dict[str, Any] = {}
        for path, value in values.items():
            segments = self.resolver.split(str(path))
            nested: Any = value
            for segment in reversed(segments):
                nested = {segment: nested}
            expanded = deep_merge(expanded, nested)
        return expanded

    def _to_primitive(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: self._to_primitive(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._to_primitive(item) for item in value]
        if self.registry.is_rich(value):
            return self._to_primitive(self.registry.serialize(value))
        return value
