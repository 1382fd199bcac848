"""Configuration manager binding a document to its persisted file."""

import logging
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any

from .accessors import TypedAccessorMixin
from .backend import FileBackend
from .backend import PersistenceBackend
from .document import ConfigurationDocument
from .document import Source
from .exceptions import ConfigError
from .exceptions import ConfigValidationError
from .models import ConfigPaths
from .models import DocumentOptions
from .models import PersistMode
from .rich import RichValueRegistry
from .section import ConfigurationSection

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[ConfigError], None]


def log_error(error: ConfigError) -> None:
    """Error handler that logs and lets the caller continue."""
    logger.warning(f"Configuration error: {error}")


class ConfigManager(TypedAccessorMixin):
    """Manages one configuration file.

    Wraps a ConfigurationDocument and a PersistenceBackend. By default every
    mutation is written to the backend before the call returns; with
    PersistMode.BATCHED mutations accumulate until flush().

    File and parse errors are passed to error_handler. Without a handler
    they are raised to the caller.

    Args:
        name: File name of the configuration (e.g. "config.yml")
        paths: Data and template directories (required unless backend is given)
        directory: Custom directory relative to the data/template directories
        copy_template: Bootstrap from the bundled template when the file is missing
        replace_template: With copy_template, overwrite an existing file
        persist_mode: When mutations reach the backend
        error_handler: Receives file and parse errors instead of raising them
        registry: Rich value codecs for the document
        backend: Explicit backend (overrides paths)
    """

    def __init__(
        self,
        name: str,
        paths: ConfigPaths | None = None,
        directory: str | None = None,
        *,
        copy_template: bool = False,
        replace_template: bool = False,
        persist_mode: PersistMode = PersistMode.IMMEDIATE,
        error_handler: ErrorHandler | None = None,
        registry: RichValueRegistry | None = None,
        backend: PersistenceBackend | None = None,
    ):
        """Initialize the manager and bootstrap its file.

        Raises:
            ConfigValidationError: If neither paths nor backend is given
        """
        if backend is None:
            if paths is None:
                raise ConfigValidationError("ConfigManager needs either paths or a backend")
            backend = FileBackend(paths.file_for(name, directory), template=paths.template_for(name, directory))

        self.name = name
        self.paths = paths
        self.directory = directory
        self.use_custom_path = directory is not None
        self.backend = backend
        self.persist_mode = persist_mode
        self.error_handler = error_handler
        self._dirty = False
        self._batch_depth = 0
        self.document = self._new_document(DocumentOptions(), registry)

        self._bootstrap(copy_template, replace_template)
        self.reload()

    # ===== Loading and Saving =====

    def reload(self) -> ConfigurationDocument:
        """Re-create the document from the backend's current contents.

        Options and defaults carry over. If the stored document cannot be
        read or parsed, the current document is kept and nothing is written.

        Returns:
            The active document
        """
        document = self._new_document(self.document.options, self.document.registry)
        document.defaults = self.document.defaults
        try:
            if self.backend.exists():
                with document.muted():
                    document.load(self.backend)
        except ConfigError as e:
            self._report(e)
            return self.document

        self.document = document
        logger.info(f"Loaded configuration '{self.name}' from {self.backend}")
        self._on_change()
        return self.document

    def load(self, source: Source) -> None:
        """Replace the document with the contents of another source."""
        try:
            self.document.load(source)
        except ConfigError as e:
            self._report(e)

    def load_from_string(self, contents: str) -> None:
        """Replace the document with parsed YAML text."""
        try:
            self.document.load_from_string(contents)
        except ConfigError as e:
            self._report(e)

    def save(self, target: Source | None = None) -> None:
        """Write the document to the backend, or to another target.

        Args:
            target: Backend, file path or text stream (default: own backend)
        """
        try:
            self.document.save(self.backend if target is None else target)
        except ConfigError as e:
            self._report(e)
            return
        if target is None:
            self._dirty = False
            logger.debug(f"Saved configuration '{self.name}'")

    def save_to_string(self) -> str:
        return self.document.save_to_string()

    def flush(self) -> bool:
        """Write pending mutations.

        Returns:
            True if a write was attempted, False if nothing was pending
        """
        if not self._dirty:
            return False
        self.save()
        return True

    @contextmanager
    def batch(self) -> Iterator["ConfigManager"]:
        """Defer writes until the block ends, then write once."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self.persist_mode is PersistMode.IMMEDIATE:
                self.flush()

    def restore_template(self, replace: bool = False) -> None:
        """Copy the bundled template into place and reload it.

        Args:
            replace: Overwrite an existing file
        """
        try:
            self.backend.ensure_directories()
            self.backend.copy_template(overwrite=replace)
        except ConfigError as e:
            self._report(e)
            return
        self.reload()

    def __enter__(self) -> "ConfigManager":
        return self

    def __exit__(self, *exc_info) -> None:
        self.flush()

    # ===== Values =====

    def get(self, path: str, default: Any = None) -> Any:
        return self.document.get(path, default)

    def set(self, path: str, value: Any) -> None:
        """Set a value (None removes it) and persist."""
        self.document.set(path, value)

    def contains(self, path: str, ignore_default: bool = False) -> bool:
        return self.document.contains(path, ignore_default)

    def is_set(self, path: str) -> bool:
        return self.document.is_set(path)

    def get_keys(self, deep: bool = True) -> list[str]:
        return self.document.get_keys(deep)

    def get_values(self, deep: bool = True) -> dict[str, Any]:
        return self.document.get_values(deep)

    def clear(self, deep: bool = True) -> None:
        """Remove every value, writing once at the end."""
        with self.batch():
            self.document.clear(deep)

    def clear_path(self, path: str) -> None:
        self.document.set(path, None)

    def create_section(self, path: str, values: Mapping[str, Any] | None = None) -> ConfigurationSection:
        return self.document.create_section(path, values)

    def create_path(
        self, section: ConfigurationSection, key: str, relative_to: ConfigurationSection | None = None
    ) -> str:
        return self.document.resolver.create_path(section, key, relative_to)

    # ===== Defaults =====

    def add_default(self, path: str, value: Any) -> None:
        self.document.add_default(path, value)

    def add_defaults(self, values: Mapping[str, Any] | ConfigurationSection) -> None:
        self.document.add_defaults(values)

    def set_defaults(self, defaults: ConfigurationDocument | Mapping[str, Any] | None) -> None:
        self.document.set_defaults(defaults)

    def get_defaults(self) -> ConfigurationDocument | None:
        return self.document.get_defaults()

    def set_copy_defaults(self, value: bool) -> None:
        self.document.set_copy_defaults(value)

    def get_copy_defaults(self) -> bool:
        return self.document.get_copy_defaults()

    # ===== Comments, Header and Footer =====

    def set_comments(self, path: str, comments: Iterable[str | None] | None) -> None:
        self.document.set_comments(path, comments)

    def get_comments(self, path: str) -> list[str | None] | None:
        return self.document.get_comments(path)

    def set_inline_comments(self, path: str, comments: Iterable[str] | None) -> None:
        self.document.set_inline_comments(path, comments)

    def get_inline_comments(self, path: str) -> list[str | None] | None:
        return self.document.get_inline_comments(path)

    def set_header(self, lines: Iterable[str | None] | None) -> None:
        self.document.set_header(lines)

    def get_header(self) -> list[str | None]:
        return self.document.get_header()

    def set_footer(self, lines: Iterable[str | None] | None) -> None:
        self.document.set_footer(lines)

    def get_footer(self) -> list[str | None]:
        return self.document.get_footer()

    # ===== Formatting Options =====

    @property
    def options(self) -> DocumentOptions:
        return self.document.options

    def set_parse_comments(self, value: bool) -> None:
        self.document.set_parse_comments(value)

    def get_parse_comments(self) -> bool:
        return self.document.get_parse_comments()

    def set_indent(self, indent: int) -> int:
        return self.document.set_indent(indent)

    def get_indent(self) -> int:
        return self.document.get_indent()

    def set_width(self, width: int) -> None:
        self.document.set_width(width)

    def get_width(self) -> int:
        return self.document.get_width()

    def set_path_separator(self, separator: str) -> None:
        self.document.set_path_separator(separator)

    def get_path_separator(self) -> str:
        return self.document.get_path_separator()

    def __repr__(self) -> str:
        return f"ConfigManager(name={self.name!r}, backend={self.backend!r})"

    # ===== Private Helpers =====

    def _registry(self) -> RichValueRegistry:
        return self.document.registry

    def _new_document(self, options: DocumentOptions, registry: RichValueRegistry | None) -> ConfigurationDocument:
        document = ConfigurationDocument(options=options, registry=registry)
        document.on_change = self._on_change
        return document

    def _bootstrap(self, copy_template: bool, replace_template: bool) -> None:
        """Make sure a file exists before the first load."""
        try:
            self.backend.ensure_directories()
            if copy_template:
                if not self.backend.exists():
                    self.backend.copy_template(overwrite=False)
                elif replace_template:
                    self.backend.copy_template(overwrite=True)
            elif not self.backend.exists():
                self.backend.write_bytes(b"")
                logger.info(f"Created configuration file for '{self.name}'")
        except ConfigError as e:
            self._report(e)

    def _on_change(self) -> None:
        self._dirty = True
        if self.persist_mode is PersistMode.IMMEDIATE and self._batch_depth == 0:
            self.save()

    def _report(self, error: ConfigError) -> None:
        if self.error_handler is None:
            raise error
        self.error_handler(error)
