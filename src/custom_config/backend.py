"""Persistence backends: where serialized documents are read from and written to."""

import logging
import os
import tempfile
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Protocol

from .exceptions import ConfigFileError

logger = logging.getLogger(__name__)


class PersistenceBackend(Protocol):
    """Durable storage for one serialized document."""

    def exists(self) -> bool:
        """Check whether a stored document exists."""
        ...

    def ensure_directories(self) -> None:
        """Create whatever containers the document needs."""
        ...

    def read_bytes(self) -> bytes:
        """Read the stored document."""
        ...

    def write_bytes(self, data: bytes) -> None:
        """Replace the stored document."""
        ...

    def copy_template(self, overwrite: bool = False) -> None:
        """Store the bundled template document."""
        ...


class FileBackend:
    """Stores a document in a file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a failed write never leaves a half-written document.

    Args:
        path: File holding the document
        template: Bundled template copied by copy_template (optional)
    """

    def __init__(self, path: Path, template: Path | Traversable | None = None):
        self.path = path
        self.template = template

    def exists(self) -> bool:
        return self.path.exists()

    def ensure_directories(self) -> None:
        """Create the parent directories of the file.

        Raises:
            ConfigFileError: If the directories cannot be created
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigFileError(f"Failed to create directory {self.path.parent}: {e}") from e

    def read_bytes(self) -> bytes:
        """Read the file.

        Raises:
            ConfigFileError: If the file cannot be read
        """
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise ConfigFileError(f"Failed to read configuration from {self.path}: {e}") from e

    def write_bytes(self, data: bytes) -> None:
        """Atomically replace the file.

        Raises:
            ConfigFileError: If the write fails
        """
        self.ensure_directories()
        tmp_name = None
        try:
            prefix = f".{self.path.name}."
            with tempfile.NamedTemporaryFile("wb", dir=self.path.parent, prefix=prefix, delete=False) as f:
                tmp_name = f.name
                f.write(data)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ConfigFileError(f"Failed to write configuration to {self.path}: {e}") from e
        logger.debug(f"Wrote {len(data)} bytes to {self.path}")

    def copy_template(self, overwrite: bool = False) -> None:
        """Copy the bundled template over the file.

        An existing file is kept unless overwrite is set.

        Raises:
            ConfigFileError: If there is no template or it cannot be copied
        """
        if self.template is None or not self.template.is_file():
            raise ConfigFileError(f"No bundled template found for {self.path.name}")
        if self.exists() and not overwrite:
            logger.warning(f"Not copying template to {self.path}: file already exists")
            return
        try:
            data = self.template.read_bytes()
        except OSError as e:
            raise ConfigFileError(f"Failed to read template {self.template}: {e}") from e
        self.write_bytes(data)
        logger.info(f"Copied template to {self.path}")

    def __repr__(self) -> str:
        return f"FileBackend({str(self.path)!r})"


class MemoryBackend:
    """Keeps a document in memory.

    Args:
        data: Initial stored bytes (None means no document yet)
        template: Bundled template bytes for copy_template (optional)
    """

    def __init__(self, data: bytes | None = None, template: bytes | None = None):
        self.data = data
        self.template = template
        self.writes = 0

    def exists(self) -> bool:
        return self.data is not None

    def ensure_directories(self) -> None:
        pass

    def read_bytes(self) -> bytes:
        if self.data is None:
            raise ConfigFileError("No document stored in memory")
        return self.data

    def write_bytes(self, data: bytes) -> None:
        self.data = bytes(data)
        self.writes += 1

    def copy_template(self, overwrite: bool = False) -> None:
        if self.template is None:
            raise ConfigFileError("No bundled template available")
        if self.exists() and not overwrite:
            return
        self.write_bytes(self.template)
