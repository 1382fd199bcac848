"""custom-config: Hierarchical, path-addressed YAML configuration files.

This library provides a configuration tree addressed by dotted paths
(``server.port``), typed accessors, a defaults layer consulted on read
misses, and YAML persistence that keeps comments, a header and a footer.

Public API:
    ConfigManager: One configuration file with write-through persistence
    ConfigPaths: Dataclass defining data and template directories
    ConfigurationDocument: Root of a configuration tree (load/save/options)
    ConfigurationSection: Node of a configuration tree
    DocumentOptions: Formatting and lookup options
    PersistMode: Enum for IMMEDIATE/BATCHED persistence
    FileBackend, MemoryBackend, PersistenceBackend: Document storage
    RichValueRegistry, RichValueCodec: Plugin mechanism for structured values
    Vector, Color: Built-in rich values
    deep_merge: Utility function for deep mapping merging
    ConfigError, ConfigFileError, ConfigParseError, ConfigValidationError: Exception types

Example:
    ```python
    from pathlib import Path
    from custom_config import ConfigManager, ConfigPaths

    # Application injects paths (policy)
    paths = ConfigPaths(data_dir=Path("data"), template_dir=Path("templates"))

    # Library provides mechanism; the file is created on first use
    config = ConfigManager("config.yml", paths, copy_template=True)

    port = config.get_int("server.port", 25565)

    # Every mutation is written to disk before returning
    config.set("server.motd", "Hello")
    config.set_comments("server.motd", ["Shown in the server list"])
    ```
"""

from .backend import FileBackend
from .backend import MemoryBackend
from .backend import PersistenceBackend
from .codec import YamlDocumentCodec
from .document import ConfigurationDocument
from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .exceptions import ConfigParseError
from .exceptions import ConfigValidationError
from .manager import ConfigManager
from .manager import log_error
from .models import ConfigPaths
from .models import DocumentOptions
from .models import PersistMode
from .paths import PathResolver
from .rich import RichValueCodec
from .rich import RichValueRegistry
from .section import ConfigurationSection
from .utils import deep_merge
from .values import Color
from .values import Vector
from .values import default_registry

__version__ = "0.1.0"

__all__ = [
    "ConfigManager",
    "ConfigPaths",
    "ConfigurationDocument",
    "ConfigurationSection",
    "DocumentOptions",
    "PersistMode",
    "PathResolver",
    "FileBackend",
    "MemoryBackend",
    "PersistenceBackend",
    "YamlDocumentCodec",
    "RichValueCodec",
    "RichValueRegistry",
    "Vector",
    "Color",
    "default_registry",
    "deep_merge",
    "log_error",
    "ConfigError",
    "ConfigFileError",
    "ConfigParseError",
    "ConfigValidationError",
]
