"""Rich value plugins.

A rich value is a structured, host-defined type (a vector, a color, ...)
stored in a document as a tagged mapping::

    spawn:
      ==: Vector
      x: 1.0
      y: 64.0
      z: -3.5

The ``==`` key carries the type tag. A codec registered for that tag turns
the mapping into a Python object on load and back into a mapping on save.
"""

import logging
from collections.abc import Mapping
from typing import Any
from typing import Protocol

logger = logging.getLogger(__name__)

TYPE_KEY = "=="


class RichValueCodec(Protocol):
    """Round-trips one rich value type to and from its wire form."""

    type_tag: str
    value_type: type

    def serialize(self, value: Any) -> dict[str, Any]:
        """Return the fields of value, without the type tag."""
        ...

    def deserialize(self, data: Mapping[str, Any]) -> Any:
        """Build a value from its fields (type tag removed)."""
        ...


class RichValueRegistry:
    """Registry of rich value codecs, looked up by type tag or value type."""

    def __init__(self, codecs: list[RichValueCodec] | None = None):
        self._codecs: dict[str, RichValueCodec] = {}
        for codec in codecs or []:
            self.register(codec)

    def register(self, codec: RichValueCodec) -> None:
        """Register a codec, replacing any codec with the same tag."""
        self._codecs[codec.type_tag] = codec
        logger.debug(f"Registered rich value codec '{codec.type_tag}'")

    def unregister(self, type_tag: str) -> bool:
        """Remove the codec for a tag.

        Returns:
            True if removed, False if not found
        """
        return self._codecs.pop(type_tag, None) is not None

    def tags(self) -> list[str]:
        """Return registered type tags in registration order."""
        return list(self._codecs)

    def codec_for(self, kind: str | type) -> RichValueCodec | None:
        """Find a codec by type tag or by value type."""
        if isinstance(kind, str):
            return self._codecs.get(kind)
        for codec in self._codecs.values():
            if codec.value_type is kind:
                return codec
        return None

    def codec_for_value(self, value: Any) -> RichValueCodec | None:
        """Find the codec able to serialize value."""
        codec = self.codec_for(type(value))
        if codec is not None:
            return codec
        for candidate in self._codecs.values():
            if isinstance(value, candidate.value_type):
                return candidate
        return None

    def is_rich(self, value: Any) -> bool:
        """Check whether value is an instance of a registered type."""
        return self.codec_for_value(value) is not None

    def serialize(self, value: Any) -> dict[str, Any]:
        """Convert a rich value to its tagged wire form.

        Raises:
            KeyError: If no codec is registered for the value's type
        """
        codec = self.codec_for_value(value)
        if codec is None:
            raise KeyError(f"No rich value codec registered for {type(value).__name__}")
        return {TYPE_KEY: codec.type_tag, **codec.serialize(value)}

    def deserialize(self, data: Mapping[str, Any], expected: RichValueCodec | None = None) -> Any | None:
        """Convert a tagged mapping into a rich value.

        Args:
            data: Mapping that may carry a type tag
            expected: If given, only decode mappings tagged for this codec

        Returns:
            The decoded value, or None when the mapping is untagged, the tag
            is unknown (or not the expected one) or the codec rejects the data
        """
        tag = data.get(TYPE_KEY)
        if not isinstance(tag, str):
            return None
        codec = self._codecs.get(tag)
        if codec is None or (expected is not None and codec is not expected):
            return None
        payload = {key: value for key, value in data.items() if key != TYPE_KEY}
        try:
            return codec.deserialize(payload)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to decode rich value tagged '{tag}': {e}")
            return None

    def revive(self, value: Any) -> Any:
        """Recursively replace decodable tagged mappings by rich values.

        Mappings with an unknown tag are kept as mappings so no data is lost.
        """
        if isinstance(value, Mapping):
            decoded = self.deserialize(value)
            if decoded is not None:
                return decoded
            return {key: self.revive(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self.revive(item) for item in value]
        return value
