"""Tests for rich values: the registry, the built-in types and document storage."""

import pytest

from custom_config import Color
from custom_config import ConfigurationDocument
from custom_config import RichValueRegistry
from custom_config import Vector
from custom_config import default_registry
from custom_config.values import VectorCodec


class TestBuiltinValues:
    """Test the Vector and Color value types."""

    def test_vector_components_are_floats(self):
        """Test vector components are stored as floats."""
        vector = Vector(1, 2, 3)
        assert vector == Vector(1.0, 2.0, 3.0)
        assert isinstance(vector.x, float)

    def test_color_channel_range(self):
        """Test channels outside 0-255 are rejected."""
        with pytest.raises(ValueError):
            Color(256, 0, 0)
        with pytest.raises(ValueError):
            Color(-1, 0, 0)

    def test_color_channel_type(self):
        """Test channels must be integers."""
        with pytest.raises(ValueError):
            Color(1.5, 0, 0)
        with pytest.raises(ValueError):
            Color(True, 0, 0)

    def test_color_rgb(self):
        """Test packing and unpacking 0xRRGGBB values."""
        color = Color.from_rgb(0xFF8000)
        assert color == Color(255, 128, 0)
        assert color.as_rgb() == 0xFF8000


class TestRichValueRegistry:
    """Test registering and using rich value codecs."""

    @pytest.fixture
    def registry(self):
        """Create a registry with the built-in codecs."""
        return default_registry()

    def test_builtin_tags(self, registry):
        """Test the default registry knows vectors and colors."""
        assert registry.tags() == ["Vector", "Color"]

    def test_codec_lookup(self, registry):
        """Test codecs are found by tag and by type."""
        assert registry.codec_for("Vector") is registry.codec_for(Vector)
        assert registry.codec_for("Unknown") is None
        assert registry.codec_for(str) is None

    def test_serialize(self, registry):
        """Test the tagged wire form."""
        assert registry.serialize(Color(1, 2, 3)) == {"==": "Color", "red": 1, "green": 2, "blue": 3}

    def test_serialize_unregistered(self, registry):
        """Test serializing an unregistered type fails."""
        with pytest.raises(KeyError):
            registry.serialize(object())

    def test_deserialize(self, registry):
        """Test decoding a tagged mapping."""
        assert registry.deserialize({"==": "Vector", "x": 1, "y": 2, "z": 3}) == Vector(1, 2, 3)

    def test_deserialize_untagged_or_unknown(self, registry):
        """Test untagged and unknown mappings are not decoded."""
        assert registry.deserialize({"x": 1}) is None
        assert registry.deserialize({"==": "Unknown", "x": 1}) is None

    def test_deserialize_rejected_payload(self, registry):
        """Test a codec error yields None instead of raising."""
        assert registry.deserialize({"==": "Vector", "x": 1}) is None
        assert registry.deserialize({"==": "Color", "red": 300, "green": 0, "blue": 0}) is None

    def test_deserialize_expected_codec(self, registry):
        """Test decoding can be restricted to one codec."""
        data = {"==": "Vector", "x": 1, "y": 2, "z": 3}
        assert registry.deserialize(data, expected=registry.codec_for(Color)) is None
        assert registry.deserialize(data, expected=registry.codec_for(Vector)) == Vector(1, 2, 3)

    def test_revive_nested(self, registry):
        """Test revive decodes inside mappings and lists and keeps unknown tags."""
        data = {
            "path": [{"==": "Vector", "x": 0, "y": 0, "z": 0}],
            "thing": {"==": "Unknown", "a": 1},
        }
        assert registry.revive(data) == {"path": [Vector(0, 0, 0)], "thing": {"==": "Unknown", "a": 1}}

    def test_unregister(self, registry):
        """Test removing a codec."""
        assert registry.unregister("Color") is True
        assert registry.unregister("Color") is False
        assert not registry.is_rich(Color(0, 0, 0))

    def test_register_replaces_same_tag(self, registry):
        """Test a codec with an existing tag replaces the old one."""
        replacement = VectorCodec()
        registry.register(replacement)
        assert registry.codec_for("Vector") is replacement
        assert registry.tags() == ["Vector", "Color"]


class TestRichValuesInDocuments:
    """Test storing rich values in a document."""

    @pytest.fixture
    def document(self):
        """Create a document with the default registry."""
        return ConfigurationDocument()

    def test_set_and_get_rich(self, document):
        """Test reading a rich value by type and by tag."""
        document.set("spawn", Vector(1, 64, -3.5))

        assert document.get_rich("spawn", Vector) == Vector(1, 64, -3.5)
        assert document.get_rich("spawn", "Vector") == Vector(1, 64, -3.5)
        assert document.is_rich("spawn", Vector)
        assert not document.is_rich("spawn", Color)

    def test_get_rich_missing(self, document):
        """Test the default is returned only for absent paths."""
        document.set("name", "Steve")
        fallback = Vector(0, 0, 0)

        assert document.get_rich("spawn", Vector, fallback) is fallback
        assert document.get_rich("name", Vector, fallback) is None

    def test_rich_value_round_trip(self, document):
        """Test rich values survive saving and loading."""
        document.set("spawn", Vector(1, 64, -3.5))
        document.set("theme.accent", Color(255, 128, 0))
        document.set("path", [Vector(0, 0, 0), Vector(1, 1, 1)])

        loaded = ConfigurationDocument()
        loaded.load_from_string(document.save_to_string())

        assert loaded.get_rich("spawn", Vector) == Vector(1, 64, -3.5)
        assert loaded.get_rich("theme.accent", Color) == Color(255, 128, 0)
        assert loaded.get_list("path") == [Vector(0, 0, 0), Vector(1, 1, 1)]

    def test_unknown_tag_stays_section(self, document):
        """Test data with an unknown tag loads as a plain section and saves unchanged."""
        document.load_from_string("thing:\n  ==: Unknown\n  a: 1\n")

        assert document.is_section("thing")
        assert document.get_rich("thing", Vector) is None
        assert document.get_section("thing").to_dict() == {"==": "Unknown", "a": 1}

    def test_codec_registered_after_load(self):
        """Test tagged data is decoded lazily once its codec is registered."""
        document = ConfigurationDocument(registry=RichValueRegistry())
        document.load_from_string("spawn:\n  ==: Vector\n  x: 1\n  y: 2\n  z: 3\n")

        assert document.is_section("spawn")
        assert document.get_rich("spawn", "Vector") is None

        document.registry.register(VectorCodec())
        assert document.get_rich("spawn", Vector) == Vector(1, 2, 3)

    def test_broken_payload_stays_section(self, document):
        """Test a tagged mapping the codec rejects is kept as data."""
        document.load_from_string("spawn:\n  ==: Vector\n  x: nope\n")

        assert document.is_section("spawn")
        assert document.get_rich("spawn", Vector) is None
