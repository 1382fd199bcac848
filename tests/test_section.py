"""Tests for configuration sections: reading, writing and tree structure."""

import datetime

import pytest

from custom_config import ConfigurationDocument
from custom_config import ConfigurationSection
from custom_config import ConfigValidationError


class TestSectionValues:
    """Test setting, getting and removing values."""

    @pytest.fixture
    def document(self):
        """Create an empty document."""
        return ConfigurationDocument()

    def test_set_then_get(self, document):
        """Test a value read back after setting it is the same value."""
        document.set("server.port", 25565)
        document.set("server.motd", "Hello")

        assert document.get("server.port") == 25565
        assert document.get("server.motd") == "Hello"

    def test_get_missing_returns_default(self, document):
        """Test get returns the supplied default for missing paths."""
        assert document.get("missing") is None
        assert document.get("missing", 42) == 42

    def test_get_empty_path_returns_section(self, document):
        """Test the empty path addresses the section itself."""
        section = document.create_section("server")
        assert section.get("") is section

    def test_set_creates_intermediate_sections(self, document):
        """Test missing intermediate sections are created."""
        document.set("a.b.c", 1)

        assert document.is_section("a")
        assert document.is_section("a.b")
        assert document.get_keys() == ["a", "a.b", "a.b.c"]

    def test_set_replaces_section_with_scalar(self, document):
        """Test a scalar replaces a whole section."""
        document.set("server.port", 25565)
        document.set("server", "localhost")

        assert document.get("server") == "localhost"
        assert not document.contains("server.port")

    def test_set_through_scalar_replaces_it(self, document):
        """Test writing below a scalar turns it into a section."""
        document.set("server", "localhost")
        document.set("server.port", 25565)

        assert document.is_section("server")
        assert document.get("server.port") == 25565

    def test_set_none_removes(self, document):
        """Test setting None removes the entry."""
        document.set("server.port", 25565)
        document.set("server.port", None)

        assert not document.contains("server.port")
        assert document.contains("server")

    def test_set_none_missing_intermediate_is_noop(self, document):
        """Test removing below a missing section changes nothing."""
        document.set("motd", "Hello")
        document.set("server.port", None)

        assert document.get_keys() == ["motd"]

    def test_set_empty_path_rejected(self, document):
        """Test values cannot be written at the empty path."""
        with pytest.raises(ConfigValidationError):
            document.set("", 1)

    def test_set_unsupported_type_rejected(self, document):
        """Test unsupported value types are rejected without changes."""
        with pytest.raises(ConfigValidationError):
            document.set("thing", object())
        assert not document.contains("thing")

    def test_set_nested_unsupported_type_leaves_tree_untouched(self, document):
        """Test a bad value deep inside a mapping is rejected before anything is written."""
        document.set("server.port", 1)
        with pytest.raises(ConfigValidationError):
            document.set("server", {"port": 2, "bad": {"inner": object()}})
        assert document.get("server.port") == 1

    def test_set_mapping_becomes_section(self, document):
        """Test mappings are stored as nested sections."""
        document.set("database", {"host": "localhost", "pool": {"size": 5}})

        assert isinstance(document.get("database"), ConfigurationSection)
        assert document.get("database.pool.size") == 5

    def test_set_mapping_drops_none_values(self, document):
        """Test None inside a mapping means absent."""
        document.set("database", {"host": "localhost", "password": None})
        assert document.get_keys() == ["database", "database.host"]

    def test_set_section_copies_it(self, document):
        """Test a section from another document is copied, not shared."""
        other = ConfigurationDocument()
        other.set("limits.players", 20)
        document.set("copy", other.get_section("limits"))

        other.set("limits.players", 50)

        copied = document.get_section("copy")
        assert copied.root is document
        assert document.get("copy.players") == 20

    def test_lists_and_scalars(self, document):
        """Test lists and the supported scalar types are stored as-is."""
        day = datetime.date(2024, 1, 2)
        document.set("worlds", ["world", "nether"])
        document.set("ratio", 0.5)
        document.set("enabled", True)
        document.set("since", day)

        assert document.get("worlds") == ["world", "nether"]
        assert document.get("ratio") == 0.5
        assert document.get("enabled") is True
        assert document.get("since") == day

    def test_tuple_stored_as_list(self, document):
        """Test tuples are stored as lists."""
        document.set("spawn", (1, 2, 3))
        assert document.get("spawn") == [1, 2, 3]

    def test_contains(self, document):
        """Test contains for present, missing and nested paths."""
        document.set("server.port", 25565)

        assert document.contains("server")
        assert document.contains("server.port")
        assert not document.contains("server.motd")
        assert not document.contains("server.port.value")
        assert "server.port" in document

    def test_get_keys_order(self, document):
        """Test keys are listed in discovery order, parents first."""
        document.set("server.port", 25565)
        document.set("motd", "Hello")
        document.set("server.host", "localhost")

        assert document.get_keys() == ["server", "server.port", "server.host", "motd"]
        assert document.get_keys(deep=False) == ["server", "motd"]

    def test_get_values(self, document):
        """Test values are keyed by relative path."""
        document.set("server.port", 25565)
        values = document.get_values()

        assert list(values) == ["server", "server.port"]
        assert isinstance(values["server"], ConfigurationSection)
        assert values["server.port"] == 25565

    def test_section_relative_paths(self, document):
        """Test sections read and write relative to themselves."""
        server = document.create_section("server")
        server.set("limits.players", 20)

        assert document.get("server.limits.players") == 20
        assert server.get_keys() == ["limits", "limits.players"]

    def test_to_dict(self, document):
        """Test converting a tree to nested dictionaries."""
        document.set("server.port", 25565)
        document.set("worlds", ["world"])

        assert document.to_dict() == {"server": {"port": 25565}, "worlds": ["world"]}

    def test_to_dict_is_a_copy(self, document):
        """Test mutating the result of to_dict does not touch the tree."""
        document.set("worlds", ["world"])
        document.to_dict()["worlds"].append("nether")

        assert document.get("worlds") == ["world"]


class TestSectionStructure:
    """Test section creation, navigation and clearing."""

    @pytest.fixture
    def document(self):
        """Create a document with a nested section."""
        document = ConfigurationDocument()
        document.set("server.limits.players", 20)
        document.set("server.port", 25565)
        document.set("motd", "Hello")
        return document

    def test_names_and_paths(self, document):
        """Test name, path, parent and root links."""
        limits = document.get_section("server.limits")

        assert limits.name == "limits"
        assert limits.path == "server.limits"
        assert limits.parent.name == "server"
        assert limits.parent.parent is document
        assert limits.root is document

    def test_document_is_root(self, document):
        """Test the document has no parent and is its own root."""
        assert document.parent is None
        assert document.root is document
        assert document.path == ""

    def test_create_section(self, document):
        """Test creating an empty section."""
        section = document.create_section("world.spawn")

        assert isinstance(section, ConfigurationSection)
        assert section.path == "world.spawn"
        assert len(section) == 0
        assert document.is_section("world.spawn")

    def test_create_section_with_values(self, document):
        """Test creating a pre-filled section."""
        section = document.create_section("database", {"host": "localhost", "port": 5432})
        assert section.get_keys() == ["host", "port"]

    def test_create_section_replaces_existing(self, document):
        """Test creating a section over an existing one replaces it."""
        document.create_section("server")
        assert not document.contains("server.port")

    def test_clear_removes_everything(self, document):
        """Test clear leaves no keys behind."""
        document.clear()
        assert document.get_keys() == []

    def test_clear_shallow(self, document):
        """Test a shallow clear also empties the section."""
        document.clear(deep=False)
        assert document.get_keys() == []

    def test_clear_section_only(self, document):
        """Test clearing a nested section keeps the rest of the tree."""
        document.get_section("server").clear()

        assert document.get_keys() == ["server", "motd"]

    def test_repr(self, document):
        """Test the repr names the path and keys."""
        assert repr(document.get_section("server")) == "ConfigurationSection(path='server', keys=['limits', 'port'])"


class TestSectionComments:
    """Test per-path comments on sections."""

    @pytest.fixture
    def document(self):
        """Create a document with one value."""
        document = ConfigurationDocument()
        document.set("server.port", 25565)
        return document

    def test_set_and_get_comments(self, document):
        """Test comments read back as set."""
        document.set_comments("server.port", ["The port", None, ""])
        assert document.get_comments("server.port") == ["The port", None, ""]

    def test_comments_split_on_newlines(self, document):
        """Test multi-line strings become several comment lines."""
        document.set_comments("server.port", ["first\nsecond"])
        assert document.get_comments("server.port") == ["first", "second"]

    def test_comments_for_missing_path(self, document):
        """Test comments for a path without a value are None."""
        assert document.get_comments("server.motd") is None
        assert document.get_inline_comments("server.motd") is None

    def test_no_comments(self, document):
        """Test a value without comments has an empty comment list."""
        assert document.get_comments("server.port") == []

    def test_comments_relative_to_section(self, document):
        """Test section comments address the same entry as full paths."""
        document.get_section("server").set_comments("port", ["The port"])
        assert document.get_comments("server.port") == ["The port"]

    def test_inline_comments(self, document):
        """Test inline comments drop blank-line markers."""
        document.set_inline_comments("server.port", ["default", None])
        assert document.get_inline_comments("server.port") == ["default"]

    def test_remove_comments(self, document):
        """Test None or an empty list removes comments."""
        document.set_comments("server.port", ["The port"])
        document.set_comments("server.port", None)
        assert document.get_comments("server.port") == []

    def test_comments_survive_value_removal(self, document):
        """Test comments come back when a removed value is set again."""
        document.set_comments("server.port", ["The port"])
        document.set("server.port", None)

        assert document.get_comments("server.port") is None

        document.set("server.port", 25566)
        assert document.get_comments("server.port") == ["The port"]
