"""Tests for utility functions."""

from types import MappingProxyType

from custom_config.utils import deep_merge


class TestDeepMerge:
    """Test deep_merge function."""

    def test_empty_mappings(self):
        """Test merging empty mappings."""
        assert deep_merge({}, {}) == {}

    def test_empty_base(self):
        """Test merging into an empty base."""
        assert deep_merge({}, {"port": 25565}) == {"port": 25565}

    def test_empty_overlay(self):
        """Test merging an empty overlay."""
        assert deep_merge({"port": 25565}, {}) == {"port": 25565}

    def test_overlay_wins_for_scalars(self):
        """Test overlay takes precedence for simple values."""
        base = {"port": 25565, "motd": "Hello"}
        overlay = {"motd": "Welcome", "max-players": 20}
        assert deep_merge(base, overlay) == {"port": 25565, "motd": "Welcome", "max-players": 20}

    def test_nested_sections_merge(self):
        """Test nested sections are merged key by key."""
        base = {"server": {"port": 25565, "motd": "Hello"}}
        overlay = {"server": {"motd": "Welcome"}, "debug": False}
        assert deep_merge(base, overlay) == {"server": {"port": 25565, "motd": "Welcome"}, "debug": False}

    def test_deep_nested_merge(self):
        """Test merging several levels deep."""
        base = {"a": {"b": {"c": {"x": 1, "y": 2}}}}
        overlay = {"a": {"b": {"c": {"y": 20, "z": 3}}}}
        assert deep_merge(base, overlay) == {"a": {"b": {"c": {"x": 1, "y": 20, "z": 3}}}}

    def test_section_replaces_scalar(self):
        """Test a section in overlay replaces a scalar in base."""
        assert deep_merge({"server": "localhost"}, {"server": {"host": "localhost"}}) == {
            "server": {"host": "localhost"}
        }

    def test_scalar_replaces_section(self):
        """Test a scalar in overlay replaces a whole section in base."""
        assert deep_merge({"server": {"host": "localhost"}}, {"server": "localhost"}) == {"server": "localhost"}

    def test_lists_not_merged(self):
        """Test lists are replaced, not merged."""
        assert deep_merge({"worlds": ["world", "nether"]}, {"worlds": ["end"]}) == {"worlds": ["end"]}

    def test_accepts_read_only_mappings(self):
        """Test any Mapping works as input and a plain dict comes out."""
        base = MappingProxyType({"server": MappingProxyType({"port": 1})})
        result = deep_merge(base, {"server": {"motd": "Hi"}})
        assert result == {"server": {"port": 1, "motd": "Hi"}}
        assert isinstance(result, dict)
        assert isinstance(result["server"], dict)

    def test_original_not_modified(self):
        """Test that the inputs are not modified."""
        base = {"server": {"port": 1}}
        overlay = {"server": {"motd": "Hi"}}
        result = deep_merge(base, overlay)

        assert result == {"server": {"port": 1, "motd": "Hi"}}
        assert base == {"server": {"port": 1}}
        assert overlay == {"server": {"motd": "Hi"}}

    def test_result_does_not_share_nested_mappings(self):
        """Test mutating the result leaves nested input sections alone."""
        base = {"server": {"port": 1}}
        overlay = {"world": {"name": "world"}}
        result = deep_merge(base, overlay)

        result["server"]["port"] = 2
        result["world"]["name"] = "nether"

        assert base == {"server": {"port": 1}}
        assert overlay == {"world": {"name": "world"}}
