"""Unit tests for cache key namespacing."""

import pytest

from src.cache.keys import (
    NAMESPACE_TAGS,
    CacheNamespace,
    namespace_tag,
    namespaced_key,
    parse_namespaced_key,
)


class TestNamespacedKey:
    """Test suite for namespaced_key()."""

    @pytest.mark.parametrize("key", ["hype", "Hype", "HYPE", "Mixed Case-Key_1"])
    def test_taxonomy_prefix_and_lowercase(self, key):
        """Test taxonomy keys are prefixed and lower-cased."""
        assert namespaced_key(key, "taxonomy") == "taxonomy-" + key.lower()

    def test_token_template_prefix(self):
        """Test tokenTemplate keeps its camel-case tag."""
        assert namespaced_key("Welcome", "tokenTemplate") == "tokenTemplate-welcome"

    def test_enum_namespace(self):
        """Test enum members behave like their tag strings."""
        assert namespaced_key("Hype", CacheNamespace.TAXONOMY) == "taxonomy-hype"
        assert namespaced_key("Hype", CacheNamespace.TOKEN_TEMPLATE) == "tokenTemplate-hype"

    @pytest.mark.parametrize("namespace", ["", "other", "Taxonomy", "tokentemplate"])
    def test_unknown_namespace_falls_back(self, namespace):
        """Test unrecognized tags yield an unprefixed key."""
        assert namespaced_key("Hype", namespace) == "-hype"

    def test_recognized_tags(self):
        """Test the recognized namespace set."""
        assert NAMESPACE_TAGS == ("taxonomy", "tokenTemplate")
        assert namespace_tag("taxonomy") == "taxonomy"
        assert namespace_tag("nope") == ""


class TestParseNamespacedKey:
    """Test suite for parse_namespaced_key()."""

    def test_parse_valid_key(self):
        """Test parsing a namespaced key."""
        parsed = parse_namespaced_key("taxonomy-hype")

        assert parsed == {"namespace": "taxonomy", "key": "hype"}

    def test_parse_keeps_dashes_in_key(self):
        """Test only the first separator splits the key."""
        parsed = parse_namespaced_key(namespaced_key("a-b-c", "tokenTemplate"))

        assert parsed == {"namespace": "tokenTemplate", "key": "a-b-c"}

    def test_parse_unprefixed_key(self):
        """Test keys from unknown namespaces parse with an empty tag."""
        assert parse_namespaced_key("-hype") == {"namespace": "", "key": "hype"}

    def test_parse_invalid_key(self):
        """Test parsing a key without a separator raises ValueError."""
        with pytest.raises(ValueError) as exc_info:
            parse_namespaced_key("hype")

        assert "Invalid cache key format" in str(exc_info.value)
