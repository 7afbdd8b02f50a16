"""
Tests for the pagesnap.refs module.
"""

import re

from pagesnap.refs import REF_PREFIX, RefRegistry


class TestRefRegistry:
    """Tests for RefRegistry."""

    def test_tokens_are_contiguous(self, make_document):
        """Test that tokens start at zero and count up."""
        document = make_document("<p>a</p><p>b</p><p>c</p>")
        registry = RefRegistry()

        refs = [registry.generate_ref(p) for p in document.select("p")]

        assert refs == ["@ref:0", "@ref:1", "@ref:2"]
        assert registry.counter == 3
        assert len(registry) == 3

    def test_token_format(self, make_document):
        """Test the @ref:N format without leading zeros."""
        document = make_document("<p>a</p>")
        registry = RefRegistry()

        for _ in range(12):
            ref = registry.generate_ref(document.select_one("p"))
            assert re.fullmatch(r"@ref:(0|[1-9][0-9]*)", ref)
            assert ref.startswith(REF_PREFIX)

    def test_get_resolves_node(self, make_document):
        """Test resolving a token back to its node."""
        document = make_document("<button>OK</button>")
        registry = RefRegistry()
        button = document.select_one("button")

        ref = registry.generate_ref(button)

        assert registry.get(ref) is button
        assert ref in registry
        assert registry.get("@ref:99") is None

    def test_clear_restarts_numbering(self, make_document):
        """Test that clearing drops mappings and restarts at zero."""
        document = make_document("<p>a</p>")
        registry = RefRegistry()
        node = document.select_one("p")
        registry.generate_ref(node)
        registry.generate_ref(node)

        registry.clear()

        assert len(registry) == 0
        assert registry.get("@ref:0") is None
        assert registry.generate_ref(node) == "@ref:0"

    def test_registries_are_independent(self, make_document):
        """Test that counters are per instance."""
        document = make_document("<p>a</p>")
        node = document.select_one("p")
        first, second = RefRegistry(), RefRegistry()

        first.generate_ref(node)
        first.generate_ref(node)

        assert second.generate_ref(node) == "@ref:0"

    def test_set_and_iterate(self, make_document):
        """Test manual mapping and iteration order."""
        document = make_document("<p>a</p><p>b</p>")
        a, b = document.select("p")
        registry = RefRegistry()

        registry.set("@ref:7", a)
        registry.generate_ref(b)

        assert list(registry) == ["@ref:7", "@ref:0"]
        assert registry.get("@ref:7") is a
        assert "refs=2" in repr(registry)
