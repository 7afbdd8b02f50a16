"""
Tests for the pagesnap.host module.

This module tests:
- PageDocument construction and root resolution
- Computed style sources and geometry results
- Node helpers (text content, connectedness)
"""

import pytest
from bs4 import BeautifulSoup

from pagesnap.data_models import BoundingBox
from pagesnap.exceptions import InvalidRootError
from pagesnap.host import (
    ComputedStyle,
    PageDocument,
    bounding_box,
    class_list,
    computed_style,
    get_attr,
    is_connected,
    text_content,
)


# =============================================================================
# PageDocument
# =============================================================================

class TestPageDocument:
    """Tests for PageDocument."""

    def test_defaults(self):
        """Test page facts for a static document."""
        document = PageDocument.from_html("<html><head><title> Docs </title></head><body></body></html>")

        assert document.url == "about:blank"
        assert document.title == "Docs"
        assert (document.viewport_width, document.viewport_height) == (1024, 768)
        assert document.ready_state == "complete"
        assert document.viewport_area == 1024 * 768

    def test_explicit_facts(self):
        """Test that constructor arguments win."""
        document = PageDocument.from_html(
            "<html><head><title>Ignored</title></head><body></body></html>",
            url="https://example.com/",
            title="Shown",
            viewport=(0, 0),
            ready_state="loading",
        )

        assert document.title == "Shown"
        assert document.viewport_area == 0
        assert document.ready_state == "loading"
        assert "example.com" in repr(document)

    def test_html_parser_accepted(self):
        """Test the stdlib parser as an alternative."""
        document = PageDocument.from_html("<html><body><p>x</p></body></html>", parser="html.parser")

        assert document.select_one("p") is not None

    def test_frequency_indexes(self, make_document):
        """Test id and name counts."""
        document = make_document("<p id='a'></p><p id='a'></p><input name='q'><input name='r'>")

        assert document.id_count("a") == 2
        assert document.id_count("missing") == 0
        assert document.name_count("q") == 1
        assert document.get_element_by_id("a") is document.select("p")[0]


class TestResolveRoot:
    """Tests for PageDocument.resolve_root."""

    def test_defaults_to_body(self, make_document):
        """Test the default root."""
        document = make_document("<p>x</p>")

        assert document.resolve_root() is document.body

    def test_explicit_root(self, make_document):
        """Test that an owned element is accepted."""
        document = make_document("<main><p>x</p></main>")
        main = document.select_one("main")

        assert document.resolve_root(main) is main

    def test_foreign_root(self, make_document):
        """Test that an element from another document is rejected."""
        document = make_document("<p>x</p>")
        other = make_document("<p>y</p>")

        with pytest.raises(InvalidRootError) as exc_info:
            document.resolve_root(other.select_one("p"))

        assert exc_info.value.code == "INVALID_ROOT"

    def test_detached_root(self, make_document):
        """Test that a detached element is rejected."""
        document = make_document("<p>x</p>")
        paragraph = document.select_one("p").extract()

        with pytest.raises(InvalidRootError):
            document.resolve_root(paragraph)

    def test_text_root(self, make_document):
        """Test that a text node is rejected."""
        document = make_document("<p>x</p>")

        with pytest.raises(InvalidRootError):
            document.resolve_root(document.select_one("p").string)

    def test_missing_body(self):
        """Test a document without a body."""
        document = PageDocument(BeautifulSoup("", "html.parser"))

        with pytest.raises(InvalidRootError):
            document.resolve_root()


# =============================================================================
# Style and Geometry
# =============================================================================

class TestComputedStyle:
    """Tests for computed_style."""

    def test_stamp(self, make_document):
        """Test stamped values."""
        document = make_document("<p data-snap-style='inline|visible|0.5'>x</p>")

        assert computed_style(document.select_one("p")) == ComputedStyle("inline", "visible", 0.5)

    def test_inline_style(self, make_document):
        """Test inline declarations."""
        document = make_document("<p style='color: red; opacity: 50%; Display: FLEX'>x</p>")

        assert computed_style(document.select_one("p")) == ComputedStyle("flex", "visible", 0.5)

    def test_defaults(self, make_document):
        """Test user-agent defaults."""
        document = make_document("<p>x</p><template><b>t</b></template>")

        assert not computed_style(document.select_one("p")).hidden
        assert computed_style(document.select_one("template")).hidden


class TestBoundingBox:
    """Tests for bounding_box."""

    def test_no_geometry(self, make_document):
        """Test a static node."""
        document = make_document("<p>x</p>")
        result = bounding_box(document.select_one("p"))

        assert result.ok
        assert result.box is None

    def test_stamped_geometry(self, make_document):
        """Test a stamped node, rounded to whole pixels."""
        document = make_document("<p data-snap-bbox='10.4,20.6,100,30'>x</p>")
        result = bounding_box(document.select_one("p"))

        assert result.ok
        assert result.box == BoundingBox(x=10, y=21, width=100, height=30)
        assert result.box.area == 3000

    def test_malformed_stamp(self, make_document):
        """Test that a bad stamp is a failed query, not an exception."""
        document = make_document("<p data-snap-bbox='wide'>x</p>")
        result = bounding_box(document.select_one("p"))

        assert not result.ok
        assert "malformed" in result.error

    def test_detached(self, make_document):
        """Test that detached nodes fail the query."""
        document = make_document("<p data-snap-bbox='0,0,1,1'>x</p>")
        paragraph = document.select_one("p").extract()

        assert not bounding_box(paragraph).ok
        assert not is_connected(paragraph)


# =============================================================================
# Node Helpers
# =============================================================================

class TestNodeHelpers:
    """Tests for node helpers."""

    def test_text_content_skips_non_content(self, make_document):
        """Test that scripts, styles and comments never count as text."""
        document = make_document("<div>a<!-- note --><script>b()</script><style>.c{}</style>d</div>")

        assert text_content(document.select_one("div")) == "ad"

    def test_multi_valued_attributes(self, make_document):
        """Test class lists and joined attribute values."""
        document = make_document("<a class='btn  primary' rel='nofollow noopener' href='#'>x</a>")
        link = document.select_one("a")

        assert class_list(link) == ["btn", "primary"]
        assert get_attr(link, "rel") == "nofollow noopener"
        assert get_attr(link, "title") is None
