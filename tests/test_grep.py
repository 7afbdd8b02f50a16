"""
Tests for the pagesnap.grep module.

This module tests:
- GrepOptions coercion
- Line and record filtering (regex, fixed strings, word/line anchors, invert)
- Substring fallback for patterns that do not compile
- The text grep utility (line numbers, context, counts)
"""

import logging
import re

import pytest

from pagesnap.exceptions import SnapshotConfigError
from pagesnap.grep import (
    GrepMatch,
    GrepOptions,
    build_element_search_data,
    compile_matcher,
    grep,
    grep_detailed,
    grep_elements,
    grep_items,
    grep_lines,
    grep_test,
    grep_text_lines,
    matches_grep,
)


LINES = [
    'BUTTON "Submit" @ref:0 /form/button',
    'LINK "Home" @ref:1 /nav/a[1]',
    'LINK "About us" @ref:2 /nav/a[2]',
    'TEXTBOX "Email" @ref:3 [type=email] /form/input',
]


# =============================================================================
# GrepOptions
# =============================================================================

class TestGrepOptions:
    """Tests for GrepOptions.coerce."""

    def test_string_is_pattern(self):
        """Test that a bare string becomes the pattern."""
        assert GrepOptions.coerce("LINK") == GrepOptions(pattern="LINK")

    def test_dict_with_camel_case(self):
        """Test dict coercion with wire-format keys."""
        options = GrepOptions.coerce({"pattern": "x", "ignoreCase": True, "fixedStrings": True, "wholeLineOnly": True})

        assert options.ignore_case
        assert options.fixed_strings
        assert options.whole_line

    def test_instance_passthrough(self):
        """Test that instances are returned unchanged."""
        options = GrepOptions(pattern="x", invert=True)

        assert GrepOptions.coerce(options) is options

    def test_dict_without_pattern(self):
        """Test that a dict must carry a pattern."""
        with pytest.raises(SnapshotConfigError):
            GrepOptions.coerce({"ignoreCase": True})

    def test_wrong_type(self):
        """Test that other types are rejected."""
        with pytest.raises(SnapshotConfigError) as exc_info:
            GrepOptions.coerce(42)

        assert exc_info.value.code == "INVALID_OPTIONS"


# =============================================================================
# Line Filtering
# =============================================================================

class TestGrepLines:
    """Tests for grep_lines and the matcher."""

    def test_regex_match(self):
        """Test regular expression matching."""
        result = grep_lines(LINES, "^LINK")

        assert result.items == LINES[1:3]
        assert result.match_count == 2
        assert result.total_count == 4
        assert result.pattern == "^LINK"

    def test_ignore_case(self):
        """Test case-insensitive matching."""
        assert grep_lines(LINES, "EMAIL").items == []
        assert grep_lines(LINES, {"pattern": "EMAIL", "ignoreCase": True}).items == [LINES[3]]

    def test_invert(self):
        """Test excluding matches."""
        result = grep_lines(LINES, GrepOptions(pattern="LINK", invert=True))

        assert result.items == [LINES[0], LINES[3]]

    def test_word_boundary(self):
        """Test whole-word matching."""
        lines = ["concatenate", "the cat sat"]

        assert grep_lines(lines, GrepOptions(pattern="cat", word_boundary=True)).items == ["the cat sat"]

    def test_whole_line(self):
        """Test whole-line matching."""
        lines = ["BUTTON", "BUTTON extra"]

        assert grep_lines(lines, GrepOptions(pattern="BUTTON", whole_line=True)).items == ["BUTTON"]

    def test_whole_line_rejects_trailing_newline(self):
        """Test that a trailing newline breaks a whole-line match."""
        lines = ["BUTTON\n", "BUTTON"]

        result = grep_lines(lines, GrepOptions(pattern="BUTTON", whole_line=True))

        assert result.items == ["BUTTON"]
        assert matches_grep("BUTTON\n", {"pattern": "BUTTON", "wholeLineOnly": True}) is False

    def test_alternation_anchored_as_group(self):
        """Test that anchors wrap the whole alternation."""
        lines = ["yes", "no", "maybe no"]

        assert grep_lines(lines, GrepOptions(pattern="yes|no", whole_line=True)).items == ["yes", "no"]

    def test_fixed_strings_no_regex_expansion(self):
        """Test that fixed strings match the literal text only."""
        lines = ["price a*b+c? here", "aabbbc"]
        result = grep_lines(lines, {"pattern": "a*b+c?", "fixedStrings": True})

        assert result.items == ["price a*b+c? here"]
        assert result.match_count == 1

    @pytest.mark.parametrize("literal", ["a.b", "(x)", "[1]", "$5.00", "a|b", "\\d+", "^start"])
    def test_fixed_strings_equals_substring(self, literal):
        """Test that fixed-strings matching agrees with substring containment."""
        lines = [f"has {literal} inside", "a1b", "x", "5.00", "ab", "d+", "start", literal]
        expected = [line for line in lines if literal in line]

        assert grep_lines(lines, GrepOptions(pattern=literal, fixed_strings=True)).items == expected

    @pytest.mark.parametrize("pattern", ["LINK", "^TEXTBOX", "@ref:[12]", "nav/a\\[\\d\\]", "zzz"])
    def test_invert_partitions_input(self, pattern):
        """Test that match and inverted match split the input exactly."""
        kept = grep_lines(LINES, GrepOptions(pattern=pattern)).items
        dropped = grep_lines(LINES, GrepOptions(pattern=pattern, invert=True)).items

        assert sorted(kept + dropped) == sorted(LINES)
        assert not set(kept) & set(dropped)

    def test_invalid_pattern_falls_back_to_substring(self, caplog):
        """Test that an uncompilable pattern degrades to substring matching."""
        lines = ["call foo(x)", "bar"]

        with caplog.at_level(logging.WARNING, logger="pagesnap.grep"):
            result = grep_lines(lines, "foo(")

        assert result.items == ["call foo(x)"]
        assert "Invalid grep pattern" in caplog.text

    def test_invalid_pattern_fallback_honours_flags(self):
        """Test that the fallback still applies ignore-case and invert."""
        lines = ["CALL FOO(X)", "bar"]

        assert grep_lines(lines, GrepOptions(pattern="foo(", ignore_case=True)).items == ["CALL FOO(X)"]
        assert grep_lines(lines, GrepOptions(pattern="foo(", ignore_case=True, invert=True)).items == ["bar"]

    def test_grep_items_with_extractor(self):
        """Test filtering arbitrary items through an extractor."""
        items = [{"name": "alpha"}, {"name": "beta"}]
        result = grep_items(items, "^b", lambda item: item["name"])

        assert result.items == [{"name": "beta"}]

    def test_matches_grep_and_compile(self):
        """Test the single-text helpers."""
        matcher = compile_matcher("ref:3")

        assert matcher(LINES[3])
        assert not matcher(LINES[0])
        assert matches_grep("Hello", {"pattern": "hello", "ignoreCase": True})


class TestGrepElements:
    """Tests for section record filtering."""

    def test_matches_on_text_heading_and_path(self, make_document):
        """Test that every record field is searchable."""
        document = make_document(
            "<section id='pricing'><h2>Plans</h2> <p>Pay  monthly</p></section>"
            "<section id='faq'><h2>Questions</h2><p>Ask us</p></section>"
        )
        pricing, faq = document.select("section")
        records = [
            build_element_search_data(pricing, "region", "Plans", "/section#pricing"),
            build_element_search_data(faq, "region", "Questions", "/section#faq"),
        ]

        assert records[0].text == "Plans Pay monthly"
        assert [r.heading for r in grep_elements(records, "monthly").items] == ["Plans"]
        assert [r.heading for r in grep_elements(records, "section#faq").items] == ["Questions"]
        assert grep_elements(records, "region").match_count == 2


# =============================================================================
# Text Grep Utility
# =============================================================================

class TestTextGrep:
    """Tests for grep, grep_detailed, grep_text_lines and grep_test."""

    TEXT = "alpha\nbeta\ngamma\ndelta"

    def test_basic(self):
        """Test plain matching."""
        assert grep("ta", self.TEXT) == ["beta", "delta"]

    def test_line_numbers(self):
        """Test N: prefixes."""
        assert grep("two", "line one\nline two", line_numbers=True) == ["2:line two"]

    def test_string_pattern_is_literal(self):
        """Test that string patterns are not regular expressions."""
        assert grep("a.c", "abc\na.c") == ["a.c"]

    def test_compiled_pattern_used_as_given(self):
        """Test that compiled patterns keep regex semantics."""
        assert grep(re.compile(r"a.c"), "abc\nxyz") == ["abc"]
        assert grep(re.compile("ABC"), "abc", ignore_case=True) == ["abc"]

    def test_count_and_invert(self):
        """Test counting and inverted matching."""
        assert grep("a", "a\nb\na", count=True) == 2
        assert grep("a", "a\nb", invert=True) == ["b"]

    def test_word_and_line_match(self):
        """Test -w and -x."""
        assert grep("cat", "concat\ncat food", word_match=True) == ["cat food"]
        assert grep("cat", "cat\ncat food", line_match=True) == ["cat"]

    def test_max_matches(self):
        """Test stopping after N matches."""
        assert grep("x", "x1\nx2\nx3", max_matches=2) == ["x1", "x2"]

    def test_context(self):
        """Test before/after context with N- prefixes."""
        text = "a\nb\nc\nd\ne"

        assert grep("c", text, before=1, line_numbers=True) == ["2-b", "3:c"]
        assert grep("c", text, after=1, line_numbers=True) == ["3:c", "4-d"]
        assert grep("c", text, before=1, after=1) == ["b", "c", "d"]

    def test_overlapping_context_not_repeated(self):
        """Test that shared context lines appear once."""
        assert grep("x", "x\ny\nx", after=1, line_numbers=True) == ["1:x", "2-y", "3:x"]

    def test_detailed(self):
        """Test structured matches."""
        matches = grep_detailed("gamma", self.TEXT, before=1)

        assert matches == [GrepMatch("beta", 2, True), GrepMatch("gamma", 3, False)]

    def test_lines_helper_and_quiet(self):
        """Test the list and boolean helpers."""
        assert grep_text_lines("b", ["a", "b"]) == ["b"]
        assert grep_test("GAMMA", self.TEXT, ignore_case=True)
        assert not grep_test("omega", self.TEXT)
