"""
Pattern Filter

Unix ``grep``-style inclusion/exclusion for rendered snapshot lines and for
searchable section records, plus a small text grep utility with line
numbers and context.

A pattern that does not compile never fails the caller: matching falls back
to plain substring containment (case-folded when ``ignore_case`` is set),
for every entry point alike.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Pattern, TypeVar, Union

from bs4 import Tag

from .exceptions import SnapshotConfigError
from .host import text_content

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Grep Options
# =============================================================================

@dataclass
class GrepOptions:
    """
    Grep options, mirroring the Unix flags.

    Attributes:
        pattern: Pattern to search for
        ignore_case: Case-insensitive matching (grep -i)
        invert: Keep non-matching items (grep -v)
        fixed_strings: Treat the pattern as a literal (grep -F)
        word_boundary: Match whole words only (grep -w)
        whole_line: Match whole lines only (grep -x)
    """
    pattern: str
    ignore_case: bool = False
    invert: bool = False
    fixed_strings: bool = False
    word_boundary: bool = False
    whole_line: bool = False

    @classmethod
    def coerce(cls, value: Union['GrepOptions', str, Dict[str, Any]]) -> 'GrepOptions':
        """Accept a GrepOptions, a bare pattern string or a dict of fields."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(pattern=value)
        if isinstance(value, dict):
            if "pattern" not in value:
                raise SnapshotConfigError("grep options need a 'pattern'", details={"grep": value})
            aliases = {
                "ignoreCase": "ignore_case",
                "fixedStrings": "fixed_strings",
                "wordBoundary": "word_boundary",
                "wholeLineOnly": "whole_line",
                "whole_line_only": "whole_line",
            }
            fields = {aliases.get(k, k): v for k, v in value.items()}
            valid = set(cls.__dataclass_fields__)
            return cls(**{k: v for k, v in fields.items() if k in valid})
        raise SnapshotConfigError(
            f"grep must be a string, dict or GrepOptions, got {type(value).__name__}",
            details={"grep_type": type(value).__name__},
        )


@dataclass
class GrepResult(Generic[T]):
    """Filtered items with counts for the summary line."""
    items: List[T]
    pattern: str
    match_count: int
    total_count: int


class _Matcher:
    """Compiled predicate for one filter invocation."""

    def __init__(self, options: GrepOptions):
        self.options = options
        self.regex: Optional[Pattern[str]] = None

        source = re.escape(options.pattern) if options.fixed_strings else options.pattern
        if options.word_boundary:
            source = rf"\b(?:{source})\b"
        if options.whole_line:
            source = rf"\A(?:{source})\Z"

        try:
            self.regex = re.compile(source, re.IGNORECASE if options.ignore_case else 0)
        except re.error as e:
            logger.warning(f"Invalid grep pattern {options.pattern!r} ({e}), using substring match")
            self._needle = options.pattern.lower() if options.ignore_case else options.pattern

    def _matches(self, text: str) -> bool:
        if self.regex is not None:
            return self.regex.search(text) is not None
        haystack = text.lower() if self.options.ignore_case else text
        return self._needle in haystack

    def __call__(self, text: str) -> bool:
        matched = self._matches(text)
        return not matched if self.options.invert else matched


def compile_matcher(query: Union[GrepOptions, str, Dict[str, Any]]) -> Callable[[str], bool]:
    return _Matcher(GrepOptions.coerce(query))


# =============================================================================
# Filter Entry Points
# =============================================================================

def grep_items(
    items: List[T],
    query: Union[GrepOptions, str, Dict[str, Any]],
    extractor: Callable[[T], str],
) -> GrepResult[T]:
    """Filter arbitrary items by the text ``extractor`` returns for each."""
    options = GrepOptions.coerce(query)
    matcher = _Matcher(options)
    kept = [item for item in items if matcher(extractor(item))]
    return GrepResult(
        items=kept,
        pattern=options.pattern,
        match_count=len(kept),
        total_count=len(items),
    )


def grep_lines(lines: List[str], query: Union[GrepOptions, str, Dict[str, Any]]) -> GrepResult[str]:
    return grep_items(lines, query, lambda line: line)


def matches_grep(text: str, query: Union[GrepOptions, str, Dict[str, Any]]) -> bool:
    return compile_matcher(query)(text)


@dataclass
class ElementSearchData:
    """Searchable record for one content section."""
    element: Tag
    role: str
    heading: Optional[str]
    xpath: str
    text: str

    @property
    def search_text(self) -> str:
        parts = [self.role, self.heading or "", self.xpath, self.text]
        return " ".join(part for part in parts if part)


_WHITESPACE = re.compile(r"\s+")


def build_element_search_data(
    element: Tag,
    role: str,
    heading: Optional[str],
    xpath: str,
) -> ElementSearchData:
    text = _WHITESPACE.sub(" ", text_content(element)).strip()
    return ElementSearchData(element=element, role=role, heading=heading, xpath=xpath, text=text)


def grep_elements(
    records: List[ElementSearchData],
    query: Union[GrepOptions, str, Dict[str, Any]],
) -> GrepResult[ElementSearchData]:
    """Filter section records on role, heading, path and full text together."""
    return grep_items(records, query, lambda record: record.search_text)


# =============================================================================
# Text Grep Utility
# =============================================================================

@dataclass
class GrepMatch:
    line: str
    line_number: int
    is_context: bool = False


def _text_regex(
    pattern: Union[str, Pattern[str]],
    ignore_case: bool,
    word_match: bool,
    line_match: bool,
) -> Pattern[str]:
    # Compiled patterns are used as given; strings are always literal
    if isinstance(pattern, re.Pattern):
        flags = pattern.flags
        if ignore_case:
            flags |= re.IGNORECASE
        return re.compile(pattern.pattern, flags)

    source = re.escape(pattern)
    if word_match:
        source = rf"\b{source}\b"
    if line_match:
        source = rf"\A{source}\Z"
    return re.compile(source, re.IGNORECASE if ignore_case else 0)


@dataclass
class _TextSearch:
    ignore_case: bool = False
    invert: bool = False
    word_match: bool = False
    line_match: bool = False
    max_matches: int = 0
    before: int = 0
    after: int = 0
    lines: List[str] = field(default_factory=list)

    def matching_indices(self, regex: Pattern[str]) -> List[int]:
        indices = []
        for i, line in enumerate(self.lines):
            matched = regex.search(line) is not None
            if matched != self.invert:
                indices.append(i)
                if self.max_matches > 0 and len(indices) >= self.max_matches:
                    break
        return indices

    def with_context(self, indices: List[int]) -> List[GrepMatch]:
        included = set()
        matches = []
        for match_index in indices:
            start = max(0, match_index - self.before)
            end = min(len(self.lines) - 1, match_index + self.after)
            for i in range(start, end + 1):
                if i in included:
                    continue
                included.add(i)
                matches.append(GrepMatch(self.lines[i], i + 1, i != match_index))
        if self.before or self.after:
            matches.sort(key=lambda m: m.line_number)
        return matches


def grep_detailed(
    pattern: Union[str, Pattern[str]],
    text: str,
    ignore_case: bool = False,
    invert: bool = False,
    word_match: bool = False,
    line_match: bool = False,
    max_matches: int = 0,
    before: int = 0,
    after: int = 0,
) -> List[GrepMatch]:
    """Matching lines (and context lines) with their 1-based line numbers."""
    search = _TextSearch(ignore_case, invert, word_match, line_match, max_matches, before, after, text.split("\n"))
    regex = _text_regex(pattern, ignore_case, word_match, line_match)
    return search.with_context(search.matching_indices(regex))


def grep(
    pattern: Union[str, Pattern[str]],
    text: str,
    ignore_case: bool = False,
    line_numbers: bool = False,
    invert: bool = False,
    count: bool = False,
    word_match: bool = False,
    line_match: bool = False,
    max_matches: int = 0,
    before: int = 0,
    after: int = 0,
) -> Union[List[str], int]:
    """
    Search multi-line text the way ``grep`` does.

    Args:
        pattern: Literal string, or a compiled ``re.Pattern`` used as given
        text: Text to search
        ignore_case: grep -i
        line_numbers: Prefix ``N:`` to matches and ``N-`` to context lines
        invert: grep -v
        count: Return the number of matching lines instead of the lines
        word_match: grep -w (string patterns only)
        line_match: grep -x (string patterns only)
        max_matches: Stop after this many matches (0 = unlimited)
        before: Context lines before each match
        after: Context lines after each match

    Returns:
        Matching lines, or their count when ``count`` is set

    Example:
        >>> grep("two", "line one\\nline two", line_numbers=True)
        ['2:line two']
    """
    search = _TextSearch(ignore_case, invert, word_match, line_match, max_matches, before, after, text.split("\n"))
    regex = _text_regex(pattern, ignore_case, word_match, line_match)
    indices = search.matching_indices(regex)

    if count:
        return len(indices)

    matches = search.with_context(indices)
    if line_numbers:
        return [f"{m.line_number}{'-' if m.is_context else ':'}{m.line}" for m in matches]
    return [m.line for m in matches]


def grep_text_lines(pattern: Union[str, Pattern[str]], lines: List[str], **kwargs) -> Union[List[str], int]:
    """``grep`` over a list of lines."""
    return grep(pattern, "\n".join(lines), **kwargs)


def grep_test(
    pattern: Union[str, Pattern[str]],
    text: str,
    ignore_case: bool = False,
    word_match: bool = False,
    line_match: bool = False,
) -> bool:
    """True if any line matches (grep -q)."""
    regex = _text_regex(pattern, ignore_case, word_match, line_match)
    return any(regex.search(line) for line in text.split("\n"))
