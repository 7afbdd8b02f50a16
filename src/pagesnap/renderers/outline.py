"""
Outline mode: indented page hierarchy with refs on containers.

Example output::

    MAIN "content" @ref:0 [500 words, 10 links] /main#content
      HEADING level=1 "Welcome" /main#content/h1
      ARTICLE "Release notes" @ref:1 [200 words] /main#content/article
"""

import logging
from typing import Optional

from bs4 import Tag

from ..content_utils import clean_text_content, count_words, detect_code_language
from ..data_models import SnapshotMode, SnapshotResult
from ..formatting import build_element_line, build_outline_metadata, build_summary_line
from ..grep import grep_lines
from ..host import element_children, get_attr, tag_name, text_content
from ..inspector import get_role, get_section_name, get_semantic_class, is_visible
from ..options import OutlineOptions
from .base import BaseRenderer, DepthGuard

logger = logging.getLogger(__name__)


UTILITY_LANDMARKS = frozenset({"banner", "navigation", "contentinfo", "search"})


class OutlineRenderer(BaseRenderer):
    """
    Recursive walk that keeps landmarks, headings, articles and named
    sections, word-heavy semantic divs, lists and code blocks.

    Indentation grows only beneath nodes that were rendered, so skipped
    wrappers leave no gaps.
    """

    mode = SnapshotMode.OUTLINE
    options_class = OutlineOptions

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.landmark_count = 0
        self.section_count = 0
        self.heading_count = 0
        self.total_words = 0

    def importance(self, role_name: str, words: int) -> str:
        if role_name == "main" or words >= self.config.primary_section_min_words:
            return "primary"
        if role_name in UTILITY_LANDMARKS:
            return "utility"
        return "secondary"

    def container_line(self, element: Tag, role_name: str, indent: str) -> str:
        name = get_section_name(element)
        words = count_words(text_content(element))
        ref = self.register(element, role_name, name, importance=self.importance(role_name, words))
        self.section_count += 1
        return build_element_line(
            role=role_name,
            name=name,
            ref=ref,
            metadata=build_outline_metadata(element) or None,
            xpath=self.xpath(element),
            indent=indent,
            config=self.config,
        )

    def line_for(self, element: Tag, indent: str) -> Optional[str]:
        role = get_role(element)
        tag = tag_name(element)

        if role is not None and role.is_landmark:
            self.landmark_count += 1
            return self.container_line(element, role.name, indent)

        if role is not None and role.is_heading:
            self.heading_count += 1
            text = clean_text_content(element, self.config.outline_heading_length)
            line = f"{indent}HEADING level={role.level}"
            if text:
                line += f' "{text}"'
            return f"{line} {self.xpath(element)}"

        if tag == "article" or (tag == "section" and (get_attr(element, "id") or get_attr(element, "aria-label"))):
            return self.container_line(element, "article" if tag == "article" else "region", indent)

        if tag == "div" and (get_attr(element, "id") or get_semantic_class(element)):
            if count_words(text_content(element)) > self.config.outline_region_min_words:
                return self.container_line(element, "region", indent)
            return None

        if tag in ("ul", "ol"):
            items = sum(1 for child in element_children(element) if tag_name(child) == "li")
            if items > 0:
                return f"{indent}LIST [{items} items] {self.xpath(element)}"
            return None

        if tag == "pre":
            language = detect_code_language(element)
            line_count = len(text_content(element).split("\n"))
            line = f"{indent}CODE"
            if language:
                line += f" [{language}]"
            return f"{line} [{line_count} lines] {self.xpath(element)}"

        return None

    def walk(self, element: Tag, depth: int, indent: int, guard: DepthGuard) -> None:
        if not guard.allows(depth):
            return
        if not self.options.include_hidden and not is_visible(element):
            return

        line = self.line_for(element, "  " * indent)
        if line:
            self.lines.append(line)

        next_indent = indent + 1 if line else indent
        for child in element_children(element):
            self.walk(child, depth + 1, next_indent, guard)

    def collect(self, root: Tag) -> None:
        self.total_words = count_words(text_content(root))
        guard = self.guard()
        try:
            self.walk(root, 0, 0, guard)
        finally:
            self.depth_limited = guard.depth_limited

    def finish(self, root: Tag) -> SnapshotResult:
        lines = self.lines
        fields = {
            "landmarks": self.landmark_count,
            "sections": self.section_count,
            "headings": self.heading_count,
            "words": self.total_words,
        }
        if self.options.grep is not None:
            result = grep_lines(self.lines, self.options.grep)
            lines = result.items
            fields["grep"] = result.pattern
            fields["matches"] = result.match_count

        quality = self.score_quality(self.section_count, len(self.refs))
        summary = build_summary_line("outline", fields)
        return self.build_result(summary, lines, quality, total_interactive=self.section_count)
