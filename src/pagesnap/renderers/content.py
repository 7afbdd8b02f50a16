"""
Content mode: text of the page's sections.

Sections are found first, filtered as whole records, and only the
surviving sections are rendered, so a grep never leaks half a section.

Example output::

    SECTION /main#content [500 words]
      HEADING level=1 "Welcome"
      TEXT "This is the introduction..."
      LIST [2 items]
        - "First item"
        - "Second item"
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from bs4 import Tag

from ..content_utils import clean_text_content, count_words, list_items
from ..data_models import SnapshotMode, SnapshotResult
from ..extract import MarkdownExtractor
from ..formatting import (
    build_code_block_output,
    build_content_section_header,
    build_list_output,
    build_summary_line,
)
from ..grep import ElementSearchData, build_element_search_data, grep_elements
from ..host import element_children, get_attr, tag_name, text_content
from ..inspector import get_role, get_semantic_class, is_visible
from ..options import ContentOptions
from .base import BaseRenderer, DepthGuard

logger = logging.getLogger(__name__)


@dataclass
class ContentSection:
    element: Tag
    xpath: str
    heading: Optional[str]
    search_data: ElementSearchData


class ContentRenderer(BaseRenderer):
    """
    Two passes: collect section boundaries, then render each kept section.

    A section is a landmark or article, a named ``<section>``, or a div with
    an id or meaningful class and enough words. Sections nest; a section
    inside another is listed on its own as well.
    """

    mode = SnapshotMode.CONTENT
    options_class = ContentOptions

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sections: List[ContentSection] = []
        self.kept: List[ContentSection] = []
        self.total_words = 0
        self.grep_fields = {}

    # =========================================================================
    # Pass 1: sections
    # =========================================================================

    def is_section(self, element: Tag) -> bool:
        role = get_role(element)
        if role is not None and (role.is_landmark or role.name == "article"):
            return True

        tag = tag_name(element)
        if tag == "section":
            return bool(get_attr(element, "id") or get_attr(element, "aria-label"))
        if tag == "div" and (get_attr(element, "id") or get_semantic_class(element)):
            return count_words(text_content(element)) > self.config.content_section_min_words
        return False

    def find_sections(self, element: Tag, depth: int, guard: DepthGuard) -> None:
        if not guard.allows(depth):
            return
        if not self.options.include_hidden and not is_visible(element):
            return

        if self.is_section(element):
            role = get_role(element)
            heading = element.find(["h1", "h2", "h3", "h4", "h5", "h6"])
            heading_text = clean_text_content(heading, self.config.heading_text_length) if heading else None
            xpath = self.xpath(element)
            self.sections.append(ContentSection(
                element=element,
                xpath=xpath,
                heading=heading_text,
                search_data=build_element_search_data(
                    element, role.name if role else "section", heading_text, xpath
                ),
            ))

        for child in element_children(element):
            self.find_sections(child, depth + 1, guard)

    # =========================================================================
    # Pass 2: lines
    # =========================================================================

    def section_lines(self, element: Tag, indent: str, depth: int, guard: DepthGuard) -> None:
        if not guard.allows(depth):
            return

        role = get_role(element)
        tag = tag_name(element)

        if role is not None and role.is_heading:
            text = clean_text_content(element, self.config.heading_text_length)
            self.lines.append(f'{indent}HEADING level={role.level} "{text}"')
            return

        if tag == "p":
            text = clean_text_content(element, self.options.max_length)
            if text:
                self.lines.append(f'{indent}TEXT "{text}"')
            return

        if tag in ("ul", "ol"):
            items = list_items(element, self.config.list_preview_items, self.config.list_item_length)
            if items:
                self.lines.extend(build_list_output(items, indent))
            return

        if tag == "pre":
            self.lines.extend(build_code_block_output(element, indent, self.config.code_preview_lines))
            return

        for child in element_children(element):
            self.section_lines(child, indent, depth + 1, guard)

    def markdown_lines(self, element: Tag) -> None:
        extractor = MarkdownExtractor(
            self.config,
            include_links=self.options.links,
            include_images=self.options.images,
            include_hidden=self.options.include_hidden,
            max_depth=self.options.max_depth,
            paragraph_length=self.options.max_length,
        )
        body = extractor.render(element)
        while body and body[-1] == "":
            body.pop()
        self.lines.extend(body)
        if extractor.depth_limited:
            self.depth_limited = True

    def collect(self, root: Tag) -> None:
        guard = self.guard()
        try:
            self.find_sections(root, 0, guard)

            self.kept = self.sections
            if self.options.grep is not None:
                result = grep_elements([s.search_data for s in self.sections], self.options.grep)
                matched = {id(record.element) for record in result.items}
                self.kept = [s for s in self.sections if id(s.element) in matched]
                self.grep_fields = {"grep": result.pattern, "matches": result.match_count}

            for section in self.kept:
                words = count_words(text_content(section.element))
                self.total_words += words
                self.lines.append(build_content_section_header(section.xpath, words))
                if self.options.format == "markdown":
                    self.markdown_lines(section.element)
                else:
                    self.section_lines(section.element, "  ", 0, self.guard())
                self.lines.append("")
        finally:
            self.depth_limited = self.depth_limited or guard.depth_limited

    def finish(self, root: Tag) -> SnapshotResult:
        fields = {"sections": len(self.kept), "words": self.total_words}
        fields.update(self.grep_fields)
        summary = build_summary_line("content", fields)

        found = len(self.sections)
        quality = self.score_quality(found, found)
        return self.build_result(summary, self.lines, quality, total_interactive=len(self.kept))
