"""
Content Extractor

Converts a document subtree to Markdown, or returns its raw markup.

Markdown rules:
- headings become ``#`` x level
- paragraphs keep inline links, code, bold and italics
- lists emit their direct ``<li>`` children only; nested lists are skipped
- ``<pre>`` becomes a fenced block with a best-effort language
- block quotes become ``> `` lines
- tables become pipe tables, short rows padded to the widest row
- images appear only when requested
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Union

from bs4 import Tag
from bs4.element import NavigableString
from soupsieve import SelectorSyntaxError

from .config import SnapshotConfig, resolve_config
from .content_utils import clean_text_content, detect_code_language, truncate
from .exceptions import SnapshotConfigError
from .formatting import (
    build_markdown_blockquote,
    build_markdown_code_block,
    build_markdown_heading,
    build_markdown_image,
    build_markdown_list_item,
    build_markdown_table,
)
from .host import (
    NON_CONTENT_TAGS,
    STAMP_ATTRIBUTES,
    PageDocument,
    element_children,
    get_attr,
    iter_descendants,
    tag_name,
    text_content,
)
from .inspector import get_role, is_visible
from .options import ExtractOptions

logger = logging.getLogger(__name__)


MARKDOWN_TRUNCATION_MARKER = "\n\n<!-- truncated -->"
HTML_TRUNCATION_MARKER = "<!-- truncated -->"

# Elements rendered as a whole by the inline formatter
_INLINE_FORMATS = {
    "a": None,
    "code": ("`", "`"),
    "strong": ("**", "**"),
    "b": ("**", "**"),
    "em": ("*", "*"),
    "i": ("*", "*"),
}

INLINE_TAGS = frozenset({
    "a", "abbr", "b", "bdi", "bdo", "br", "cite", "code", "data", "dfn", "em",
    "i", "kbd", "label", "mark", "q", "s", "samp", "small", "span", "strong",
    "sub", "sup", "time", "u", "var", "wbr",
})


class MarkdownExtractor:
    """
    Recursive Markdown writer for one subtree.

    Usage:
        extractor = MarkdownExtractor(config, include_links=True)
        lines = extractor.render(article)
    """

    def __init__(
        self,
        config: Optional[SnapshotConfig] = None,
        include_links: bool = True,
        include_images: bool = False,
        include_hidden: bool = False,
        max_depth: int = 50,
        paragraph_length: int = 2000,
    ):
        self.config = config or SnapshotConfig()
        self.include_links = include_links
        self.include_images = include_images
        self.include_hidden = include_hidden
        self.max_depth = min(max_depth, self.config.max_recursion_depth)
        self.paragraph_length = paragraph_length
        self.depth_limited = False

    def render(self, root: Tag) -> List[str]:
        lines: List[str] = []
        self._walk(root, lines, 0)
        return lines

    # =========================================================================
    # Block level
    # =========================================================================

    def _walk(self, element: Tag, lines: List[str], depth: int) -> None:
        if depth > self.max_depth:
            self.depth_limited = True
            return
        if not self.include_hidden and not is_visible(element):
            return

        tag = tag_name(element)
        role = get_role(element)

        if role is not None and role.is_heading:
            text = clean_text_content(element, self.config.heading_text_length)
            if text:
                lines.extend([build_markdown_heading(role.level or 2, text), ""])
            return

        if tag == "p":
            text = self.inline_text(element, self.paragraph_length)
            if text:
                lines.extend([text, ""])
            return

        if tag in ("ul", "ol"):
            self._list(element, lines, ordered=(tag == "ol"))
            return

        if tag == "pre":
            code = text_content(element).strip()
            lines.extend(build_markdown_code_block(code, detect_code_language(element)))
            lines.append("")
            return

        if tag == "code":
            # Inline code is written by the enclosing paragraph
            return

        if tag == "blockquote":
            self._blockquote(element, lines)
            return

        if tag == "img":
            if self.include_images:
                alt = get_attr(element, "alt") or "image"
                lines.extend([build_markdown_image(alt, get_attr(element, "src") or ""), ""])
            return

        if tag == "a":
            self._block_link(element, lines)
            return

        if tag == "hr":
            lines.extend(["---", ""])
            return

        if tag == "table":
            self._table(element, lines)
            return

        if tag in NON_CONTENT_TAGS:
            return

        if self._is_inline_container(element):
            text = self.inline_text(element, self.paragraph_length)
            if text:
                lines.extend([text, ""])
            return

        for child in element_children(element):
            self._walk(child, lines, depth + 1)

    def _list(self, element: Tag, lines: List[str], ordered: bool) -> None:
        index = 1
        for item in element_children(element):
            if tag_name(item) != "li":
                continue
            if self.include_hidden or is_visible(item):
                text = self.inline_text(item, self.config.markdown_list_item_length, skip_lists=True)
                if text:
                    lines.append(build_markdown_list_item(text, ordered, index))
            index += 1
        lines.append("")

    def _blockquote(self, element: Tag, lines: List[str]) -> None:
        paragraphs = [p for p in element_children(element) if tag_name(p) == "p"]
        if paragraphs:
            texts = [clean_text_content(p, self.config.blockquote_length) for p in paragraphs]
            quoted = [line for text in texts if text for line in build_markdown_blockquote(text)]
        else:
            text = clean_text_content(element, self.config.blockquote_length)
            quoted = build_markdown_blockquote(text) if text else []
        if quoted:
            lines.extend(quoted)
            lines.append("")

    def _block_link(self, element: Tag, lines: List[str]) -> None:
        text = clean_text_content(element, self.config.heading_text_length)
        if not text:
            return
        href = get_attr(element, "href")
        if self.include_links and href:
            lines.extend([f"[{text}]({href})", ""])
        else:
            lines.extend([text, ""])

    def _table(self, table: Tag, lines: List[str]) -> None:
        rows = []
        for row in table.find_all("tr"):
            cells = [c for c in element_children(row) if tag_name(c) in ("th", "td")]
            rows.append([
                clean_text_content(cell, self.config.table_cell_length).replace("|", "\\|")
                for cell in cells
            ])

        table_lines = build_markdown_table(rows)
        if table_lines:
            lines.extend(table_lines)
            lines.append("")

    @staticmethod
    def _is_inline_container(element: Tag) -> bool:
        """Holds direct text and only inline elements, e.g. ``<div>Hi <b>there</b></div>``."""
        has_text = False
        for child in element.children:
            if isinstance(child, Tag):
                if tag_name(child) not in INLINE_TAGS:
                    return False
            elif type(child) is NavigableString and child.strip():
                has_text = True
        return has_text

    # =========================================================================
    # Inline level
    # =========================================================================

    def inline_text(self, element: Tag, max_length: int, skip_lists: bool = False) -> str:
        """
        Text of ``element`` with links, code and emphasis converted.

        Text inside a converted element is written once, by that element.
        """
        if not self.include_links:
            text = self._plain_text(element, skip_lists)
        else:
            parts: List[str] = []
            self._inline(element, parts, skip_lists)
            text = "".join(parts)
        return truncate(text, max_length)

    def _plain_text(self, element: Tag, skip_lists: bool) -> str:
        if not skip_lists:
            return text_content(element)
        parts = []
        self._collect_text(element, parts, skip_lists=True)
        return "".join(parts)

    def _collect_text(self, element: Tag, parts: List[str], skip_lists: bool) -> None:
        for child in element.children:
            if isinstance(child, Tag):
                tag = tag_name(child)
                if tag in NON_CONTENT_TAGS or (skip_lists and tag in ("ul", "ol")):
                    continue
                self._collect_text(child, parts, skip_lists)
            elif type(child) is NavigableString:
                parts.append(str(child))

    def _inline(self, element: Tag, parts: List[str], skip_lists: bool) -> None:
        for child in element.children:
            if type(child) is NavigableString:
                parts.append(str(child))
                continue
            if not isinstance(child, Tag):
                continue

            tag = tag_name(child)
            if tag in NON_CONTENT_TAGS or (skip_lists and tag in ("ul", "ol")):
                continue
            if tag == "br":
                parts.append(" ")
                continue
            if tag not in _INLINE_FORMATS:
                self._inline(child, parts, skip_lists)
                continue

            text = text_content(child)
            if tag == "a":
                href = get_attr(child, "href")
                label = text.strip()
                parts.append(f"[{label}]({href})" if href and label else label)
            else:
                opener, closer = _INLINE_FORMATS[tag]
                parts.append(f"{opener}{text}{closer}")


# =============================================================================
# Raw markup
# =============================================================================

def strip_stamps(element: Tag) -> Tag:
    """Detached copy of ``element`` without capture stamp attributes."""
    clone = copy.copy(element)
    for node in [clone, *iter_descendants(clone)]:
        for attribute in STAMP_ATTRIBUTES:
            node.attrs.pop(attribute, None)
    return clone


def extract_html(root: Tag, max_length: Optional[int] = None) -> str:
    html = str(strip_stamps(root))
    if max_length and len(html) > max_length:
        html = html[:max_length] + HTML_TRUNCATION_MARKER
    return html


def extract_markdown(
    document: PageDocument,
    root: Tag,
    extractor: MarkdownExtractor,
    max_length: Optional[int] = None,
) -> str:
    lines = [f"<!-- source: {document.url or 'about:blank'} -->", ""]
    lines.extend(extractor.render(root))

    output = "\n".join(lines)
    if max_length and len(output) > max_length:
        output = output[:max_length] + MARKDOWN_TRUNCATION_MARKER
    return output


def extract_content(
    document: PageDocument,
    options: Union[ExtractOptions, Dict[str, Any], None] = None,
    config: Union[SnapshotConfig, Dict[str, Any], None] = None,
) -> str:
    """
    Extract a subtree as Markdown (default) or raw HTML.

    Args:
        document: Page to extract from
        options: ExtractOptions or a dict of its fields
        config: Optional SnapshotConfig

    Returns:
        The content string; ``""`` when ``selector`` matches nothing

    Raises:
        SnapshotConfigError: Invalid options or selector
        InvalidRootError: Unusable root
    """
    options = ExtractOptions.from_value(options)
    config = resolve_config(config)

    if options.selector:
        try:
            root = document.select_one(options.selector)
        except SelectorSyntaxError as e:
            raise SnapshotConfigError(
                f"Invalid selector {options.selector!r}: {e}",
                details={"option": "selector", "value": options.selector},
            ) from e
        if root is None:
            logger.debug(f"Selector {options.selector!r} matched nothing")
            return ""
    else:
        root = document.resolve_root(options.root)

    if options.format == "html":
        return extract_html(root, options.max_length)

    extractor = MarkdownExtractor(
        config,
        include_links=options.links,
        include_images=options.images,
        include_hidden=options.include_hidden,
        max_depth=options.max_depth,
    )
    return extract_markdown(document, root, extractor, options.max_length)
