"""
Output formatting for snapshot text.

Every snapshot is ``PAGE:`` header, mode summary line, blank line, then the
content lines. The builders here produce each of those pieces.
"""

from typing import Dict, List, Optional, Sequence, Union

from bs4 import Tag

from .config import SnapshotConfig
from .content_utils import count_child_elements, count_words, detect_code_language, truncate
from .host import PageDocument, text_content
from .traverse import InteractionCounts


def truncate_by_type(text: str, kind: str, config: Optional[SnapshotConfig] = None) -> str:
    """Truncate with the limit configured for a text kind (ELEMENT_NAME, URL, ...)."""
    return truncate(text, (config or SnapshotConfig()).limit(kind))


# =============================================================================
# Headers
# =============================================================================

def build_page_header(document: PageDocument, config: Optional[SnapshotConfig] = None) -> str:
    url = truncate_by_type(document.url or "about:blank", "URL", config)
    title = truncate_by_type(document.title or "Untitled", "TEXT_SHORT", config)
    return f"PAGE: {url} | {title} | viewport={document.viewport_width}x{document.viewport_height}"


def build_snapshot_header(
    mode: str,
    element_count: int,
    ref_count: Optional[int] = None,
    max_lines: Optional[int] = None,
    truncated: bool = False,
    extra: Optional[Dict[str, Union[str, int]]] = None,
    grep_pattern: Optional[str] = None,
    grep_matches: Optional[int] = None,
) -> str:
    parts = [f"{mode.upper()}:", f"elements={element_count}"]

    if ref_count is not None:
        parts.append(f"refs={ref_count}")
    if max_lines is not None:
        parts.append(f"maxLines={max_lines}")
    if truncated:
        parts.append("(truncated)")
    if extra:
        parts.extend(f"{key}={value}" for key, value in extra.items())
    if grep_pattern is not None:
        parts.append(f"grep={grep_pattern}")
        parts.append(f"matches={grep_matches or 0}")

    return " ".join(parts)


def build_summary_line(label: str, fields: Dict[str, Union[str, int]]) -> str:
    """``LABEL: k=v k=v`` for modes whose summary is not element-based."""
    return " ".join([f"{label.upper()}:"] + [f"{k}={v}" for k, v in fields.items()])


def build_snapshot_output(page_header: str, snapshot_header: str, lines: Sequence[str]) -> str:
    return "\n".join([page_header, snapshot_header, "", *lines])


# =============================================================================
# Element Lines
# =============================================================================

def build_element_line(
    role: str,
    name: Optional[str] = None,
    ref: Optional[str] = None,
    xpath: Optional[str] = None,
    attributes: Optional[str] = None,
    states: Optional[List[str]] = None,
    indent: str = "",
    metadata: Optional[str] = None,
    config: Optional[SnapshotConfig] = None,
) -> str:
    """``ROLE "name" @ref:N [metadata] [attrs] (states) /semantic/path``"""
    parts = [role.upper()]
    if name:
        parts.append(f'"{truncate_by_type(name, "ELEMENT_NAME", config)}"')
    if ref:
        parts.append(ref)
    if metadata:
        parts.append(metadata)
    if attributes:
        parts.append(attributes)
    if states:
        parts.append(f"({', '.join(states)})")
    if xpath:
        parts.append(xpath)
    return indent + " ".join(parts)


def build_outline_metadata(element: Tag) -> str:
    parts = []

    words = count_words(text_content(element))
    if words > 0:
        parts.append(f"{words} words")

    links = len(element.select("a[href]"))
    if links > 0:
        parts.append(f"{links} links")

    paragraphs = count_child_elements(element, ["p"])
    if paragraphs > 1:
        parts.append(f"{paragraphs} paragraphs")

    items = count_child_elements(element, ["li"])
    if items > 0:
        parts.append(f"{items} items")

    code = len(element.select("pre, code"))
    if code > 0:
        parts.append(f"{code} code")

    return f"[{', '.join(parts)}]" if parts else ""


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def build_interaction_summary(counts: InteractionCounts) -> str:
    if counts.total == 0:
        return ""

    parts = []
    if counts.buttons:
        parts.append(_plural(counts.buttons, "button"))
    if counts.links:
        parts.append(_plural(counts.links, "link"))
    if counts.inputs:
        parts.append(_plural(counts.inputs, "input"))
    if counts.other:
        parts.append(f"{counts.other} other")
    return f"[{', '.join(parts)}]"


# =============================================================================
# Content Lines
# =============================================================================

def build_content_section_header(xpath: str, word_count: int) -> str:
    return f"SECTION {xpath} [{word_count} words]"


def build_code_block_output(element: Tag, indent: str = "", preview_lines: int = 5) -> List[str]:
    language = detect_code_language(element)
    code_lines = text_content(element).strip().split("\n")

    if language:
        lines = [f"{indent}CODE [{language}, {len(code_lines)} lines]"]
    else:
        lines = [f"{indent}CODE [{len(code_lines)} lines]"]

    lines.extend(f"{indent}  {line}" for line in code_lines[:preview_lines])
    if len(code_lines) > preview_lines:
        lines.append(f"{indent}  ...")
    return lines


def build_list_output(items: List[str], indent: str = "") -> List[str]:
    lines = [f"{indent}LIST [{len(items)} items]"]
    lines.extend(f'{indent}  - "{item}"' for item in items)
    return lines


# =============================================================================
# Markdown
# =============================================================================

def build_markdown_heading(level: int, text: str) -> str:
    return f"{'#' * min(max(level, 1), 6)} {text}"


def build_markdown_list_item(text: str, ordered: bool = False, index: Optional[int] = None) -> str:
    if ordered and index is not None:
        return f"{index}. {text}"
    return f"- {text}"


def build_markdown_code_block(code: str, language: Optional[str] = None) -> List[str]:
    return [f"```{language or ''}", code, "```"]


def build_markdown_blockquote(text: str) -> List[str]:
    return [f"> {line}" for line in text.split("\n")]


def build_markdown_image(alt: str, src: str) -> str:
    return f"![{alt}]({src})"


def build_markdown_table(rows: List[List[str]]) -> List[str]:
    """Pipe table; short rows are padded to the widest row, first row is the header."""
    if not rows:
        return []
    width = max(len(row) for row in rows)
    if width == 0:
        return []
    padded = [row + [""] * (width - len(row)) for row in rows]
    lines = [f"| {' | '.join(padded[0])} |", f"| {' | '.join(['---'] * width)} |"]
    lines.extend(f"| {' | '.join(row)} |" for row in padded[1:])
    return lines
