"""
Host document binding.

The snapshot engine reads a parsed HTML tree (BeautifulSoup ``Tag`` objects)
and never mutates it. Facts a browser would compute (geometry, computed
style) are read from stamps written by ``capture.capture_page`` when the tree
came from a live page, or from the inline ``style`` attribute and user-agent
defaults when it did not.

Geometry queries return a ``GeometryResult`` instead of raising so callers
can degrade per node and keep going.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString

from .config import DEFAULT_VIEWPORT
from .data_models import BoundingBox
from .exceptions import InvalidRootError

logger = logging.getLogger(__name__)


# Attributes written onto elements by the live capture
BBOX_STAMP = "data-snap-bbox"
STYLE_STAMP = "data-snap-style"
STAMP_ATTRIBUTES = (BBOX_STAMP, STYLE_STAMP)

# Elements the user-agent stylesheet never displays
UA_HIDDEN_TAGS = frozenset({
    "head", "script", "style", "template", "noscript",
    "title", "meta", "link", "base",
})

# Elements whose strings never count as text content
NON_CONTENT_TAGS = frozenset({"script", "style", "template", "noscript", "head"})

_STYLE_DECLARATION = re.compile(r"([a-zA-Z-]+)\s*:\s*([^;]+)")


# =============================================================================
# Node Helpers
# =============================================================================

def is_element(node) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def tag_name(node: Tag) -> str:
    return (node.name or "").lower()


def get_attr(node: Tag, key: str) -> Optional[str]:
    """
    Attribute value as a single string.

    BeautifulSoup returns multi-valued attributes (class, rel, ...) as lists;
    they are joined with spaces here the way the DOM exposes them.
    """
    value = node.attrs.get(key)
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def has_attr(node: Tag, key: str) -> bool:
    return key in node.attrs


def class_list(node: Tag) -> List[str]:
    value = node.attrs.get("class")
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return [c for c in value if c]


def element_children(node: Tag) -> List[Tag]:
    """Direct element children in document order."""
    return [child for child in node.children if is_element(child)]


def parent_element(node: Tag) -> Optional[Tag]:
    parent = node.parent
    return parent if is_element(parent) else None


def ancestors(node: Tag) -> Iterator[Tag]:
    """Element ancestors, nearest first."""
    parent = parent_element(node)
    while parent is not None:
        yield parent
        parent = parent_element(parent)


def iter_descendants(node: Tag) -> Iterator[Tag]:
    """Element descendants in document order (the node itself excluded)."""
    for descendant in node.descendants:
        if is_element(descendant):
            yield descendant


def _is_text_string(node) -> bool:
    # Comment, Doctype, CData, Script, Stylesheet... are all subclasses
    return type(node) is NavigableString


def text_content(node: Tag) -> str:
    """
    Concatenated text of the subtree, like the DOM's ``textContent``,
    minus script/style/template strings and comments.
    """
    parts: List[str] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if _is_text_string(current):
            parts.append(str(current))
            continue
        if not isinstance(current, Tag):
            continue
        if current is not node and tag_name(current) in NON_CONTENT_TAGS:
            continue
        stack.extend(reversed(list(current.children)))
    return "".join(parts)


def is_connected(node: Tag) -> bool:
    """True when the node's parent chain reaches a document."""
    current = node
    while current is not None:
        if isinstance(current, BeautifulSoup):
            return True
        current = current.parent
    return False


def owner_soup(node: Tag) -> Optional[BeautifulSoup]:
    current = node
    while current is not None:
        if isinstance(current, BeautifulSoup):
            return current
        current = current.parent
    return None


# =============================================================================
# Computed Style
# =============================================================================

@dataclass(frozen=True)
class ComputedStyle:
    """The three properties visibility decisions are based on."""
    display: str = "block"
    visibility: str = "visible"
    opacity: float = 1.0

    @property
    def hidden(self) -> bool:
        return (
            self.display == "none"
            or self.visibility in ("hidden", "collapse")
            or self.opacity == 0
        )


def _parse_opacity(value: str) -> float:
    value = value.strip()
    try:
        if value.endswith("%"):
            return float(value[:-1]) / 100
        return float(value)
    except ValueError:
        return 1.0


def _parse_inline_style(style: str) -> dict:
    declarations = {}
    for prop, value in _STYLE_DECLARATION.findall(style):
        value = value.replace("!important", "").strip().lower()
        declarations[prop.lower()] = value
    return declarations


def computed_style(node: Tag) -> ComputedStyle:
    """
    Best available computed style for a node.

    Priority: capture stamp, then inline style, then user-agent defaults.
    """
    stamp = get_attr(node, STYLE_STAMP)
    if stamp:
        display, _, rest = stamp.partition("|")
        visibility, _, opacity = rest.partition("|")
        return ComputedStyle(
            display=display or "block",
            visibility=visibility or "visible",
            opacity=_parse_opacity(opacity) if opacity else 1.0,
        )

    display = "block"
    visibility = "visible"
    opacity = 1.0

    name = tag_name(node)
    if name in UA_HIDDEN_TAGS or has_attr(node, "hidden"):
        display = "none"
    elif name == "input" and (get_attr(node, "type") or "").lower() == "hidden":
        display = "none"

    style = get_attr(node, "style")
    if style:
        declarations = _parse_inline_style(style)
        display = declarations.get("display", display)
        visibility = declarations.get("visibility", visibility)
        if "opacity" in declarations:
            opacity = _parse_opacity(declarations["opacity"])

    return ComputedStyle(display=display, visibility=visibility, opacity=opacity)


# =============================================================================
# Geometry
# =============================================================================

@dataclass(frozen=True)
class GeometryResult:
    """
    Outcome of a geometry query.

    ``ok`` with ``box=None`` means the tree carries no geometry for the node
    (static HTML). ``ok=False`` means the query itself failed.
    """
    ok: bool
    box: Optional[BoundingBox] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, box: Optional[BoundingBox]) -> 'GeometryResult':
        return cls(ok=True, box=box)

    @classmethod
    def failure(cls, error: str) -> 'GeometryResult':
        return cls(ok=False, error=error)


def bounding_box(node: Tag) -> GeometryResult:
    if not is_connected(node):
        return GeometryResult.failure("node is detached from the document")

    stamp = get_attr(node, BBOX_STAMP)
    if stamp is None:
        return GeometryResult.success(None)

    try:
        x, y, width, height = (int(round(float(v))) for v in stamp.split(","))
    except ValueError:
        return GeometryResult.failure(f"malformed geometry stamp: {stamp!r}")
    return GeometryResult.success(BoundingBox(x=x, y=y, width=width, height=height))


# =============================================================================
# Page Document
# =============================================================================

class PageDocument:
    """
    A parsed page plus the page-level facts the renderers report.

    Usage:
        document = PageDocument.from_html(html, url="https://example.com")
        result = generate_snapshot(document, RefRegistry(), "interactive")
    """

    def __init__(
        self,
        soup: BeautifulSoup,
        url: str = "about:blank",
        title: Optional[str] = None,
        viewport: Optional[Tuple[int, int]] = None,
        ready_state: str = "complete",
    ):
        """
        Args:
            soup: Parsed document tree
            url: Page URL
            title: Page title (defaults to the <title> element text)
            viewport: (width, height) in CSS pixels
            ready_state: document.readyState at capture time
        """
        self.soup = soup
        self.url = url or "about:blank"
        if title is None:
            title_tag = soup.find("title")
            title = title_tag.get_text().strip() if title_tag else ""
        self.title = title
        width, height = viewport if viewport is not None else DEFAULT_VIEWPORT
        self.viewport_width = int(width)
        self.viewport_height = int(height)
        self.ready_state = ready_state
        self._id_counts: Optional[Counter] = None
        self._name_counts: Optional[Counter] = None

    @classmethod
    def from_html(
        cls,
        html: Union[str, bytes],
        parser: str = "lxml",
        **kwargs
    ) -> 'PageDocument':
        """Parse markup into a document. ``kwargs`` are passed to the constructor."""
        return cls(BeautifulSoup(html, parser), **kwargs)

    @property
    def body(self) -> Optional[Tag]:
        return self.soup.body

    @property
    def document_element(self) -> Optional[Tag]:
        return self.soup.find("html") or self.body

    @property
    def viewport_area(self) -> int:
        return self.viewport_width * self.viewport_height

    def owns(self, node: Tag) -> bool:
        return owner_soup(node) is self.soup

    def resolve_root(self, root: Optional[Tag] = None) -> Tag:
        """
        The given root, or <body> when none is given.

        Raises:
            InvalidRootError: No <body>, not an element, or not part of this document
        """
        if root is None:
            root = self.body
        if root is None:
            raise InvalidRootError(
                "No root element available (document has no <body>)",
                details={"url": self.url},
            )
        if not is_element(root):
            raise InvalidRootError(
                f"Root must be an element, got {type(root).__name__}",
                details={"root_type": type(root).__name__},
            )
        if not self.owns(root):
            raise InvalidRootError(
                f"Root <{tag_name(root)}> is not attached to this document",
                details={"root": tag_name(root)},
            )
        return root

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def get_element_by_id(self, element_id: str) -> Optional[Tag]:
        return self.soup.find(id=element_id)

    def id_count(self, element_id: str) -> int:
        if self._id_counts is None:
            self._id_counts = Counter(
                get_attr(el, "id") for el in self.soup.find_all(id=True)
            )
        return self._id_counts[element_id]

    def name_count(self, name: str) -> int:
        if self._name_counts is None:
            self._name_counts = Counter(
                get_attr(el, "name") for el in self.soup.find_all(attrs={"name": True})
            )
        return self._name_counts[name]

    def __repr__(self) -> str:
        return (
            f"PageDocument(url={self.url!r}, title={self.title!r}, "
            f"viewport={self.viewport_width}x{self.viewport_height})"
        )
