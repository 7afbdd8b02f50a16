"""
Semantic Path Builder

Builds short, human-legible structural paths such as
``/main#content/article.post[2]/h2`` for nodes. Presentational wrappers are
dropped; only semantic tags and elements with an id or a meaningful class
become segments.

A ``[n]`` index is appended to a segment only when another node with the
same segment text shares the same nearest kept ancestor, so paths stay as
short as possible while remaining distinct.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from bs4 import Tag

from .host import ancestors, get_attr, is_element, owner_soup, tag_name
from .inspector import get_semantic_class

logger = logging.getLogger(__name__)


SEMANTIC_TAGS = frozenset({
    "main", "nav", "header", "footer", "aside", "search", "form",
    "article", "section", "dialog", "fieldset", "figure", "details",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "table", "pre", "code",
})

_NEVER_SEGMENTS = frozenset({"html", "body"})


def is_path_segment(node: Tag) -> bool:
    """Whether the node appears in other nodes' paths."""
    name = tag_name(node)
    if name in _NEVER_SEGMENTS:
        return False
    if name in SEMANTIC_TAGS:
        return True
    return bool(get_attr(node, "id")) or get_semantic_class(node) is not None


@dataclass(frozen=True)
class PathSegment:
    tag: str
    element_id: Optional[str] = None
    cls: Optional[str] = None
    index: Optional[int] = None

    @property
    def key(self) -> str:
        """Segment text without the sibling index."""
        text = self.tag
        if self.element_id:
            text += f"#{self.element_id}"
        if self.cls:
            text += f".{self.cls}"
        return text

    def __str__(self) -> str:
        if self.index is None:
            return self.key
        return f"{self.key}[{self.index}]"


@dataclass(frozen=True)
class SemanticPath:
    segments: Tuple[PathSegment, ...]

    def __str__(self) -> str:
        return "/" + "/".join(str(segment) for segment in self.segments)

    def __len__(self) -> int:
        return len(self.segments)


def _segment_for(node: Tag) -> PathSegment:
    element_id = get_attr(node, "id")
    return PathSegment(
        tag=tag_name(node),
        element_id=element_id.strip() if element_id and element_id.strip() else None,
        cls=get_semantic_class(node),
    )


class SemanticPathBuilder:
    """
    Builds semantic paths, caching sibling groups per scope.

    One builder is used per rendering pass; the tree must not change while
    it is in use.
    """

    def __init__(self):
        # id(scope) -> (scope, {id(node): (key, position)}, {key: count})
        self._scopes: Dict[int, Tuple[Tag, Dict[int, Tuple[str, int]], Dict[str, int]]] = {}

    def reset(self) -> None:
        self._scopes.clear()

    def _scope_index(self, scope: Tag) -> Tuple[Dict[int, Tuple[str, int]], Dict[str, int]]:
        cached = self._scopes.get(id(scope))
        if cached is not None and cached[0] is scope:
            return cached[1], cached[2]

        positions: Dict[int, Tuple[str, int]] = {}
        counts: Dict[str, int] = {}

        # Document-order walk of everything whose nearest kept ancestor is scope
        stack = [c for c in reversed(list(scope.children)) if is_element(c)]
        while stack:
            current = stack.pop()
            key = _segment_for(current).key
            counts[key] = counts.get(key, 0) + 1
            positions[id(current)] = (key, counts[key])
            if not is_path_segment(current):
                stack.extend(c for c in reversed(list(current.children)) if is_element(c))

        self._scopes[id(scope)] = (scope, positions, counts)
        return positions, counts

    def _top_scope(self, node: Tag) -> Tag:
        soup = owner_soup(node)
        if soup is not None:
            return soup
        top = node
        for ancestor in ancestors(node):
            top = ancestor
        return top

    def build(self, node: Tag) -> SemanticPath:
        chain: List[Tag] = [node] + [a for a in ancestors(node) if is_path_segment(a)]

        segments: List[PathSegment] = []
        for i, segment_node in enumerate(chain):
            scope = chain[i + 1] if i + 1 < len(chain) else self._top_scope(segment_node)
            segment = _segment_for(segment_node)

            if scope is not segment_node:
                positions, counts = self._scope_index(scope)
                key, position = positions.get(id(segment_node), (segment.key, 1))
                if counts.get(key, 0) > 1:
                    segment = PathSegment(segment.tag, segment.element_id, segment.cls, position)

            segments.append(segment)

        segments.reverse()
        return SemanticPath(tuple(segments))

    def __call__(self, node: Tag) -> str:
        return str(self.build(node))


def build_semantic_path(node: Tag, builder: Optional[SemanticPathBuilder] = None) -> str:
    """Semantic path string for a node."""
    return (builder or SemanticPathBuilder())(node)
