"""
Traversal Engine

Ordered, lazy walks over a subtree that yield ``(element, depth)`` pairs
under a depth limit and a visibility filter. Invisible nodes are pruned
together with their whole subtree unless ``include_hidden`` is set.

Each call returns a fresh cursor that starts from the root; a cursor is an
ordinary iterator and is exhausted after one pass.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterator, List, NamedTuple, Optional, Tuple

from bs4 import Tag

from .config import DEFAULT_MAX_DEPTH
from .host import element_children, tag_name
from .inspector import LANDMARK_ROLES, Role, get_role, is_interactive, is_visible

logger = logging.getLogger(__name__)


@dataclass
class TraverseOptions:
    max_depth: int = DEFAULT_MAX_DEPTH
    include_hidden: bool = False
    check_ancestors: bool = False


class TraversalItem(NamedTuple):
    element: Tag
    depth: int


class _Cursor:
    """Shared pruning rules for both traversal orders."""

    def __init__(self, root: Tag, options: Optional[TraverseOptions] = None):
        self.root = root
        self.options = options or TraverseOptions()
        self.depth_limited = False
        self.visited = 0

    def _admit(self, element: Tag, depth: int) -> bool:
        if depth > self.options.max_depth:
            self.depth_limited = True
            return False
        if not self.options.include_hidden and not is_visible(element, self.options.check_ancestors):
            return False
        return True

    def __iter__(self) -> Iterator[TraversalItem]:
        return self


class DepthFirstCursor(_Cursor):
    """Pre-order walk in document order, driven by an explicit stack."""

    def __init__(self, root: Tag, options: Optional[TraverseOptions] = None):
        super().__init__(root, options)
        self._stack: List[Tuple[Tag, int]] = [(root, 0)]

    def __next__(self) -> TraversalItem:
        while self._stack:
            element, depth = self._stack.pop()
            if not self._admit(element, depth):
                continue
            children = element_children(element)
            self._stack.extend((child, depth + 1) for child in reversed(children))
            self.visited += 1
            return TraversalItem(element, depth)
        raise StopIteration


class BreadthFirstCursor(_Cursor):
    """Level-order walk with a FIFO queue; children keep document order."""

    def __init__(self, root: Tag, options: Optional[TraverseOptions] = None):
        super().__init__(root, options)
        self._queue: Deque[Tuple[Tag, int]] = deque([(root, 0)])

    def __next__(self) -> TraversalItem:
        while self._queue:
            element, depth = self._queue.popleft()
            if not self._admit(element, depth):
                continue
            self._queue.extend((child, depth + 1) for child in element_children(element))
            self.visited += 1
            return TraversalItem(element, depth)
        raise StopIteration


def traverse_elements(root: Tag, options: Optional[TraverseOptions] = None) -> DepthFirstCursor:
    return DepthFirstCursor(root, options)


def traverse_breadth_first(root: Tag, options: Optional[TraverseOptions] = None) -> BreadthFirstCursor:
    return BreadthFirstCursor(root, options)


# =============================================================================
# Filtered Traversal
# =============================================================================

def traverse_interactive(
    root: Tag,
    predicate: Callable[[Tag], bool] = is_interactive,
    options: Optional[TraverseOptions] = None,
) -> Iterator[TraversalItem]:
    for item in traverse_elements(root, options):
        if predicate(item.element):
            yield item


def traverse_landmarks(
    root: Tag,
    options: Optional[TraverseOptions] = None,
) -> Iterator[Tuple[Tag, int, Role]]:
    """Yields ``(element, depth, role)`` for landmark elements."""
    for element, depth in traverse_elements(root, options):
        role = get_role(element)
        if role is not None and role.name in LANDMARK_ROLES:
            yield element, depth, role


def traverse_headings(
    root: Tag,
    options: Optional[TraverseOptions] = None,
) -> Iterator[Tuple[Tag, int, int]]:
    """Yields ``(element, depth, level)`` for h1-h6 elements."""
    for element, depth in traverse_elements(root, options):
        name = tag_name(element)
        if len(name) == 2 and name[0] == "h" and name[1] in "123456":
            yield element, depth, int(name[1])


# =============================================================================
# Collect Utilities
# =============================================================================

def collect_elements(root: Tag, options: Optional[TraverseOptions] = None) -> List[Tag]:
    return [element for element, _ in traverse_elements(root, options)]


def collect_matching(
    root: Tag,
    predicate: Callable[[Tag], bool],
    options: Optional[TraverseOptions] = None,
) -> List[Tag]:
    return [element for element, _ in traverse_elements(root, options) if predicate(element)]


def count_elements(root: Tag) -> int:
    """Every element in the subtree, hidden ones included."""
    cursor = traverse_elements(root, TraverseOptions(max_depth=1000, include_hidden=True))
    return sum(1 for _ in cursor)


# =============================================================================
# Statistics
# =============================================================================

@dataclass
class InteractionCounts:
    buttons: int = 0
    links: int = 0
    inputs: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.buttons + self.links + self.inputs + self.other


_INPUT_ROLES = frozenset({"textbox", "searchbox", "combobox"})
_INPUT_TAGS = frozenset({"input", "textarea", "select"})


def count_interactive_descendants(element: Tag) -> InteractionCounts:
    """
    Histogram of visible interactive elements in a subtree, the element
    itself included. Invisible elements are neither counted nor descended.
    """
    counts = InteractionCounts()
    stack = [element]

    while stack:
        current = stack.pop()
        if not is_visible(current):
            continue

        if is_interactive(current):
            role = get_role(current)
            role_name = role.name if role else None
            tag = tag_name(current)

            if role_name == "button" or tag == "button":
                counts.buttons += 1
            elif role_name == "link" or tag == "a":
                counts.links += 1
            elif role_name in _INPUT_ROLES or tag in _INPUT_TAGS:
                counts.inputs += 1
            else:
                counts.other += 1

        stack.extend(reversed(element_children(current)))

    return counts
