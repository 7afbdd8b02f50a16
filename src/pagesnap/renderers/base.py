"""
Abstract base class for snapshot mode renderers.

A renderer turns one document subtree into a ``SnapshotResult``: the text
block, the reference table and quality metadata. Every renderer shares the
same lifecycle:

1. Options are validated and the root is resolved. Problems here raise
   ``SnapshotConfigError``/``InvalidRootError`` before any traversal.
2. The reference registry is cleared.
3. ``collect`` walks the tree, accumulating lines, refs and counters.
   Anything it raises is caught, logged and turned into a warning; the
   lines and refs gathered so far are kept.
4. ``finish`` assembles the header, summary line and metadata.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type, Union

from bs4 import Tag

from ..config import SnapshotConfig, resolve_config
from ..data_models import RefInfo, SnapshotMetadata, SnapshotMode, SnapshotQuality, SnapshotResult
from ..exceptions import TraversalError
from ..formatting import build_page_header, build_snapshot_output, truncate_by_type
from ..host import PageDocument, ancestors, bounding_box, tag_name
from ..inspector import generate_selector, generate_simple_selector, get_role, get_section_name
from ..options import BaseOptions
from ..refs import RefRegistry
from ..semantic_path import SemanticPathBuilder

logger = logging.getLogger(__name__)


class DepthGuard:
    """Caps recursive walks at the configured recursion ceiling."""

    def __init__(self, max_depth: int, ceiling: int):
        self.limit = min(max_depth, ceiling)
        self.depth_limited = False

    def allows(self, depth: int) -> bool:
        if depth <= self.limit:
            return True
        self.depth_limited = True
        return False


class BaseRenderer(ABC):
    """
    Base class for the six snapshot modes.

    Subclasses set ``mode`` and ``options_class`` and implement ``collect``
    and ``finish``.
    """

    mode: SnapshotMode
    options_class: Type[BaseOptions] = BaseOptions
    clears_registry: bool = True

    def __init__(
        self,
        document: PageDocument,
        registry: Optional[RefRegistry] = None,
        options: Union[BaseOptions, Dict[str, Any], None] = None,
        config: Union[SnapshotConfig, Dict[str, Any], None] = None,
    ):
        self.document = document
        self.registry = registry if registry is not None else RefRegistry()
        self.options = self.options_class.from_value(options)
        self.config = resolve_config(config)

        # Per-pass state
        self.lines: List[str] = []
        self.refs: Dict[str, RefInfo] = {}
        self.warnings: List[str] = []
        self.fault: Optional[TraversalError] = None
        self.depth_limited = False
        self.paths = SemanticPathBuilder()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def resolve_root(self) -> Tag:
        return self.document.resolve_root(self.options.root)

    def render(self) -> SnapshotResult:
        root = self.resolve_root()

        if self.clears_registry:
            self.registry.clear()
        self.paths.reset()

        try:
            self.collect(root)
        except Exception as e:
            # Partial results are returned instead of raising
            self.fault = TraversalError(
                f"{self.mode.value} snapshot failed during traversal: {e}",
                mode=self.mode.value,
                original=e,
            )
            logger.warning(
                f"Snapshot traversal failed, returning partial results: {self.fault}",
                exc_info=True,
            )
            self.warnings.append(f"Partial snapshot: traversal failed ({type(e).__name__}: {e})")

        result = self.finish(root)
        logger.debug(
            f"{self.mode.value} snapshot: lines={len(self.lines)} refs={len(self.refs)} "
            f"quality={result.metadata.quality} warnings={len(result.metadata.warnings)}"
        )
        return result

    @abstractmethod
    def collect(self, root: Tag) -> None:
        """
        Walk the tree from ``root`` and accumulate lines, refs and counters.

        Args:
            root: Validated root element
        """
        pass

    @abstractmethod
    def finish(self, root: Tag) -> SnapshotResult:
        """
        Assemble the final result from the accumulated state.

        Called after ``collect`` even when it failed part way.
        """
        pass

    # =========================================================================
    # Helpers for subclasses
    # =========================================================================

    def xpath(self, node: Tag) -> str:
        return self.paths(node)

    def register(self, node: Tag, role: str, name: str = "", **extra) -> str:
        """
        Issue a ref for ``node`` and record its RefInfo.

        When the geometry query fails the entry degrades to a simple selector
        without geometry; the ref itself is still issued.
        """
        ref = self.registry.generate_ref(node)
        geometry = bounding_box(node)

        if geometry.ok:
            box = geometry.box
            in_viewport = None
            if box is not None:
                in_viewport = box.intersects_viewport(self.document.viewport_width, self.document.viewport_height)
            info = RefInfo(
                selector=generate_selector(node, self.document),
                role=role,
                name=name or None,
                bbox=box,
                in_viewport=in_viewport,
                **extra,
            )
        else:
            logger.warning(f"Geometry unavailable for {ref} <{tag_name(node)}>: {geometry.error}")
            info = RefInfo(
                selector=generate_simple_selector(node),
                role=role,
                name=name or None,
                **extra,
            )

        self.refs[ref] = info
        return ref

    def landmark_context(self, node: Tag) -> Optional[str]:
        """Nearest enclosing landmark as ``role`` or ``role "name"``."""
        for ancestor in ancestors(node):
            role = get_role(ancestor)
            if role is not None and role.is_landmark:
                name = truncate_by_type(get_section_name(ancestor), "ELEMENT_NAME", self.config)
                return f'{role.name} "{name}"' if name else role.name
        return None

    def guard(self) -> DepthGuard:
        return DepthGuard(self.options.max_depth, self.config.max_recursion_depth)

    def score_quality(self, total: int, captured: int, truncated: bool = False) -> SnapshotQuality:
        """
        Quality for this pass.

        ``low``: zero viewport, nothing captured, capture ratio under the
        configured threshold, or an internal fault. ``medium``: partial
        capture above the threshold, or a truncated line budget.
        """
        if self.fault is not None or self.document.viewport_area == 0 or captured == 0:
            return SnapshotQuality.LOW
        ratio = captured / total if total else 1.0
        if ratio < self.config.quality_medium_ratio:
            return SnapshotQuality.LOW
        if ratio < 1.0 or truncated:
            return SnapshotQuality.MEDIUM
        return SnapshotQuality.HIGH

    def page_header(self) -> str:
        return build_page_header(self.document, self.config)

    def build_result(
        self,
        summary: str,
        lines: List[str],
        quality: SnapshotQuality,
        total_interactive: int = 0,
        truncated: bool = False,
    ) -> SnapshotResult:
        metadata = SnapshotMetadata(
            total_interactive_elements=total_interactive,
            captured_elements=len(self.refs),
            quality=quality,
            truncated=truncated,
            depth_limited=self.depth_limited,
            warnings=list(self.warnings),
        )
        return SnapshotResult(
            tree=build_snapshot_output(self.page_header(), summary, lines),
            refs=dict(self.refs),
            metadata=metadata,
        )
