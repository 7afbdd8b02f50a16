"""
Snapshot mode renderers.

Each renderer takes a document, a reference registry and per-mode options
and produces a ``SnapshotResult``.
"""

from typing import Dict, Type

from ..data_models import SnapshotMode
from .all import AllRenderer
from .base import BaseRenderer, DepthGuard
from .content import ContentRenderer
from .head import HeadRenderer
from .interactive import InteractiveRenderer
from .outline import OutlineRenderer
from .structure import StructureRenderer

RENDERERS: Dict[SnapshotMode, Type[BaseRenderer]] = {
    SnapshotMode.HEAD: HeadRenderer,
    SnapshotMode.INTERACTIVE: InteractiveRenderer,
    SnapshotMode.STRUCTURE: StructureRenderer,
    SnapshotMode.OUTLINE: OutlineRenderer,
    SnapshotMode.CONTENT: ContentRenderer,
    SnapshotMode.ALL: AllRenderer,
}

__all__ = [
    "BaseRenderer",
    "DepthGuard",
    "HeadRenderer",
    "InteractiveRenderer",
    "StructureRenderer",
    "OutlineRenderer",
    "ContentRenderer",
    "AllRenderer",
    "RENDERERS",
]
