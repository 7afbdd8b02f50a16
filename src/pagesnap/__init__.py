"""
pagesnap - DOM snapshots for browser agents

Renders a page's document tree into compact text views (status,
interactive, structure, outline, content, all) with stable element
references, and extracts page content as Markdown or HTML.
"""

__version__ = "0.1.0"

from .capture import capture_page
from .config import SnapshotConfig
from .data_models import (
    BoundingBox,
    RefInfo,
    SnapshotMetadata,
    SnapshotMode,
    SnapshotQuality,
    SnapshotResult,
)
from .exceptions import (
    CaptureError,
    InvalidRootError,
    SnapshotConfigError,
    SnapshotError,
    TraversalError,
)
from .extract import extract_content
from .grep import GrepOptions, grep, grep_lines
from .host import PageDocument
from .options import (
    AllOptions,
    ContentOptions,
    ExtractOptions,
    HeadOptions,
    InteractiveOptions,
    OutlineOptions,
    SnapshotOptions,
    StructureOptions,
)
from .refs import RefRegistry
from .snapshot import (
    create_snapshot,
    generate_snapshot,
    snapshot_all,
    snapshot_content,
    snapshot_head,
    snapshot_interactive,
    snapshot_outline,
    snapshot_structure,
)

__all__ = [
    # Entry points
    "generate_snapshot",
    "create_snapshot",
    "snapshot_head",
    "snapshot_interactive",
    "snapshot_structure",
    "snapshot_outline",
    "snapshot_content",
    "snapshot_all",
    "extract_content",
    "capture_page",
    # Document and registry
    "PageDocument",
    "RefRegistry",
    # Options and config
    "SnapshotConfig",
    "HeadOptions",
    "InteractiveOptions",
    "StructureOptions",
    "OutlineOptions",
    "ContentOptions",
    "AllOptions",
    "ExtractOptions",
    "SnapshotOptions",
    "GrepOptions",
    # Results
    "SnapshotMode",
    "SnapshotQuality",
    "SnapshotResult",
    "SnapshotMetadata",
    "RefInfo",
    "BoundingBox",
    # Errors
    "SnapshotError",
    "SnapshotConfigError",
    "InvalidRootError",
    "TraversalError",
    "CaptureError",
    # Text search
    "grep",
    "grep_lines",
]
