"""Status mode: page facts and a coarse readiness verdict, no traversal."""

import logging

from bs4 import Tag

from ..data_models import SnapshotMode, SnapshotQuality, SnapshotResult
from ..formatting import build_summary_line
from ..options import HeadOptions
from .base import BaseRenderer

logger = logging.getLogger(__name__)


INTERACTIVE_SELECTOR = (
    'button, a[href], input, textarea, select, '
    '[role="button"], [tabindex]:not([tabindex="-1"])'
)

VIEWPORT_WARNING = "Viewport not initialized (0x0) - page may be loading or redirecting"


def page_status(viewport_area: int, interactive_count: int, ready_state: str) -> str:
    """
    Readiness verdict; each call is independent.

    zero viewport -> loading, nothing interactive -> empty,
    readyState complete -> ready, otherwise interactive.
    """
    if viewport_area == 0:
        return "loading"
    if interactive_count == 0:
        return "empty"
    if ready_state == "complete":
        return "ready"
    return "interactive"


class HeadRenderer(BaseRenderer):
    """
    Quick status check before a deeper snapshot.

    Issues no refs and leaves the registry untouched, so refs from the last
    full snapshot stay valid.
    """

    mode = SnapshotMode.HEAD
    options_class = HeadOptions
    clears_registry = False

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.total_elements = 0
        self.interactive_count = 0
        self.status = "loading"

    def collect(self, root: Tag) -> None:
        self.total_elements = len(root.find_all(True))
        self.interactive_count = len(root.select(INTERACTIVE_SELECTOR))
        self.status = page_status(
            self.document.viewport_area, self.interactive_count, self.document.ready_state
        )

        document = self.document
        self.lines = [
            f"URL: {document.url or 'about:blank'}",
            f"TITLE: {document.title or 'Untitled'}",
            f"VIEWPORT: {document.viewport_width}x{document.viewport_height}",
            f"STATUS: {self.status}",
            f"ELEMENTS: total={self.total_elements} interactive={self.interactive_count}",
            f"READY_STATE: {document.ready_state}",
        ]

    def finish(self, root: Tag) -> SnapshotResult:
        if self.document.viewport_area == 0:
            self.warnings.append(VIEWPORT_WARNING)

        quality = SnapshotQuality.HIGH
        if self.fault is not None or self.document.viewport_area == 0:
            quality = SnapshotQuality.LOW

        summary = build_summary_line("head", {
            "status": self.status,
            "elements": self.total_elements,
            "interactive": self.interactive_count,
        })
        return self.build_result(summary, self.lines, quality, total_interactive=self.interactive_count)
