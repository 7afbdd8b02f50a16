"""
Interactive mode: every clickable or typeable element, each with a ref.

This is the default mode an agent uses before acting on a page.
"""

import logging
from typing import Optional

from bs4 import Tag

from ..data_models import SnapshotMode, SnapshotResult
from ..formatting import build_element_line, build_snapshot_header
from ..grep import grep_lines
from ..inspector import (
    element_states,
    get_accessible_name,
    get_input_attributes,
    get_role,
    is_interactive,
)
from ..options import InteractiveOptions
from ..traverse import DepthFirstCursor, TraverseOptions, traverse_elements
from .base import BaseRenderer
from .head import VIEWPORT_WARNING

logger = logging.getLogger(__name__)


EMPTY_PAGE_WARNING = "Page appears to be empty or transitional - wait for content to load"
REDIRECT_WARNING = "Detected intermediate/redirect page - snapshot may not contain meaningful content"


class InteractiveRenderer(BaseRenderer):
    """
    Depth-first walk that lists interactive elements as
    ``ROLE "name" @ref:N [attrs] (states) /path``.

    Interactive elements without a role are counted but not rendered.
    """

    mode = SnapshotMode.INTERACTIVE
    options_class = InteractiveOptions

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cursor: Optional[DepthFirstCursor] = None
        self.total_interactive = 0

    def collect(self, root: Tag) -> None:
        self.cursor = traverse_elements(root, TraverseOptions(
            max_depth=self.options.max_depth,
            include_hidden=self.options.include_hidden,
        ))

        for element, _ in self.cursor:
            if not is_interactive(element):
                continue
            self.total_interactive += 1

            role = get_role(element)
            if role is None:
                continue

            name = get_accessible_name(element)
            ref = self.register(element, role.name, name, context=self.landmark_context(element))
            self.lines.append(build_element_line(
                role=role.name,
                name=name,
                ref=ref,
                attributes=get_input_attributes(element),
                states=element_states(element),
                xpath=self.xpath(element),
                config=self.config,
            ))

    def page_warnings(self, visited: int) -> None:
        if self.document.viewport_area == 0:
            self.warnings.append(VIEWPORT_WARNING)

        if not self.refs and self.total_interactive == 0 and visited < self.config.empty_page_max_elements:
            self.warnings.append(EMPTY_PAGE_WARNING)

        url = self.document.url or ""
        if any(marker in url for marker in self.config.redirect_url_markers):
            self.warnings.append(REDIRECT_WARNING)

        captured = len(self.refs)
        if self.total_interactive and captured / self.total_interactive < self.config.quality_medium_ratio:
            self.warnings.append(
                f"Low capture ratio: {captured} of {self.total_interactive} interactive elements rendered"
            )

    def finish(self, root: Tag) -> SnapshotResult:
        visited = self.cursor.visited if self.cursor is not None else 0
        if self.cursor is not None:
            self.depth_limited = self.cursor.depth_limited

        lines = self.lines
        grep_pattern = grep_matches = None
        if self.options.grep is not None:
            result = grep_lines(self.lines, self.options.grep)
            lines = result.items
            grep_pattern, grep_matches = result.pattern, result.match_count

        self.page_warnings(visited)

        summary = build_snapshot_header(
            "snapshot",
            element_count=visited,
            ref_count=len(self.refs),
            grep_pattern=grep_pattern,
            grep_matches=grep_matches,
        )
        quality = self.score_quality(self.total_interactive, len(self.refs))
        return self.build_result(summary, lines, quality, total_interactive=self.total_interactive)
