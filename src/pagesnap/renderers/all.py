"""All mode: every role-bearing element with a ref, interactive or not."""

import logging
from typing import Optional

from bs4 import Tag

from ..data_models import SnapshotMode, SnapshotResult
from ..formatting import build_element_line, build_snapshot_header
from ..inspector import element_states, get_accessible_name, get_role, is_interactive
from ..options import AllOptions
from ..traverse import DepthFirstCursor, TraverseOptions, traverse_elements
from .base import BaseRenderer

logger = logging.getLogger(__name__)


class AllRenderer(BaseRenderer):
    """
    Same walk as interactive mode without the interactivity filter.

    Interactive elements are still counted so the summary can compare them
    with the full listing.
    """

    mode = SnapshotMode.ALL
    options_class = AllOptions

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cursor: Optional[DepthFirstCursor] = None
        self.interactive_count = 0

    def collect(self, root: Tag) -> None:
        self.cursor = traverse_elements(root, TraverseOptions(
            max_depth=self.options.max_depth,
            include_hidden=self.options.include_hidden,
        ))

        for element, _ in self.cursor:
            if is_interactive(element):
                self.interactive_count += 1

            role = get_role(element)
            if role is None:
                continue

            name = get_accessible_name(element)
            ref = self.register(element, role.name, name, context=self.landmark_context(element))
            self.lines.append(build_element_line(
                role=role.name,
                name=name,
                ref=ref,
                states=element_states(element),
                xpath=self.xpath(element),
                config=self.config,
            ))

    def finish(self, root: Tag) -> SnapshotResult:
        if self.cursor is not None:
            self.depth_limited = self.cursor.depth_limited

        summary = build_snapshot_header(
            "all",
            element_count=len(self.lines),
            ref_count=len(self.refs),
            extra={"interactive": self.interactive_count},
        )
        quality = self.score_quality(len(self.lines), len(self.refs))
        return self.build_result(summary, self.lines, quality, total_interactive=self.interactive_count)
