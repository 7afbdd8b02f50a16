"""
Structure mode: landmarks, headings and forms under a line budget.

Breadth-first, so the budget keeps the top of the page hierarchy rather
than the first screenful of the document.
"""

import logging
from collections import deque
from typing import Deque, NamedTuple, Optional, Tuple

from bs4 import Tag

from ..data_models import SnapshotMode, SnapshotResult
from ..formatting import build_element_line, build_interaction_summary, build_snapshot_header
from ..host import element_children, tag_name
from ..inspector import Role, get_accessible_name, get_role, is_visible
from ..options import StructureOptions
from ..traverse import count_interactive_descendants
from .base import BaseRenderer

logger = logging.getLogger(__name__)


class _Pending(NamedTuple):
    element: Tag
    depth: int
    indent: str


class StructureRenderer(BaseRenderer):
    """
    Shows landmark, heading and form nodes with interaction summaries.

    Landmarks, headings and forms are shown even when their computed style
    says hidden, since saved pages often lose their external stylesheets.
    Hidden non-semantic nodes are pruned with their subtree. Children of
    shown nodes are indented two more spaces.
    """

    mode = SnapshotMode.STRUCTURE
    options_class = StructureOptions

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.truncated = False

    @staticmethod
    def classify(element: Tag, role: Optional[Role]) -> Tuple[bool, bool, bool]:
        is_landmark = role is not None and role.is_landmark
        is_heading = (role is not None and role.is_heading) or (
            len(tag_name(element)) == 2 and tag_name(element)[0] == "h" and tag_name(element)[1] in "123456"
        )
        is_form = (role is not None and role.name == "form") or tag_name(element) == "form"
        return is_landmark, is_heading, is_form

    def collect(self, root: Tag) -> None:
        max_lines = self.options.max_lines
        queue: Deque[_Pending] = deque([_Pending(root, 0, "")])

        while queue:
            element, depth, indent = queue.popleft()

            if depth > self.options.max_depth:
                self.depth_limited = True
                continue

            role = get_role(element)
            is_landmark, is_heading, is_form = self.classify(element, role)
            semantic = is_landmark or is_heading or is_form

            if not semantic:
                if not self.options.include_hidden and not is_visible(element):
                    continue
                queue.extend(_Pending(child, depth + 1, indent) for child in element_children(element))
                continue

            if len(self.lines) >= max_lines:
                self.truncated = True
                break

            metadata = None
            if is_landmark or is_form:
                metadata = build_interaction_summary(count_interactive_descendants(element)) or None

            if role is None:
                role = Role(tag_name(element))
            self.lines.append(build_element_line(
                role=role.name,
                name=get_accessible_name(element),
                metadata=metadata,
                xpath=self.xpath(element),
                indent=indent,
                config=self.config,
            ))

            queue.extend(_Pending(child, depth + 1, indent + "  ") for child in element_children(element))

        logger.debug(f"Structure pass: {len(self.lines)} lines, truncated={self.truncated}")

    def finish(self, root: Tag) -> SnapshotResult:
        summary = build_snapshot_header(
            "structure",
            element_count=len(self.lines),
            max_lines=self.options.max_lines,
            truncated=self.truncated,
        )
        shown = len(self.lines)
        quality = self.score_quality(shown, shown, truncated=self.truncated)
        return self.build_result(summary, self.lines, quality, truncated=self.truncated)
