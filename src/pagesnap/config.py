"""
Configuration for the snapshot engine.

This module defines the tunable heuristics used by the renderers: quality
thresholds, section word-count boundaries, truncation limits and recursion
guards. None of these values are believed to be optimal; they are kept here so
callers can adjust them without touching the renderers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

logger = logging.getLogger(__name__)


DEFAULT_MAX_DEPTH = 50
DEFAULT_MAX_LINES = 100
DEFAULT_CONTENT_MAX_LENGTH = 2000
DEFAULT_VIEWPORT: Tuple[int, int] = (1024, 768)

DEFAULT_TRUNCATE_LIMITS: Dict[str, int] = {
    "ELEMENT_NAME": 50,
    "TEXT_SHORT": 80,
    "TEXT_LONG": 120,
    "ERROR_MESSAGE": 100,
    "URL": 150,
}

DEFAULT_REDIRECT_URL_MARKERS = [
    "RotateCookies",     # Google account cookie rotation
    "ServiceLogin",      # Google sign-in interstitial
    "/blank",            # about:blank style placeholders
]


@dataclass
class SnapshotConfig:
    """
    Configuration for snapshot generation.

    Controls quality scoring, section detection heuristics, output
    truncation and recursion guards. Per-call options (depth, line budget,
    grep) live on the per-mode option classes instead.
    """

    # === Quality Scoring ===

    quality_medium_ratio: float = 0.5
    """
    Minimum captured/total ratio for a ``medium`` quality score.
    A full capture scores ``high``; anything below this ratio scores ``low``.
    """

    # === Section Heuristics ===

    content_section_min_words: int = 30
    """Words a classed or identified div needs before content mode treats it as a section."""

    outline_region_min_words: int = 50
    """Words a classed or identified div needs before outline mode lists it as a region."""

    primary_section_min_words: int = 100
    """Words at which an outline section is marked ``importance=primary``."""

    # === Recursion Guard ===

    max_recursion_depth: int = 400
    """
    Hard ceiling for the recursive outline, content and extraction walks.
    Applied on top of the caller's max_depth so a deep tree cannot exhaust
    the interpreter stack.
    """

    # === Previews and Truncation ===

    list_preview_items: int = 10
    """List items shown per list in content mode."""

    code_preview_lines: int = 5
    """Lines of code shown per code block in content mode."""

    heading_text_length: int = 100
    """Heading text truncation for content mode and markdown extraction."""

    outline_heading_length: int = 60
    """Heading text truncation for outline mode."""

    list_item_length: int = 100
    """List item truncation for content mode."""

    markdown_list_item_length: int = 200
    """List item truncation for markdown extraction."""

    table_cell_length: int = 100
    """Table cell truncation for markdown extraction."""

    blockquote_length: int = 2000
    """Blockquote truncation for markdown extraction."""

    truncate_limits: Dict[str, int] = field(default_factory=lambda: DEFAULT_TRUNCATE_LIMITS.copy())
    """Context-aware truncation limits keyed by text kind (ELEMENT_NAME, URL, ...)."""

    # === Page State Detection ===

    empty_page_max_elements: int = 10
    """Pages with nothing interactive and fewer visited elements are reported as empty/transitional."""

    redirect_url_markers: List[str] = field(default_factory=lambda: DEFAULT_REDIRECT_URL_MARKERS.copy())
    """URL fragments that indicate an intermediate or redirect page."""

    def __post_init__(self):
        if not 0.0 <= self.quality_medium_ratio <= 1.0:
            raise ValueError(f"quality_medium_ratio must be within [0, 1], got {self.quality_medium_ratio}")
        if self.max_recursion_depth < 1:
            raise ValueError(f"max_recursion_depth must be positive, got {self.max_recursion_depth}")
        # Fill in limits missing from a partial override
        for key, value in DEFAULT_TRUNCATE_LIMITS.items():
            self.truncate_limits.setdefault(key, value)

    def limit(self, kind: str) -> int:
        """Truncation limit for a text kind."""
        return self.truncate_limits[kind]

    @classmethod
    def from_value(cls, value: Union['SnapshotConfig', Dict, None]) -> 'SnapshotConfig':
        """
        Create config from flexible input types.

        Args:
            value: One of:
                - SnapshotConfig: returned as-is
                - None: returns the defaults
                - Dict: creates config from dict values
        """
        if isinstance(value, cls):
            return value
        elif isinstance(value, dict):
            return cls.from_dict(value)
        elif value is None:
            return cls()
        raise TypeError(f"Cannot build SnapshotConfig from {type(value).__name__}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SnapshotConfig':
        """Create config from dictionary. Unknown keys are ignored."""
        if not data:
            return cls()

        valid_keys = set(cls.__dataclass_fields__.keys())
        unknown = set(data) - valid_keys
        if unknown:
            logger.debug(f"Ignoring unknown snapshot config keys: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in valid_keys})

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'SnapshotConfig':
        """
        Load config from a YAML file.

        The file holds a mapping of field names, either at the top level or
        under a ``snapshot:`` key.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Snapshot config file {path} must contain a mapping")
        if isinstance(data.get("snapshot"), dict):
            data = data["snapshot"]
        return cls.from_dict(data)


def resolve_config(config: Optional[Union[SnapshotConfig, Dict]]) -> SnapshotConfig:
    """Shorthand used by the public entry points."""
    return SnapshotConfig.from_value(config)
