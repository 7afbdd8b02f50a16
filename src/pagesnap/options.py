"""
Per-call options for each snapshot mode and for content extraction.

Options are validated on construction, so a bad option is rejected before
any traversal starts. Plain dicts are accepted wherever options are, with
either snake_case or camelCase keys.
"""

import logging
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Type, TypeVar, Union

from bs4 import Tag

from .config import DEFAULT_CONTENT_MAX_LENGTH, DEFAULT_MAX_DEPTH, DEFAULT_MAX_LINES
from .data_models import SnapshotMode
from .exceptions import SnapshotConfigError
from .grep import GrepOptions

logger = logging.getLogger(__name__)

O = TypeVar("O", bound="BaseOptions")

GrepSpec = Union[str, GrepOptions, Dict[str, Any]]

CONTENT_FORMATS = ("tree", "markdown")
EXTRACT_FORMATS = ("markdown", "html")

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL.sub("_", key).lower()


def _coerce_grep(value: Optional[GrepSpec]) -> Optional[GrepOptions]:
    # An empty pattern means no filtering
    if value is None or value == "":
        return None
    return GrepOptions.coerce(value)


def _check_format_only_options(options: Any) -> None:
    for option in ("include_links", "include_images"):
        if getattr(options, option) is not None and options.format != "markdown":
            raise SnapshotConfigError(
                f'{option} option requires format="markdown"',
                details={"option": option, "format": options.format},
            )


@dataclass
class BaseOptions:
    """
    Options shared by every traversing mode.

    Attributes:
        root: Element to start from (defaults to <body>)
        max_depth: Deepest level visited, the root being depth 0
        include_hidden: Visit nodes whose computed style hides them
    """
    root: Optional[Tag] = None
    max_depth: int = DEFAULT_MAX_DEPTH
    include_hidden: bool = False

    def __post_init__(self):
        if not isinstance(self.max_depth, int) or self.max_depth < 0:
            raise SnapshotConfigError(
                f"max_depth must be a non-negative integer, got {self.max_depth!r}",
                details={"option": "max_depth", "value": self.max_depth},
            )

    @classmethod
    def from_value(cls: Type[O], value: Union[O, Dict[str, Any], None]) -> O:
        """Build options from an instance, a dict or None (defaults)."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls()
        if isinstance(value, dict):
            return cls.from_dict(value)
        raise SnapshotConfigError(
            f"Cannot build {cls.__name__} from {type(value).__name__}",
            details={"options_type": type(value).__name__},
        )

    @classmethod
    def from_dict(cls: Type[O], data: Dict[str, Any]) -> O:
        valid = {f.name for f in fields(cls)}
        normalized = {_snake(k): v for k, v in data.items()}
        unknown = set(normalized) - valid
        if unknown:
            logger.debug(f"Ignoring unknown {cls.__name__} keys: {sorted(unknown)}")
        return cls(**{k: v for k, v in normalized.items() if k in valid})


@dataclass
class HeadOptions(BaseOptions):
    """Status mode reads page facts only; depth and visibility are unused."""


@dataclass
class InteractiveOptions(BaseOptions):
    grep: Optional[GrepSpec] = None

    def __post_init__(self):
        super().__post_init__()
        self.grep = _coerce_grep(self.grep)


@dataclass
class StructureOptions(BaseOptions):
    max_lines: int = DEFAULT_MAX_LINES

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.max_lines, int) or self.max_lines < 1:
            raise SnapshotConfigError(
                f"max_lines must be a positive integer, got {self.max_lines!r}",
                details={"option": "max_lines", "value": self.max_lines},
            )


@dataclass
class OutlineOptions(BaseOptions):
    grep: Optional[GrepSpec] = None

    def __post_init__(self):
        super().__post_init__()
        self.grep = _coerce_grep(self.grep)


@dataclass
class ContentOptions(BaseOptions):
    """
    Attributes:
        format: ``tree`` for typed lines, ``markdown`` for Markdown section bodies
        grep: Filter applied to whole sections before any text is emitted
        max_length: Characters kept per paragraph
        include_links: Render links as ``[text](href)`` (markdown only, default on)
        include_images: Render images as ``![alt](src)`` (markdown only, default off)
    """
    format: str = "tree"
    grep: Optional[GrepSpec] = None
    max_length: int = DEFAULT_CONTENT_MAX_LENGTH
    include_links: Optional[bool] = None
    include_images: Optional[bool] = None

    def __post_init__(self):
        super().__post_init__()
        if self.format not in CONTENT_FORMATS:
            raise SnapshotConfigError(
                f"Unknown content format {self.format!r}; expected one of {CONTENT_FORMATS}",
                details={"option": "format", "value": self.format},
            )
        if not isinstance(self.max_length, int) or self.max_length < 1:
            raise SnapshotConfigError(
                f"max_length must be a positive integer, got {self.max_length!r}",
                details={"option": "max_length", "value": self.max_length},
            )
        _check_format_only_options(self)
        self.grep = _coerce_grep(self.grep)

    @property
    def links(self) -> bool:
        return True if self.include_links is None else bool(self.include_links)

    @property
    def images(self) -> bool:
        return bool(self.include_images)


@dataclass
class AllOptions(BaseOptions):
    """Full mode takes traversal options only."""


@dataclass
class ExtractOptions(BaseOptions):
    """
    Attributes:
        format: ``markdown`` (default) or ``html``
        selector: CSS selector for the subtree to extract; no match gives ``""``
        max_length: Overall output cap; longer output ends with a truncation marker
        include_links: Render links as ``[text](href)`` (markdown only, default on)
        include_images: Render images as ``![alt](src)`` (markdown only, default off)
    """
    format: str = "markdown"
    selector: Optional[str] = None
    max_length: Optional[int] = None
    include_links: Optional[bool] = None
    include_images: Optional[bool] = None

    def __post_init__(self):
        super().__post_init__()
        if self.format not in EXTRACT_FORMATS:
            raise SnapshotConfigError(
                f"Unknown extract format {self.format!r}; expected one of {EXTRACT_FORMATS}",
                details={"option": "format", "value": self.format},
            )
        if self.max_length is not None and (not isinstance(self.max_length, int) or self.max_length < 1):
            raise SnapshotConfigError(
                f"max_length must be a positive integer, got {self.max_length!r}",
                details={"option": "max_length", "value": self.max_length},
            )
        _check_format_only_options(self)

    @property
    def links(self) -> bool:
        return True if self.include_links is None else bool(self.include_links)

    @property
    def images(self) -> bool:
        return bool(self.include_images)


@dataclass
class SnapshotOptions(BaseOptions):
    """
    Legacy union of every mode's options, dispatched on ``mode``.

    ``format`` applies to content mode only. ``compact`` is accepted and
    ignored.
    """
    mode: Union[SnapshotMode, str] = SnapshotMode.INTERACTIVE
    format: Optional[str] = None
    grep: Optional[GrepSpec] = None
    max_length: Optional[int] = None
    include_links: Optional[bool] = None
    include_images: Optional[bool] = None
    max_lines: Optional[int] = None
    compact: bool = False

    def __post_init__(self):
        super().__post_init__()
        try:
            self.mode = SnapshotMode(self.mode)
        except ValueError:
            raise SnapshotConfigError(
                f"Unknown snapshot mode {self.mode!r}",
                details={"option": "mode", "value": self.mode},
            ) from None
        if self.format == "html":
            raise SnapshotConfigError(
                'format="html" is not a snapshot format; use extract_content() for raw markup',
                details={"option": "format", "value": self.format},
            )

    def for_mode(self) -> BaseOptions:
        """The per-mode options this legacy request stands for."""
        base = {"root": self.root, "max_depth": self.max_depth, "include_hidden": self.include_hidden}

        if self.mode is SnapshotMode.HEAD:
            return HeadOptions(**base)
        if self.mode is SnapshotMode.INTERACTIVE:
            return InteractiveOptions(grep=self.grep, **base)
        if self.mode is SnapshotMode.STRUCTURE:
            if self.max_lines is None:
                return StructureOptions(**base)
            return StructureOptions(max_lines=self.max_lines, **base)
        if self.mode is SnapshotMode.OUTLINE:
            return OutlineOptions(grep=self.grep, **base)
        if self.mode is SnapshotMode.CONTENT:
            content = {
                "format": self.format or "tree",
                "grep": self.grep,
                "include_links": self.include_links,
                "include_images": self.include_images,
            }
            if self.max_length is not None:
                content["max_length"] = self.max_length
            return ContentOptions(**content, **base)
        return AllOptions(**base)


MODE_OPTIONS: Dict[SnapshotMode, Type[BaseOptions]] = {
    SnapshotMode.HEAD: HeadOptions,
    SnapshotMode.INTERACTIVE: InteractiveOptions,
    SnapshotMode.STRUCTURE: StructureOptions,
    SnapshotMode.OUTLINE: OutlineOptions,
    SnapshotMode.CONTENT: ContentOptions,
    SnapshotMode.ALL: AllOptions,
}
