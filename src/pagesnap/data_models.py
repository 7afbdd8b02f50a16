"""
Data models for snapshot results.

These are the values handed to the command-dispatch layer: the rendered
text, the reference table and quality metadata. They serialize with camelCase
keys so existing consumers of the wire format can read them unchanged.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SnapshotMode(str, Enum):
    """Textual projection produced by a rendering pass."""
    HEAD = "head"  # Quick status, no traversal
    INTERACTIVE = "interactive"  # Clickable/typeable elements with refs
    STRUCTURE = "structure"  # Landmarks/headings under a line budget
    OUTLINE = "outline"  # Indented hierarchy with section refs
    CONTENT = "content"  # Section text extraction
    ALL = "all"  # Every role-bearing element with refs


class SnapshotQuality(str, Enum):
    """Coarse confidence in how complete a snapshot is."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class BoundingBox(_WireModel):
    """Element geometry in viewport coordinates, rounded to whole pixels."""
    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    def intersects_viewport(self, width: int, height: int) -> bool:
        return (
            self.x + self.width > 0
            and self.y + self.height > 0
            and self.x < width
            and self.y < height
        )


class RefInfo(_WireModel):
    """
    What the command layer needs to act on a referenced element later.

    ``selector`` is a CSS selector for the element. When the geometry query
    failed for the element, the selector is the simplified form and ``bbox``
    is absent.
    """
    selector: str
    role: str
    name: Optional[str] = None
    bbox: Optional[BoundingBox] = None
    in_viewport: Optional[bool] = None
    importance: Optional[Literal["primary", "secondary", "utility"]] = None
    context: Optional[str] = None


class SnapshotMetadata(_WireModel):
    """Counts and quality signals for one rendering pass."""
    total_interactive_elements: int = 0
    captured_elements: int = 0
    quality: SnapshotQuality = SnapshotQuality.HIGH
    truncated: bool = False
    depth_limited: bool = False
    warnings: List[str] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        # Wire format omits an empty warnings list
        if not data.get("warnings"):
            data.pop("warnings", None)
        return data


class SnapshotResult(_WireModel):
    """
    Output of a single rendering pass.

    Invariant: ``metadata.captured_elements == len(refs)``.
    """
    tree: str
    refs: Dict[str, RefInfo] = Field(default_factory=dict)
    metadata: SnapshotMetadata = Field(default_factory=SnapshotMetadata)

    def ref_tokens(self) -> List[str]:
        """Reference tokens in emission order."""
        return list(self.refs.keys())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tree": self.tree,
            "refs": {ref: info.to_dict() for ref, info in self.refs.items()},
            "metadata": self.metadata.to_dict(),
        }

    @property
    def lines(self) -> List[str]:
        return self.tree.split("\n")
