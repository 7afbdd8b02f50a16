"""
Snapshot entry points.

``generate_snapshot`` is the single dispatch point used by the command
layer; the ``snapshot_*`` functions are per-mode shortcuts and
``create_snapshot`` accepts the legacy union options.
"""

import logging
from typing import Any, Dict, Optional, Union

from .config import SnapshotConfig
from .data_models import SnapshotMode, SnapshotResult
from .exceptions import SnapshotConfigError
from .host import PageDocument
from .options import (
    AllOptions,
    BaseOptions,
    ContentOptions,
    HeadOptions,
    InteractiveOptions,
    OutlineOptions,
    SnapshotOptions,
    StructureOptions,
)
from .refs import RefRegistry
from .renderers import RENDERERS

logger = logging.getLogger(__name__)

OptionsLike = Union[BaseOptions, Dict[str, Any], None]
ConfigLike = Union[SnapshotConfig, Dict[str, Any], None]


def _resolve_mode(mode: Union[SnapshotMode, str]) -> SnapshotMode:
    try:
        return SnapshotMode(mode)
    except ValueError:
        raise SnapshotConfigError(
            f"Unknown snapshot mode {mode!r}; expected one of {[m.value for m in SnapshotMode]}",
            details={"option": "mode", "value": mode},
        ) from None


def generate_snapshot(
    document: PageDocument,
    registry: RefRegistry,
    mode: Union[SnapshotMode, str] = SnapshotMode.INTERACTIVE,
    options: OptionsLike = None,
    config: ConfigLike = None,
) -> SnapshotResult:
    """
    Render one snapshot of ``document`` in the given mode.

    The registry is cleared first (status mode leaves it untouched) and then
    holds the refs issued by this pass.

    Args:
        document: Page to snapshot
        registry: Reference registry owned by the caller
        mode: head, interactive, structure, outline, content or all
        options: That mode's options, or a dict of their fields
        config: Optional SnapshotConfig, or a dict of its fields

    Returns:
        SnapshotResult with tree text, refs and metadata

    Raises:
        SnapshotConfigError: Unknown mode or invalid options
        InvalidRootError: The root cannot be used
    """
    renderer_class = RENDERERS[_resolve_mode(mode)]
    return renderer_class(document, registry, options, config).render()


def create_snapshot(
    document: PageDocument,
    registry: RefRegistry,
    options: Union[SnapshotOptions, Dict[str, Any], None] = None,
    config: ConfigLike = None,
) -> SnapshotResult:
    """Legacy entry point taking the union of every mode's options."""
    legacy = SnapshotOptions.from_value(options)
    return generate_snapshot(document, registry, legacy.mode, legacy.for_mode(), config)


def snapshot_head(
    document: PageDocument,
    options: Union[HeadOptions, Dict[str, Any], None] = None,
    config: ConfigLike = None,
    registry: Optional[RefRegistry] = None,
) -> SnapshotResult:
    return generate_snapshot(document, registry, SnapshotMode.HEAD, options, config)


def snapshot_interactive(
    document: PageDocument,
    registry: RefRegistry,
    options: Union[InteractiveOptions, Dict[str, Any], None] = None,
    config: ConfigLike = None,
) -> SnapshotResult:
    return generate_snapshot(document, registry, SnapshotMode.INTERACTIVE, options, config)


def snapshot_structure(
    document: PageDocument,
    registry: RefRegistry,
    options: Union[StructureOptions, Dict[str, Any], None] = None,
    config: ConfigLike = None,
) -> SnapshotResult:
    return generate_snapshot(document, registry, SnapshotMode.STRUCTURE, options, config)


def snapshot_outline(
    document: PageDocument,
    registry: RefRegistry,
    options: Union[OutlineOptions, Dict[str, Any], None] = None,
    config: ConfigLike = None,
) -> SnapshotResult:
    return generate_snapshot(document, registry, SnapshotMode.OUTLINE, options, config)


def snapshot_content(
    document: PageDocument,
    registry: RefRegistry,
    options: Union[ContentOptions, Dict[str, Any], None] = None,
    config: ConfigLike = None,
) -> SnapshotResult:
    return generate_snapshot(document, registry, SnapshotMode.CONTENT, options, config)


def snapshot_all(
    document: PageDocument,
    registry: RefRegistry,
    options: Union[AllOptions, Dict[str, Any], None] = None,
    config: ConfigLike = None,
) -> SnapshotResult:
    return generate_snapshot(document, registry, SnapshotMode.ALL, options, config)
