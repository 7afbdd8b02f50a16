"""
Reference Registry

Maps short ``@ref:N`` tokens to nodes for the lifetime of one rendering
pass. Every renderer clears the registry before populating it, so tokens
from an earlier snapshot stop resolving as soon as a new one is taken.
"""

import logging
from typing import Dict, Iterator, Optional

from bs4 import Tag

logger = logging.getLogger(__name__)


REF_PREFIX = "@ref:"


class RefRegistry:
    """
    Registry of element references for a single snapshot.

    Counters are per instance; two registries never share tokens.

    Usage:
        registry = RefRegistry()
        result = generate_snapshot(document, registry, "interactive")
        button = registry.get("@ref:0")
    """

    def __init__(self):
        self._refs: Dict[str, Tag] = {}
        self._counter = 0

    def clear(self) -> None:
        """Drop every mapping and restart numbering at zero."""
        self._refs.clear()
        self._counter = 0

    def set(self, ref: str, node: Tag) -> None:
        self._refs[ref] = node

    def get(self, ref: str) -> Optional[Tag]:
        """Node for a token, or None when the token is unknown or was cleared."""
        return self._refs.get(ref)

    def generate_ref(self, node: Tag) -> str:
        """Issue the next token and map it to ``node``."""
        ref = f"{REF_PREFIX}{self._counter}"
        self._counter += 1
        self._refs[ref] = node
        return ref

    @property
    def counter(self) -> int:
        return self._counter

    def __len__(self) -> int:
        return len(self._refs)

    def __contains__(self, ref: object) -> bool:
        return ref in self._refs

    def __iter__(self) -> Iterator[str]:
        return iter(self._refs)

    def __repr__(self) -> str:
        return f"RefRegistry(refs={len(self._refs)}, next={self._counter})"
