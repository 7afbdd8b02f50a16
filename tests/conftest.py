"""
Shared fixtures for the pagesnap test suite.

Documents are built from inline HTML; a fragment is wrapped in a minimal
``<html>``/``<body>`` shell so every test works against a full page.
"""

import pytest

from pagesnap import PageDocument, RefRegistry


def wrap(body: str, title: str = "Test Page") -> str:
    if body.lstrip().lower().startswith(("<html", "<!doctype")):
        return body
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


@pytest.fixture
def make_document():
    """Factory: ``make_document(body_html, **page_kwargs) -> PageDocument``."""
    def _make(body: str, **kwargs) -> PageDocument:
        return PageDocument.from_html(wrap(body), **kwargs)
    return _make


@pytest.fixture
def registry():
    return RefRegistry()
