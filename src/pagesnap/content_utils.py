"""Text helpers shared by the outline, content and extraction passes."""

import re
from typing import Iterable, List, Optional

from bs4 import Tag

from .host import ancestors, class_list, iter_descendants, tag_name, text_content

_WHITESPACE = re.compile(r"\s+")
_LANGUAGE_CLASS = re.compile(r"(?:language-|lang-)(\w+)", re.IGNORECASE)


def truncate(text: str, max_length: int) -> str:
    """Collapse whitespace, then cut to ``max_length`` with a trailing ``...``."""
    cleaned = _WHITESPACE.sub(" ", text or "").strip()
    if len(cleaned) <= max_length:
        return cleaned
    return cleaned[:max(max_length - 3, 0)] + "..."


def count_words(text: str) -> int:
    return len((text or "").split())


def clean_text_content(element: Tag, max_length: Optional[int] = None) -> str:
    text = _WHITESPACE.sub(" ", text_content(element)).strip()
    if max_length and len(text) > max_length:
        return text[:max_length - 3] + "..."
    return text


def count_child_elements(element: Tag, tag_names: Iterable[str]) -> int:
    """Elements with one of ``tag_names`` in the subtree, the element itself included."""
    tags = {t.lower() for t in tag_names}
    count = 1 if tag_name(element) in tags else 0
    return count + sum(1 for d in iter_descendants(element) if tag_name(d) in tags)


def list_items(element: Tag, max_items: int = 10, max_length: int = 100) -> List[str]:
    """Text of the first ``max_items`` <li> descendants, empty ones dropped."""
    items = []
    for li in element.find_all("li", limit=max_items):
        text = clean_text_content(li, max_length)
        if text:
            items.append(text)
    return items


def _language_from_classes(element: Tag) -> Optional[str]:
    match = _LANGUAGE_CLASS.search(" ".join(class_list(element)))
    return match.group(1).lower() if match else None


def detect_code_language(element: Tag) -> Optional[str]:
    """
    Language hint from a ``language-*``/``lang-*`` class on the element, its
    first <code> child, or its nearest <pre>/<code> ancestor.
    """
    language = _language_from_classes(element)
    if language:
        return language

    if tag_name(element) == "pre":
        code = element.find("code")
        if code is not None:
            language = _language_from_classes(code)
            if language:
                return language

    for ancestor in ancestors(element):
        if tag_name(ancestor) in ("pre", "code"):
            return _language_from_classes(ancestor)
    return None
