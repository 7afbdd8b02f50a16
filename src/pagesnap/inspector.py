"""
Node Inspector

Pure, total functions describing a single node: semantic role, accessible
name, visibility, interactivity, input attributes, states and CSS selectors.

Role computation looks only at the node's own tag and attributes. A
``<header>`` inside an ``<article>`` is still a banner; landmark containment
is left to the renderers.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from .host import (
    PageDocument,
    ancestors,
    bounding_box,
    class_list,
    computed_style,
    element_children,
    get_attr,
    has_attr,
    owner_soup,
    parent_element,
    tag_name,
    text_content,
)

logger = logging.getLogger(__name__)


_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


# =============================================================================
# Roles
# =============================================================================

class RoleCategory(Enum):
    """Closed classification renderers match on instead of role strings."""
    LANDMARK = "landmark"
    HEADING = "heading"
    WIDGET = "widget"
    SECTION = "section"
    LIST = "list"
    TABLE = "table"
    MEDIA = "media"
    OTHER = "other"


LANDMARK_ROLES = frozenset({
    "banner", "navigation", "main", "complementary",
    "contentinfo", "search", "region", "form",
})

# ARIA roles that make any element interactive
INTERACTIVE_ROLES = frozenset({
    "button", "link", "checkbox", "radio", "switch", "textbox", "searchbox",
    "combobox", "listbox", "option", "menuitem", "menuitemcheckbox",
    "menuitemradio", "tab", "slider", "spinbutton", "treeitem", "scrollbar",
})

# Roles whose accessible name may come from their text content
NAME_FROM_CONTENT_ROLES = frozenset({
    "button", "link", "heading", "checkbox", "radio", "switch", "tab",
    "menuitem", "menuitemcheckbox", "menuitemradio", "option", "treeitem",
    "cell", "columnheader", "rowheader", "listitem", "tooltip", "row",
})

_SECTION_ROLES = frozenset({"article", "dialog", "group", "figure", "blockquote", "alertdialog"})
_LIST_ROLES = frozenset({"list", "listitem", "menu", "menubar", "tablist", "tree"})
_TABLE_ROLES = frozenset({"table", "grid", "row", "cell", "columnheader", "rowheader", "rowgroup"})
_MEDIA_ROLES = frozenset({"img", "figure"})


@dataclass(frozen=True)
class Role:
    """Semantic role of a node. Headings carry their level."""
    name: str
    level: Optional[int] = None

    @property
    def category(self) -> RoleCategory:
        if self.name in LANDMARK_ROLES:
            return RoleCategory.LANDMARK
        if self.name == "heading":
            return RoleCategory.HEADING
        if self.name in INTERACTIVE_ROLES:
            return RoleCategory.WIDGET
        if self.name in _SECTION_ROLES:
            return RoleCategory.SECTION
        if self.name in _LIST_ROLES:
            return RoleCategory.LIST
        if self.name in _TABLE_ROLES:
            return RoleCategory.TABLE
        if self.name in _MEDIA_ROLES:
            return RoleCategory.MEDIA
        return RoleCategory.OTHER

    @property
    def is_landmark(self) -> bool:
        return self.category is RoleCategory.LANDMARK

    @property
    def is_heading(self) -> bool:
        return self.category is RoleCategory.HEADING

    def __str__(self) -> str:
        return self.name


_HEADING_TAG = re.compile(r"^h([1-6])$")

# Tag -> implicit role, for tags whose role needs no attribute inspection
_IMPLICIT_ROLES = {
    "button": "button",
    "summary": "button",
    "nav": "navigation",
    "main": "main",
    "header": "banner",
    "footer": "contentinfo",
    "aside": "complementary",
    "form": "form",
    "search": "search",
    "article": "article",
    "dialog": "dialog",
    "ul": "list",
    "ol": "list",
    "menu": "list",
    "li": "listitem",
    "table": "table",
    "thead": "rowgroup",
    "tbody": "rowgroup",
    "tfoot": "rowgroup",
    "tr": "row",
    "td": "cell",
    "th": "columnheader",
    "textarea": "textbox",
    "option": "option",
    "fieldset": "group",
    "details": "group",
    "figure": "figure",
    "hr": "separator",
    "progress": "progressbar",
    "meter": "meter",
    "blockquote": "blockquote",
    "dl": "list",
}

# input[type] -> role
_INPUT_ROLES = {
    "button": "button",
    "submit": "button",
    "reset": "button",
    "image": "button",
    "file": "button",
    "checkbox": "checkbox",
    "radio": "radio",
    "range": "slider",
    "number": "spinbutton",
    "search": "searchbox",
}

_NO_ROLE = frozenset({"presentation", "none", "generic"})


def _heading_level(node: Tag) -> Optional[int]:
    match = _HEADING_TAG.match(tag_name(node))
    if match:
        return int(match.group(1))
    level = get_attr(node, "aria-level")
    if level and level.strip().isdigit():
        return max(1, min(int(level.strip()), 6))
    return 2


def get_role(node: Tag) -> Optional[Role]:
    """
    Semantic role of a node, or None when it has none.

    An explicit ``role`` attribute wins over the tag-derived role; only its
    first token is used. ``presentation``/``none`` remove the role.
    """
    explicit = (get_attr(node, "role") or "").strip().lower()
    if explicit:
        first = explicit.split()[0]
        if first in _NO_ROLE:
            return None
        if first == "heading":
            return Role("heading", _heading_level(node))
        return Role(first)

    name = tag_name(node)

    if _HEADING_TAG.match(name):
        return Role("heading", _heading_level(node))

    if name in ("a", "area"):
        return Role("link") if has_attr(node, "href") else None

    if name == "input":
        input_type = (get_attr(node, "type") or "text").strip().lower()
        if input_type == "hidden":
            return None
        if input_type in _INPUT_ROLES:
            return Role(_INPUT_ROLES[input_type])
        if has_attr(node, "list"):
            return Role("combobox")
        return Role("textbox")

    if name == "select":
        size = (get_attr(node, "size") or "").strip()
        if has_attr(node, "multiple") or (size.isdigit() and int(size) > 1):
            return Role("listbox")
        return Role("combobox")

    if name == "section":
        # Only a named section is a region landmark
        if get_attr(node, "aria-label") or get_attr(node, "aria-labelledby") or get_attr(node, "title"):
            return Role("region")
        return None

    if name == "img":
        alt = get_attr(node, "alt")
        if alt is not None and not alt.strip():
            return None
        return Role("img")

    implicit = _IMPLICIT_ROLES.get(name)
    return Role(implicit) if implicit else None


def is_landmark(node: Tag) -> bool:
    role = get_role(node)
    return role is not None and role.is_landmark


# =============================================================================
# Interactivity and Visibility
# =============================================================================

def _tab_index(node: Tag) -> Optional[int]:
    value = get_attr(node, "tabindex")
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def is_interactive(node: Tag) -> bool:
    """
    True for native controls, explicit interactive ARIA roles, and anything
    with a non-negative tab index. Disabled controls still count.
    """
    name = tag_name(node)

    if name in ("button", "select", "textarea", "summary"):
        return True
    if name in ("a", "area") and has_attr(node, "href"):
        return True
    if name == "input":
        return (get_attr(node, "type") or "").strip().lower() != "hidden"
    if (get_attr(node, "contenteditable") or "").lower() in ("", "true") and has_attr(node, "contenteditable"):
        return True

    explicit = (get_attr(node, "role") or "").strip().lower()
    if explicit and explicit.split()[0] in INTERACTIVE_ROLES:
        return True

    tab_index = _tab_index(node)
    return tab_index is not None and tab_index >= 0


def is_visible(node: Tag, check_ancestors: bool = False) -> bool:
    """
    Whether the node is rendered, judged from computed style only.

    Zero-size geometry does not make a node invisible.
    """
    try:
        if computed_style(node).hidden:
            return False
        if check_ancestors:
            for ancestor in ancestors(node):
                if computed_style(ancestor).hidden:
                    return False
    except (AttributeError, TypeError) as e:
        logger.debug(f"Visibility check failed for <{tag_name(node)}>: {e}")
        return False
    return True


def is_in_viewport(node: Tag, document: PageDocument) -> Optional[bool]:
    """None when the node has no geometry to judge by."""
    result = bounding_box(node)
    if not result.ok or result.box is None:
        return None
    return result.box.intersects_viewport(document.viewport_width, document.viewport_height)


def element_states(node: Tag) -> List[str]:
    states = []
    if has_attr(node, "disabled") or get_attr(node, "aria-disabled") == "true":
        states.append("disabled")
    if has_attr(node, "checked") or get_attr(node, "aria-checked") == "true":
        states.append("checked")
    if get_attr(node, "aria-expanded") == "true":
        states.append("expanded")
    if get_attr(node, "aria-selected") == "true" or (tag_name(node) == "option" and has_attr(node, "selected")):
        states.append("selected")
    return states


# =============================================================================
# Names
# =============================================================================

def _labelled_by_text(node: Tag) -> str:
    ids = (get_attr(node, "aria-labelledby") or "").split()
    soup = owner_soup(node)
    if not ids or soup is None:
        return ""
    texts = []
    for label_id in ids:
        target = soup.find(id=label_id)
        if target is not None:
            texts.append(text_content(target))
    return normalize_whitespace(" ".join(texts))


def _associated_label_text(node: Tag) -> str:
    if tag_name(node) not in ("input", "select", "textarea", "meter", "progress"):
        return ""

    element_id = get_attr(node, "id")
    soup = owner_soup(node)
    if element_id and soup is not None:
        label = soup.find("label", attrs={"for": element_id})
        if label is not None:
            text = normalize_whitespace(text_content(label))
            if text:
                return text

    for ancestor in ancestors(node):
        if tag_name(ancestor) == "label":
            return normalize_whitespace(text_content(ancestor))
    return ""


def get_accessible_name(node: Tag) -> str:
    """
    Best-effort label for a node. Never None.

    Priority: aria-label, aria-labelledby, associated <label>, alt for
    images, value for button-like inputs, text content (for roles named by
    their content), then placeholder, title and alt.
    """
    try:
        name = normalize_whitespace(get_attr(node, "aria-label") or "")
        if name:
            return name

        name = _labelled_by_text(node)
        if name:
            return name

        name = _associated_label_text(node)
        if name:
            return name

        tag = tag_name(node)
        input_type = (get_attr(node, "type") or "").lower()

        if tag in ("img", "area") or (tag == "input" and input_type == "image"):
            name = normalize_whitespace(get_attr(node, "alt") or "")
            if name:
                return name

        if tag == "input" and input_type in ("button", "submit", "reset"):
            value = normalize_whitespace(get_attr(node, "value") or "")
            if value:
                return value
            if input_type in ("submit", "reset"):
                return input_type.capitalize()

        role = get_role(node)
        if tag not in ("input", "select", "textarea") and role is not None and role.name in NAME_FROM_CONTENT_ROLES:
            name = normalize_whitespace(text_content(node))
            if name:
                return name

        for attribute in ("placeholder", "title", "alt"):
            name = normalize_whitespace(get_attr(node, attribute) or "")
            if name:
                return name
    except (AttributeError, TypeError) as e:
        logger.debug(f"Accessible name lookup failed for <{tag_name(node)}>: {e}")
    return ""


def get_section_name(node: Tag) -> str:
    """Label for a container: aria-label, aria-labelledby, first heading, then id."""
    name = normalize_whitespace(get_attr(node, "aria-label") or "")
    if name:
        return name

    name = _labelled_by_text(node)
    if name:
        return name

    heading = node.find(re.compile(r"^h[1-6]$"))
    if heading is not None:
        name = normalize_whitespace(text_content(heading))
        if name:
            return name

    return get_attr(node, "id") or ""


def get_input_attributes(node: Tag) -> str:
    """
    Compact ``[type=email required ...]`` fragment for form controls.

    Empty for everything else.
    """
    tag = tag_name(node)
    if tag not in ("input", "select", "textarea"):
        return ""

    parts = []
    if tag == "input":
        parts.append(f"type={(get_attr(node, 'type') or 'text').lower()}")
    if has_attr(node, "required") or get_attr(node, "aria-required") == "true":
        parts.append("required")
    if has_attr(node, "readonly"):
        parts.append("readonly")
    if tag == "select" and has_attr(node, "multiple"):
        parts.append("multiple")

    placeholder = normalize_whitespace(get_attr(node, "placeholder") or "")
    if placeholder:
        parts.append(f'placeholder="{placeholder[:30]}"')

    if tag == "select":
        selected = node.find("option", selected=True) or node.find("option")
        if selected is not None:
            value = normalize_whitespace(text_content(selected))
            if value:
                parts.append(f'value="{value[:30]}"')
    elif tag == "input" and (get_attr(node, "type") or "text").lower() not in ("password", "checkbox", "radio"):
        value = normalize_whitespace(get_attr(node, "value") or "")
        if value:
            parts.append(f'value="{value[:30]}"')

    return f"[{' '.join(parts)}]" if parts else ""


# =============================================================================
# Classes and Selectors
# =============================================================================

# Utility-framework prefixes (Tailwind, Bootstrap, ...) that say nothing about meaning
_UTILITY_PREFIXES = (
    "flex", "grid", "col-", "row-", "gap-", "p-", "px-", "py-", "pt-", "pb-", "pl-", "pr-",
    "m-", "mx-", "my-", "mt-", "mb-", "ml-", "mr-", "w-", "h-", "min-", "max-",
    "text-", "font-", "bg-", "border", "rounded", "shadow", "d-", "justify-",
    "items-", "align-", "self-", "order-", "z-", "top-", "left-", "right-",
    "bottom-", "inset-", "overflow", "opacity-", "leading-", "tracking-",
    "space-", "divide-", "ring-", "transition", "duration-", "ease-", "cursor-",
    "float-", "clear", "sr-only", "visually-hidden", "is-", "has-", "js-",
)
_UTILITY_WORDS = frozenset({
    "container", "wrapper", "inner", "outer", "clearfix", "row", "col",
    "hidden", "block", "inline", "relative", "absolute", "fixed", "sticky",
    "static", "active", "show", "fade", "visible", "invisible", "truncate",
    "uppercase", "lowercase", "capitalize", "italic", "bold", "center",
})
_HASH_LIKE = re.compile(
    r"^(css|sc|jsx|svelte|emotion|styled|chakra|mui|makeStyles)-[a-zA-Z0-9_-]+$"
    r"|^[a-f0-9]{6,}$"
    r"|__(?=[a-zA-Z]*[0-9])[a-zA-Z0-9]{5,}$"
)


def is_meaningful_class(cls: str) -> bool:
    """
    Whether a class name says something about content.

    Rejects short tokens, hash-like generated names, responsive/state
    variants (``md:flex``) and utility-framework classes.
    """
    if len(cls) < 3 or ":" in cls or "[" in cls or "/" in cls:
        return False
    lowered = cls.lower()
    if lowered in _UTILITY_WORDS or lowered.startswith(_UTILITY_PREFIXES):
        return False
    if _HASH_LIKE.search(cls):
        return False
    if sum(ch.isdigit() for ch in cls) >= 3:
        return False
    return True


def get_semantic_class(node: Tag) -> Optional[str]:
    """First meaningful class of the node, if any."""
    for cls in class_list(node):
        if is_meaningful_class(cls):
            return cls
    return None


_SIMPLE_IDENT = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")


def _css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _count_matches(soup, selector: str) -> int:
    try:
        return len(soup.select(selector, limit=2))
    except SelectorSyntaxError as e:
        logger.debug(f"Selector {selector!r} could not be evaluated: {e}")
        return 0


def generate_selector(node: Tag, document: Optional[PageDocument] = None) -> str:
    """
    CSS selector that uniquely identifies the node where possible.

    Tries a unique id, then a unique name for form controls, then a unique
    class pair, then falls back to an ``nth-of-type`` path of up to five
    levels.
    """
    tag = tag_name(node)
    if tag in ("html", "body"):
        return tag

    soup = document.soup if document is not None else owner_soup(node)

    element_id = get_attr(node, "id")
    if element_id and _SIMPLE_IDENT.match(element_id):
        if document is not None:
            unique = document.id_count(element_id) == 1
        else:
            unique = soup is not None and _count_matches(soup, f"#{element_id}") == 1
        if unique:
            return f"#{element_id}"

    name = get_attr(node, "name")
    if name and tag in ("input", "select", "textarea"):
        selector = f'{tag}[name="{_css_string(name)}"]'
        if document is not None:
            unique = document.name_count(name) == 1
        else:
            unique = soup is not None and _count_matches(soup, selector) == 1
        if unique:
            return selector

    classes = [c for c in class_list(node) if _SIMPLE_IDENT.match(c)]
    if classes and soup is not None:
        selector = tag + "." + ".".join(classes[:2])
        if _count_matches(soup, selector) == 1:
            return selector

    path = []
    current = node
    while current is not None and tag_name(current) not in ("html", "body") and len(path) < 5:
        segment = tag_name(current)
        parent = parent_element(current)
        if parent is not None:
            same_tag = [c for c in element_children(parent) if tag_name(c) == segment]
            if len(same_tag) > 1:
                position = next(i for i, sibling in enumerate(same_tag) if sibling is current)
                segment += f":nth-of-type({position + 1})"
        path.insert(0, segment)
        current = parent
    return " > ".join(path) or tag


def generate_simple_selector(node: Tag) -> str:
    """Cheap selector used when the full one cannot be trusted."""
    tag = tag_name(node)
    element_id = get_attr(node, "id")
    if element_id and _SIMPLE_IDENT.match(element_id):
        return f"{tag}#{element_id}"
    classes = [c for c in class_list(node) if _SIMPLE_IDENT.match(c)]
    if classes:
        return f"{tag}.{classes[0]}"
    return tag

