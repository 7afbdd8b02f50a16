"""
Tests for the pagesnap.inspector module.

This module tests:
- Role computation (implicit, explicit, headings, landmarks)
- Interactivity and visibility predicates
- Accessible names and input attributes
- Meaningful class detection and CSS selector generation
"""

import pytest

from pagesnap.inspector import (
    Role,
    RoleCategory,
    element_states,
    generate_selector,
    generate_simple_selector,
    get_accessible_name,
    get_input_attributes,
    get_role,
    get_section_name,
    get_semantic_class,
    is_in_viewport,
    is_interactive,
    is_landmark,
    is_meaningful_class,
    is_visible,
    normalize_whitespace,
)
from pagesnap.snapshot import snapshot_interactive


# =============================================================================
# Roles
# =============================================================================

class TestGetRole:
    """Tests for get_role."""

    @pytest.mark.parametrize("markup,selector,expected", [
        ("<button>OK</button>", "button", "button"),
        ("<a href='/x'>x</a>", "a", "link"),
        ("<nav></nav>", "nav", "navigation"),
        ("<header></header>", "header", "banner"),
        ("<footer></footer>", "footer", "contentinfo"),
        ("<main></main>", "main", "main"),
        ("<aside></aside>", "aside", "complementary"),
        ("<form></form>", "form", "form"),
        ("<input type='checkbox'>", "input", "checkbox"),
        ("<input type='submit'>", "input", "button"),
        ("<input type='search'>", "input", "searchbox"),
        ("<input>", "input", "textbox"),
        ("<textarea></textarea>", "textarea", "textbox"),
        ("<select><option>a</option></select>", "select", "combobox"),
        ("<select multiple><option>a</option></select>", "select", "listbox"),
        ("<ul><li>a</li></ul>", "li", "listitem"),
        ("<img src='a.png' alt='Logo'>", "img", "img"),
    ])
    def test_implicit_roles(self, make_document, markup, selector, expected):
        """Test roles derived from the tag and its attributes."""
        document = make_document(markup)
        role = get_role(document.select_one(selector))

        assert role is not None
        assert role.name == expected

    @pytest.mark.parametrize("markup,selector", [
        ("<a>no href</a>", "a"),
        ("<input type='hidden'>", "input"),
        ("<section>unnamed</section>", "section"),
        ("<div>plain</div>", "div"),
        ("<span>plain</span>", "span"),
        ("<img src='spacer.gif' alt=''>", "img"),
        ("<nav role='presentation'></nav>", "nav"),
        ("<div role='none'></div>", "div"),
    ])
    def test_no_role(self, make_document, markup, selector):
        """Test nodes that carry no role."""
        document = make_document(markup)

        assert get_role(document.select_one(selector)) is None

    def test_heading_levels(self, make_document):
        """Test heading levels from tags and aria-level."""
        document = make_document(
            "<h3>Three</h3><div role='heading' aria-level='4'>Four</div><div role='heading'>Default</div>"
        )

        assert get_role(document.select_one("h3")) == Role("heading", 3)
        assert get_role(document.select_one("[aria-level]")) == Role("heading", 4)
        assert get_role(document.select("div")[1]) == Role("heading", 2)

    def test_explicit_role_wins(self, make_document):
        """Test that the first token of an explicit role overrides the tag."""
        document = make_document("<div role='button link'>Go</div>")

        assert get_role(document.select_one("div")).name == "button"

    def test_named_section_is_region(self, make_document):
        """Test that only labelled sections become region landmarks."""
        document = make_document("<section aria-label='News'>x</section>")
        role = get_role(document.select_one("section"))

        assert role.name == "region"
        assert role.is_landmark

    def test_role_category(self):
        """Test the closed role classification."""
        assert Role("navigation").category is RoleCategory.LANDMARK
        assert Role("heading", 1).category is RoleCategory.HEADING
        assert Role("button").category is RoleCategory.WIDGET
        assert Role("article").category is RoleCategory.SECTION
        assert Role("list").category is RoleCategory.LIST
        assert Role("cell").category is RoleCategory.TABLE
        assert Role("img").category is RoleCategory.MEDIA
        assert Role("separator").category is RoleCategory.OTHER
        assert str(Role("link")) == "link"

    def test_is_landmark(self, make_document):
        """Test landmark detection ignores containment."""
        document = make_document("<article><header>Post header</header></article>")

        assert is_landmark(document.select_one("header"))
        assert not is_landmark(document.select_one("article"))


# =============================================================================
# Interactivity and Visibility
# =============================================================================

class TestIsInteractive:
    """Tests for is_interactive."""

    @pytest.mark.parametrize("markup,selector,expected", [
        ("<button>x</button>", "button", True),
        ("<button disabled>x</button>", "button", True),
        ("<a href='#'>x</a>", "a", True),
        ("<a>x</a>", "a", False),
        ("<input>", "input", True),
        ("<input type='hidden'>", "input", False),
        ("<select></select>", "select", True),
        ("<details><summary>More</summary></details>", "summary", True),
        ("<div tabindex='0'>x</div>", "div", True),
        ("<div tabindex='-1'>x</div>", "div", False),
        ("<div tabindex='abc'>x</div>", "div", False),
        ("<div role='button'>x</div>", "div", True),
        ("<div role='tab'>x</div>", "div", True),
        ("<div contenteditable>x</div>", "div", True),
        ("<div contenteditable='false'>x</div>", "div", False),
        ("<div>x</div>", "div", False),
    ])
    def test_interactive(self, make_document, markup, selector, expected):
        """Test the interactivity predicate."""
        document = make_document(markup)

        assert is_interactive(document.select_one(selector)) is expected


class TestIsVisible:
    """Tests for is_visible."""

    @pytest.mark.parametrize("style", [
        "display:none",
        "display: none !important",
        "visibility:hidden",
        "visibility: collapse",
        "opacity:0",
        "opacity: 0.0",
    ])
    def test_hidden_by_inline_style(self, make_document, style):
        """Test inline styles that hide a node."""
        document = make_document(f"<p style='{style}'>x</p>")

        assert not is_visible(document.select_one("p"))

    def test_visible_by_default(self, make_document):
        """Test that an unstyled node is visible."""
        document = make_document("<p>x</p>")

        assert is_visible(document.select_one("p"))

    def test_hidden_attribute_and_ua_defaults(self, make_document):
        """Test the hidden attribute and user-agent hidden tags."""
        document = make_document("<p hidden>x</p><script>var a;</script><input type='hidden'>")

        assert not is_visible(document.select_one("p"))
        assert not is_visible(document.select_one("script"))
        assert not is_visible(document.select_one("input"))

    def test_stamp_wins_over_inline_style(self, make_document):
        """Test that a capture stamp takes priority over the style attribute."""
        document = make_document(
            "<p style='display:none' data-snap-style='block|visible|1'>a</p>"
            "<p data-snap-style='block|hidden|1'>b</p>"
        )
        first, second = document.select("p")

        assert is_visible(first)
        assert not is_visible(second)

    def test_check_ancestors(self, make_document):
        """Test that ancestors are consulted only when asked."""
        document = make_document("<div style='display:none'><span>x</span></div>")
        span = document.select_one("span")

        assert is_visible(span)
        assert not is_visible(span, check_ancestors=True)

    def test_zero_size_is_not_hidden(self, make_document):
        """Test that empty geometry does not make a node invisible."""
        document = make_document("<p data-snap-bbox='0,0,0,0'>x</p>")

        assert is_visible(document.select_one("p"))


class TestIsInViewport:
    """Tests for is_in_viewport."""

    def test_without_geometry(self, make_document):
        """Test that static trees give no verdict."""
        document = make_document("<p>x</p>")

        assert is_in_viewport(document.select_one("p"), document) is None

    def test_with_geometry(self, make_document):
        """Test stamped geometry against the viewport."""
        document = make_document(
            "<p id='in' data-snap-bbox='10,10,100,20'>in</p>"
            "<p id='below' data-snap-bbox='0,2000,100,20'>below</p>",
            viewport=(800, 600),
        )

        assert is_in_viewport(document.select_one("#in"), document) is True
        assert is_in_viewport(document.select_one("#below"), document) is False


# =============================================================================
# Names and Attributes
# =============================================================================

class TestAccessibleName:
    """Tests for get_accessible_name."""

    def test_aria_label_wins(self, make_document):
        """Test that aria-label takes priority over content."""
        document = make_document("<button aria-label='Close dialog'>X</button>")

        assert get_accessible_name(document.select_one("button")) == "Close dialog"

    def test_aria_labelledby(self, make_document):
        """Test names assembled from referenced elements."""
        document = make_document(
            "<span id='first'>Billing</span><span id='second'>address</span>"
            "<input aria-labelledby='first second'>"
        )

        assert get_accessible_name(document.select_one("input")) == "Billing address"

    def test_label_for(self, make_document):
        """Test a label associated by id."""
        document = make_document("<label for='email'>Email  address</label><input id='email'>")

        assert get_accessible_name(document.select_one("input")) == "Email address"

    def test_wrapping_label(self, make_document):
        """Test a label wrapping its control."""
        document = make_document("<label>Remember me <input type='checkbox'></label>")

        assert get_accessible_name(document.select_one("input")) == "Remember me"

    def test_content_and_fallbacks(self, make_document):
        """Test text content, alt, value and placeholder fallbacks."""
        document = make_document(
            "<button>  Save\n changes </button>"
            "<img src='a.png' alt='Company logo'>"
            "<input type='submit'>"
            "<input type='button' value='Preview'>"
            "<input placeholder='Search...'>"
        )
        inputs = document.select("input")

        assert get_accessible_name(document.select_one("button")) == "Save changes"
        assert get_accessible_name(document.select_one("img")) == "Company logo"
        assert get_accessible_name(inputs[0]) == "Submit"
        assert get_accessible_name(inputs[1]) == "Preview"
        assert get_accessible_name(inputs[2]) == "Search..."

    def test_never_none(self, make_document):
        """Test that unnamed nodes give an empty string."""
        document = make_document("<div></div>")

        assert get_accessible_name(document.select_one("div")) == ""

    def test_section_name(self, make_document):
        """Test the container naming order."""
        document = make_document(
            "<nav aria-label='Primary'></nav>"
            "<article><h2>Release notes</h2></article>"
            "<div id='sidebar'></div>"
        )

        assert get_section_name(document.select_one("nav")) == "Primary"
        assert get_section_name(document.select_one("article")) == "Release notes"
        assert get_section_name(document.select_one("div")) == "sidebar"


class TestInputAttributes:
    """Tests for get_input_attributes and element_states."""

    def test_input_fragment(self, make_document):
        """Test the compact attribute fragment for an input."""
        document = make_document("<input type='email' required placeholder='you@example.com'>")

        assert get_input_attributes(document.select_one("input")) == (
            '[type=email required placeholder="you@example.com"]'
        )

    def test_password_value_not_shown(self, make_document):
        """Test that password values never appear."""
        document = make_document("<input type='password' value='secret'>")

        assert get_input_attributes(document.select_one("input")) == "[type=password]"

    def test_select_value(self, make_document):
        """Test the selected option of a select."""
        document = make_document("<select><option>One</option><option selected>Two</option></select>")

        assert get_input_attributes(document.select_one("select")) == '[value="Two"]'

    def test_non_control(self, make_document):
        """Test that other elements give nothing."""
        document = make_document("<div>x</div>")

        assert get_input_attributes(document.select_one("div")) == ""

    def test_states(self, make_document):
        """Test state extraction."""
        document = make_document(
            "<input type='checkbox' checked disabled>"
            "<button aria-expanded='true'>Menu</button>"
            "<div role='tab' aria-selected='true'>Tab</div>"
        )

        assert element_states(document.select_one("input")) == ["disabled", "checked"]
        assert element_states(document.select_one("button")) == ["expanded"]
        assert element_states(document.select_one("div")) == ["selected"]


# =============================================================================
# Classes and Selectors
# =============================================================================

class TestMeaningfulClass:
    """Tests for is_meaningful_class and get_semantic_class."""

    @pytest.mark.parametrize("cls", ["product-card", "post", "card__title", "sidebar", "hero-banner"])
    def test_meaningful(self, cls):
        """Test classes that describe content."""
        assert is_meaningful_class(cls)

    @pytest.mark.parametrize("cls", [
        "ab", "flex", "p-4", "text-lg", "md:flex", "w-[200px]", "w-1/2",
        "container", "css-1a2b3c", "sc-bdVaJa", "a1b2c3d4", "abc123def",
        "Button_root__a1B2c",
    ])
    def test_not_meaningful(self, cls):
        """Test utility, generated and variant classes."""
        assert not is_meaningful_class(cls)

    def test_first_meaningful_class(self, make_document):
        """Test that the first meaningful class is picked."""
        document = make_document("<div class='flex p-4 product-card featured'></div>")

        assert get_semantic_class(document.select_one("div")) == "product-card"


class TestGenerateSelector:
    """Tests for generate_selector and generate_simple_selector."""

    def test_unique_id(self, make_document):
        """Test that a unique id is used directly."""
        document = make_document("<button id='save'>Save</button>")
        button = document.select_one("button")

        assert generate_selector(button, document) == "#save"
        assert generate_selector(button) == "#save"

    def test_duplicate_id_falls_through(self, make_document):
        """Test that a repeated id is not trusted."""
        document = make_document("<div><p id='dup'>a</p></div><div><p id='dup'>b</p></div>")
        second = document.select("p")[1]

        assert generate_selector(second, document) == "div:nth-of-type(2) > p"

    def test_unique_name(self, make_document):
        """Test form controls identified by name."""
        document = make_document("<form><input name='q'></form>")

        assert generate_selector(document.select_one("input"), document) == 'input[name="q"]'

    def test_unique_classes(self, make_document):
        """Test a unique class pair."""
        document = make_document("<a class='btn primary' href='#'>a</a><a class='btn' href='#'>b</a>")

        assert generate_selector(document.select_one("a"), document) == "a.btn.primary"

    def test_nth_of_type_path(self, make_document):
        """Test the positional fallback."""
        document = make_document("<ul><li>a</li><li>b</li></ul>")
        second = document.select("li")[1]

        assert generate_selector(second, document) == "ul > li:nth-of-type(2)"

    def test_identical_siblings_get_distinct_positions(self, make_document):
        """Test that siblings with identical markup are told apart."""
        document = make_document("<div><button>OK</button><button>OK</button></div>")
        first, second = document.select("button")

        assert generate_selector(first, document) == "div > button:nth-of-type(1)"
        assert generate_selector(second, document) == "div > button:nth-of-type(2)"

    def test_ref_selectors_resolve_to_registered_nodes(self, make_document, registry):
        """Test that every ref selector finds exactly its own element."""
        document = make_document(
            "<div><button>OK</button><button>OK</button></div>"
            "<ul><li><a href='#'>x</a></li><li><a href='#'>x</a></li></ul>"
        )

        result = snapshot_interactive(document, registry)

        assert len(result.refs) == 4
        for ref, info in result.refs.items():
            matches = document.select(info.selector)
            assert len(matches) == 1
            assert matches[0] is registry.get(ref)

    def test_body_and_html(self, make_document):
        """Test that document roots name themselves."""
        document = make_document("<p>x</p>")

        assert generate_selector(document.body) == "body"

    def test_simple_selector(self, make_document):
        """Test the degraded selector form."""
        document = make_document("<div id='main'></div><span class='badge new'></span><em></em>")

        assert generate_simple_selector(document.select_one("div")) == "div#main"
        assert generate_simple_selector(document.select_one("span")) == "span.badge"
        assert generate_simple_selector(document.select_one("em")) == "em"


def test_normalize_whitespace():
    """Test whitespace collapsing."""
    assert normalize_whitespace("  a \n\t b  ") == "a b"
    assert normalize_whitespace(None) == ""
