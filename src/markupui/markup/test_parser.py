"""Tests for the markup parser."""

import pytest

from markupui.components import ComponentResolver, Expression, Label, TagRegistry
from markupui.errors import (
    MarkupSyntaxError,
    ReservedIdError,
    UnsupportedStylePropertyError,
    UnsupportedTagError,
)
from markupui.markup import MarkupParser

TITLE_DOCUMENT = """
<script type="text/customui">
    @Title = "X";
</script>
<h1>@Title</h1>
"""


@pytest.fixture
def parser():
    return MarkupParser()


def test_group_with_label(parser):
    """A div with a label compiles to Group > Label carrying the text."""
    template = parser.parse('<div id="c"><label id="t">Hello</label></div>')

    root = template.root
    assert root.name == "Group"
    assert root.id == "C"
    assert len(root.children) == 1
    assert root.children[0].name == "Label"
    assert root.children[0].text == "Hello"
    assert template.build() == 'Group #C {\n  Label #T {\n    Text: "Hello";\n  }\n}'


def test_variable_in_heading_text(parser):
    template = parser.parse(TITLE_DOCUMENT)
    heading = template.root

    assert heading.name == "@MarkupH1"
    assert heading.text == "X"
    assert template.get_variables() == {"Title": "X"}


def test_override_wins_over_script(parser):
    template = parser.parse(TITLE_DOCUMENT, {"Title": "Y"})
    assert template.root.text == "Y"
    assert template.get_variable("@Title") == "Y"


def test_override_with_sigil(parser):
    template = parser.parse("<p>@Name</p>", {"@Name": "Ann"})
    assert template.root.text == "Ann"


def test_unknown_variable_reference_is_kept(parser):
    assert parser.parse("<p>@Missing</p>").root.text == "@Missing"


def test_variables_in_attributes_and_style(parser):
    template = parser.parse(
        """
        <script type="text/customui">
            @Accent = #0f0;
            @Size = 40;
        </script>
        <div style="background: @Accent; width: @Size"></div>
        """
    )
    root = template.root
    assert root.get_property("Background") == "#00ff00"
    assert root.get_property("Anchor") == {"Width": 40}


def test_text_in_group_becomes_label(parser):
    root = parser.parse("<div>Loose text</div>").root
    assert isinstance(root.children[0], Label)
    assert root.children[0].text == "Loose text"


def test_text_whitespace_is_collapsed(parser):
    assert parser.parse("<span>\n  a\n   b  </span>").root.text == "a b"


def test_text_beside_child_elements_is_ignored(parser):
    root = parser.parse("<div>ignored<span>kept</span></div>").root
    assert len(root.children) == 1
    assert root.children[0].text == "kept"


def test_multiple_roots(parser):
    template = parser.parse("<div id='a'></div>\n<div id='b'></div>")
    assert [r.id for r in template.roots] == ["A", "B"]
    assert template.build() == "Group #A {\n}\n\nGroup #B {\n}"


def test_empty_document_has_one_group(parser):
    template = parser.parse("   ")
    assert len(template.roots) == 1
    assert template.root.name == "Group"


def test_nested_same_tag(parser):
    root = parser.parse("<div><div><div></div></div><span>x</span></div>").root
    assert [c.name for c in root.children] == ["Group", "Label"]
    assert root.children[0].children[0].name == "Group"


def test_unclosed_element_is_self_closing(parser):
    """Everything after an unclosed tag becomes its sibling."""
    template = parser.parse("<div id='a'><span>x</span>")
    assert [r.name for r in template.roots] == ["Group", "Label"]
    assert template.roots[0].children == []


def test_orphan_closing_tag(parser):
    with pytest.raises(MarkupSyntaxError):
        parser.parse("<div></div></span>")


def test_binding_attributes_become_expressions(parser):
    root = parser.parse('<span :text="@Title" :visible="@Shown"></span>').root
    assert root.get_property("Text") == Expression("@Title")
    assert root.get_property("Visible") == Expression("@Shown")


def test_visibility_attributes(parser):
    assert parser.parse('<div m-show="false"></div>').root.get_property("Visible") is False
    assert parser.parse('<div m-if="@Open"></div>').root.get_property("Visible") == Expression(
        "@Open"
    )


def test_style_attribute(parser):
    root = parser.parse('<span style="color: #fff; font-weight: bold">x</span>').root
    assert root.styles == {"TextColor": "#ffffff", "RenderBold": True}


def test_viewport_and_auto_sizes_are_dropped(parser):
    template = parser.parse('<div id="a" style="width: auto; height: 100vh"></div>')
    assert template.build() == "Group #A {\n}"


def test_unsupported_style_property(parser):
    with pytest.raises(UnsupportedStylePropertyError):
        parser.parse('<div style="float: left"></div>')


def test_denylisted_tag_at_any_depth(parser):
    with pytest.raises(UnsupportedTagError):
        parser.parse("<div><section><div><table></table></div></section></div>")


def test_reserved_id(parser):
    with pytest.raises(ReservedIdError):
        parser.parse('<div id="markup-root"></div>')


def test_select_options(parser):
    root = parser.parse(
        '<select value="b"><option value="a">A</option><option>b</option></select>'
    ).root
    assert root.name == "$C.@DropdownBox"
    assert root.get_property("Options") == ["a", "b"]
    assert root.get_property("Value") == "b"
    assert root.children == []


def test_script_properties_apply_to_first_root(parser):
    template = parser.parse(
        """
        <script type="text/customui">
            background = "#000";
        </script>
        <div id="a"></div><div id="b"></div>
        """
    )
    assert template.roots[0].get_property("Background") == "#000"
    assert template.roots[1].get_property("Background") is None


def test_alias_declaration_and_prefixed_tag(parser):
    template = parser.parse(
        """
        <script type="text/customui">
            $Menu = "../Menu.ui";
        </script>
        <Menu.Entry text="Play" />
        """
    )
    assert template.root.name == "$Menu.@Entry"
    assert template.aliases["Menu"] == "../Menu.ui"
    assert template.build().startswith('$Menu = "../Menu.ui";\n\n$Menu.@Entry {')


def test_javascript_imports_use_root_dir():
    parser = MarkupParser(root_dir="../../")
    template = parser.parse(
        """
        <script type="text/javascript">
            import Menu from "@/Menu.ui";
        </script>
        <Menu.Entry/>
        """
    )
    assert template.aliases["Menu"] == "../../Menu.ui"


def test_builtin_alias_cannot_be_redeclared():
    parser = MarkupParser(common_alias_path="../Shared.ui")
    template = parser.parse(
        """
        <script type="text/customui">
            $C = "../Elsewhere.ui";
        </script>
        <C.Title/>
        """
    )
    assert template.aliases["C"] == "../Shared.ui"
    assert template.build().startswith('$C = "../Shared.ui";')


def test_unterminated_script_block(parser):
    with pytest.raises(MarkupSyntaxError):
        parser.parse('<script type="text/customui">@A = 1;<div></div>')


def test_comments_are_ignored(parser):
    template = parser.parse("<!-- <table></table> --><div></div>")
    assert template.root.name == "Group"


def test_custom_tag_registry():
    registry = TagRegistry()
    registry.register("card", lambda attributes: Label(attributes.get("title")))
    parser = MarkupParser(ComponentResolver(registry))

    root = parser.parse('<card title="Hello"></card>').root
    assert root.name == "Label"
    assert root.text == "Hello"


def test_minimal_output():
    template = MarkupParser(minimal=True).parse("<div id='a'><span>x</span></div><div></div>")
    assert template.build() == 'Group #A {\nLabel {\nText: "x";\n}\n}\nGroup {\n}'
