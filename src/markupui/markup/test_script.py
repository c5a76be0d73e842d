"""Tests for the script block parser."""

import pytest

from markupui.components import Expression
from markupui.errors import InvalidVariableNameError, ScriptSyntaxError, UnterminatedLiteralError
from markupui.markup.script import ScriptParser, ScriptResult
from markupui.variables import VariableKind


@pytest.fixture
def parser():
    return ScriptParser()


def test_variable_kinds(parser):
    result = parser.parse(
        """
        @Title = "Welcome";
        @Count = 3
        @Ratio = 0.5;
        @Enabled = true;
        @Accent = #f0a;
        @Shade = rgb(0, 0, 0);
        @Width = (@Count * 10);
        """
    )

    kinds = {name: (v.value, v.kind) for name, v in result.variables.items()}
    assert kinds == {
        "Title": ("Welcome", VariableKind.STRING),
        "Count": ("3", VariableKind.NUMBER),
        "Ratio": ("0.5", VariableKind.NUMBER),
        "Enabled": ("true", VariableKind.BOOLEAN),
        "Accent": ("#ff00aa", VariableKind.COLOR),
        "Shade": ("#000000", VariableKind.COLOR),
        "Width": ("(@Count * 10)", VariableKind.LITERAL),
    }


def test_later_declarations_win(parser):
    result = parser.parse('@A = "one";\n@A = "two";')
    assert result.variables["A"].value == "two"


def test_comments_and_blank_lines_are_skipped(parser):
    result = parser.parse("// heading\n\n   // indented\n@A = 1;")
    assert list(result.variables) == ["A"]


def test_aliases(parser):
    result = parser.parse('$Menu = "../Menu.ui";')
    assert result.aliases == {"Menu": "../Menu.ui"}


def test_root_properties(parser):
    result = parser.parse('background = "#000";\nvisible = false;\nmaxWidth = 200;\nlayout = @Mode;')
    assert result.properties == {
        "Background": "#000",
        "Visible": False,
        "MaxWidth": 200,
        "Layout": Expression("@Mode"),
    }


def test_result_accumulates_across_blocks(parser):
    result = ScriptResult()
    parser.parse("@A = 1;", result)
    parser.parse("@B = 2;", result)
    assert list(result.variables) == ["A", "B"]


def test_invalid_variable_name(parser):
    with pytest.raises(InvalidVariableNameError) as exc_info:
        parser.parse("\n@1st = 2;")
    assert exc_info.value.name == "1st"
    assert exc_info.value.line_number == 2


def test_unterminated_literal(parser):
    with pytest.raises(UnterminatedLiteralError):
        parser.parse('@Title = "Welcome;')


def test_quote_inside_literal(parser):
    with pytest.raises(ScriptSyntaxError):
        parser.parse('@Title = "a"b";')


def test_line_without_declaration(parser):
    with pytest.raises(ScriptSyntaxError) as exc_info:
        parser.parse("just words")
    assert exc_info.value.line == "just words"


def test_missing_value(parser):
    with pytest.raises(ScriptSyntaxError):
        parser.parse("@A = ;")


def test_javascript_imports(parser):
    result = parser.parse_imports(
        'import Menu from "@/Menu.ui";\nimport Shared from "./Shared.ui"',
        ScriptResult(),
        root_dir="../../",
    )
    assert result.aliases == {"Menu": "../../Menu.ui", "Shared": "./Shared.ui"}
