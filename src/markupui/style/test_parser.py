"""Tests for the inline style parser."""

import pytest

from markupui.errors import (
    InvalidStyleSizeError,
    InvalidStyleValueError,
    UnsupportedStylePropertyError,
)
from markupui.style import StyleParser


@pytest.fixture
def parser():
    return StyleParser()


def test_color_and_size(parser):
    """Text colour lands in Style, sizes in Anchor."""
    assert parser.parse("color: #fff; width: 20px") == {
        "Style": {"TextColor": "#ffffff"},
        "Anchor": {"Width": 20},
    }


def test_size_units(parser):
    """em counts 16 units and % counts 10."""
    result = parser.parse("width: 2em; height: 50%; top: 7")
    assert result["Anchor"] == {"Width": 32, "Height": 500, "Top": 7}


def test_margin_sides_map_to_anchor(parser):
    result = parser.parse("margin-top: 4px; margin-left: 8px")
    assert result == {"Anchor": {"Top": 4, "Left": 8}}


def test_margin_shorthand_is_ignored(parser):
    assert parser.parse("margin: 10px") == {}


@pytest.mark.parametrize(
    "value,expected",
    [
        ("5px", (5, 5, 5, 5)),
        ("1px 2px", (1, 2, 1, 2)),
        ("1px 2px 3px", (1, 2, 3, 2)),
        ("1px 2px 3px 4px", (1, 2, 3, 4)),
    ],
)
def test_padding_shorthand(parser, value, expected):
    """Padding follows CSS top/right/bottom/left order."""
    top, right, bottom, left = expected
    assert parser.parse(f"padding: {value}")["Padding"] == {
        "Left": left,
        "Top": top,
        "Right": right,
        "Bottom": bottom,
    }


def test_padding_with_too_many_values(parser):
    with pytest.raises(InvalidStyleValueError):
        parser.parse("padding: 1px 2px 3px 4px 5px")


def test_background_colour_and_url(parser):
    assert parser.parse("background: rgb(0, 0, 255)") == {"Background": "#0000FF"}
    assert parser.parse("background: url('bg.png')") == {"Background": "bg.png"}


def test_text_styles_accumulate(parser):
    result = parser.parse(
        "font-weight: bold; font-size: 18px; text-align: center; "
        "vertical-align: middle; text-transform: uppercase; text-decoration: underline"
    )
    assert result == {
        "Style": {
            "RenderBold": True,
            "FontSize": 18,
            "HorizontalAlignment": "Center",
            "VerticalAlignment": "Center",
            "RenderUppercase": True,
            "RenderUnderlined": True,
        }
    }


def test_display_none_hides(parser):
    assert parser.parse("display: none") == {"Visible": False}
    assert parser.parse("display: block") == {"Visible": True}


def test_variables_pass_through(parser):
    assert parser.parse("width: @Size; color: @Accent") == {
        "Anchor": {"Width": "@Size"},
        "Style": {"TextColor": "@Accent"},
    }


def test_empty_and_malformed_segments_are_skipped(parser):
    assert parser.parse(" ; color: #000 ;; nonsense ") == {"Style": {"TextColor": "#000000"}}


def test_property_names_are_case_insensitive(parser):
    assert parser.parse("WIDTH: 3px") == {"Anchor": {"Width": 3}}


def test_unsupported_property_raises(parser):
    with pytest.raises(UnsupportedStylePropertyError) as exc_info:
        parser.parse("width: 2px; float: left")
    assert exc_info.value.property_name == "float"


def test_unparseable_size_drops_only_that_declaration(parser):
    result = parser.parse("width: auto; height: 100vh; top: 4px; color: #fff")
    assert result == {"Anchor": {"Top": 4}, "Style": {"TextColor": "#ffffff"}}


def test_parse_size_rejects_non_lengths(parser):
    with pytest.raises(InvalidStyleSizeError) as exc_info:
        parser.parse_size("width", "wide")
    assert isinstance(exc_info.value, InvalidStyleValueError)


def test_invalid_alignment_raises(parser):
    with pytest.raises(InvalidStyleValueError):
        parser.parse("text-align: justify")


def test_supported_properties(parser):
    assert {"color", "padding", "margin-top"} <= parser.supported_properties
