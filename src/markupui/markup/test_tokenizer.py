"""Tests for the markup tokenizer and attribute parser."""

import pytest

from markupui.errors import MarkupSyntaxError
from markupui.markup.attributes import parse_attributes
from markupui.markup.tokenizer import EndTag, StartTag, Text, normalize_prefix, strip_comments, tokenize


def test_tokenize_simple_document():
    tokens = tokenize('<div id="a">Hi</div>')

    assert [type(t) for t in tokens] == [StartTag, Text, EndTag]
    start = tokens[0]
    assert start.name == "div"
    assert start.attributes == 'id="a"'
    assert not start.self_closing
    assert tokens[1].content == "Hi"
    assert tokens[2].name == "div"


def test_tag_names_are_lowercased_but_original_is_kept():
    start = tokenize("<ProgressBar/>")[0]
    assert start.name == "progressbar"
    assert start.original == "ProgressBar"
    assert start.self_closing
    assert start.is_void


def test_void_tags():
    assert tokenize('<input type="text">')[0].is_void
    assert not tokenize("<div>")[0].is_void


@pytest.mark.parametrize("markup", ["<C.TextButton/>", "<$C.TextButton/>"])
def test_alias_prefix(markup):
    start = tokenize(markup)[0]
    assert start.prefix == "$C"
    assert start.original == "TextButton"


def test_closing_tag_with_prefix():
    end = tokenize("</$Menu.Entry>")[0]
    assert isinstance(end, EndTag)
    assert end.prefix == "$Menu"
    assert end.name == "entry"


def test_normalize_prefix():
    assert normalize_prefix(None) is None
    assert normalize_prefix("Common.") == "$Common"


def test_strip_comments():
    assert strip_comments("<div><!-- <p>gone</p> --></div>") == "<div></div>"


def test_unterminated_comment():
    with pytest.raises(MarkupSyntaxError):
        strip_comments("<div><!-- never closed</div>")


def test_parse_attributes_quote_styles():
    attributes = parse_attributes("""a="1" b='two' c=3 disabled :text="@Title" max-length=5""")

    assert [(a.name, a.value, a.binding) for a in attributes] == [
        ("a", "1", False),
        ("b", "two", False),
        ("c", "3", False),
        ("disabled", "true", False),
        ("text", "@Title", True),
        ("max-length", "5", False),
    ]


def test_attribute_key_is_lowercase():
    assert parse_attributes('ID="x"')[0].key == "id"


def test_malformed_attributes_raise():
    with pytest.raises(MarkupSyntaxError):
        parse_attributes('a="1" ="oops"')
