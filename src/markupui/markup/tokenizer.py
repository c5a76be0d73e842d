"""Tokenizer - splits markup into start tags, end tags and text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from markupui.errors import MarkupSyntaxError

TAG_PATTERN = re.compile(
    r"<(/?)((?:\$?[A-Za-z][A-Za-z0-9]*)\.)?([A-Za-z_@][A-Za-z0-9_\-]*)\s*([^>]*?)(/?)\s*>"
)
COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)

VOID_TAGS = frozenset({"img", "input", "br", "hr", "meta", "link"})


@dataclass(frozen=True)
class StartTag:
    name: str
    original: str
    prefix: str | None
    attributes: str
    self_closing: bool
    position: int

    @property
    def is_void(self) -> bool:
        return self.self_closing or self.name in VOID_TAGS


@dataclass(frozen=True)
class EndTag:
    name: str
    prefix: str | None
    position: int


@dataclass(frozen=True)
class Text:
    content: str
    position: int


Token = Union[StartTag, EndTag, Text]


def normalize_prefix(prefix: str | None) -> str | None:
    """``C.`` / ``$C.`` -> ``$C``."""
    if not prefix:
        return None
    prefix = prefix.rstrip(".")
    return prefix if prefix.startswith("$") else f"${prefix}"


def strip_comments(text: str) -> str:
    """Remove ``<!-- -->`` comments.

    Raises:
        MarkupSyntaxError: If a comment is never closed.
    """
    stripped = COMMENT.sub("", text)
    position = stripped.find("<!--")
    if position != -1:
        raise MarkupSyntaxError("Unterminated comment", position)
    return stripped


def tokenize(text: str) -> list[Token]:
    """Split markup into tokens in document order.

    Text between tags is kept verbatim, including whitespace.
    """
    tokens: list[Token] = []
    cursor = 0

    for match in TAG_PATTERN.finditer(text):
        if match.start() > cursor:
            tokens.append(Text(text[cursor:match.start()], cursor))

        closing, prefix, original, attributes, self_closing = match.groups()
        prefix = normalize_prefix(prefix)

        if closing:
            tokens.append(EndTag(original.lower(), prefix, match.start()))
        else:
            tokens.append(
                StartTag(
                    name=original.lower(),
                    original=original,
                    prefix=prefix,
                    attributes=attributes.strip(),
                    self_closing=bool(self_closing),
                    position=match.start(),
                )
            )
        cursor = match.end()

    if cursor < len(text):
        tokens.append(Text(text[cursor:], cursor))

    return tokens
