"""Attribute list parsing for start tags."""

from __future__ import annotations

import re
from dataclasses import dataclass

from markupui.errors import MarkupSyntaxError


@dataclass(frozen=True)
class Attribute:
    """One attribute as written in the markup.

    ``binding`` is True for ``:name="expr"`` attributes, whose value is an
    expression for the runtime rather than literal text.
    """

    name: str
    value: str
    binding: bool = False

    @property
    def key(self) -> str:
        return self.name.lower()


ATTRIBUTE = re.compile(
    r"""
    (?P<binding>:?)
    (?P<name>[A-Za-z_][A-Za-z0-9_.\-]*)
    (?:
        \s*=\s*
        (?:
            "(?P<double>[^"]*)"
          | '(?P<single>[^']*)'
          | (?P<bare>[^\s"'=<>`]+)
        )
    )?
    """,
    re.VERBOSE,
)


def parse_attributes(source: str, position: int | None = None) -> list[Attribute]:
    """Parse the raw attribute text of a start tag.

    Bare attributes (``disabled``) get the value ``"true"``. Declaration
    order is preserved.

    Raises:
        MarkupSyntaxError: If the text contains anything that is not an attribute.
    """
    attributes: list[Attribute] = []
    index = 0
    length = len(source)

    while index < length:
        if source[index].isspace():
            index += 1
            continue

        match = ATTRIBUTE.match(source, index)
        if match is None or match.end() == index:
            raise MarkupSyntaxError(
                f"Malformed attribute list near {source[index:index + 20]!r}", position
            )

        value = next(
            (
                match.group(group)
                for group in ("double", "single", "bare")
                if match.group(group) is not None
            ),
            "true",
        )
        attributes.append(Attribute(match.group("name"), value, bool(match.group("binding"))))
        index = match.end()

    return attributes
