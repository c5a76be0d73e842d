"""Style parser - translates inline CSS declarations into component properties.

Only an enumerated set of CSS properties has a meaning for the UI runtime.
Everything else is rejected so the compiled output never silently differs
from what the markup asked for.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from markupui.errors import (
    InvalidStyleSizeError,
    InvalidStyleValueError,
    UnsupportedStylePropertyError,
)
from markupui.style.colors import convert_color

log = logging.getLogger(__name__)

# A translated declaration: path into the property mapping plus its value.
Entry = tuple[tuple[str, ...], Any]


class StyleParser:
    """Parses ``style="..."`` declaration blocks.

    Example:
        >>> StyleParser().parse("color: #fff; width: 20px")
        {'Style': {'TextColor': '#ffffff'}, 'Anchor': {'Width': 20}}
    """

    SIZE = re.compile(r"^(-?\d+(?:\.\d+)?)\s*(px|em|%)?$", re.IGNORECASE)
    URL = re.compile(r"^url\(\s*['\"]?(.*?)['\"]?\s*\)$", re.IGNORECASE)

    ANCHOR_KEYS = {
        "width": "Width",
        "height": "Height",
        "top": "Top",
        "left": "Left",
        "right": "Right",
        "bottom": "Bottom",
        "margin-top": "Top",
        "margin-left": "Left",
        "margin-right": "Right",
        "margin-bottom": "Bottom",
    }

    HORIZONTAL_ALIGNMENT = {
        "left": "Start",
        "start": "Start",
        "center": "Center",
        "right": "End",
        "end": "End",
    }

    VERTICAL_ALIGNMENT = {
        "top": "Start",
        "start": "Start",
        "middle": "Center",
        "center": "Center",
        "bottom": "End",
        "end": "End",
    }

    BOLD_WEIGHTS = {"bold", "bolder", "700", "800", "900"}
    WRAP_VALUES = {"break-word", "anywhere", "wrap", "true"}

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[str, str], list[Entry]]] = {
            "color": self._text_color,
            "background": self._background,
            "background-color": self._background,
            "padding": self._padding,
            "margin": self._margin,
            "display": self._display,
            "font-weight": self._font_weight,
            "font-size": self._font_size,
            "font-name": self._font_name,
            "text-align": self._text_align,
            "vertical-align": self._vertical_align,
            "text-transform": self._text_transform,
            "text-decoration": self._text_decoration,
            "word-wrap": self._wrap,
            "overflow-wrap": self._wrap,
            "letter-spacing": self._letter_spacing,
            "text-outline-color": self._outline_color,
        }
        for name in self.ANCHOR_KEYS:
            self._handlers[name] = self._anchor

    @property
    def supported_properties(self) -> frozenset[str]:
        return frozenset(self._handlers)

    def parse(self, declarations: str) -> dict[str, Any]:
        """Parse a declaration block into an ordered property mapping.

        Args:
            declarations: The raw ``style`` attribute value.

        Returns:
            Mapping of output property to value. ``Style``, ``Anchor`` and
            ``Padding`` are nested dicts accumulated across declarations.

        Raises:
            UnsupportedStylePropertyError: For a property outside the table.
            InvalidStyleValueError: For an unparseable colour or keyword.
                A length the runtime cannot express (``auto``, ``100vh``) only
                drops its own declaration.
        """
        result: dict[str, Any] = {}

        for segment in declarations.split(";"):
            if ":" not in segment:
                continue

            name, value = segment.split(":", 1)
            name = name.strip().lower()
            value = value.strip()

            if not name:
                continue

            handler = self._handlers.get(name)
            if handler is None:
                raise UnsupportedStylePropertyError(name)

            try:
                entries = handler(name, value)
            except InvalidStyleSizeError:
                log.debug("Dropping %s: %r, not a px, em or %% size", name, value)
                continue

            for path, entry_value in entries:
                self._merge(result, path, entry_value)

        return result

    @staticmethod
    def _merge(result: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
        target = result
        for key in path[:-1]:
            nested = target.get(key)
            if not isinstance(nested, dict):
                nested = {}
                target[key] = nested
            target = nested
        target[path[-1]] = value

    def parse_size(self, name: str, value: str) -> int | str:
        """Convert a CSS length to the runtime's integer units.

        ``px`` is stripped, ``em`` counts 16 units, ``%`` counts 10 units.
        ``@Variable`` references pass through unchanged.
        """
        value = value.strip()
        if value.startswith("@"):
            return value

        match = self.SIZE.match(value)
        if not match:
            raise InvalidStyleSizeError(name, value)

        number = float(match.group(1))
        unit = (match.group(2) or "").lower()
        if unit == "em":
            number *= 16
        elif unit == "%":
            number *= 10
        return int(number)

    # -- handlers ---------------------------------------------------------

    def _text_color(self, name: str, value: str) -> list[Entry]:
        return [(("Style", "TextColor"), convert_color(value, name))]

    def _outline_color(self, name: str, value: str) -> list[Entry]:
        return [(("Style", "OutlineColor"), convert_color(value, name))]

    def _background(self, name: str, value: str) -> list[Entry]:
        url = self.URL.match(value)
        if url:
            return [(("Background",), url.group(1))]
        return [(("Background",), convert_color(value, name))]

    def _anchor(self, name: str, value: str) -> list[Entry]:
        return [(("Anchor", self.ANCHOR_KEYS[name]), self.parse_size(name, value))]

    def _padding(self, name: str, value: str) -> list[Entry]:
        parts = [self.parse_size(name, p) for p in value.split()]

        if len(parts) == 1:
            top = right = bottom = left = parts[0]
        elif len(parts) == 2:
            top = bottom = parts[0]
            right = left = parts[1]
        elif len(parts) == 3:
            top, right, bottom = parts
            left = right
        elif len(parts) == 4:
            top, right, bottom, left = parts
        else:
            raise InvalidStyleValueError(name, value, "expected 1 to 4 values")

        return [
            (("Padding", "Left"), left),
            (("Padding", "Top"), top),
            (("Padding", "Right"), right),
            (("Padding", "Bottom"), bottom),
        ]

    def _margin(self, name: str, value: str) -> list[Entry]:
        log.debug("Ignoring outer margin %r, the runtime has no equivalent", value)
        return []

    def _display(self, name: str, value: str) -> list[Entry]:
        return [(("Visible",), value.lower() != "none")]

    def _font_weight(self, name: str, value: str) -> list[Entry]:
        return [(("Style", "RenderBold"), value.lower() in self.BOLD_WEIGHTS)]

    def _font_size(self, name: str, value: str) -> list[Entry]:
        return [(("Style", "FontSize"), self.parse_size(name, value))]

    def _font_name(self, name: str, value: str) -> list[Entry]:
        return [(("Style", "FontName"), value.strip("'\""))]

    def _text_align(self, name: str, value: str) -> list[Entry]:
        return [
            (
                ("Style", "HorizontalAlignment"),
                self._keyword(name, value, self.HORIZONTAL_ALIGNMENT),
            )
        ]

    def _vertical_align(self, name: str, value: str) -> list[Entry]:
        return [
            (
                ("Style", "VerticalAlignment"),
                self._keyword(name, value, self.VERTICAL_ALIGNMENT),
            )
        ]

    def _text_transform(self, name: str, value: str) -> list[Entry]:
        return [(("Style", "RenderUppercase"), value.lower() == "uppercase")]

    def _text_decoration(self, name: str, value: str) -> list[Entry]:
        return [(("Style", "RenderUnderlined"), "underline" in value.lower().split())]

    def _wrap(self, name: str, value: str) -> list[Entry]:
        return [(("Style", "Wrap"), value.lower() in self.WRAP_VALUES)]

    def _letter_spacing(self, name: str, value: str) -> list[Entry]:
        return [(("Style", "LetterSpacing"), self.parse_size(name, value))]

    @staticmethod
    def _keyword(name: str, value: str, table: dict[str, str]) -> str:
        if value.startswith("@"):
            return value
        try:
            return table[value.lower()]
        except KeyError:
            raise InvalidStyleValueError(
                name, value, f"expected one of {', '.join(sorted(table))}"
            ) from None
