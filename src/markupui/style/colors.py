"""Colour normalization shared by the style parser, script variables and serializer."""

from __future__ import annotations

import re

from markupui.errors import InvalidStyleValueError

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
RGB_COLOR = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)$",
    re.IGNORECASE,
)


def expand_hex_color(value: str) -> str:
    """Expand a three-digit ``#rgb`` colour to ``#rrggbb``.

    Anything that is not a three-digit hex colour is returned untouched.
    """
    if len(value) == 4 and value.startswith("#"):
        return "#" + "".join(ch * 2 for ch in value[1:])
    return value


def is_color(value: str) -> bool:
    """Return True if ``value`` is a hex or rgb()/rgba() colour literal."""
    value = value.strip()
    return bool(HEX_COLOR.match(value) or RGB_COLOR.match(value))


def format_alpha(alpha: float) -> str:
    """Format an alpha channel with at most two decimals and no trailing zeros."""
    text = f"{alpha:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def convert_color(value: str, property_name: str = "color") -> str:
    """Normalize a colour value to the runtime's hex notation.

    Args:
        value: ``#rgb``, ``#rrggbb``, ``#rrggbbaa``, ``rgb(...)``, ``rgba(...)``
            or an ``@Variable`` reference.
        property_name: Used in the error message only.

    Returns:
        The normalized colour string.

    Raises:
        InvalidStyleValueError: For colour names or malformed values.
    """
    value = value.strip()

    if value.startswith("@"):
        return value

    if value.startswith("#"):
        if not HEX_COLOR.match(value):
            raise InvalidStyleValueError(property_name, value, "malformed hex colour")
        return expand_hex_color(value)

    match = RGB_COLOR.match(value)
    if match:
        channels = [int(match.group(i)) for i in (1, 2, 3)]
        if any(c > 255 for c in channels):
            raise InvalidStyleValueError(
                property_name, value, "channel out of range"
            )
        hex_value = "#{:02X}{:02X}{:02X}".format(*channels)

        if match.group(4) is None:
            return hex_value

        alpha = float(match.group(4))
        if alpha > 1:
            alpha = alpha / 255
        return f"{hex_value}({format_alpha(alpha)})"

    raise InvalidStyleValueError(property_name, value, "unsupported colour format")
