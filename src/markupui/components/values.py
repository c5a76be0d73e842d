"""Property values and their rendering in the command grammar."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from markupui.style.colors import expand_hex_color

INDENT = "  "

NUMBER = re.compile(r"^-?\d+(\.\d+)?$")
I18N_SEPARATORS = re.compile(r"[_\-.]")


@dataclass(frozen=True)
class Expression:
    """Raw expression text emitted verbatim, e.g. a bound ``@Variable``."""

    source: str

    def __str__(self) -> str:
        return self.source


@dataclass(frozen=True)
class LocalizationKey:
    """A ``%``-prefixed reference into the runtime's translation table."""

    key: str

    @classmethod
    def of(cls, text: str) -> "LocalizationKey":
        return cls(text[1:] if text.startswith("%") else text)

    def __str__(self) -> str:
        return to_i18n_path(self.key)


def to_i18n_path(key: str) -> str:
    """Convert ``menu.play_button`` style keys to ``%menuPlayButton``."""
    parts = [p for p in I18N_SEPARATORS.split(key.lstrip("%")) if p]
    if not parts:
        return "%"
    head = parts[0].lower()
    tail = "".join(p[0].upper() + p[1:].lower() for p in parts[1:])
    return f"%{head}{tail}"


def quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def format_string(text: str) -> str:
    """Render a string property, leaving references and literals unquoted."""
    trimmed = text.strip()

    if trimmed.startswith("%"):
        return to_i18n_path(trimmed)
    if trimmed.startswith("@"):
        return trimmed
    if NUMBER.match(trimmed):
        return trimmed
    if trimmed in ("true", "false"):
        return trimmed
    if trimmed.startswith("#"):
        return expand_hex_color(trimmed)

    return quote(trimmed)


def format_value(value: Any, level: int = 0, minimal: bool = False) -> str | None:
    """Render a property value.

    Args:
        value: The property value.
        level: Indentation level of the line that holds the value.
        minimal: Render nested maps inline.

    Returns:
        The rendered text, or None when the value should be omitted.
    """
    if value is None:
        return None
    if isinstance(value, (Expression, LocalizationKey)):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        return format_map(value, level, minimal)
    if isinstance(value, (list, tuple)):
        items = [format_value(v, level + 1, minimal) for v in value]
        return "[" + ", ".join(i for i in items if i is not None) + "]"
    if isinstance(value, str):
        return format_string(value)

    raise TypeError(f"Value is not serializable: {type(value).__name__}")


def format_map(mapping: dict[str, Any], level: int = 0, minimal: bool = False) -> str | None:
    """Render a nested map as a parenthesised block.

    Returns None for a map with no renderable entries.
    """
    entries = []
    for key, value in mapping.items():
        rendered = format_value(value, level + 1, minimal)
        if rendered is None:
            continue
        entries.append((key, rendered))

    if not entries:
        return None

    if minimal:
        return "(" + ", ".join(f"{k}: {v}" for k, v in entries) + ")"

    pad = INDENT * (level + 1)
    body = ",\n".join(f"{pad}{k}: {v}" for k, v in entries)
    return f"(\n{body}\n{INDENT * level})"
