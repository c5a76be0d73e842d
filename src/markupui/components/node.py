"""Component tree - mutable nodes that serialize to the command grammar."""

from __future__ import annotations

import re
from typing import Any, Iterator

from markupui.components.values import (
    INDENT,
    LocalizationKey,
    format_map,
    format_value,
)
from markupui.errors import ReservedIdError

# Id of the container the runtime wraps every page in.
RESERVED_ROOT_ID = "MarkupRoot"

ID_SPLIT = re.compile(r"[_\-]|(?<=[a-z])(?=[A-Z])")


def to_pascal_case(raw: str) -> str:
    """Convert ``main-container`` / ``main_container`` / ``mainContainer`` to ``MainContainer``."""
    parts = [p for p in ID_SPLIT.split(raw.strip()) if p]
    return "".join(p[0].upper() + p[1:].lower() for p in parts)


class ComponentNode:
    """One output component: a name, an id, properties, styles and children."""

    def __init__(
        self,
        name: str,
        properties: dict[str, Any] | None = None,
        *,
        minimal: bool = False,
    ):
        self.name = name
        self.id: str | None = None
        self.properties: dict[str, Any] = {}
        self.styles: dict[str, Any] = {}
        self.children: list[ComponentNode] = []
        self.minimal = minimal
        if properties:
            self.set_properties(properties)

    def __repr__(self) -> str:
        ident = f" #{self.id}" if self.id else ""
        return f"<{type(self).__name__} {self.name}{ident} children={len(self.children)}>"

    # -- mutation ---------------------------------------------------------

    def set_id(self, raw: str) -> "ComponentNode":
        component_id = to_pascal_case(str(raw))
        if component_id.lower() == RESERVED_ROOT_ID.lower():
            raise ReservedIdError(component_id)
        self.id = component_id or None
        return self

    def set_property(self, name: str, value: Any) -> "ComponentNode":
        """Set a property. Dicts merge into an existing dict, everything else replaces."""
        if name.lower() == "id":
            return self.set_id(value)

        current = self.properties.get(name)
        if isinstance(value, dict) and isinstance(current, dict):
            self.properties[name] = {**current, **value}
        elif isinstance(value, dict):
            self.properties[name] = dict(value)
        else:
            self.properties[name] = value
        return self

    def set_properties(self, properties: dict[str, Any]) -> "ComponentNode":
        for name, value in properties.items():
            self.set_property(name, value)
        return self

    def get_property(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def set_style(self, name: str, value: Any) -> "ComponentNode":
        current = self.styles.get(name)
        if isinstance(value, dict) and isinstance(current, dict):
            self.styles[name] = {**current, **value}
        else:
            self.styles[name] = value
        return self

    def apply_style(self, mapping: dict[str, Any]) -> "ComponentNode":
        """Merge a StyleParser result: ``Style`` entries become styles, the rest properties."""
        for name, value in mapping.items():
            if name == "Style" and isinstance(value, dict):
                for style_name, style_value in value.items():
                    self.set_style(style_name, style_value)
            else:
                self.set_property(name, value)
        return self

    def add_child(self, node: "ComponentNode") -> "ComponentNode":
        if node is self:
            raise ValueError("A node cannot be its own child")
        self.children.append(node)
        return self

    def walk(self) -> Iterator["ComponentNode"]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    # -- serialization ----------------------------------------------------

    def header(self) -> str:
        if not self.name and self.id:
            return f"#{self.id}"
        if self.id:
            return f"{self.name} #{self.id}"
        return self.name

    def _merged_style(self) -> Any:
        explicit = self.properties.get("Style")
        if explicit is not None and not isinstance(explicit, dict):
            return explicit

        merged: dict[str, Any] = dict(explicit or {})
        for name, value in self.styles.items():
            existing = merged.get(name)
            if isinstance(value, dict) and isinstance(existing, dict):
                merged[name] = {**value, **existing}
            elif name not in merged:
                merged[name] = value
        return merged or None

    def _skips_property(self, name: str) -> bool:
        # Groups cannot display text, the parser moves it into a child Label.
        return name == "Text" and self.name.lower() == "group"

    def rendered_properties(self, level: int, minimal: bool) -> list[tuple[str, str]]:
        properties = dict(self.properties)
        style = self._merged_style()
        if style is not None:
            properties["Style"] = style
        else:
            properties.pop("Style", None)

        rendered = []
        for name, value in properties.items():
            if self._skips_property(name):
                continue
            text = (
                format_map(value, level, minimal)
                if isinstance(value, dict)
                else format_value(value, level, minimal)
            )
            if text is None or not text.strip():
                continue
            rendered.append((name, text))
        return rendered

    def build(self, minimal: bool = False, depth: int = 0) -> str:
        """Serialize this node and its descendants.

        Args:
            minimal: Drop indentation and blank lines, inline nested maps.
            depth: Nesting depth of this node.

        Returns:
            The command text for this subtree.
        """
        minimal = minimal or self.minimal
        pad = "" if minimal else INDENT * depth
        inner = "" if minimal else INDENT * (depth + 1)

        lines = [f"{pad}{self.header()} {{"]

        properties = self.rendered_properties(depth + 1, minimal)
        for name, text in properties:
            lines.append(f"{inner}{name}: {text};")

        if properties and self.children and not minimal:
            lines.append("")

        for index, child in enumerate(self.children):
            if index and not minimal:
                lines.append("")
            lines.append(child.build(minimal, depth + 1))

        lines.append(f"{pad}}}")
        return "\n".join(lines)


class Tagless(ComponentNode):
    """A node emitted only as an ``#Id`` anchor, without a component name."""

    def __init__(self, component_id: str, properties: dict[str, Any] | None = None):
        super().__init__("", properties)
        self.set_id(component_id)
        if not self.id:
            raise ValueError("A tagless node needs a non-empty id")


class Group(ComponentNode):
    """Plain container. Text has to live in a child Label."""

    def __init__(self, properties: dict[str, Any] | None = None, *, minimal: bool = False):
        super().__init__("Group", properties, minimal=minimal)


class TextNode(ComponentNode):
    """A component that carries a ``Text`` property."""

    def set_text(self, text: Any) -> "TextNode":
        if text is None:
            raise ValueError("Text cannot be None")
        if isinstance(text, str) and text.startswith("%"):
            text = LocalizationKey.of(text)
        self.set_property("Text", text)
        return self

    @property
    def text(self) -> Any:
        return self.properties.get("Text")


class Label(TextNode):
    def __init__(self, text: Any = None, properties: dict[str, Any] | None = None):
        super().__init__("Label", properties)
        if text is not None:
            self.set_text(text)
