"""Default HTML tag table.

Each entry maps a lowercase tag to a factory that builds the initial node from
the element's (already substituted) attributes.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from markupui.components.node import ComponentNode, Group, Label, TextNode
from markupui.components.qr import qr_code

TagFactory = Callable[[Mapping[str, str]], ComponentNode]

GROUP_TAGS = ("div", "section", "article", "header", "footer", "nav", "main", "ul", "ol")

# Text presets emitted once in the document preamble when a tag uses them.
TEXT_PRESETS: dict[str, dict[str, Any]] = {
    "@MarkupH1": {"Style": {"FontSize": 28, "RenderBold": True}},
    "@MarkupH2": {"Style": {"FontSize": 24, "RenderBold": True}},
    "@MarkupH3": {"Style": {"FontSize": 20, "RenderBold": True}},
    "@MarkupH4": {"Style": {"FontSize": 18, "RenderBold": True}},
    "@MarkupH5": {"Style": {"FontSize": 16, "RenderBold": True}},
    "@MarkupH6": {"Style": {"FontSize": 14, "RenderBold": True}},
    "@MarkupP": {"Anchor": {"Bottom": 8}},
}

UNSUPPORTED_TAGS = frozenset(
    {
        "br", "hr", "video", "audio", "iframe", "canvas", "svg",
        "table", "thead", "tbody", "tr", "td", "th", "form",
        "script", "style", "meta", "link", "head", "body",
    }
)


def is_truthy(value: str | None) -> bool:
    return value is not None and value.strip().lower() in ("", "true", "1", "yes", "checked")


def _to_int(value: str) -> int | str:
    try:
        return int(value.strip())
    except ValueError:
        return value


def group(attributes: Mapping[str, str]) -> ComponentNode:
    node = Group()
    if "text" in attributes:
        node.add_child(Label(attributes["text"]))
    return node


def button(attributes: Mapping[str, str]) -> ComponentNode:
    node = TextNode("Button")
    text = attributes.get("text", attributes.get("value"))
    if text is not None:
        node.set_text(text)
    return node


def text_preset(name: str) -> TagFactory:
    def factory(attributes: Mapping[str, str]) -> ComponentNode:
        node = TextNode(name)
        if "text" in attributes:
            node.set_text(attributes["text"])
        return node

    return factory


def label(attributes: Mapping[str, str]) -> ComponentNode:
    return Label(attributes.get("text"))


def _apply_text_field(node: ComponentNode, attributes: Mapping[str, str]) -> ComponentNode:
    if "placeholder" in attributes:
        node.set_property("PlaceholderText", attributes["placeholder"])
    if "value" in attributes:
        node.set_property("Value", attributes["value"])
    if "maxlength" in attributes:
        node.set_property("MaxLength", _to_int(attributes["maxlength"]))
    if "readonly" in attributes:
        node.set_property("ReadOnly", is_truthy(attributes["readonly"]))
    return node


def input_field(attributes: Mapping[str, str]) -> ComponentNode:
    kind = attributes.get("type", "text").strip().lower()

    if kind == "password":
        node = ComponentNode("$C.@TextField", {"PasswordChar": "*"})
        return _apply_text_field(node, attributes)

    if kind == "number":
        return _apply_text_field(ComponentNode("$C.@NumberField"), attributes)

    if kind == "color":
        node = ComponentNode("ColorPicker")
        if "value" in attributes:
            node.set_property("Value", attributes["value"])
        return node

    if kind == "checkbox":
        node = TextNode("$C.@CheckBoxWithLabel")
        text = attributes.get("label", attributes.get("text"))
        if text is not None:
            node.set_text(text)
        if "checked" in attributes and is_truthy(attributes["checked"]):
            node.set_property("Value", True)
        return node

    return _apply_text_field(ComponentNode("$C.@TextField"), attributes)


def textarea(attributes: Mapping[str, str]) -> ComponentNode:
    return _apply_text_field(ComponentNode("$C.@MultilineTextField"), attributes)


def select(attributes: Mapping[str, str]) -> ComponentNode:
    node = ComponentNode("$C.@DropdownBox")
    if "value" in attributes:
        node.set_property("Value", attributes["value"])
    return node


def image(attributes: Mapping[str, str]) -> ComponentNode:
    node = Group()
    if "src" in attributes:
        node.set_property("Background", attributes["src"])
    if "alt" in attributes:
        node.set_property("Tooltip", attributes["alt"])

    anchor = {}
    for attr, key in (("width", "Width"), ("height", "Height")):
        if attr in attributes:
            anchor[key] = _to_int(attributes[attr])
    if anchor:
        node.set_property("Anchor", anchor)
    return node


def default_tags() -> dict[str, TagFactory]:
    """Build a fresh copy of the default tag table."""
    table: dict[str, TagFactory] = {tag: group for tag in GROUP_TAGS}
    table.update(
        {
            "button": button,
            "input": input_field,
            "textarea": textarea,
            "select": select,
            "label": label,
            "span": label,
            "li": label,
            "p": text_preset("@MarkupP"),
            "img": image,
            "qrcode": qr_code,
        }
    )
    for level in range(1, 7):
        table[f"h{level}"] = text_preset(f"@MarkupH{level}")
    return table
