"""Component tree, tag resolution and serialization."""

from .node import ComponentNode, Group, Label, Tagless, TextNode, to_pascal_case
from .resolver import (
    AliasContext,
    ComponentResolver,
    TagRegistry,
    capitalize_property_name,
)
from .values import Expression, LocalizationKey

__all__ = [
    "AliasContext",
    "ComponentNode",
    "ComponentResolver",
    "Expression",
    "Group",
    "Label",
    "LocalizationKey",
    "TagRegistry",
    "Tagless",
    "TextNode",
    "capitalize_property_name",
    "to_pascal_case",
]
