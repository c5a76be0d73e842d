"""Component resolver - maps markup tags to output component nodes.

Resolution order (first match wins):
1. Custom tags registered at runtime
2. Alias-qualified tags (``<$C.TextButton>``)
3. Internal underscore tags (``<_img>``)
4. The default HTML tag table
5. Direct component names (``<TextButton>``), after the unsupported-tag denylist
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from markupui.components.defaults import (
    UNSUPPORTED_TAGS,
    TagFactory,
    default_tags,
    is_truthy,
)
from markupui.components.node import ComponentNode, Group
from markupui.components.raster import RasterOptions, render_image_file
from markupui.errors import UnsupportedTagError

log = logging.getLogger(__name__)

BUILTIN_ALIASES = ("C", "Common")
DEFAULT_COMMON_PATH = "../Common.ui"

# Attributes the parser interprets itself; never copied onto a component.
RESERVED_ATTRIBUTES = frozenset({"id", "style", "class", "m-show", "m-if"})

ALIAS_NAME = re.compile(r"^\$([A-Za-z_][A-Za-z0-9_]*)\.")


def capitalize_property_name(name: str) -> str:
    """Convert an attribute name to a property name.

    ``max-length`` becomes ``MaxLength``; ``placeholderText`` becomes
    ``PlaceholderText``.
    """
    if "-" in name:
        parts = [p for p in name.split("-") if p]
        return "".join(p[0].upper() + p[1:].lower() for p in parts)
    return name[:1].upper() + name[1:]


class TagRegistry:
    """Thread-safe registry of custom tag factories, keyed case-insensitively."""

    def __init__(self) -> None:
        self._factories: dict[str, TagFactory] = {}
        self._lock = threading.Lock()

    def register(self, name: str, factory: TagFactory) -> None:
        if not callable(factory):
            raise TypeError(f"Factory for <{name}> is not callable")
        key = name.strip().lower()
        if not key:
            raise ValueError("Tag name cannot be empty")
        with self._lock:
            self._factories[key] = factory
        log.debug("Registered custom tag <%s>", key)

    def unregister(self, name: str) -> None:
        with self._lock:
            self._factories.pop(name.strip().lower(), None)

    def get(self, name: str) -> TagFactory | None:
        with self._lock:
            return self._factories.get(name.lower())

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._factories)

    def clear(self) -> None:
        with self._lock:
            self._factories.clear()

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._factories)


@dataclass
class AliasContext:
    """Aliases visible to one document.

    Built-in aliases always resolve to ``common_path``; a script block cannot
    shadow them.
    """

    declared: dict[str, str] = field(default_factory=dict)
    common_path: str = DEFAULT_COMMON_PATH

    def builtin_name(self, alias: str) -> str | None:
        for name in BUILTIN_ALIASES:
            if name.lower() == alias.lower():
                return name
        return None

    def declare(self, alias: str, path: str) -> None:
        alias = alias.lstrip("$")
        builtin = self.builtin_name(alias)
        if builtin is not None:
            log.warning(
                "Alias $%s is built in and cannot be redeclared, keeping %s",
                builtin,
                self.common_path,
            )
        self.declared[alias] = path

    def canonical(self, alias: str) -> str | None:
        """Return the spelling used in output for ``alias``, or None if unknown."""
        alias = alias.lstrip("$")
        builtin = self.builtin_name(alias)
        if builtin is not None:
            return builtin
        if alias in self.declared:
            return alias
        return None

    def path_for(self, alias: str) -> str | None:
        alias = alias.lstrip("$")
        if self.builtin_name(alias) is not None:
            return self.common_path
        return self.declared.get(alias)

    def resolved(self) -> dict[str, str]:
        """Every alias visible in this document with its target path."""
        aliases = {name: self.common_path for name in BUILTIN_ALIASES}
        for name, path in self.declared.items():
            if self.builtin_name(name) is None:
                aliases[name] = path
        return aliases


class ComponentResolver:
    """Resolves one element to its initial component node."""

    def __init__(
        self,
        registry: TagRegistry | None = None,
        raster_defaults: RasterOptions | None = None,
    ):
        self.registry = registry if registry is not None else TagRegistry()
        self.raster_defaults = raster_defaults or RasterOptions()
        self._defaults = default_tags()

    def resolve(
        self,
        tag: str,
        tag_original: str,
        attributes: Mapping[str, str],
        alias_prefix: str | None,
        aliases: AliasContext,
        *,
        base_dir: Path | None = None,
    ) -> ComponentNode:
        """Resolve a tag to a component node.

        Args:
            tag: Lowercased tag name, without alias prefix.
            tag_original: Tag name as written in the markup.
            attributes: Element attributes keyed by lowercase name.
            alias_prefix: ``$C`` style prefix, or None.
            aliases: Alias context of the document.
            base_dir: Directory used to resolve relative ``_img`` sources.

        Returns:
            The initial node, without children.

        Raises:
            UnsupportedTagError: If no resolution step accepts the tag.
        """
        factory = self.registry.get(tag)
        if factory is not None:
            return factory(attributes)

        if alias_prefix:
            canonical = aliases.canonical(alias_prefix)
            if canonical is None:
                raise UnsupportedTagError(
                    f"{alias_prefix}.{tag_original}", f"unknown alias {alias_prefix}"
                )
            return self._passthrough(f"${canonical}.@{tag_original}", attributes)

        if tag.startswith("_"):
            return self._internal(tag, attributes, base_dir)

        factory = self._defaults.get(tag)
        if factory is not None:
            return factory(attributes)

        if tag in UNSUPPORTED_TAGS:
            raise UnsupportedTagError(tag_original)

        if tag_original[:1].isupper():
            return self._passthrough(tag_original, attributes)

        raise UnsupportedTagError(tag_original, "no component mapping")

    @staticmethod
    def _passthrough(name: str, attributes: Mapping[str, str]) -> ComponentNode:
        node = ComponentNode(name)
        for attr, value in attributes.items():
            if attr in RESERVED_ATTRIBUTES:
                continue
            node.set_property(capitalize_property_name(attr), value)
        return node

    def _internal(
        self, tag: str, attributes: Mapping[str, str], base_dir: Path | None
    ) -> ComponentNode:
        if tag == "_img":
            source = attributes.get("src") or attributes.get("value")
            if not source:
                return Group()
            return render_image_file(source, self._raster_options(attributes), base_dir)

        log.warning("Unknown internal tag <%s>, emitting an empty Group", tag)
        return Group()

    def _raster_options(self, attributes: Mapping[str, str]) -> RasterOptions:
        defaults = self.raster_defaults

        def number(key: str, fallback: int) -> int:
            try:
                return max(1, int(attributes[key]))
            except (KeyError, ValueError):
                return fallback

        return RasterOptions(
            block_size=number("blocksize", defaults.block_size),
            max_width=number("maxwidth", defaults.max_width),
            max_height=number("maxheight", defaults.max_height),
            skip_white=is_truthy(attributes.get("skipwhite"))
            if "skipwhite" in attributes
            else defaults.skip_white,
        )


def used_aliases(roots: list[ComponentNode]) -> list[str]:
    """Alias names referenced by component names in ``roots``, in first-use order."""
    seen: list[str] = []
    for root in roots:
        for node in root.walk():
            match = ALIAS_NAME.match(node.name)
            if match and match.group(1) not in seen:
                seen.append(match.group(1))
    return seen
