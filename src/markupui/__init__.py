"""markupui - compiles HTML-like markup into UI runtime command documents.

Usage:
    import markupui

    template = markupui.parse('<div id="main"><p>Hello</p></div>')
    print(template.build())
"""

from __future__ import annotations

import os
import threading
from typing import Any, Mapping

from ._version import __version__
from .builder import InterfaceBuilder
from .cache import FileWatcher, TemplateCache
from .components import ComponentNode, Expression, Group, Label, TagRegistry, Tagless, TextNode
from .components.defaults import TagFactory
from .config import BuilderSettings, load_settings
from .errors import (
    InvalidStyleSizeError,
    InvalidStyleValueError,
    InvalidVariableNameError,
    MarkupSyntaxError,
    MarkupUIError,
    NotFoundError,
    ReservedIdError,
    ScriptSyntaxError,
    UnsupportedStylePropertyError,
    UnsupportedTagError,
    UnterminatedLiteralError,
)
from .template import CompiledTemplate

_default_builder: InterfaceBuilder | None = None
_default_lock = threading.Lock()


def get_default_builder() -> InterfaceBuilder:
    """Return the process-wide builder, creating it on first use."""
    global _default_builder
    with _default_lock:
        if _default_builder is None:
            _default_builder = InterfaceBuilder()
        return _default_builder


def parse(
    source: str | os.PathLike[str], overrides: Mapping[str, Any] | None = None
) -> CompiledTemplate:
    """Compile markup text or a markup file with the default builder."""
    return get_default_builder().parse(source, overrides)


def watch_file_changes(path: str | os.PathLike[str]) -> None:
    get_default_builder().watch_file_changes(path)


def register_custom_tag(name: str, factory: TagFactory) -> None:
    get_default_builder().register_custom_tag(name, factory)


__all__ = [
    "BuilderSettings",
    "CompiledTemplate",
    "ComponentNode",
    "Expression",
    "FileWatcher",
    "Group",
    "InterfaceBuilder",
    "InvalidStyleSizeError",
    "InvalidStyleValueError",
    "InvalidVariableNameError",
    "Label",
    "MarkupSyntaxError",
    "MarkupUIError",
    "NotFoundError",
    "ReservedIdError",
    "ScriptSyntaxError",
    "TagRegistry",
    "Tagless",
    "TemplateCache",
    "TextNode",
    "UnsupportedStylePropertyError",
    "UnsupportedTagError",
    "UnterminatedLiteralError",
    "__version__",
    "get_default_builder",
    "load_settings",
    "parse",
    "register_custom_tag",
    "watch_file_changes",
]
