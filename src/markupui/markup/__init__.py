"""Markup parsing: script blocks, attributes, tokens and the tree builder."""

from .parser import MarkupParser
from .script import ScriptParser, ScriptResult

__all__ = [
    "MarkupParser",
    "ScriptParser",
    "ScriptResult",
]
