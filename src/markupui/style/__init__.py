"""Inline style parsing."""

from .colors import convert_color, expand_hex_color, is_color
from .parser import StyleParser

__all__ = ["StyleParser", "convert_color", "expand_hex_color", "is_color"]
