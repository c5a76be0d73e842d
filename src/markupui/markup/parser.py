"""Markup parser - turns a markup document into a CompiledTemplate.

Pipeline:
1. Strip comments, evaluate script blocks, apply caller overrides
2. Tokenize the remaining markup
3. Build one component tree per top-level element
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from markupui.components.node import ComponentNode, Group, Label, TextNode
from markupui.components.resolver import (
    DEFAULT_COMMON_PATH,
    AliasContext,
    ComponentResolver,
    capitalize_property_name,
)
from markupui.components.values import Expression
from markupui.errors import MarkupSyntaxError
from markupui.markup.attributes import Attribute, parse_attributes
from markupui.markup.script import ScriptParser, ScriptResult
from markupui.markup.tokenizer import EndTag, StartTag, Text, Token, strip_comments, tokenize
from markupui.style.parser import StyleParser
from markupui.template import CompiledTemplate
from markupui.variables import Variable, apply_overrides, substitute

log = logging.getLogger(__name__)

SCRIPT_BLOCK = re.compile(
    r"<script\s+type\s*=\s*[\"']text/(?P<kind>customui|javascript)[\"']\s*>(?P<body>.*?)</script\s*>",
    re.IGNORECASE | re.DOTALL,
)
SCRIPT_OPEN = re.compile(r"<script\s+type\s*=\s*[\"']text/(customui|javascript)[\"']", re.IGNORECASE)
WHITESPACE = re.compile(r"\s+")

VISIBILITY_ATTRIBUTES = ("m-show", "m-if")


@dataclass
class Element:
    """A start tag with its child elements and text, before resolution."""

    tag: StartTag
    children: list["Element"] = field(default_factory=list)
    text: list[str] = field(default_factory=list)

    @property
    def text_content(self) -> str:
        return " ".join(t for t in self.text if t)


@dataclass
class ParseContext:
    variables: dict[str, Variable]
    aliases: AliasContext
    base_dir: Path | None = None


class MarkupParser:
    """Compiles markup text into a CompiledTemplate."""

    def __init__(
        self,
        resolver: ComponentResolver | None = None,
        style_parser: StyleParser | None = None,
        *,
        common_alias_path: str = DEFAULT_COMMON_PATH,
        root_dir: str = "../",
        minimal: bool = False,
    ):
        self.resolver = resolver or ComponentResolver()
        self.style_parser = style_parser or StyleParser()
        self.script_parser = ScriptParser()
        self.common_alias_path = common_alias_path
        self.root_dir = root_dir
        self.minimal = minimal

    def parse(
        self,
        text: str,
        overrides: Mapping[str, Any] | None = None,
        *,
        base_dir: Path | None = None,
        source_path: Path | None = None,
    ) -> CompiledTemplate:
        """Compile markup text.

        Args:
            text: The markup document.
            overrides: Variables that take precedence over script declarations.
            base_dir: Directory for resolving relative resources (``_img``).
            source_path: Recorded on the template for diagnostics.

        Returns:
            The compiled template.
        """
        markup = strip_comments(text).strip()
        markup, script = self._extract_scripts(markup)

        aliases = AliasContext(common_path=self.common_alias_path)
        for name, path in script.aliases.items():
            aliases.declare(name, path)

        context = ParseContext(
            variables=apply_overrides(script.variables, overrides),
            aliases=aliases,
            base_dir=base_dir,
        )

        elements = self._build_elements(tokenize(markup))
        roots = [self._compile(element, context) for element in elements]

        if not roots:
            roots = [Group()]
        if script.properties:
            roots[0].set_properties(script.properties)

        log.debug("Compiled %d root(s) from %s", len(roots), source_path or "<string>")

        return CompiledTemplate(
            roots,
            context.variables,
            aliases.resolved(),
            minimal=self.minimal,
            source_path=source_path,
        )

    # -- script blocks ------------------------------------------------------

    def _extract_scripts(self, markup: str) -> tuple[str, ScriptResult]:
        result = ScriptResult()

        for match in SCRIPT_BLOCK.finditer(markup):
            body = match.group("body")
            if match.group("kind").lower() == "customui":
                self.script_parser.parse(body, result)
            else:
                self.script_parser.parse_imports(body, result, self.root_dir)

        remaining = SCRIPT_BLOCK.sub("", markup)
        unclosed = SCRIPT_OPEN.search(remaining)
        if unclosed:
            raise MarkupSyntaxError("Unterminated <script> block", unclosed.start())

        return remaining, result

    # -- structure ----------------------------------------------------------

    def _build_elements(self, tokens: list[Token]) -> list[Element]:
        return self._parse_range(tokens, 0, len(tokens), parent=None)

    def _parse_range(
        self, tokens: list[Token], start: int, end: int, parent: Element | None
    ) -> list[Element]:
        elements: list[Element] = []
        index = start

        while index < end:
            token = tokens[index]

            if isinstance(token, Text):
                content = WHITESPACE.sub(" ", token.content).strip()
                if content and parent is not None:
                    parent.text.append(content)
                elif content:
                    log.debug("Ignoring top-level text %r", content[:40])
                index += 1
                continue

            if isinstance(token, EndTag):
                raise MarkupSyntaxError(
                    f"Unexpected closing tag </{token.name}>", token.position
                )

            element = Element(token)
            closing = None if token.is_void else self._find_closing(tokens, index, end)

            if closing is None:
                index += 1
            else:
                element.children = self._parse_range(tokens, index + 1, closing, element)
                index = closing + 1

            elements.append(element)

        return elements

    @staticmethod
    def _find_closing(tokens: list[Token], open_index: int, end: int) -> int | None:
        """Index of the end tag matching ``tokens[open_index]``, or None if unclosed."""
        opening = tokens[open_index]
        assert isinstance(opening, StartTag)
        depth = 0

        for index in range(open_index + 1, end):
            token = tokens[index]
            if isinstance(token, StartTag):
                if (
                    token.name == opening.name
                    and _same_prefix(token.prefix, opening.prefix)
                    and not token.is_void
                ):
                    depth += 1
            elif isinstance(token, EndTag):
                if token.name == opening.name and _same_prefix(token.prefix, opening.prefix):
                    if depth == 0:
                        return index
                    depth -= 1

        return None

    # -- compilation ----------------------------------------------------------

    def _compile(self, element: Element, context: ParseContext) -> ComponentNode:
        tag = element.tag
        attributes = parse_attributes(tag.attributes, tag.position)

        plain: dict[str, str] = {}
        bindings: list[Attribute] = []
        for attribute in attributes:
            if attribute.binding:
                bindings.append(attribute)
            else:
                plain[attribute.key] = substitute(attribute.value, context.variables)

        node = self.resolver.resolve(
            tag.name,
            tag.original,
            plain,
            tag.prefix,
            context.aliases,
            base_dir=context.base_dir,
        )

        if "id" in plain:
            node.set_id(plain["id"])
        if "style" in plain:
            node.apply_style(self.style_parser.parse(plain["style"]))

        for binding in bindings:
            node.set_property(capitalize_property_name(binding.name), Expression(binding.value))

        for name in VISIBILITY_ATTRIBUTES:
            if name in plain:
                node.set_property("Visible", _visibility(plain[name]))

        if tag.name == "select":
            self._collect_options(node, element, context)
            return node

        for child in element.children:
            node.add_child(self._compile(child, context))

        text = substitute(element.text_content, context.variables)
        if text and element.children:
            log.debug("Ignoring text %r in <%s>, it has child elements", text[:40], tag.name)
        elif text:
            _apply_text(node, text)

        return node

    def _collect_options(self, node: ComponentNode, element: Element, context: ParseContext) -> None:
        options: list[str] = []
        for child in element.children:
            if child.tag.name != "option":
                node.add_child(self._compile(child, context))
                continue
            attributes = {
                a.key: a.value for a in parse_attributes(child.tag.attributes, child.tag.position)
            }
            value = attributes.get("value", child.text_content)
            options.append(substitute(value, context.variables))
        if options:
            node.set_property("Options", options)


def _same_prefix(a: str | None, b: str | None) -> bool:
    return (a or "").lower() == (b or "").lower()


def _visibility(value: str) -> bool | Expression:
    value = value.strip()
    if value.startswith(("@", "(")):
        return Expression(value)
    return value.lower() in ("true", "1", "yes")


def _apply_text(node: ComponentNode, text: str) -> None:
    if isinstance(node, TextNode):
        node.set_text(text)
    elif node.name.lower() == "group":
        node.add_child(Label(text))
    else:
        node.set_property("Text", text)
