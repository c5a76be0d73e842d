"""Script block - variable, alias and root property declarations.

Grammar, one declaration per line:

    @Name = "text"          string variable
    @Name = 12 | true | #fff | (...)  unquoted variable
    $Alias = "../File.ui"   alias declaration
    Property = value        property of the first root component
    // comment
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from markupui.components.values import Expression
from markupui.errors import ScriptSyntaxError, UnterminatedLiteralError
from markupui.style.colors import HEX_COLOR, RGB_COLOR, convert_color
from markupui.variables import IDENTIFIER, Variable, VariableKind, validate_name

log = logging.getLogger(__name__)

NUMBER = re.compile(r"^-?\d+(\.\d+)?$")
DECLARATION = re.compile(r"^(?P<sigil>[@$]?)(?P<name>[^=]*?)\s*=\s*(?P<value>.*)$")
JS_IMPORT = re.compile(r"import\s+([A-Za-z_][A-Za-z0-9_]*)\s+from\s+[\"']([^\"']+)[\"']\s*;?")


@dataclass
class ScriptResult:
    """Everything declared by the script blocks of one document."""

    variables: dict[str, Variable] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)
    properties: dict[str, Any] = field(default_factory=dict)


class ScriptParser:
    """Evaluates ``text/customui`` script blocks line by line."""

    def parse(self, source: str, result: ScriptResult | None = None) -> ScriptResult:
        """Parse one script block.

        Args:
            source: Block content between the script tags.
            result: Accumulator shared by all blocks of a document.

        Returns:
            The accumulator, updated in declaration order.

        Raises:
            ScriptSyntaxError: For a line matching no declaration grammar.
            InvalidVariableNameError: For a malformed ``@`` or ``$`` name.
            UnterminatedLiteralError: For an unclosed quoted literal.
        """
        result = result if result is not None else ScriptResult()

        for number, raw in enumerate(source.splitlines(), start=1):
            line = raw.strip()
            if not line or line.startswith("//"):
                continue
            self._parse_line(line, number, result)

        return result

    def parse_imports(self, source: str, result: ScriptResult, root_dir: str = "../") -> ScriptResult:
        """Collect ``import X from "@/File.ui"`` statements as aliases."""
        for name, path in JS_IMPORT.findall(source):
            if path.startswith("@/"):
                path = root_dir + path[2:]
            result.aliases[name] = path
            log.debug("Imported alias $%s = %s", name, path)
        return result

    def _parse_line(self, line: str, number: int, result: ScriptResult) -> None:
        match = DECLARATION.match(line)
        if match is None:
            raise ScriptSyntaxError(line, number, "Expected a declaration of the form Name = value")

        sigil = match.group("sigil")
        name = match.group("name").strip()
        raw_value = match.group("value").strip()

        if raw_value.endswith(";"):
            raw_value = raw_value[:-1].rstrip()
        if not raw_value:
            raise ScriptSyntaxError(line, number, "Missing value")

        if sigil == "@":
            result.variables[validate_name(name, line, number)] = self._variable(
                name, raw_value, line, number
            )
            log.debug("Declared variable @%s", name)
        elif sigil == "$":
            validate_name(name, line, number)
            value, _ = self._literal(raw_value, line, number)
            result.aliases[name] = value
            log.debug("Declared alias $%s = %s", name, value)
        else:
            if not IDENTIFIER.match(name):
                raise ScriptSyntaxError(line, number, f"Invalid property name {name!r}")
            result.properties[name[0].upper() + name[1:]] = self._property_value(
                raw_value, line, number
            )

    @staticmethod
    def _literal(raw: str, line: str, number: int) -> tuple[str, bool]:
        """Return the literal text and whether it was quoted."""
        quote_char = raw[0]
        if quote_char not in ("'", '"'):
            return raw, False

        if len(raw) < 2 or raw[-1] != quote_char:
            raise UnterminatedLiteralError(line, number)

        inner = raw[1:-1]
        if quote_char in inner:
            raise ScriptSyntaxError(line, number, "Unexpected quote inside literal")
        return inner, True

    def _variable(self, name: str, raw: str, line: str, number: int) -> Variable:
        value, quoted = self._literal(raw, line, number)

        if HEX_COLOR.match(value) or RGB_COLOR.match(value):
            return Variable(name, convert_color(value, f"@{name}"), VariableKind.COLOR)
        if quoted:
            return Variable(name, value, VariableKind.STRING)
        if value in ("true", "false"):
            return Variable(name, value, VariableKind.BOOLEAN)
        if NUMBER.match(value):
            return Variable(name, value, VariableKind.NUMBER)
        return Variable(name, value, VariableKind.LITERAL)

    def _property_value(self, raw: str, line: str, number: int) -> Any:
        value, quoted = self._literal(raw, line, number)
        if quoted:
            return value
        if value in ("true", "false"):
            return value == "true"
        if NUMBER.match(value):
            return float(value) if "." in value else int(value)
        return Expression(value)
