"""Template variables and compile-time substitution."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Mapping

from markupui.components.values import quote
from markupui.errors import InvalidVariableNameError

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
REFERENCE = re.compile(r"@([A-Za-z_][A-Za-z0-9_]*)")


class VariableKind(str, enum.Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    COLOR = "color"
    LITERAL = "literal"


@dataclass(frozen=True)
class Variable:
    """A resolved template variable."""

    name: str
    value: str
    kind: VariableKind = VariableKind.STRING

    def render(self) -> str:
        """Render the value for an ``@Name = value;`` declaration."""
        if self.kind is VariableKind.STRING:
            return quote(self.value)
        return self.value

    @classmethod
    def from_override(cls, name: str, value: Any) -> "Variable":
        """Build a variable from a caller-supplied value."""
        name = validate_name(name.lstrip("@"))
        if isinstance(value, bool):
            return cls(name, "true" if value else "false", VariableKind.BOOLEAN)
        if isinstance(value, (int, float)):
            return cls(name, str(value), VariableKind.NUMBER)
        return cls(name, str(value), VariableKind.STRING)


def validate_name(name: str, line: str | None = None, line_number: int | None = None) -> str:
    if not IDENTIFIER.match(name):
        raise InvalidVariableNameError(name, line, line_number)
    return name


def substitute(text: str, variables: Mapping[str, Variable]) -> str:
    """Replace ``@Name`` references with variable values; unknown names stay as written."""

    def replace(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        return variable.value if variable is not None else match.group(0)

    return REFERENCE.sub(replace, text)


def apply_overrides(
    variables: Mapping[str, Variable], overrides: Mapping[str, Any] | None
) -> dict[str, Variable]:
    """Return ``variables`` with caller overrides applied on top."""
    merged = dict(variables)
    for name, value in (overrides or {}).items():
        variable = Variable.from_override(name, value)
        merged[variable.name] = variable
    return merged
