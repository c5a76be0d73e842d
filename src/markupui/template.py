"""CompiledTemplate - the parser's output and its rendering to a command document."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from jinja2 import BaseLoader, Environment

from markupui.components.defaults import TEXT_PRESETS
from markupui.components.node import ComponentNode
from markupui.components.resolver import used_aliases
from markupui.variables import Variable

log = logging.getLogger(__name__)

DOCUMENT_TEMPLATE = """\
{% for name, path in aliases %}
${{ name }} = "{{ path }}";
{% endfor %}
{% if aliases %}

{% endif %}
{% for preset in presets %}
{{ preset }}

{% endfor %}
{% for name, value in variables %}
@{{ name }} = {{ value }};
{% endfor %}
{% if variables %}

{% endif %}
{{ roots | join(separator) }}
"""

_env = Environment(
    loader=BaseLoader(),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=False,
)
_document = _env.from_string(DOCUMENT_TEMPLATE)


def render_preset(name: str, properties: Mapping[str, Any], minimal: bool = False) -> str:
    """Render a preset definition such as ``@MarkupH1 = Label { ... };``."""
    body = ComponentNode("Label", dict(properties)).build(minimal)
    return f"{name} = {body};"


class CompiledTemplate:
    """A compiled markup document.

    The tree is fixed at construction. Variable declarations emitted by
    ``build()`` are snapshotted at the same time, so ``set_variable`` only
    changes what ``get_variables`` reports; it never alters the output.
    """

    def __init__(
        self,
        roots: Sequence[ComponentNode],
        variables: Mapping[str, Variable],
        aliases: Mapping[str, str],
        *,
        minimal: bool = False,
        source_path: Path | None = None,
    ):
        self._roots = tuple(roots)
        self._variables: dict[str, Variable] = dict(variables)
        self._aliases = dict(aliases)
        self.minimal = minimal
        self.source_path = source_path

        self._declarations = [(v.name, v.render()) for v in self._variables.values()]
        self._built: str | None = None

    def __repr__(self) -> str:
        source = self.source_path or "<string>"
        return f"<CompiledTemplate {source} roots={len(self._roots)}>"

    @property
    def roots(self) -> tuple[ComponentNode, ...]:
        return self._roots

    @property
    def root(self) -> ComponentNode:
        return self._roots[0]

    @property
    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def get_variables(self) -> dict[str, str]:
        """Current variable values by name, without the ``@`` sigil."""
        return {name: variable.value for name, variable in self._variables.items()}

    def get_variable(self, name: str) -> str | None:
        variable = self._variables.get(name.lstrip("@"))
        return variable.value if variable is not None else None

    def set_variable(self, name: str, value: Any) -> None:
        """Update the variable table.

        Substitution already happened at parse time; this does not change
        the output of ``build()``.
        """
        variable = Variable.from_override(name, value)
        self._variables[variable.name] = variable

    def build(self) -> str:
        """Render the full command document.

        Sections, separated by blank lines: alias declarations, text preset
        definitions, variable declarations, then each root component.
        """
        if self._built is None:
            self._built = self._render()
        return self._built

    def _render(self) -> str:
        aliases = []
        for name in used_aliases(list(self._roots)):
            path = self._aliases.get(name)
            if path is None:
                log.warning("Component uses undeclared alias $%s", name)
                continue
            aliases.append((name, path))

        presets = []
        for root in self._roots:
            for node in root.walk():
                if node.name in TEXT_PRESETS and node.name not in presets:
                    presets.append(node.name)

        return _document.render(
            aliases=aliases,
            presets=[render_preset(n, TEXT_PRESETS[n], self.minimal) for n in presets],
            variables=self._declarations,
            roots=[root.build(self.minimal) for root in self._roots],
            separator="\n" if self.minimal else "\n\n",
        )
