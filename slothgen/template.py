"""A small text template engine for ``{{ .field }}`` substitutions.

Templates fail on unknown keys instead of rendering them empty.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from slothgen.conventions import format_float

_WS = " \t\r\n"
_FIELD_RE = re.compile(r"\.(?:[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)?")


class TemplateError(Exception):
    """Raised when a template cannot be parsed or rendered."""


@dataclass(frozen=True)
class _Field:
    path: tuple[str, ...]
    source: str


def _parse_action(body: str, offset: int) -> _Field | None:
    if not body:
        raise TemplateError(f"missing value for command at offset {offset}")
    if len(body) >= 4 and body.startswith("/*") and body.endswith("*/"):
        return None
    if _FIELD_RE.fullmatch(body):
        return _Field(tuple(part for part in body.split(".") if part), body)
    raise TemplateError(f"malformed or unsupported action {{{{{body}}}}} at offset {offset}")


def _parse(text: str) -> list[str | _Field]:
    nodes: list[str | _Field] = []
    pos = 0
    trim_next = False
    while True:
        start = text.find("{{", pos)
        literal = text[pos:] if start < 0 else text[pos:start]
        if trim_next:
            literal = literal.lstrip(_WS)
        if start < 0:
            if literal:
                nodes.append(literal)
            return nodes
        end = text.find("}}", start + 2)
        if end < 0:
            raise TemplateError(f"unclosed action starting at offset {start}")
        inner = text[start + 2:end]
        if len(inner) >= 2 and inner[0] == "-" and inner[1] in _WS:
            literal = literal.rstrip(_WS)
            inner = inner[1:]
        trim_next = len(inner) >= 2 and inner[-1] == "-" and inner[-2] in _WS
        if trim_next:
            inner = inner[:-1]
        if literal:
            nodes.append(literal)
        node = _parse_action(inner.strip(_WS), start)
        if node is not None:
            nodes.append(node)
        pos = end + 2


def _resolve(data: Any, node: _Field) -> Any:
    value = data
    for name in node.path:
        if isinstance(value, Mapping):
            if name not in value:
                raise TemplateError(f'executing "{node.source}": map has no entry for key "{name}"')
            value = value[name]
        elif value is None:
            raise TemplateError(f'executing "{node.source}": nil value evaluating field {name}')
        else:
            try:
                value = getattr(value, name)
            except AttributeError:
                raise TemplateError(
                    f'executing "{node.source}": can\'t evaluate field {name}'
                ) from None
    return value


def _format(value: Any) -> str:
    if value is None:
        return "<no value>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_float(value)
    return str(value)


class Template:
    """A parsed template; parse errors raise :class:`TemplateError` at creation."""

    def __init__(self, text: str) -> None:
        self.text = text
        self._nodes = _parse(text)

    def render(self, data: Any) -> str:
        """Render the template against a mapping or an object."""
        return "".join(
            node if isinstance(node, str) else _format(_resolve(data, node))
            for node in self._nodes
        )


def render_template(text: str, data: Any) -> str:
    """Parse and render a template in one step."""
    return Template(text).render(data)