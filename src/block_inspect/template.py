"""
Text templates for block metadata.

Templates use the Go text/template field syntax that block tooling has always
accepted on the command line, e.g. ``{{.ULID}} [{{.MinTime}},{{.MaxTime}}]``.
Only field references are supported:

- ``{{.}}``             the whole document as compact JSON
- ``{{.Field}}``        a top-level field
- ``{{.Field.Sub}}``    a nested field, or a key of a map such as ``.Labels.env``

Go trim markers are honored: ``{{- .ULID}}`` drops the whitespace before the
action and ``{{.ULID -}}`` the whitespace after it.

Field names match model fields case-insensitively with underscores ignored,
so ``MinTime``, ``minTime`` and ``min_time`` all name ``BlockMeta.min_time``.

Templates are compiled once, before any bucket access, so a malformed template
fails fast. Unknown fields are only detected on execution, like in Go.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from pydantic import BaseModel

from .errors import RenderFailed, SetupFailed
from .models import BlockMeta

__all__ = ["CompiledTemplate", "compile_template"]

_ACTION_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_FIELD_CHAIN_RE = re.compile(r"^(?:\.|(?:\.[A-Za-z_][A-Za-z0-9_]*)+)$")

# Trim markers need a space between the dash and the action: "{{- " and " -}}"
_TRIM_LEFT_RE = re.compile(r"^-[ \t\r\n]")
_TRIM_RIGHT_RE = re.compile(r"[ \t\r\n]-$")
_SPACE = " \t\r\n"

# Printed by Go templates for a missing map key
NO_VALUE = "<no value>"


@dataclass(frozen=True)
class _Field:
    path: Tuple[str, ...]


_Part = Union[str, _Field]


@dataclass(frozen=True)
class CompiledTemplate:
    """Parsed template, ready to be executed against any number of documents."""
    source: str
    parts: Tuple[_Part, ...]

    def execute(self, meta: BlockMeta) -> str:
        """
        Expand the template for one document.

        Raises:
            RenderFailed: If a field reference cannot be resolved
        """
        out = []
        for part in self.parts:
            if isinstance(part, str):
                out.append(part)
            elif not part.path:
                out.append(meta.compact_json())
            else:
                out.append(_format_value(_resolve(meta, part.path)))
        return "".join(out)


def compile_template(source: str) -> CompiledTemplate:
    """
    Parse a template string.

    Raises:
        SetupFailed: If an action is unclosed, empty or not a field reference
    """
    parts = []
    pos = 0
    trim_next = False
    for match in _ACTION_RE.finditer(source):
        raw = match.group(1)
        trim_left = _TRIM_LEFT_RE.match(raw) is not None
        trim_right = _TRIM_RIGHT_RE.search(raw) is not None
        if trim_left:
            raw = raw[1:]
        if trim_right:
            raw = raw[:-1]

        literal = source[pos:match.start()]
        if trim_next:
            literal = literal.lstrip(_SPACE)
        if trim_left:
            literal = literal.rstrip(_SPACE)
        if literal:
            parts.append(literal)

        action = raw.strip(_SPACE)
        if not action:
            raise SetupFailed(f"invalid template: missing value for command in {source!r}")
        if not _FIELD_CHAIN_RE.match(action):
            raise SetupFailed(f"invalid template: unsupported action {match.group(0)} in {source!r}")
        parts.append(_Field(path=tuple(p for p in action.split(".") if p)))
        pos = match.end()
        trim_next = trim_right

    tail = source[pos:]
    if "{{" in tail:
        raise SetupFailed(f"invalid template: unclosed action in {source!r}")
    if trim_next:
        tail = tail.lstrip(_SPACE)
    if tail:
        parts.append(tail)

    return CompiledTemplate(source=source, parts=tuple(parts))


def _match_field(model: type, name: str) -> Optional[str]:
    wanted = name.replace("_", "").lower()
    for field_name, info in model.model_fields.items():
        candidates = [field_name, info.alias, info.serialization_alias]
        if any(c and c.replace("_", "").lower() == wanted for c in candidates):
            return field_name
    return None


def _resolve(value: Any, path: Tuple[str, ...]) -> Any:
    for name in path:
        if isinstance(value, BaseModel):
            field_name = _match_field(type(value), name)
            if field_name is None:
                raise RenderFailed(
                    f"execute template: can't evaluate field {name} in type {type(value).__name__}"
                )
            value = getattr(value, field_name)
        elif isinstance(value, dict):
            if name not in value:
                return NO_VALUE
            value = value[name]
        else:
            raise RenderFailed(
                f"execute template: can't evaluate field {name} in type {type(value).__name__}"
            )
    return value


def _format_value(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, BaseModel):
        return "{" + " ".join(_format_value(getattr(value, f)) for f in type(value).model_fields) + "}"
    if isinstance(value, dict):
        return "map[" + " ".join(f"{k}:{_format_value(v)}" for k, v in sorted(value.items())) + "]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_value(v) for v in value) + "]"
    return str(value)
