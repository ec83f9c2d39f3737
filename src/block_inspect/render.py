"""
Output renderers for bucket entries.

The output format string is turned into exactly one renderer before the walk
starts, and that renderer is used for every entry:

- ``""``      -> NameOnly: the block directory name
- ``"json"``  -> CanonicalJSON: validated meta.json, tab indented
- otherwise   -> TemplateFormat: a compiled field template
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from .errors import RenderFailed
from .models import BlockMeta
from .template import CompiledTemplate, compile_template

__all__ = ["NameOnly", "CanonicalJSON", "TemplateFormat", "Renderer", "select_renderer"]

JSON_FORMAT = "json"


@dataclass(frozen=True)
class NameOnly:
    """Print the entry name without its trailing separator."""
    needs_meta: ClassVar[bool] = False

    def render(self, entry: str, meta: Optional[BlockMeta] = None) -> str:
        return entry[:-1] + "\n"


@dataclass(frozen=True)
class CanonicalJSON:
    """Print the re-encoded metadata document."""
    needs_meta: ClassVar[bool] = True

    def render(self, entry: str, meta: Optional[BlockMeta] = None) -> str:
        if meta is None:
            raise RenderFailed("encode meta.json: no metadata", entry=entry)
        try:
            return meta.canonical_json()
        except (TypeError, ValueError) as e:
            raise RenderFailed(f"encode meta.json: {e}", entry=entry) from e


@dataclass(frozen=True)
class TemplateFormat:
    """Print the metadata expanded through a user template."""
    template: CompiledTemplate
    needs_meta: ClassVar[bool] = True

    def render(self, entry: str, meta: Optional[BlockMeta] = None) -> str:
        if meta is None:
            raise RenderFailed("execute template: no metadata", entry=entry)
        return self.template.execute(meta) + "\n"


Renderer = Union[NameOnly, CanonicalJSON, TemplateFormat]


def select_renderer(fmt: str) -> Renderer:
    """
    Choose the renderer for an output format string.

    Raises:
        SetupFailed: If ``fmt`` is a template that does not compile
    """
    if fmt == "":
        return NameOnly()
    if fmt == JSON_FORMAT:
        return CanonicalJSON()
    return TemplateFormat(template=compile_template(fmt))
