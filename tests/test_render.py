"""
Tests for renderer selection and the three renderers.
"""
from __future__ import annotations

import json

import pytest

from block_inspect.errors import RenderFailed, SetupFailed
from block_inspect.models import BlockMeta
from block_inspect.render import CanonicalJSON, NameOnly, TemplateFormat, select_renderer


@pytest.fixture
def meta(make_meta):
    return BlockMeta.from_json(json.dumps(make_meta()))


class TestSelectRenderer:
    """Format string dispatch."""

    def test_empty_selects_name_only(self):
        assert isinstance(select_renderer(""), NameOnly)

    def test_json_selects_canonical_json(self):
        assert isinstance(select_renderer("json"), CanonicalJSON)

    @pytest.mark.parametrize("fmt", ["{{.ULID}}", "JSON", "json ", "plain text"])
    def test_anything_else_is_a_template(self, fmt):
        renderer = select_renderer(fmt)
        assert isinstance(renderer, TemplateFormat)
        assert renderer.template.source == fmt

    def test_bad_template_fails_at_selection(self):
        with pytest.raises(SetupFailed):
            select_renderer("{{.ULID")

    def test_needs_meta(self):
        assert select_renderer("").needs_meta is False
        assert select_renderer("json").needs_meta is True
        assert select_renderer("{{.ULID}}").needs_meta is True


class TestRenderers:
    """Per-variant output."""

    def test_name_only_strips_one_separator(self):
        assert NameOnly().render("01ABC/") == "01ABC\n"
        assert NameOnly().render("tenant-a/01ABC/") == "tenant-a/01ABC\n"

    def test_canonical_json(self, meta):
        out = CanonicalJSON().render("01ABC/", meta)
        assert out == meta.canonical_json()
        assert out.endswith("}\n")
        assert '\n\t"ulid": "01ABC",\n' in out

    def test_canonical_json_requires_meta(self):
        with pytest.raises(RenderFailed):
            CanonicalJSON().render("01ABC/", None)

    def test_template_appends_newline(self, meta):
        renderer = select_renderer("{{.ULID}} [{{.MinTime}},{{.MaxTime}}]")
        assert renderer.render("01ABC/", meta) == "01ABC [0,100]\n"

    def test_template_requires_meta(self):
        with pytest.raises(RenderFailed):
            select_renderer("{{.ULID}}").render("01ABC/", None)
