"""
End-to-end tests for block listing.

Runs the whole pipeline (walk, fetch, validate, render) against in-memory
buckets, through both list_blocks and the Operations facade.
"""
from __future__ import annotations

import io
import json
import time

import pytest

from block_inspect.errors import (
    DeadlineExceeded, DecodeFailed, EnumerationFailed, FetchFailed, RenderFailed, SetupFailed,
)
from block_inspect.operations import Operations, OpsConfig
from block_inspect.pipeline import list_blocks
from block_inspect.render import select_renderer
from block_inspect.storage.fakes import InMemoryBucket
from block_inspect.walker import Deadline

SCENARIO_JSON_OUTPUT = (
    "{\n"
    '\t"version": 1,\n'
    '\t"ulid": "01ABC",\n'
    '\t"minTime": 0,\n'
    '\t"maxTime": 100,\n'
    '\t"stats": {\n'
    '\t\t"numSamples": 10,\n'
    '\t\t"numSeries": 0,\n'
    '\t\t"numChunks": 0,\n'
    '\t\t"numTombstones": 0\n'
    "\t},\n"
    '\t"compaction": {\n'
    '\t\t"level": 1,\n'
    '\t\t"sources": []\n'
    "\t},\n"
    '\t"labels": {}\n'
    "}\n"
)


class _SlowBucket(InMemoryBucket):
    """Bucket whose reads take longer than the test deadline."""

    def __init__(self, delay_s: float) -> None:
        super().__init__()
        self.delay_s = delay_s

    def get(self, path, *, timeout=None):
        time.sleep(self.delay_s)
        return super().get(path, timeout=timeout)


def _run(bucket, fmt, *, prefix="", deadline=None):
    out = io.StringIO()
    count = list_blocks(
        bucket,
        select_renderer(fmt),
        prefix=prefix,
        deadline=deadline or Deadline.after(60),
        out=out,
    )
    return out.getvalue(), count


@pytest.fixture
def single_block_bucket(bucket, make_meta):
    bucket.put("01ABC/meta.json", json.dumps(make_meta()))
    return bucket


class TestScenarios:
    """Reference scenarios."""

    def test_names(self, seeded_bucket):
        output, count = _run(seeded_bucket, "")

        assert output == "01ABC\n01DEF\n"
        assert count == 2

    def test_names_do_not_fetch_metadata(self, seeded_bucket):
        _run(seeded_bucket, "")
        assert [c for c in seeded_bucket.calls if c[0] == "get"] == []

    def test_json(self, single_block_bucket):
        output, _ = _run(single_block_bucket, "json")
        assert output == SCENARIO_JSON_OUTPUT

    def test_template(self, single_block_bucket):
        output, _ = _run(single_block_bucket, "{{.ULID}} [{{.MinTime}},{{.MaxTime}}]")
        assert output == "01ABC [0,100]\n"

    def test_corrupted_metadata(self, bucket, make_meta):
        bucket.put("01ABC/meta.json", json.dumps(make_meta())[:30])
        out = io.StringIO()

        with pytest.raises(DecodeFailed) as exc_info:
            list_blocks(bucket, select_renderer("json"), prefix="", deadline=Deadline.after(60), out=out)

        assert "01ABC/meta.json" in str(exc_info.value)
        assert exc_info.value.entry == "01ABC/"
        assert out.getvalue() == ""


class TestOrderingAndAbort:
    """Ordering, abort and deadline behavior."""

    def test_backend_order_preserved(self, bucket, make_meta):
        for ulid in ("01C", "01A", "01B"):
            bucket.put(f"{ulid}/meta.json", json.dumps(make_meta(ulid)))

        output, _ = _run(bucket, "{{.ULID}}")

        assert output == "01C\n01A\n01B\n"

    def test_abort_on_first_decode_error(self, bucket, make_meta):
        bucket.put("01A/meta.json", json.dumps(make_meta("01A")))
        bucket.put("01B/meta.json", "{broken")
        bucket.put("01C/meta.json", json.dumps(make_meta("01C")))
        out = io.StringIO()

        with pytest.raises(DecodeFailed):
            list_blocks(bucket, select_renderer("{{.ULID}}"), prefix="", deadline=Deadline.after(60), out=out)

        assert out.getvalue() == "01A\n"
        assert ("get", "01C/meta.json") not in bucket.calls
        assert bucket.open_streams == 0

    def test_missing_metadata_aborts(self, bucket, make_meta):
        bucket.put("01A/meta.json", json.dumps(make_meta("01A")))
        bucket.put("01B/index", b"")

        with pytest.raises(FetchFailed) as exc_info:
            _run(bucket, "json")
        assert exc_info.value.path == "01B/meta.json"

    def test_plain_object_at_block_level(self, seeded_bucket):
        seeded_bucket.put("README.md", b"hello")

        with pytest.raises(EnumerationFailed, match="not a block directory") as exc_info:
            _run(seeded_bucket, "")
        assert exc_info.value.entry == "README.md"

    def test_expired_deadline_renders_nothing(self, seeded_bucket):
        out = io.StringIO()

        with pytest.raises(DeadlineExceeded):
            list_blocks(seeded_bucket, select_renderer(""), prefix="", deadline=Deadline.after(0), out=out)

        assert out.getvalue() == ""

    def test_slow_fetch_past_deadline_prints_nothing(self, make_meta):
        slow = _SlowBucket(delay_s=0.5)
        slow.put("01ABC/meta.json", json.dumps(make_meta()))
        out = io.StringIO()

        with pytest.raises(DeadlineExceeded, match="writing output") as exc_info:
            list_blocks(slow, select_renderer("json"), prefix="", deadline=Deadline.after(0.2), out=out)

        assert out.getvalue() == ""
        assert exc_info.value.entry == "01ABC/"
        assert slow.open_streams == 0

    def test_write_failure(self, seeded_bucket):
        class _BrokenPipe(io.StringIO):
            def write(self, s):
                raise BrokenPipeError("broken pipe")

        with pytest.raises(RenderFailed, match="broken pipe"):
            list_blocks(seeded_bucket, select_renderer(""), prefix="", deadline=Deadline.after(60), out=_BrokenPipe())

    def test_unknown_template_field_aborts(self, seeded_bucket):
        with pytest.raises(RenderFailed) as exc_info:
            _run(seeded_bucket, "{{.Nope}}")
        assert exc_info.value.entry == "01ABC/"

    def test_prefix(self, bucket, make_meta):
        bucket.put("tenant-a/01ABC/meta.json", json.dumps(make_meta()))
        bucket.put("tenant-b/01DEF/meta.json", json.dumps(make_meta("01DEF")))

        assert _run(bucket, "", prefix="tenant-a/")[0] == "tenant-a/01ABC\n"
        assert _run(bucket, "{{.ULID}}", prefix="tenant-a/")[0] == "01ABC\n"


class TestOperations:
    """Operations facade."""

    def test_ls(self, seeded_bucket):
        ops = Operations(config=OpsConfig(), bucket_factory=lambda: seeded_bucket)
        out = io.StringIO()

        assert ops.ls("", out=out) == 2
        assert out.getvalue() == "01ABC\n01DEF\n"

    def test_ls_with_prefix(self, bucket, make_meta):
        bucket.put("tenant-a/01ABC/meta.json", json.dumps(make_meta()))
        ops = Operations(config=OpsConfig(prefix="tenant-a/"), bucket_factory=lambda: bucket)
        out = io.StringIO()

        ops.ls("json", out=out)

        assert json.loads(out.getvalue())["ulid"] == "01ABC"

    def test_bad_template_never_builds_bucket(self, seeded_bucket):
        built = []

        def factory():
            built.append(True)
            return seeded_bucket

        ops = Operations(config=OpsConfig(), bucket_factory=factory)

        with pytest.raises(SetupFailed, match="invalid template"):
            ops.ls("{{.ULID")

        assert built == []
        assert seeded_bucket.calls == []

    def test_non_positive_timeout(self, seeded_bucket):
        ops = Operations(config=OpsConfig(timeout_s=0), bucket_factory=lambda: seeded_bucket)

        with pytest.raises(SetupFailed, match="timeout must be positive"):
            ops.ls("")
        assert seeded_bucket.calls == []

    def test_bucket_built_once(self, seeded_bucket):
        built = []

        def factory():
            built.append(True)
            return seeded_bucket

        ops = Operations(config=OpsConfig(), bucket_factory=factory)
        ops.ls("", out=io.StringIO())
        ops.ls("json", out=io.StringIO())

        assert built == [True]
