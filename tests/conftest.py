"""Root pytest configuration for block-inspect tests."""
import json

import pytest

from block_inspect.settings import Settings
from block_inspect.storage.fakes import InMemoryBucket

# Environment variables read by create_settings_from_env and the CLI
_ENV_VARS = [
    "BLOCK_INSPECT_BUCKET",
    "BLOCK_INSPECT_DEFAULT_SCHEME",
    "BLOCK_INSPECT_WALK_TIMEOUT",
    "BLOCK_INSPECT_REQUEST_TIMEOUT",
    "BLOCK_INSPECT_STORAGE_RETRIES",
    "BLOCK_INSPECT_AZURE_BLOB_ENDPOINT",
    "BLOCK_INSPECT_S3_ENDPOINT",
    "AZURE_STORAGE_CONNECTION_STRING",
    "AZURE_STORAGE_ACCOUNT",
    "AZURE_STORAGE_KEY",
    "AWS_REGION",
    "AWS_DEFAULT_REGION",
    "GOOGLE_CLOUD_PROJECT",
    "BLOCK_INSPECT_GCS_ENDPOINT",
]


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Start every test from a clean environment."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def settings():
    """Standard test settings."""
    return Settings()


@pytest.fixture
def bucket():
    """Empty in-memory bucket."""
    return InMemoryBucket()


@pytest.fixture
def make_meta():
    """Factory for meta.json documents (as dicts) in on-disk key format."""
    def _make(ulid="01ABC", **overrides):
        doc = {
            "version": 1,
            "ulid": ulid,
            "minTime": 0,
            "maxTime": 100,
            "stats": {"samples": 10},
            "compaction": {"level": 1, "sources": []},
            "labels": {},
        }
        doc.update(overrides)
        return doc
    return _make


@pytest.fixture
def seeded_bucket(bucket, make_meta):
    """Bucket holding two valid blocks, 01ABC and 01DEF."""
    for ulid in ("01ABC", "01DEF"):
        bucket.put(f"{ulid}/meta.json", json.dumps(make_meta(ulid)))
        bucket.put(f"{ulid}/chunks/000001", b"\x00" * 8)
    return bucket
