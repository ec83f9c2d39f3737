"""
Bucket factory.

Provides a single factory function that creates the Bucket implementation for
a bucket URI, so call sites never branch on the storage provider.
"""
from __future__ import annotations

from ..errors import SetupFailed
from ..settings import Settings
from .base import Bucket
from .uri import ParsedBucketURI


def make_bucket(parsed: ParsedBucketURI, settings: Settings) -> Bucket:
    """
    Create the storage accessor for a parsed bucket URI.

    Args:
        parsed: Parsed ``--bucket`` value
        settings: Storage configuration

    Returns:
        Bucket implementation for the URI scheme

    Raises:
        SetupFailed: If the client cannot be constructed

    Examples:
        >>> make_bucket(parse_bucket_uri("file:///data/blocks"), settings)
        <LocalBucket ...>
    """
    # Imported here so a local bucket does not pay for cloud SDK imports
    try:
        if parsed.scheme == "file":
            from .local import LocalBucket
            return LocalBucket(parsed.bucket)
        if parsed.scheme == "az":
            from .object_store import AzureBucket
            return AzureBucket(parsed.bucket, settings=settings)
        if parsed.scheme == "s3":
            from .object_store import S3Bucket
            return S3Bucket(parsed.bucket, settings=settings)
        if parsed.scheme == "gs":
            from .object_store import GCSBucket
            return GCSBucket(parsed.bucket, settings=settings)
    except SetupFailed:
        raise
    except Exception as e:
        raise SetupFailed(f"create {parsed.scheme} bucket client for {parsed.original}: {e}") from e

    # parse_bucket_uri only produces the schemes above
    raise SetupFailed(f"Unsupported bucket scheme: {parsed.scheme}")


__all__ = ["make_bucket"]
