"""
Bucket URI parsing.

Provides consistent parsing and validation of the ``--bucket`` argument across
storage providers (Azure, S3, GCS, local filesystem).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
import re

__all__ = ["ParsedBucketURI", "SCHEMES", "parse_bucket_uri", "join_prefix"]

SCHEMES = ("az", "s3", "gs", "file")


@dataclass(frozen=True)
class ParsedBucketURI:
    """
    Parsed components of a bucket URI.

    Attributes:
        scheme: Storage provider scheme (az, s3, gs, file)
        bucket: Container/bucket name, or the root directory for ``file``
        prefix: Key prefix inside the bucket, empty or ending with ``/``
        original: Original URI string for error messages
    """
    scheme: Literal["az", "s3", "gs", "file"]
    bucket: str
    prefix: str
    original: str


def parse_bucket_uri(uri: str, *, default_scheme: str = "az") -> ParsedBucketURI:
    """
    Parse and validate a bucket URI.

    Accepts ``{az|s3|gs}://bucket[/prefix]``, ``file:///abs/dir`` and bare
    bucket names, which use ``default_scheme``.

    Validation:
    - Rejects URIs containing ".." (path traversal)
    - Rejects URIs with backslashes (non-POSIX paths)
    - Rejects empty bucket names

    Args:
        uri: Bucket URI to parse
        default_scheme: Scheme for bare bucket names

    Returns:
        ParsedBucketURI with validated components

    Raises:
        ValueError: If URI format is invalid or contains unsafe patterns

    Examples:
        >>> parse_bucket_uri("s3://metrics/tenant-a")
        ParsedBucketURI(scheme='s3', bucket='metrics', prefix='tenant-a/', original='...')

        >>> parse_bucket_uri("metrics")
        ParsedBucketURI(scheme='az', bucket='metrics', prefix='', original='metrics')
    """
    if not uri:
        raise ValueError("bucket URI cannot be empty")

    if ".." in uri:
        raise ValueError(f"bucket URI contains path traversal: {uri}")

    if "\\" in uri:
        raise ValueError(f"bucket URI contains backslashes (use forward slashes): {uri}")

    match = re.match(r"^([a-z0-9]+)://(.*)$", uri)
    if match:
        scheme, remainder = match.groups()
    else:
        scheme, remainder = default_scheme, uri

    if scheme not in SCHEMES:
        raise ValueError(f"Unsupported bucket scheme '{scheme}' in {uri}. Supported: {', '.join(SCHEMES)}")

    if scheme == "file":
        # file:///data/blocks -> root directory "/data/blocks", no prefix
        if not remainder.startswith("/"):
            raise ValueError(f"file bucket URI must use an absolute path: {uri}")
        root = remainder.rstrip("/") or "/"
        return ParsedBucketURI(scheme="file", bucket=root, prefix="", original=uri)

    if remainder.startswith("/"):
        raise ValueError(f"bucket name cannot start with '/': {uri}")

    bucket, _, prefix = remainder.partition("/")
    if not bucket:
        raise ValueError(f"bucket name cannot be empty: {uri}")

    prefix = prefix.strip("/")
    return ParsedBucketURI(
        scheme=scheme,  # type: ignore  # We validated it's one of the literals
        bucket=bucket,
        prefix=f"{prefix}/" if prefix else "",
        original=uri,
    )


def join_prefix(base: str, extra: str) -> str:
    """
    Join two listing prefixes, normalizing to empty or ``.../``.

    Examples:
        >>> join_prefix("tenant-a/", "2024")
        'tenant-a/2024/'
        >>> join_prefix("", "")
        ''
    """
    if ".." in extra.split("/"):
        raise ValueError(f"prefix contains path traversal: {extra}")
    parts = [p for p in (base.strip("/"), extra.strip("/")) if p]
    return "/".join(parts) + "/" if parts else ""
