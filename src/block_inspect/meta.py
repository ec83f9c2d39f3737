"""
Metadata fetch and validation.

Reads a block's ``meta.json`` from the bucket and decodes it into a
``BlockMeta``. Only decoded documents leave this module; raw bytes never do.
"""
from __future__ import annotations

import logging
import posixpath
from contextlib import closing

from pydantic import ValidationError

from .errors import DecodeFailed, EnumerationFailed, FetchFailed
from .models import META_FILENAME, BlockMeta
from .storage.base import Bucket
from .walker import Deadline

__all__ = ["block_id", "meta_path", "fetch_meta"]

logger = logging.getLogger(__name__)


def block_id(entry: str) -> str:
    """
    Block identifier for a directory-like bucket entry.

    Examples:
        >>> block_id("01ABC/")
        '01ABC'
        >>> block_id("tenant-a/01ABC/")
        '01ABC'

    Raises:
        EnumerationFailed: If the entry is not directory-like
    """
    if not entry.endswith("/") or entry == "/":
        raise EnumerationFailed("entry is not a block directory", entry=entry)
    return posixpath.basename(entry[:-1])


def meta_path(entry: str) -> str:
    """Object path of the metadata document under ``entry``."""
    return posixpath.join(entry, META_FILENAME)


def fetch_meta(bucket: Bucket, entry: str, deadline: Deadline) -> BlockMeta:
    """
    Fetch and validate the metadata document of one block.

    Args:
        bucket: Storage accessor
        entry: Directory-like entry name yielded by the walker
        deadline: Walk deadline; the remaining time bounds the read

    Returns:
        Decoded, validated metadata

    Raises:
        DeadlineExceeded: If the deadline has passed
        FetchFailed: If the object cannot be opened or read
        DecodeFailed: If the content is not a valid document for this block
    """
    expected_id = block_id(entry)
    path = meta_path(entry)
    deadline.check("fetching metadata", path=path)
    logger.debug(f"Fetching {path}")

    try:
        stream = bucket.get(path, timeout=deadline.remaining())
    except FileNotFoundError as e:
        raise FetchFailed(f"get reader for {META_FILENAME}: object not found", path=path) from e
    except OSError as e:
        raise FetchFailed(f"get reader for {META_FILENAME}: {e}", path=path) from e

    with closing(stream):
        try:
            data = stream.read()
        except OSError as e:
            raise FetchFailed(f"read {META_FILENAME}: {e}", path=path) from e
        try:
            meta = BlockMeta.from_json(data)
        except ValidationError as e:
            raise DecodeFailed(
                f"decode {META_FILENAME}: {e.error_count()} validation error(s): "
                f"{_first_error(e)}",
                path=path,
            ) from None

    if meta.ulid != expected_id:
        raise DecodeFailed(
            f"decode {META_FILENAME}: ulid {meta.ulid!r} does not match block {expected_id!r}",
            path=path,
        )
    return meta


def _first_error(exc: ValidationError) -> str:
    err = exc.errors(include_url=False, include_input=False)[0]
    loc = ".".join(str(part) for part in err["loc"]) or "<root>"
    return f"{loc}: {err['msg']}"
