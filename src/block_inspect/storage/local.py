"""
Filesystem bucket.

Treats a local directory as a bucket: sub-directories are directory-like
entries and files are objects. Handy for inspecting block directories copied
out of object storage, and for end-to-end tests without cloud credentials.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from ..path_safety import safe_key
from .base import DIR_DELIMITER, Bucket

__all__ = ["LocalBucket"]

logger = logging.getLogger(__name__)


class LocalBucket(Bucket):
    """Bucket backed by a local directory."""

    def __init__(self, root: str | os.PathLike) -> None:
        self._root = Path(root)
        if not self._root.is_dir():
            raise ValueError(f"bucket directory does not exist: {self._root}")
        logger.debug(f"Local bucket rooted at {self._root}")

    @property
    def name(self) -> str:
        return str(self._root)

    def iter(self, prefix: str) -> Iterator[str]:
        directory = self._root / safe_key(prefix) if prefix else self._root
        if not directory.is_dir():
            # An object-store listing of a missing prefix is simply empty
            return
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
        for entry in entries:
            if entry.is_dir():
                yield f"{prefix}{entry.name}{DIR_DELIMITER}"
            else:
                yield f"{prefix}{entry.name}"

    def get(self, path: str, *, timeout: Optional[float] = None) -> BinaryIO:
        try:
            key = safe_key(path)
        except ValueError as e:
            raise OSError(str(e)) from e
        return open(self._root / key, "rb")
