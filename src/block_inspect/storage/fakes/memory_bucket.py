"""
In-memory bucket implementation for testing.

This implementation explicitly subclasses Bucket to ensure interface changes
break CI immediately, preventing silent drift.
"""
from __future__ import annotations

import io
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple

from ..base import DIR_DELIMITER, Bucket

__all__ = ["InMemoryBucket"]


class _TrackedStream(io.BytesIO):
    """BytesIO that reports its close() back to the owning bucket."""

    def __init__(self, data: bytes, owner: InMemoryBucket) -> None:
        super().__init__(data)
        self._owner = owner
        owner.open_streams += 1

    def close(self) -> None:
        if not self.closed:
            self._owner.open_streams -= 1
        super().close()


class InMemoryBucket(Bucket):
    """
    In-memory bucket for testing.

    This is a test double; not for production use.
    Keys are object paths; values are bytes. Listing order follows insertion
    order rather than sorting, so tests can tell whether callers reorder.
    Every ``iter`` and ``get`` call is recorded in ``calls``.
    """

    def __init__(self, name: str = "test-bucket") -> None:
        self._name = name
        self._objects: Dict[str, bytes] = {}
        self._get_errors: Dict[str, Exception] = {}
        self._iter_error: Optional[Exception] = None
        self.calls: List[Tuple[str, str]] = []
        self.open_streams = 0

    @property
    def name(self) -> str:
        return self._name

    def put(self, path: str, data: bytes | str) -> None:
        """Store object content."""
        self._objects[path] = data.encode() if isinstance(data, str) else data

    def fail_get(self, path: str, exc: Exception) -> None:
        """Make ``get(path)`` raise ``exc``."""
        self._get_errors[path] = exc

    def fail_iter(self, exc: Exception) -> None:
        """Make listing raise ``exc`` after yielding every entry."""
        self._iter_error = exc

    def iter(self, prefix: str) -> Iterator[str]:
        self.calls.append(("iter", prefix))
        seen = []
        for key in self._objects:
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if not rest:
                continue
            head, sep, _ = rest.partition(DIR_DELIMITER)
            name = f"{prefix}{head}{sep}"
            if name not in seen:
                seen.append(name)
        yield from seen
        if self._iter_error is not None:
            raise self._iter_error

    def get(self, path: str, *, timeout: Optional[float] = None) -> BinaryIO:
        self.calls.append(("get", path))
        if path in self._get_errors:
            raise self._get_errors[path]
        if path not in self._objects:
            raise FileNotFoundError(path)
        return _TrackedStream(self._objects[path], self)

    def clear(self) -> None:
        """Clear all stored data (test utility)."""
        self._objects.clear()
        self._get_errors.clear()
        self._iter_error = None
        self.calls.clear()
