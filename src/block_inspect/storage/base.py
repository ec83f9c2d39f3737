"""
Storage interfaces for block inspection.

The Bucket protocol is the whole boundary between the inspection pipeline and
object storage. Implementations only ever read; credentials, transport and
retry policy are their own business.
"""
from __future__ import annotations

from typing import BinaryIO, Iterator, Optional, Protocol, runtime_checkable

__all__ = ["Bucket", "DIR_DELIMITER"]

DIR_DELIMITER = "/"


@runtime_checkable
class Bucket(Protocol):
    """Protocol for read-only bucket access."""

    @property
    def name(self) -> str:
        """Bucket name, used in log and error messages."""
        ...

    def iter(self, prefix: str) -> Iterator[str]:
        """
        Yield entries directly under ``prefix`` (one level, not recursive).

        Directory-like entries (common prefixes) end with ``/``; plain objects
        at that level are yielded as their full key. Names include ``prefix``.

        Args:
            prefix: Prefix to list, empty for the bucket root

        Raises:
            OSError: For backend errors while listing
        """
        ...

    def get(self, path: str, *, timeout: Optional[float] = None) -> BinaryIO:
        """
        Open an object for reading. The caller closes the returned stream.

        Args:
            path: Object key
            timeout: Seconds the request may take, None for the backend default

        Raises:
            FileNotFoundError: If the object does not exist
            OSError: For other backend errors
        """
        ...
