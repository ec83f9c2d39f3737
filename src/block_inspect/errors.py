"""
Error classes for block inspection.

Every failure in the pipeline is fatal to the walk. The classes below let the
CLI map each kind of failure to its own exit code, while the message keeps the
object path and bucket entry that were being processed.
"""
from __future__ import annotations

from typing import Optional


class InspectError(Exception):
    """
    Base class for all block inspection errors.

    Attributes:
        path: Object path being read when the error happened, if any
        entry: Bucket entry being processed, filled in by the walker
    """

    def __init__(self, message: str, *, path: Optional[str] = None, entry: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.entry = entry

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"path={self.path}")
        if self.entry and self.entry != self.path:
            parts.append(f"entry={self.entry}")
        return " ".join(parts)


class SetupFailed(InspectError):
    """
    Raised before enumeration starts.

    Raised when:
    - The output template does not compile
    - Settings or the bucket URI are invalid
    - The storage client cannot be constructed
    """
    pass


class EnumerationFailed(InspectError):
    """
    Listing the bucket failed.

    Raised when:
    - The storage backend fails while listing
    - An entry does not end with the directory separator
    - The per-entry callback fails with a non-inspection error
    """
    pass


class FetchFailed(InspectError):
    """Metadata object is missing or could not be read."""
    pass


class DecodeFailed(InspectError):
    """Metadata object content is not a valid block meta document."""
    pass


class RenderFailed(InspectError):
    """Encoding, template execution or writing the output failed."""
    pass


class DeadlineExceeded(InspectError):
    """The walk ran past its time budget."""
    pass


__all__ = [
    "InspectError",
    "SetupFailed",
    "EnumerationFailed",
    "FetchFailed",
    "DecodeFailed",
    "RenderFailed",
    "DeadlineExceeded",
]
