"""
Bucket walker.

Drives one enumeration pass over a bucket prefix. Entries are processed one at
a time, in the order the storage backend yields them; the first failure stops
the walk and is raised to the caller.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import DeadlineExceeded, EnumerationFailed, InspectError
from .storage.base import Bucket

__all__ = ["Deadline", "walk"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deadline:
    """
    Absolute point in time (monotonic clock) after which a walk must abort.

    A single Deadline covers the listing and every metadata fetch of a walk.
    """
    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        """Deadline ``seconds`` from now."""
        return cls(expires_at=time.monotonic() + seconds)

    def remaining(self) -> float:
        """Seconds left before expiry (zero or negative once expired)."""
        return self.expires_at - time.monotonic()

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self, operation: str, *, path: Optional[str] = None) -> None:
        """
        Raise if the deadline has passed.

        Raises:
            DeadlineExceeded: If no time is left for ``operation``
        """
        if self.expired:
            raise DeadlineExceeded(f"deadline exceeded before {operation}", path=path)


def walk(bucket: Bucket, prefix: str, deadline: Deadline, on_entry: Callable[[str], None]) -> int:
    """
    Call ``on_entry`` once per entry directly under ``prefix``.

    Args:
        bucket: Storage accessor to list
        prefix: Prefix to list, empty for the bucket root
        deadline: Time budget for the whole walk
        on_entry: Per-entry callback; raising aborts the walk

    Returns:
        Number of entries processed

    Raises:
        DeadlineExceeded: If the deadline passes before the walk completes
        EnumerationFailed: If listing fails or ``on_entry`` raises a non-inspection error
        InspectError: The error raised by ``on_entry``, with ``entry`` set
    """
    deadline.check(f"listing {prefix!r}")
    logger.debug(f"Walking prefix {prefix!r}")

    count = 0
    entries = bucket.iter(prefix)
    while True:
        try:
            name = next(entries)
        except StopIteration:
            break
        except InspectError:
            raise
        except Exception as e:
            raise EnumerationFailed(f"iterate bucket prefix {prefix!r}: {e}") from e

        deadline.check("processing entry", path=name)
        try:
            on_entry(name)
        except InspectError as e:
            if e.entry is None:
                e.entry = name
            raise
        except Exception as e:
            raise EnumerationFailed(f"process entry: {e}", entry=name) from e
        count += 1

    # A listing that only completed after the deadline is not a success
    deadline.check(f"completing listing of {prefix!r}")
    logger.debug(f"Walked {count} entries under {prefix!r}")
    return count
