"""
Operations Facade - Application service layer.

Provides a clean interface between the CLI and the listing pipeline,
centralizing command orchestration and policy decisions while keeping
CLI commands thin and testable.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from ..errors import SetupFailed
from ..pipeline import list_blocks
from ..render import select_renderer
from ..storage.base import Bucket
from ..walker import Deadline


@dataclass(frozen=True)
class OpsConfig:
    """
    Configuration for Operations facade.

    Centralizes policy decisions that apply to every command.
    """
    timeout_s: float = 300.0      # Time budget for one bucket walk
    prefix: str = ""              # Listing prefix inside the bucket
    verbose: bool = False         # Show detailed output


class Operations:
    """
    Application service facade for CLI operations.

    The bucket is supplied as a factory and only built once a command has
    validated its own arguments, so a bad output template never causes a
    storage client to be created, let alone a request to be sent.
    """

    def __init__(self, config: OpsConfig, bucket_factory: Callable[[], Bucket]):
        """
        Initialize Operations facade.

        Args:
            config: Configuration settings
            bucket_factory: Returns the storage accessor, called at most once per command
        """
        self.cfg = config
        self._bucket_factory = bucket_factory
        self._bucket: Optional[Bucket] = None

    @property
    def bucket(self) -> Bucket:
        if self._bucket is None:
            self._bucket = self._bucket_factory()
        return self._bucket

    def ls(self, fmt: str = "", *, out: Optional[TextIO] = None) -> int:
        """
        List blocks in the bucket.

        Args:
            fmt: Output format: "" (names), "json" or a field template
            out: Output stream (defaults to stdout)

        Returns:
            Number of blocks listed

        Raises:
            SetupFailed: If the template is invalid or the bucket cannot be built
            InspectError: First failure of the walk
        """
        renderer = select_renderer(fmt)
        if self.cfg.timeout_s <= 0:
            raise SetupFailed(f"timeout must be positive, got {self.cfg.timeout_s}")

        bucket = self.bucket
        deadline = Deadline.after(self.cfg.timeout_s)
        return list_blocks(
            bucket,
            renderer,
            prefix=self.cfg.prefix,
            deadline=deadline,
            out=out if out is not None else sys.stdout,
        )
