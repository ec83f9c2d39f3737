"""
CLI Context for managing application dependencies.

Provides a clean way to manage CLI-level dependencies like settings and the
bucket accessor, avoiding global state and enabling proper dependency injection.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import SetupFailed
from .settings import Settings, create_settings_from_env
from .storage.base import Bucket
from .storage.bucket_factory import make_bucket
from .storage.uri import ParsedBucketURI, parse_bucket_uri


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    Manages application-level dependencies (settings, bucket) that are
    initialized once and shared across a CLI command execution.
    """
    settings: Settings
    bucket_uri: ParsedBucketURI
    _bucket: Optional[Bucket] = None

    @classmethod
    def from_env(cls, bucket: str) -> CLIContext:
        """
        Create CLI context from environment variables and the ``--bucket`` value.

        Raises:
            SetupFailed: If settings or the bucket URI are invalid
        """
        try:
            settings = create_settings_from_env()
            parsed = parse_bucket_uri(bucket, default_scheme=settings.default_scheme)
        except ValueError as e:
            raise SetupFailed(str(e)) from e
        return cls(settings=settings, bucket_uri=parsed)

    @property
    def bucket(self) -> Bucket:
        """
        Get or create the bucket accessor (lazy initialization).

        The client is created on first access, so commands that fail
        argument validation never construct one.
        """
        if self._bucket is None:
            self._bucket = make_bucket(self.bucket_uri, self.settings)
        return self._bucket
