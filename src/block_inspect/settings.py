"""
Settings and configuration for block inspection.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables when the CLI context is built.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .storage.uri import SCHEMES

__all__ = ["Settings", "create_settings_from_env"]


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for block inspection.

    General Settings:
        default_scheme: Storage scheme used for bare bucket names (az, s3, gs, file)
        walk_timeout_s: Time budget for one whole bucket walk in seconds
        request_timeout_s: Per-request timeout handed to storage SDKs
        storage_retries: Retries the storage SDK may perform (0=no retry)

    Azure Blob Storage Settings:
        az_connection_string: Azure storage connection string
        az_account: Azure storage account name
        az_key: Azure storage account key
        az_blob_endpoint: Custom Azure blob endpoint (for Azurite/private endpoints)

    S3 Settings:
        s3_region: AWS region of the bucket
        s3_endpoint_url: Custom S3 endpoint (MinIO, R2, ...)

    GCS Settings:
        gcs_project: Google Cloud project for the storage client
        gcs_endpoint: Custom GCS endpoint (fake-gcs-server and other emulators)
    """
    default_scheme: str = "az"
    walk_timeout_s: float = 300.0
    request_timeout_s: float = 30.0
    storage_retries: int = 5

    # Azure settings
    az_connection_string: Optional[str] = None
    az_account: Optional[str] = None
    az_key: Optional[str] = None
    az_blob_endpoint: Optional[str] = None

    # S3 settings
    s3_region: Optional[str] = None
    s3_endpoint_url: Optional[str] = None

    # GCS settings
    gcs_project: Optional[str] = None
    gcs_endpoint: Optional[str] = None

    def __post_init__(self):
        """Validate settings on construction."""
        if self.default_scheme not in SCHEMES:
            raise ValueError(
                f"Invalid default_scheme: {self.default_scheme}. Supported: {', '.join(SCHEMES)}"
            )

        # Validate timeouts are positive
        if self.walk_timeout_s <= 0:
            raise ValueError(f"walk_timeout_s must be positive, got {self.walk_timeout_s}")

        if self.request_timeout_s <= 0:
            raise ValueError(f"request_timeout_s must be positive, got {self.request_timeout_s}")

        # Validate retry count is non-negative
        if self.storage_retries < 0:
            raise ValueError(f"storage_retries must be non-negative, got {self.storage_retries}")

        # Validate Azure auth: either connection string OR (account + key)
        has_conn_str = bool(self.az_connection_string)
        has_account_key = bool(self.az_account and self.az_key)

        if has_conn_str and has_account_key:
            raise ValueError("Specify either az_connection_string OR (az_account + az_key), not both")

        # Azure auth is optional here (S3, GCS and local buckets don't need it),
        # but if partially configured it must be complete
        if self.az_account and not self.az_key:
            raise ValueError("az_account specified but az_key is missing")
        if self.az_key and not self.az_account:
            raise ValueError("az_key specified but az_account is missing")


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        General:
        - BLOCK_INSPECT_DEFAULT_SCHEME (default: az)
        - BLOCK_INSPECT_WALK_TIMEOUT (default: 300.0)
        - BLOCK_INSPECT_REQUEST_TIMEOUT (default: 30.0)
        - BLOCK_INSPECT_STORAGE_RETRIES (default: 5)

        Azure:
        - AZURE_STORAGE_CONNECTION_STRING (optional)
        - AZURE_STORAGE_ACCOUNT (optional)
        - AZURE_STORAGE_KEY (optional)
        - BLOCK_INSPECT_AZURE_BLOB_ENDPOINT (optional, for Azurite/custom endpoints)

        S3:
        - AWS_REGION or AWS_DEFAULT_REGION (optional)
        - BLOCK_INSPECT_S3_ENDPOINT (optional)

        GCS:
        - GOOGLE_CLOUD_PROJECT (optional)
        - BLOCK_INSPECT_GCS_ENDPOINT (optional, for emulators)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    return Settings(
        default_scheme=os.getenv("BLOCK_INSPECT_DEFAULT_SCHEME", "az").lower(),
        walk_timeout_s=get_float("BLOCK_INSPECT_WALK_TIMEOUT", 300.0),
        request_timeout_s=get_float("BLOCK_INSPECT_REQUEST_TIMEOUT", 30.0),
        storage_retries=get_int("BLOCK_INSPECT_STORAGE_RETRIES", 5),
        az_connection_string=os.getenv("AZURE_STORAGE_CONNECTION_STRING"),
        az_account=os.getenv("AZURE_STORAGE_ACCOUNT"),
        az_key=os.getenv("AZURE_STORAGE_KEY"),
        az_blob_endpoint=os.getenv("BLOCK_INSPECT_AZURE_BLOB_ENDPOINT"),
        s3_region=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION"),
        s3_endpoint_url=os.getenv("BLOCK_INSPECT_S3_ENDPOINT"),
        gcs_project=os.getenv("GOOGLE_CLOUD_PROJECT"),
        gcs_endpoint=os.getenv("BLOCK_INSPECT_GCS_ENDPOINT"),
    )
