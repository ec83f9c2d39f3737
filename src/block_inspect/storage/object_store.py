"""
Object store buckets.

Implements the Bucket protocol for cloud providers: Azure Blob Storage
(azure-storage-blob), Amazon S3 or S3-compatible stores (boto3) and Google
Cloud Storage (google-cloud-storage).

Retries are left to each SDK's own retry policy, configured from Settings.
Metadata documents are small, so ``get`` downloads the whole object and hands
back an in-memory stream.
"""
from __future__ import annotations

import io
import logging
import math
import re
from typing import BinaryIO, Iterator, Optional

import boto3
from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.credentials import AnonymousCredentials
from google.cloud import storage as gcs
from google.cloud.storage.retry import DEFAULT_RETRY

from ..settings import Settings
from .base import DIR_DELIMITER, Bucket

__all__ = ["AzureBucket", "S3Bucket", "GCSBucket"]

logger = logging.getLogger(__name__)

_S3_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}

# Sockets reject a zero timeout (it means non-blocking)
_MIN_SOCKET_TIMEOUT_S = 0.001


class AzureBucket(Bucket):
    """
    Bucket adapter for an Azure Blob Storage container.

    Uses azure-storage-blob SDK with connection string or account+key authentication.
    Supports custom endpoints for Azurite and private Azure clouds.
    """

    def __init__(self, container: str, *, settings: Settings) -> None:
        """
        Initialize Azure adapter with settings.

        Args:
            container: Container name
            settings: Settings containing Azure authentication and configuration

        Raises:
            ValueError: If Azure authentication is not properly configured
        """
        self._settings = settings
        self._container_name = container
        self._validate_azure_auth()

        # Log configuration (without secrets)
        if settings.az_connection_string:
            logger.debug("Azure bucket using connection string auth")
        else:
            logger.debug(f"Azure bucket using account+key auth for {settings.az_account}")
        if settings.az_blob_endpoint:
            logger.debug(f"Azure bucket using custom endpoint: {settings.az_blob_endpoint}")

        self._container = self._service_client().get_container_client(container)

    def _validate_azure_auth(self) -> None:
        """Validate Azure authentication configuration."""
        has_conn_str = bool(self._settings.az_connection_string)
        has_account_key = bool(self._settings.az_account and self._settings.az_key)

        if not has_conn_str and not has_account_key:
            raise ValueError(
                "Azure authentication not configured: need AZURE_STORAGE_CONNECTION_STRING "
                "or (AZURE_STORAGE_ACCOUNT + AZURE_STORAGE_KEY)"
            )

    def _service_client(self) -> BlobServiceClient:
        """
        Build the blob service client.

        Connection patterns:

        1. Connection string: ``BlobServiceClient.from_connection_string()``
        2. Connection string + custom endpoint: account name and key are taken
           from the connection string, the endpoint is ``{endpoint}/{account}``
        3. Account+key: ``https://{account}.blob.core.windows.net``
        4. Account+key + custom endpoint: ``{endpoint}/{account}``
        """
        s = self._settings
        client_opts = dict(
            connection_timeout=s.request_timeout_s,
            read_timeout=s.request_timeout_s,
            retry_total=s.storage_retries,
            retry_backoff_factor=0.4,
        )

        if s.az_connection_string:
            if not s.az_blob_endpoint:
                return BlobServiceClient.from_connection_string(s.az_connection_string, **client_opts)
            account = re.search(r"AccountName=([^;]+)", s.az_connection_string)
            key = re.search(r"AccountKey=([^;]+)", s.az_connection_string)
            if not account:
                return BlobServiceClient.from_connection_string(s.az_connection_string, **client_opts)
            credential = {"account_name": account.group(1), "account_key": key.group(1)} if key else None
            return BlobServiceClient(
                account_url=f"{s.az_blob_endpoint.rstrip('/')}/{account.group(1)}",
                credential=credential,
                **client_opts,
            )

        if s.az_blob_endpoint:
            account_url = f"{s.az_blob_endpoint.rstrip('/')}/{s.az_account}"
        else:
            account_url = f"https://{s.az_account}.blob.core.windows.net"
        return BlobServiceClient(account_url=account_url, credential=s.az_key, **client_opts)

    @property
    def name(self) -> str:
        return self._container_name

    def iter(self, prefix: str) -> Iterator[str]:
        """List blobs and virtual directories directly under ``prefix``."""
        try:
            for item in self._container.walk_blobs(name_starts_with=prefix or None, delimiter=DIR_DELIMITER):
                yield item.name
        except AzureError as e:
            raise OSError(f"Azure list error for {self._container_name}/{prefix}: {e}") from e

    def get(self, path: str, *, timeout: Optional[float] = None) -> BinaryIO:
        """
        Download a blob.

        Raises:
            FileNotFoundError: If the blob does not exist
            OSError: For other Azure/network errors
        """
        opts = {}
        if timeout is not None:
            # Server-side timeout, whole seconds
            opts["timeout"] = max(1, math.ceil(timeout))
        try:
            data = self._container.download_blob(path, **opts).readall()
        except ResourceNotFoundError:
            raise FileNotFoundError(f"Blob not found: {self._container_name}/{path}")
        except AzureError as e:
            raise OSError(f"Azure blob download error: {e}") from e
        return io.BytesIO(data)


class S3Bucket(Bucket):
    """Bucket adapter for Amazon S3 and S3-compatible stores."""

    def __init__(self, bucket: str, *, settings: Settings, client=None) -> None:
        """
        Args:
            bucket: Bucket name
            settings: Region, endpoint, timeouts and retry settings
            client: Pre-built boto3 S3 client (tests); built from settings if None
        """
        self._bucket = bucket
        if client is None:
            config = Config(
                connect_timeout=settings.request_timeout_s,
                read_timeout=settings.request_timeout_s,
                retries={"max_attempts": settings.storage_retries, "mode": "standard"},
            )
            client = boto3.client(
                "s3",
                region_name=settings.s3_region,
                endpoint_url=settings.s3_endpoint_url,
                config=config,
            )
            logger.debug(
                f"S3 bucket {bucket} region={settings.s3_region} endpoint={settings.s3_endpoint_url or 'default'}"
            )
        self._client = client

    @property
    def name(self) -> str:
        return self._bucket

    def iter(self, prefix: str) -> Iterator[str]:
        """List common prefixes and keys directly under ``prefix``, page by page."""
        paginator = self._client.get_paginator("list_objects_v2")
        try:
            # list_objects_v2 returns at most 1000 keys per page
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix, Delimiter=DIR_DELIMITER):
                names = [p["Prefix"] for p in page.get("CommonPrefixes", [])]
                names.extend(obj["Key"] for obj in page.get("Contents", []) if obj["Key"] != prefix)
                yield from sorted(names)
        except (BotoCoreError, ClientError) as e:
            raise OSError(f"S3 list error for {self._bucket}/{prefix}: {e}") from e

    def get(self, path: str, *, timeout: Optional[float] = None) -> BinaryIO:
        """
        Download an object.

        The request itself is bounded by the client config; ``timeout`` bounds
        each socket read of the body.

        Raises:
            FileNotFoundError: If the object does not exist
            OSError: For other S3/network errors
        """
        try:
            obj = self._client.get_object(Bucket=self._bucket, Key=path)
            body = obj["Body"]
            try:
                if timeout is not None:
                    body.set_socket_timeout(max(timeout, _MIN_SOCKET_TIMEOUT_S))
                data = body.read()
            finally:
                body.close()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in _S3_NOT_FOUND_CODES:
                raise FileNotFoundError(f"Object not found: s3://{self._bucket}/{path}") from e
            raise OSError(f"S3 get error: {e}") from e
        except BotoCoreError as e:
            raise OSError(f"S3 get error: {e}") from e
        return io.BytesIO(data)


class GCSBucket(Bucket):
    """
    Bucket adapter for Google Cloud Storage.

    Credentials come from Application Default Credentials. With a custom
    endpoint (fake-gcs-server and similar emulators) the client is anonymous.
    """

    def __init__(self, bucket: str, *, settings: Settings, client=None) -> None:
        """
        Args:
            bucket: Bucket name
            settings: Project, endpoint, timeouts and retry settings
            client: Pre-built storage client (tests); built from settings if None
        """
        self._bucket_name = bucket
        self._request_timeout = settings.request_timeout_s
        self._retry = DEFAULT_RETRY if settings.storage_retries > 0 else None
        if client is None:
            if settings.gcs_endpoint:
                logger.debug(f"GCS bucket using custom endpoint: {settings.gcs_endpoint}")
                client = gcs.Client(
                    project=settings.gcs_project,
                    credentials=AnonymousCredentials(),
                    client_options={"api_endpoint": settings.gcs_endpoint},
                )
            else:
                client = gcs.Client(project=settings.gcs_project)
        self._client = client

    @property
    def name(self) -> str:
        return self._bucket_name

    def _timeout(self, timeout: Optional[float]) -> float:
        if timeout is None:
            return self._request_timeout
        return max(min(timeout, self._request_timeout), _MIN_SOCKET_TIMEOUT_S)

    def iter(self, prefix: str) -> Iterator[str]:
        """List prefixes and blobs directly under ``prefix``, page by page."""
        try:
            blobs = self._client.list_blobs(
                self._bucket_name,
                prefix=prefix or None,
                delimiter=DIR_DELIMITER,
                timeout=self._request_timeout,
                retry=self._retry,
            )
            for page in blobs.pages:
                names = list(page.prefixes)
                names.extend(blob.name for blob in page if blob.name != prefix)
                yield from sorted(names)
        except GoogleAPIError as e:
            raise OSError(f"GCS list error for {self._bucket_name}/{prefix}: {e}") from e

    def get(self, path: str, *, timeout: Optional[float] = None) -> BinaryIO:
        """
        Download an object, bounded by ``timeout`` (capped at the request timeout).

        Raises:
            FileNotFoundError: If the object does not exist
            OSError: For other GCS/network errors
        """
        blob = self._client.bucket(self._bucket_name).blob(path)
        try:
            data = blob.download_as_bytes(timeout=self._timeout(timeout), retry=self._retry)
        except NotFound as e:
            raise FileNotFoundError(f"Object not found: gs://{self._bucket_name}/{path}") from e
        except GoogleAPIError as e:
            raise OSError(f"GCS get error: {e}") from e
        return io.BytesIO(data)
