# src/storage/s3_store.py — v1
"""S3-compatible object store (STORE_BACKEND=s3).

Supports AWS S3, MinIO, and other S3-compatible storage. Path-style
addressing is forced for MinIO compatibility. Retries and auth are
left to boto3.
"""

from __future__ import annotations

import logging
from pathlib import Path

from s3cache.core.models import CacheMetadata
from s3cache.storage.base_object_store import BaseObjectStore, CacheNotFoundError, StoreError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class S3ObjectStore(BaseObjectStore):
    """Cache archives in an S3 bucket."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        region: str | None = None,
    ) -> None:
        """Initialize S3 store.

        Args:
            bucket: S3 bucket name.
            endpoint_url: Custom endpoint for MinIO/compatible storage.
            access_key_id: Access key (cache username).
            secret_access_key: Secret key (cache password).
            region: Region name.
        """
        try:
            import boto3
            from botocore.config import Config
        except ImportError as e:
            raise ImportError(
                "boto3 package required for S3 store: pip install boto3"
            ) from e

        kwargs: dict = {"config": Config(s3={"addressing_style": "path"})}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        if access_key_id:
            kwargs["aws_access_key_id"] = access_key_id
        if secret_access_key:
            kwargs["aws_secret_access_key"] = secret_access_key

        self._s3 = boto3.client("s3", **kwargs)
        self._bucket = bucket

    @staticmethod
    def _error_code(exc: Exception) -> str:
        response = getattr(exc, "response", None) or {}
        return str(response.get("Error", {}).get("Code", ""))

    def _is_not_found(self, exc: Exception) -> bool:
        return (
            isinstance(exc, self._s3.exceptions.ClientError)
            and self._error_code(exc) in _NOT_FOUND_CODES
        )

    def _head(self, key: str) -> dict | None:
        try:
            return self._s3.head_object(Bucket=self._bucket, Key=key)
        except self._s3.exceptions.ClientError as exc:
            if self._is_not_found(exc):
                return None
            raise StoreError(f"Failed to check cache existence: {exc}") from exc

    def exists(self, key: str) -> bool:
        """Check if an S3 object exists."""
        return self._head(key) is not None

    def metadata(self, key: str) -> CacheMetadata | None:
        """Size and last-modified time of an S3 object."""
        response = self._head(key)
        if response is None:
            return None
        return CacheMetadata(
            key=key,
            size=response.get("ContentLength") or 0,
            last_modified=response.get("LastModified"),
        )

    def upload(self, local_path: Path, key: str) -> None:
        """Upload an archive to S3."""
        logger.info("Uploading cache to S3: %s", key)
        try:
            self._s3.upload_file(str(local_path), self._bucket, key)
        except Exception as exc:
            raise StoreError(f"Failed to upload cache to S3: {exc}") from exc
        logger.info("Successfully uploaded cache: %s", key)

    def download(self, key: str, local_path: Path) -> None:
        """Download an archive from S3."""
        logger.info("Downloading cache from S3: %s", key)
        try:
            self._s3.download_file(self._bucket, key, str(local_path))
        except Exception as exc:
            if self._is_not_found(exc):
                raise CacheNotFoundError(key) from exc
            raise StoreError(f"Failed to download cache from S3: {exc}") from exc
        logger.info("Successfully downloaded cache: %s", key)
