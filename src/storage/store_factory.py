# src/storage/store_factory.py — v1
"""Factory: instantiate the object store from configuration."""

from __future__ import annotations

from s3cache.config.settings import Settings
from s3cache.storage.base_object_store import BaseObjectStore
from s3cache.storage.local_store import LocalObjectStore


def create_store(settings: Settings) -> BaseObjectStore:
    """Create the configured object store backend.

    Args:
        settings: Action inputs (store backend and S3 connection).

    Returns:
        BaseObjectStore instance.

    Raises:
        ValueError: If the backend is not supported.
    """
    if settings.store_backend == "local":
        return LocalObjectStore(settings.local_store_root)

    if settings.store_backend == "s3":
        from s3cache.storage.s3_store import S3ObjectStore
        return S3ObjectStore(
            bucket=settings.s3_bucket,
            endpoint_url=settings.s3_endpoint or None,
            access_key_id=settings.cache_username.get_secret_value(),
            secret_access_key=settings.cache_password.get_secret_value(),
            region=settings.s3_region or None,
        )

    raise ValueError(f"Unsupported store backend: {settings.store_backend!r}")
