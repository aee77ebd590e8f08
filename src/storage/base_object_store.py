# src/storage/base_object_store.py — v1
"""Abstract object store interface for cache archives.

Keys are full cache keys, used as object identifiers as-is.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from s3cache.core.models import CacheHit, CacheMetadata

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Object store operation failed."""


class CacheNotFoundError(StoreError):
    """Requested cache object does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Cache not found: {key}")
        self.key = key


class BaseObjectStore(ABC):
    """Unified interface for cache archive storage backends."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if an object exists. Absence is not an error."""

    @abstractmethod
    def metadata(self, key: str) -> CacheMetadata | None:
        """Object attributes, or None if absent."""

    @abstractmethod
    def upload(self, local_path: Path, key: str) -> None:
        """Upload a local file under ``key`` (overwrites)."""

    @abstractmethod
    def download(self, key: str, local_path: Path) -> None:
        """Download ``key`` to a local file.

        Raises:
            CacheNotFoundError: If the object does not exist.
        """

    def find_first(self, keys: list[str]) -> CacheHit | None:
        """Probe ``keys`` in order and return the first that exists.

        The hit is exact only when it is the first candidate.
        """
        for index, key in enumerate(keys):
            if self.exists(key):
                logger.info("Found cache: %s", key)
                return CacheHit(key=key, is_exact_match=index == 0)
        return None
