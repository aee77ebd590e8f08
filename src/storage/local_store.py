# src/storage/local_store.py — v1
"""Local filesystem object store (STORE_BACKEND=local).

Each key maps to a file under the store root; slashes in the key become
subdirectories.
"""

from __future__ import annotations

import shutil
from datetime import datetime, timezone
from pathlib import Path

from s3cache.core.models import CacheMetadata
from s3cache.storage.base_object_store import BaseObjectStore, CacheNotFoundError


class LocalObjectStore(BaseObjectStore):
    """Cache archives in a local directory."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser()

    def _resolve(self, key: str) -> Path:
        """Resolve a key to a path under the root."""
        return self._root / key

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def metadata(self, key: str) -> CacheMetadata | None:
        path = self._resolve(key)
        if not path.is_file():
            return None
        st = path.stat()
        return CacheMetadata(
            key=key,
            size=st.st_size,
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    def upload(self, local_path: Path, key: str) -> None:
        dst = self._resolve(key)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(str(local_path), str(dst))

    def download(self, key: str, local_path: Path) -> None:
        src = self._resolve(key)
        if not src.is_file():
            raise CacheNotFoundError(key)
        Path(local_path).parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(str(src), str(local_path))
