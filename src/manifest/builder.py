# src/manifest/builder.py — v1
"""Build and persist the cache manifest at save time.

Path normalization happens here, once: every entry is stored relative to
the save-time working directory whether the resolver returned absolute or
relative matches.
"""

from __future__ import annotations

import logging
import os
import stat
from datetime import datetime, timezone
from pathlib import Path

from s3cache.keys.builder import strip_extension
from s3cache.manifest.models import (
    MANIFEST_FILENAME,
    MANIFEST_VERSION,
    CacheManifest,
    ManifestEntry,
)

logger = logging.getLogger(__name__)


def relative_to_working_dir(path: str, working_dir: Path) -> str:
    """Express ``path`` relative to ``working_dir``."""
    absolute = path if os.path.isabs(path) else os.path.join(working_dir, path)
    return os.path.relpath(absolute, working_dir)


def create_manifest(
    cache_key: str,
    paths: list[str],
    working_dir: Path,
) -> CacheManifest:
    """Create a manifest for resolved paths.

    A path that cannot be stat'ed is still recorded, as a plain file.

    Args:
        cache_key: Full cache key (the canonical extension is dropped).
        paths: Resolved paths, absolute or relative to ``working_dir``.
        working_dir: Save-time working directory.

    Returns:
        New CacheManifest.
    """
    entries: list[ManifestEntry] = []
    for p in paths:
        relative = relative_to_working_dir(p, working_dir)
        absolute = os.path.join(working_dir, relative)

        is_directory = False
        try:
            is_directory = stat.S_ISDIR(os.stat(absolute).st_mode)
        except OSError as exc:
            logger.warning("Could not stat path: %s - %s", absolute, exc)

        entries.append(
            ManifestEntry(
                original_path=relative,
                archived_path=relative,
                is_directory=is_directory,
            )
        )

    return CacheManifest(
        version=MANIFEST_VERSION,
        cache_key=strip_extension(cache_key),
        created_at=datetime.now(timezone.utc),
        entries=entries,
    )


def manifest_path(directory: Path) -> Path:
    return Path(directory) / MANIFEST_FILENAME


def save_manifest(manifest: CacheManifest, directory: Path) -> Path:
    """Write the manifest into ``directory`` and return its path."""
    path = manifest_path(directory)
    path.write_text(manifest.to_json(), encoding="utf-8")
    logger.debug("Manifest saved to: %s", path)
    return path
