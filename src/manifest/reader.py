# src/manifest/reader.py — v1
"""Load a manifest from an extracted archive and check its entries.

A version mismatch is only warned about unless strict mode is requested:
manifest schema bumps have stayed backward-compatible so far.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from s3cache.manifest.builder import manifest_path
from s3cache.manifest.models import MANIFEST_VERSION, CacheManifest, ManifestValidation

logger = logging.getLogger(__name__)


class ManifestError(Exception):
    """Base class for manifest loading failures."""


class ManifestNotFoundError(ManifestError):
    """No manifest file at the expected location."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Manifest file not found: {path}")
        self.path = path


class ManifestVersionError(ManifestError):
    """Manifest version differs from ours and strict mode is on."""

    def __init__(self, found: str, expected: str = MANIFEST_VERSION) -> None:
        super().__init__(
            f"Manifest version mismatch: expected {expected}, got {found}"
        )
        self.found = found
        self.expected = expected


def load_manifest(directory: Path, strict: bool = False) -> CacheManifest:
    """Load ``cache-manifest.json`` from ``directory``.

    Args:
        directory: Directory the archive was extracted into.
        strict: Reject a manifest whose version differs from ours.

    Raises:
        ManifestNotFoundError: If the file is absent.
        ManifestVersionError: On version mismatch in strict mode.
        ManifestError: If the file is not a valid manifest.
    """
    path = manifest_path(directory)
    if not path.exists():
        raise ManifestNotFoundError(path)

    try:
        manifest = CacheManifest.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise ManifestError(f"Invalid manifest {path}: {exc}") from exc

    if manifest.version != MANIFEST_VERSION:
        if strict:
            raise ManifestVersionError(manifest.version)
        logger.warning(
            "Manifest version mismatch: expected %s, got %s",
            MANIFEST_VERSION, manifest.version,
        )

    return manifest


def validate_manifest_paths(
    manifest: CacheManifest, base_dir: Path
) -> ManifestValidation:
    """Count entries whose original path exists under ``base_dir``."""
    valid = 0
    missing = 0
    for entry in manifest.entries:
        full = os.path.join(base_dir, entry.original_path)
        if os.path.lexists(full):
            valid += 1
        else:
            missing += 1
            logger.debug("Path not found: %s", entry.original_path)
    return ManifestValidation(valid=valid, missing=missing)
