# src/manifest/models.py — v1
"""Manifest models: CacheManifest, ManifestEntry, ManifestValidation.

Serialized as ``cache-manifest.json`` at the archive root with camelCase keys:
``{version, cacheKey, createdAt, paths: [{originalPath, archivedPath, isDirectory}]}``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MANIFEST_VERSION = "1.0"
MANIFEST_FILENAME = "cache-manifest.json"


class ManifestEntry(BaseModel):
    """One cached path, relative to the save-time working directory."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    original_path: str
    archived_path: str
    is_directory: bool = False


class CacheManifest(BaseModel):
    """Versioned record mapping archived entries back to original locations."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    version: str = MANIFEST_VERSION
    cache_key: str
    created_at: datetime
    entries: list[ManifestEntry] = Field(default_factory=list, alias="paths")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class ManifestValidation(BaseModel):
    """Counts of manifest entries present / absent under a base directory."""

    valid: int = 0
    missing: int = 0


class RestoreSummary(BaseModel):
    """Per-entry tally of one manifest replay."""

    restored: int = 0
    skipped: int = 0
    failed: int = 0
