# tests/unit/manifest/test_reader.py — v1
"""Tests for manifest/reader.py — loading, version policy, path validation."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import pytest

from s3cache.manifest.builder import save_manifest
from s3cache.manifest.models import CacheManifest, ManifestEntry
from s3cache.manifest.reader import (
    ManifestError,
    ManifestNotFoundError,
    ManifestVersionError,
    load_manifest,
    validate_manifest_paths,
)


@pytest.fixture
def manifest() -> CacheManifest:
    return CacheManifest(
        cache_key="o/r/b/w/k",
        created_at=datetime(2026, 2, 7, 14, 0, 0, tzinfo=timezone.utc),
        entries=[
            ManifestEntry(original_path="out", archived_path="out", is_directory=True),
            ManifestEntry(original_path="build.log", archived_path="build.log"),
        ],
    )


def _write(directory, payload: dict) -> None:
    (directory / "cache-manifest.json").write_text(json.dumps(payload))


class TestLoadManifest:
    def test_round_trip(self, tmp_path, manifest):
        save_manifest(manifest, tmp_path)
        assert load_manifest(tmp_path) == manifest

    def test_missing_raises(self, tmp_path):
        with pytest.raises(ManifestNotFoundError):
            load_manifest(tmp_path)

    def test_invalid_raises(self, tmp_path):
        _write(tmp_path, {"version": "1.0"})
        with pytest.raises(ManifestError):
            load_manifest(tmp_path)

    def test_version_mismatch_warns(self, tmp_path, caplog):
        _write(tmp_path, {
            "version": "2.0", "cacheKey": "k",
            "createdAt": "2026-02-07T14:00:00Z", "paths": [],
        })
        with caplog.at_level(logging.WARNING):
            loaded = load_manifest(tmp_path)
        assert loaded.version == "2.0"
        assert "version mismatch" in caplog.text

    def test_version_mismatch_strict(self, tmp_path):
        _write(tmp_path, {
            "version": "2.0", "cacheKey": "k",
            "createdAt": "2026-02-07T14:00:00Z", "paths": [],
        })
        with pytest.raises(ManifestVersionError, match="expected 1.0, got 2.0"):
            load_manifest(tmp_path, strict=True)

    def test_reads_original_format(self, tmp_path):
        _write(tmp_path, {
            "version": "1.0",
            "cacheKey": "myorg/myrepo/main/CI/deps",
            "createdAt": "2026-02-07T14:00:00.123Z",
            "paths": [{"originalPath": "node_modules", "archivedPath": "node_modules",
                       "isDirectory": True}],
        })
        loaded = load_manifest(tmp_path)
        assert loaded.entries[0].original_path == "node_modules"
        assert loaded.entries[0].is_directory is True


class TestValidateManifestPaths:
    def test_counts(self, work_dir, manifest):
        (work_dir / "build.log").unlink()
        result = validate_manifest_paths(manifest, work_dir)
        assert result.valid == 1
        assert result.missing == 1
