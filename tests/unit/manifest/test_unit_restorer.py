# tests/unit/manifest/test_unit_restorer.py — v1
"""Tests for manifest/restorer.py — per-entry replay and isolation."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path

import pytest

from s3cache.manifest.models import CacheManifest, ManifestEntry
from s3cache.manifest import restorer as restorer_module
from s3cache.manifest.restorer import restore_from_manifest


def _manifest(*entries: ManifestEntry) -> CacheManifest:
    return CacheManifest(
        cache_key="k",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        entries=list(entries),
    )


def _snapshot(root: Path) -> dict[str, str]:
    return {
        str(p.relative_to(root)): p.read_text()
        for p in sorted(root.rglob("*")) if p.is_file()
    }


@pytest.fixture
def extracted(tmp_path: Path, work_dir: Path) -> Path:
    ext = tmp_path / "extract"
    shutil.copytree(work_dir, ext)
    return ext


class TestRestoreFromManifest:
    def test_file_and_directory(self, extracted, tmp_path):
        target = tmp_path / "target"
        target.mkdir()
        manifest = _manifest(
            ManifestEntry(original_path="out", archived_path="out", is_directory=True),
            ManifestEntry(original_path="build.log", archived_path="build.log"),
        )
        summary = restore_from_manifest(manifest, extracted, target)
        assert summary.restored == 2
        assert (target / "out" / "nested" / "b.txt").read_text() == "beta"
        assert (target / "build.log").read_text() == "log"

    def test_creates_parent_directories(self, extracted, tmp_path):
        target = tmp_path / "target"
        manifest = _manifest(
            ManifestEntry(original_path="out/nested/b.txt", archived_path="out/nested/b.txt"),
        )
        restore_from_manifest(manifest, extracted, target)
        assert (target / "out" / "nested" / "b.txt").exists()

    def test_directory_merged_not_replaced(self, extracted, tmp_path):
        target = tmp_path / "target"
        (target / "out").mkdir(parents=True)
        (target / "out" / "local.txt").write_text("keep")
        (target / "out" / "a.txt").write_text("stale")
        manifest = _manifest(
            ManifestEntry(original_path="out", archived_path="out", is_directory=True),
        )
        restore_from_manifest(manifest, extracted, target)
        assert (target / "out" / "local.txt").read_text() == "keep"
        assert (target / "out" / "a.txt").read_text() == "alpha"

    def test_missing_source_skipped(self, extracted, tmp_path, caplog):
        target = tmp_path / "target"
        manifest = _manifest(
            ManifestEntry(original_path="gone", archived_path="gone"),
            ManifestEntry(original_path="build.log", archived_path="build.log"),
        )
        with caplog.at_level(logging.WARNING):
            summary = restore_from_manifest(manifest, extracted, target)
        assert summary.skipped == 1
        assert summary.restored == 1
        assert "Source path not found in archive: gone" in caplog.text
        assert (target / "build.log").exists()

    def test_failed_entry_does_not_stop_batch(self, extracted, tmp_path, caplog):
        target = tmp_path / "target"
        target.mkdir()
        # A plain file where a directory is needed makes the first copy fail.
        (target / "out").write_text("blocker")
        manifest = _manifest(
            ManifestEntry(original_path="out/a.txt", archived_path="out/a.txt"),
            ManifestEntry(original_path="build.log", archived_path="build.log"),
        )
        with caplog.at_level(logging.WARNING):
            summary = restore_from_manifest(manifest, extracted, target)
        assert summary.failed == 1
        assert summary.restored == 1
        assert "Failed to restore out/a.txt" in caplog.text

    def test_unexpected_error_isolated_to_entry(
        self, extracted, tmp_path, monkeypatch, caplog
    ):
        real_copy = restorer_module.copy_entry

        def flaky_copy(source, target, is_directory):
            if target.endswith("build.log"):
                raise ValueError("unexpected entry state")
            real_copy(source, target, is_directory)

        monkeypatch.setattr(restorer_module, "copy_entry", flaky_copy)
        target = tmp_path / "target"
        manifest = _manifest(
            ManifestEntry(original_path="build.log", archived_path="build.log"),
            ManifestEntry(original_path="out", archived_path="out", is_directory=True),
        )
        with caplog.at_level(logging.WARNING):
            summary = restore_from_manifest(manifest, extracted, target)
        assert summary.failed == 1
        assert summary.restored == 1
        assert (target / "out" / "a.txt").exists()
        assert "unexpected entry state" in caplog.text

    def test_archived_path_outside_archive_skipped(self, extracted, tmp_path):
        target = tmp_path / "target"
        manifest = _manifest(
            ManifestEntry(original_path="x", archived_path="../work/build.log"),
        )
        summary = restore_from_manifest(manifest, extracted, target)
        assert summary.skipped == 1
        assert not (target / "x").exists()

    def test_idempotent(self, extracted, tmp_path):
        target = tmp_path / "target"
        manifest = _manifest(
            ManifestEntry(original_path="out", archived_path="out", is_directory=True),
            ManifestEntry(original_path="build.log", archived_path="build.log"),
        )
        restore_from_manifest(manifest, extracted, target)
        first = _snapshot(target)
        restore_from_manifest(manifest, extracted, target)
        assert _snapshot(target) == first
