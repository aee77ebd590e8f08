# src/pipeline/restore.py — v1
"""Restore orchestrator: fallback keys -> probe -> download -> extract -> replay.

A miss is a normal outcome. Any failure is logged as a warning and
reported as ``degraded``. Network retries are the store client's concern;
nothing is retried here.
"""

from __future__ import annotations

import logging
import posixpath
import time
from pathlib import Path

from s3cache.archive.transport import ArchiveTransport
from s3cache.core.models import CacheHit, CacheOutcome
from s3cache.keys.builder import KeyBuilder
from s3cache.logging.context import set_action_context, set_cache_key_context
from s3cache.manifest.reader import load_manifest, validate_manifest_paths
from s3cache.manifest.restorer import restore_from_manifest
from s3cache.pipeline.workspace import temp_workspace
from s3cache.storage.base_object_store import BaseObjectStore

logger = logging.getLogger(__name__)

EXTRACT_DIR = "extract"


class RestoreOrchestrator:
    """Find the best-matching archive and restore it onto the file system.

    Args:
        store: Object store holding archives.
        key_builder: Builds the primary key and fallback list.
        transport: Archive extractor.
        working_dir: Directory entries are restored into (default: cwd).
        temp_root: Parent for the temp workspace (default: system temp).
        strict_manifest: Reject manifests with a different version.
    """

    def __init__(
        self,
        store: BaseObjectStore,
        key_builder: KeyBuilder,
        transport: ArchiveTransport | None = None,
        working_dir: Path | None = None,
        temp_root: Path | None = None,
        strict_manifest: bool = False,
    ) -> None:
        self._store = store
        self._keys = key_builder
        self._transport = transport or ArchiveTransport()
        self._working_dir = Path(working_dir) if working_dir else Path.cwd()
        self._temp_root = temp_root
        self._strict_manifest = strict_manifest

    def run(self, key_template: str, restore_keys: list[str] | None = None) -> CacheOutcome:
        """Restore the cache. Never raises."""
        set_action_context("restore")
        start_time = time.monotonic()
        hit: CacheHit | None = None

        try:
            primary_key = self._keys.build(key_template)
            set_cache_key_context(primary_key)
            logger.info("Primary cache key: %s", primary_key)

            candidates = self._keys.fallback_keys(primary_key, restore_keys or [])
            logger.info("Checking %d cache keys...", len(candidates))
            for i, key in enumerate(candidates, start=1):
                logger.info("  %d. %s", i, key)

            hit = self._store.find_first(candidates)
            if hit is None:
                logger.info("No cache found")
                return CacheOutcome(
                    action="restore",
                    status="miss",
                    duration_seconds=time.monotonic() - start_time,
                    diagnostics=[f"none of {len(candidates)} keys exist"],
                )

            logger.info("Cache found: %s", hit.key)
            logger.info("Exact match: %s", str(hit.is_exact_match).lower())
            set_cache_key_context(hit.key)
            return self._restore(hit, start_time)
        except Exception as exc:
            logger.warning("Failed to restore cache: %s", exc)
            logger.debug("Restore failure details", exc_info=True)
            return CacheOutcome(
                action="restore",
                status="degraded",
                cache_key=hit.key if hit else None,
                cache_hit=False,
                duration_seconds=time.monotonic() - start_time,
                diagnostics=[f"restore failed: {exc}"],
            )

    def _restore(self, hit: CacheHit, start_time: float) -> CacheOutcome:
        metadata = self._store.metadata(hit.key)
        size_bytes: int | None = None
        if metadata is not None:
            size_bytes = metadata.size
            logger.info("Cache size: %.2f MB", metadata.size / 1024 / 1024)

        with temp_workspace(self._temp_root) as temp_dir:
            archive_path = temp_dir / posixpath.basename(hit.key)
            self._store.download(hit.key, archive_path)

            extract_dir = temp_dir / EXTRACT_DIR
            compression = self._transport.extract(archive_path, extract_dir)

            logger.info("Loading cache manifest...")
            manifest = load_manifest(extract_dir, strict=self._strict_manifest)
            logger.info("Manifest contains %d paths", len(manifest.entries))

            summary = restore_from_manifest(manifest, extract_dir, self._working_dir)

        validation = validate_manifest_paths(manifest, self._working_dir)
        diagnostics: list[str] = []
        if summary.skipped or summary.failed:
            diagnostics.append(
                f"{summary.skipped} entries skipped, {summary.failed} failed"
            )
        if validation.missing:
            diagnostics.append(f"{validation.missing} paths missing after restore")

        duration = time.monotonic() - start_time
        logger.info("")
        logger.info("Cache restored successfully!")
        logger.info("  Key: %s", hit.key)
        logger.info("  Duration: %.2fs", duration)
        logger.info("  Paths restored: %d", summary.restored)
        logger.info("  Exact match: %s", str(hit.is_exact_match).lower())

        return CacheOutcome(
            action="restore",
            status="success",
            cache_key=hit.key,
            cache_hit=hit.is_exact_match,
            compression=compression.value,
            paths_count=summary.restored,
            size_bytes=size_bytes,
            duration_seconds=duration,
            diagnostics=diagnostics,
        )
