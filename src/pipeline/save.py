# src/pipeline/save.py — v1
"""Save orchestrator: paths -> manifest -> archive -> object store.

Sequence:
  1. Build the cache key
  2. Resolve path patterns, keep those that exist
  3. Write the manifest into the working directory
  4. Archive paths + manifest into a temp workspace
  5. Upload under the cache key

The manifest file and the temp workspace are removed on every exit path.
Any failure is logged as a warning and reported as a ``degraded``
outcome: a cache outage must never fail the build.
"""

from __future__ import annotations

import logging
import posixpath
import time
from pathlib import Path

from s3cache.archive.transport import ArchiveTransport
from s3cache.core.models import CacheOutcome
from s3cache.keys.builder import KeyBuilder
from s3cache.logging.context import set_action_context, set_cache_key_context
from s3cache.manifest.builder import create_manifest, manifest_path, save_manifest
from s3cache.paths.resolver import drop_nested, filter_existing, resolve_patterns
from s3cache.pipeline.workspace import temp_workspace
from s3cache.storage.base_object_store import BaseObjectStore

logger = logging.getLogger(__name__)


class SaveOrchestrator:
    """Package paths into an archive and upload it under a cache key.

    Args:
        store: Object store receiving the archive.
        key_builder: Builds the namespaced cache key.
        transport: Archive creator (defaults to lz4 with gzip fallback).
        working_dir: Directory patterns are resolved against (default: cwd).
        temp_root: Parent for the temp workspace (default: system temp).
    """

    def __init__(
        self,
        store: BaseObjectStore,
        key_builder: KeyBuilder,
        transport: ArchiveTransport | None = None,
        working_dir: Path | None = None,
        temp_root: Path | None = None,
    ) -> None:
        self._store = store
        self._keys = key_builder
        self._transport = transport or ArchiveTransport()
        self._working_dir = Path(working_dir) if working_dir else Path.cwd()
        self._temp_root = temp_root

    def run(self, key_template: str, patterns: list[str]) -> CacheOutcome:
        """Save the cache. Never raises."""
        set_action_context("save")
        start_time = time.monotonic()
        cache_key: str | None = None

        try:
            cache_key = self._keys.build(key_template)
            set_cache_key_context(cache_key)
            logger.info("Cache key: %s", cache_key)
            return self._save(cache_key, patterns, start_time)
        except Exception as exc:
            logger.warning("Failed to save cache: %s", exc)
            logger.debug("Save failure details", exc_info=True)
            return CacheOutcome(
                action="save",
                status="degraded",
                cache_key=cache_key,
                duration_seconds=time.monotonic() - start_time,
                diagnostics=[f"save failed: {exc}"],
            )

    def _miss(self, cache_key: str, reason: str, start_time: float) -> CacheOutcome:
        logger.warning(reason)
        return CacheOutcome(
            action="save",
            status="miss",
            cache_key=cache_key,
            duration_seconds=time.monotonic() - start_time,
            diagnostics=[reason],
        )

    def _save(self, cache_key: str, patterns: list[str], start_time: float) -> CacheOutcome:
        wd = self._working_dir

        logger.info("Resolving paths to cache...")
        resolved = resolve_patterns(patterns, wd)
        if not resolved:
            return self._miss(cache_key, "No paths found to cache", start_time)
        logger.info("Found %d paths to cache", len(resolved))

        existing = filter_existing(resolved, wd)
        if not existing:
            return self._miss(cache_key, "No existing paths found to cache", start_time)

        diagnostics: list[str] = []
        if len(existing) < len(resolved):
            skipped = f"{len(resolved) - len(existing)} paths not found and will be skipped"
            logger.warning(skipped)
            diagnostics.append(skipped)

        existing = drop_nested(existing, wd)

        logger.info("Creating cache manifest...")
        manifest = create_manifest(cache_key, existing, wd)

        with temp_workspace(self._temp_root) as temp_dir:
            archive_path = temp_dir / posixpath.basename(cache_key)
            manifest_file = manifest_path(wd)
            try:
                save_manifest(manifest, wd)
                members = [entry.archived_path for entry in manifest.entries]
                members.append(manifest_file.name)
                compression = self._transport.create(members, archive_path, wd)
            finally:
                manifest_file.unlink(missing_ok=True)

            if self._store.exists(cache_key):
                logger.info("Cache already exists, overwriting...")

            self._store.upload(archive_path, cache_key)
            size_bytes = archive_path.stat().st_size

        duration = time.monotonic() - start_time
        outcome = CacheOutcome(
            action="save",
            status="success",
            cache_key=cache_key,
            compression=compression.value,
            paths_count=len(existing),
            size_bytes=size_bytes,
            duration_seconds=duration,
            diagnostics=diagnostics,
        )
        logger.info("")
        logger.info("Cache saved successfully!")
        logger.info("  Size: %.2f MB", outcome.size_mb)
        logger.info("  Compression: %s", outcome.compression)
        logger.info("  Duration: %.2fs", duration)
        logger.info("  Paths cached: %d", outcome.paths_count)
        return outcome
