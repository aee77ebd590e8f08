# src/manifest/restorer.py — v1
"""Replay manifest entries from an extracted archive onto a target directory.

Each entry is restored independently. A missing source is skipped with a
warning and a failed copy is logged; neither stops the remaining entries.
Directories are merged into existing targets, files are overwritten.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from s3cache.manifest.models import CacheManifest, ManifestEntry, RestoreSummary

logger = logging.getLogger(__name__)


def _inside(base: str, candidate: str) -> bool:
    base = os.path.abspath(base)
    return os.path.commonpath([base, os.path.abspath(candidate)]) == base


def copy_entry(source: str, target: str, is_directory: bool) -> None:
    """Copy a file, or merge a directory tree, creating parents as needed."""
    parent = os.path.dirname(target)
    if parent:
        os.makedirs(parent, exist_ok=True)
    if is_directory:
        shutil.copytree(source, target, dirs_exist_ok=True)
    else:
        shutil.copy2(source, target)


def _restore_entry(
    entry: ManifestEntry, extracted_dir: Path, target_dir: Path
) -> str:
    """Restore one entry; returns ``restored`` or ``skipped``."""
    source = os.path.join(extracted_dir, entry.archived_path)
    target = os.path.join(target_dir, entry.original_path)

    if not _inside(str(extracted_dir), source):
        logger.warning("Archived path escapes the archive: %s", entry.archived_path)
        return "skipped"

    if not os.path.lexists(source):
        logger.warning("Source path not found in archive: %s", entry.archived_path)
        return "skipped"

    copy_entry(source, target, entry.is_directory)
    logger.debug("Restored: %s", entry.original_path)
    return "restored"


def restore_from_manifest(
    manifest: CacheManifest,
    extracted_dir: Path,
    target_dir: Path,
) -> RestoreSummary:
    """Restore every manifest entry; partial restore is a normal outcome.

    Args:
        manifest: Manifest loaded from the extracted archive.
        extracted_dir: Where the archive was extracted.
        target_dir: Working directory to restore into.

    Returns:
        RestoreSummary with restored / skipped / failed counts.
    """
    logger.info("Restoring %d paths from manifest", len(manifest.entries))
    summary = RestoreSummary()

    for entry in manifest.entries:
        try:
            outcome = _restore_entry(entry, extracted_dir, target_dir)
        except Exception as exc:
            logger.warning("Failed to restore %s: %s", entry.original_path, exc)
            summary.failed += 1
            continue
        if outcome == "restored":
            summary.restored += 1
        else:
            summary.skipped += 1

    logger.info(
        "Cache restoration complete (%d restored, %d skipped, %d failed)",
        summary.restored, summary.skipped, summary.failed,
    )
    return summary
