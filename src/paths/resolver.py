# src/paths/resolver.py — v1
"""Expand user path patterns into a sorted, deduplicated path list.

Patterns use glob syntax (``*``, ``?``, ``[...]``, recursive ``**``).
Symbolic links to directories are never descended into: a match that
is itself a link is kept, matches found beneath one are dropped.
"""

from __future__ import annotations

import glob
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def _literal_root(pattern: str) -> str:
    """Longest leading part of a pattern without glob magic."""
    parts: list[str] = []
    for part in Path(pattern).parts:
        if glob.has_magic(part):
            break
        parts.append(part)
    return os.path.join(*parts) if parts else ""


def _crosses_symlink(match: str, root: str) -> bool:
    """True if any directory strictly between ``root`` and ``match`` is a symlink."""
    root = os.path.normpath(root)
    parent = os.path.dirname(os.path.normpath(match))
    while parent.startswith(root + os.sep):
        if os.path.islink(parent):
            return True
        parent = os.path.dirname(parent)
    return False


def expand_pattern(pattern: str, working_dir: Path) -> list[str]:
    """Expand one pattern relative to ``working_dir``.

    Absolute patterns stay absolute; relative ones yield relative matches.
    """
    expanded = os.path.expanduser(pattern)
    matches = glob.glob(
        expanded, root_dir=str(working_dir), recursive=True, include_hidden=True
    )
    root = os.path.join(working_dir, _literal_root(expanded))
    results: list[str] = []
    for match in matches:
        normalized = os.path.normpath(match)
        if not os.path.lexists(os.path.join(working_dir, normalized)):
            continue
        if _crosses_symlink(os.path.join(working_dir, normalized), root):
            logger.debug("Skipping %s: reached through a symbolic link", match)
            continue
        results.append(normalized)
    return results


def resolve_patterns(patterns: list[str], working_dir: Path | None = None) -> list[str]:
    """Resolve all patterns: union of matches, deduplicated, sorted.

    Zero matches is not an error here; callers decide.
    """
    base = Path(working_dir) if working_dir is not None else Path.cwd()
    found: set[str] = set()
    for pattern in patterns:
        if not pattern.strip():
            continue
        matches = expand_pattern(pattern.strip(), base)
        logger.debug("Pattern %r matched %d paths", pattern, len(matches))
        found.update(matches)
    return sorted(found)


def filter_existing(paths: list[str], working_dir: Path) -> list[str]:
    """Keep only paths that exist on disk (links count even if dangling)."""
    existing: list[str] = []
    for p in paths:
        full = Path(p) if os.path.isabs(p) else working_dir / p
        if full.exists() or full.is_symlink():
            existing.append(p)
    return existing


def drop_nested(paths: list[str], working_dir: Path) -> list[str]:
    """Drop paths that sit under another directory in the list.

    The archiver recurses into directories, so a descendant listed next to
    its ancestor would be stored twice. Order is preserved.
    """
    full = [os.path.normpath(os.path.join(working_dir, p)) for p in paths]
    directories = {f for f in full if os.path.isdir(f) and not os.path.islink(f)}
    kept: list[str] = []
    for p, f in zip(paths, full):
        if any(str(parent) in directories for parent in Path(f).parents):
            logger.debug("Skipping %s: covered by a parent directory", p)
            continue
        kept.append(p)
    return kept
