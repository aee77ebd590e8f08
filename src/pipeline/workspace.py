# src/pipeline/workspace.py — v1
"""Per-invocation temporary working directory."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


@contextmanager
def temp_workspace(root: Path | None = None) -> Iterator[Path]:
    """Create a unique ``cache-*`` directory, removed on every exit path."""
    if root is not None:
        Path(root).mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(
        prefix="cache-", dir=root, ignore_cleanup_errors=True
    ) as tmp:
        logger.debug("Temp workspace: %s", tmp)
        yield Path(tmp)
