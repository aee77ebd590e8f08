# src/core/models.py — v1
"""Core data models shared across components.

RunnerContext, CacheHit, CacheMetadata, CacheOutcome.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

_BRANCH_REF_PREFIX = "refs/heads/"


class RunnerContext(BaseModel):
    """Repository/branch/workflow identity a cache key is namespaced by.

    Built once per invocation and passed explicitly to the key builder.
    """

    model_config = ConfigDict(frozen=True)

    org: str = ""
    repo: str = ""
    branch: str = ""
    workflow: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RunnerContext:
        """Read GITHUB_REPOSITORY, GITHUB_REF and GITHUB_WORKFLOW.

        Missing variables yield empty segments.
        """
        env = os.environ if environ is None else environ
        repository = env.get("GITHUB_REPOSITORY", "")
        owner, _, name = repository.partition("/")
        ref = env.get("GITHUB_REF", "")
        if ref.startswith(_BRANCH_REF_PREFIX):
            ref = ref[len(_BRANCH_REF_PREFIX):]
        return cls(
            org=owner,
            repo=name,
            branch=ref,
            workflow=env.get("GITHUB_WORKFLOW", ""),
        )


class CacheHit(BaseModel):
    """First existing key found while probing a fallback list."""

    key: str
    is_exact_match: bool


class CacheMetadata(BaseModel):
    """Store-side attributes of a cache object, fetched on demand."""

    key: str
    size: int = 0
    last_modified: datetime | None = None


class CacheOutcome(BaseModel):
    """Structured result of one save or restore invocation."""

    action: Literal["save", "restore"]
    status: Literal["success", "miss", "degraded"]
    cache_key: str | None = None
    cache_hit: bool = False
    compression: str | None = None
    paths_count: int = 0
    size_bytes: int | None = None
    duration_seconds: float = 0.0
    diagnostics: list[str] = Field(default_factory=list)

    @property
    def size_mb(self) -> float | None:
        if self.size_bytes is None:
            return None
        return self.size_bytes / 1024 / 1024
