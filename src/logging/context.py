# src/logging/context.py — v1
"""Contextual logging support: attach action and cache key to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_action: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "action", default=None
)
_cache_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_key", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    action: str | None = None
    cache_key: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(action=_action.get(), cache_key=_cache_key.get())


def set_action_context(action: str) -> None:
    """Set the operation being run (save / restore)."""
    _action.set(action)


def set_cache_key_context(cache_key: str | None) -> None:
    """Set the cache key the operation is working on."""
    _cache_key.set(cache_key)


def clear_context() -> None:
    """Reset all context variables."""
    _action.set(None)
    _cache_key.set(None)
