# src/keys/builder.py — v1
"""Cache key construction and fallback key ordering.

Keys have the shape ``<org>/<repo>/<branch>/<workflow>/<suffix>.tar.lz4``.
The extension is fixed whatever compressor produced the archive; the
format is detected from content on extraction.
"""

from __future__ import annotations

import logging
import re

from s3cache.core.models import RunnerContext

logger = logging.getLogger(__name__)

CANONICAL_EXTENSION = ".tar.lz4"
FALLBACK_BRANCH = "main"

# Position of the branch segment in an unsuffixed key.
_BRANCH_INDEX = 2
_MIN_SEGMENTS = 4


def _placeholder(expression: str) -> re.Pattern[str]:
    return re.compile(r"\$\{\{\s*" + re.escape(expression) + r"\s*\}\}")


_PLACEHOLDERS: dict[str, re.Pattern[str]] = {
    "org": _placeholder("github.repository_owner"),
    "repo": _placeholder("github.repository"),
    "branch": _placeholder("github.ref_name"),
    "workflow": _placeholder("github.workflow"),
}


def strip_extension(key: str) -> str:
    """Drop the canonical extension from a key (no-op if absent)."""
    return key.replace(CANONICAL_EXTENSION, "")


class KeyBuilder:
    """Build namespaced cache keys from templates and a RunnerContext."""

    def __init__(self, context: RunnerContext) -> None:
        self._context = context

    @property
    def context(self) -> RunnerContext:
        return self._context

    def substitute(self, template: str) -> str:
        """Replace known ``${{ github.* }}`` placeholders with context values.

        A placeholder whose context value is missing becomes an empty string.
        Unknown expressions are left as written.
        """
        result = template
        for field_name, pattern in _PLACEHOLDERS.items():
            value = getattr(self._context, field_name)
            result = pattern.sub(lambda _m, v=value: v, result)
        return result

    def build(self, template: str) -> str:
        """Build the full cache key for a user key template."""
        ctx = self._context
        suffix = self.substitute(template)
        return (
            f"{ctx.org}/{ctx.repo}/{ctx.branch}/{ctx.workflow}/{suffix}"
            f"{CANONICAL_EXTENSION}"
        )

    def fallback_keys(self, primary_key: str, user_keys: list[str]) -> list[str]:
        """Ordered candidate keys for a restore.

        1. ``primary_key`` (an exact match if found).
        2. Each non-empty user key, built, in caller order.
        3. ``primary_key`` with its branch segment replaced by ``main``,
           only if the unsuffixed key has at least four segments.
        """
        keys = [primary_key]

        for user_key in user_keys:
            if user_key and user_key != primary_key:
                keys.append(self.build(user_key))

        parts = strip_extension(primary_key).split("/")
        if len(parts) >= _MIN_SEGMENTS:
            main_parts = list(parts)
            main_parts[_BRANCH_INDEX] = FALLBACK_BRANCH
            keys.append("/".join(main_parts) + CANONICAL_EXTENSION)
        else:
            logger.debug(
                "Key %s has fewer than %d segments; no %s fallback",
                primary_key, _MIN_SEGMENTS, FALLBACK_BRANCH,
            )

        return keys
