# src/logging/masking.py — v1
"""Redact registered secret values from log output."""

from __future__ import annotations

import logging
import threading

MASK = "***"

_lock = threading.Lock()
_secrets: set[str] = set()


def register_secret(value: str) -> None:
    """Add a value to be masked in every subsequent log record."""
    if not value:
        return
    with _lock:
        _secrets.add(value)


def clear_secrets() -> None:
    with _lock:
        _secrets.clear()


def mask(text: str) -> str:
    """Replace every registered secret in ``text``, longest first."""
    with _lock:
        secrets = sorted(_secrets, key=len, reverse=True)
    for secret in secrets:
        text = text.replace(secret, MASK)
    return text


class SecretMaskingFilter(logging.Filter):
    """Render the message and mask secrets before any formatter sees it."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True
