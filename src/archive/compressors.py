# src/archive/compressors.py — v1
"""Compressor capabilities used by the archive transport.

Two implementations: LZ4 (fast, preferred) and gzip (universally
available). Selection probes tool availability at run time; extraction
identifies the format from the archive's leading bytes, never its name.
"""

from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

LZ4_MAGIC = b"\x04\x22\x4d\x18"
GZIP_MAGIC = b"\x1f\x8b"

_SIGNATURE_LENGTH = 4


class CompressionFormat(str, Enum):
    """Compression applied to the tar stream."""

    LZ4 = "lz4"
    GZIP = "gzip"


class BaseCompressor(ABC):
    """External compressor program usable through ``tar --use-compress-program``."""

    format: CompressionFormat
    signature: bytes
    program: str

    @abstractmethod
    def is_available(self) -> bool:
        """True if the compressor can run on this machine."""

    @property
    def compress_program(self) -> str:
        """Value for ``--use-compress-program`` (tar appends ``-d`` to decode)."""
        return self.program


class ExecutableCompressor(BaseCompressor):
    """Compressor backed by an executable found on PATH."""

    def __init__(self, program: str | None = None) -> None:
        if program is not None:
            self.program = program

    def is_available(self) -> bool:
        return shutil.which(self.program) is not None


class Lz4Compressor(ExecutableCompressor):
    format = CompressionFormat.LZ4
    signature = LZ4_MAGIC
    program = "lz4"


class GzipCompressor(ExecutableCompressor):
    format = CompressionFormat.GZIP
    signature = GZIP_MAGIC
    program = "gzip"


def select_compressor(
    preferred: BaseCompressor, fallback: BaseCompressor
) -> BaseCompressor:
    """Return ``preferred`` if available, otherwise ``fallback``."""
    if preferred.is_available():
        return preferred
    logger.warning(
        "%s not found, falling back to %s compression",
        preferred.program, fallback.format.value,
    )
    return fallback


def detect_format(header: bytes) -> CompressionFormat:
    """Classify a buffer by its leading bytes.

    Unknown signatures are treated as gzip, with a warning.
    """
    if header.startswith(LZ4_MAGIC):
        return CompressionFormat.LZ4
    if header.startswith(GZIP_MAGIC):
        return CompressionFormat.GZIP
    logger.warning(
        "Unrecognized archive signature %s, assuming gzip", header[:_SIGNATURE_LENGTH].hex()
    )
    return CompressionFormat.GZIP


def detect_file_format(path: Path) -> CompressionFormat:
    """Read the first bytes of ``path`` and classify them."""
    with open(path, "rb") as fh:
        header = fh.read(_SIGNATURE_LENGTH)
    return detect_format(header)
