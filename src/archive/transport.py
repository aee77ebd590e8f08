# src/archive/transport.py — v1
"""Create and extract single-file compressed tar archives.

The external ``tar`` does the archiving; compression goes through
``--use-compress-program`` with the selected compressor. Member names are
passed via a list file rather than argv so long path lists never hit the
argument-length limit.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from s3cache.archive.compressors import (
    BaseCompressor,
    CompressionFormat,
    GzipCompressor,
    Lz4Compressor,
    detect_file_format,
    select_compressor,
)

logger = logging.getLogger(__name__)

MAX_ERROR = 1024 * 5  # Maximum length of archiver stderr to keep
TRUNC_PREFIX = "[TRUNC]"

CommandRunner = Callable[[Sequence[str]], None]


class ArchiveError(Exception):
    """Base class for archive transport failures."""


class ArchiverFailedError(ArchiveError):
    """The archiver process could not run or exited non-zero."""

    def __init__(self, command: str, error: str, stderr: str | None = None) -> None:
        message = f"{command}: {error}"
        if stderr:
            message = f"{message}: {stderr!r}"
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class DecoderUnavailableError(ArchiveError):
    """Archive format detected but its decoder is not installed."""

    def __init__(self, fmt: CompressionFormat, program: str) -> None:
        super().__init__(
            f"Archive is {fmt.value}-compressed but '{program}' is not available"
        )
        self.format = fmt
        self.program = program


def run_command(cmd: Sequence[str]) -> None:
    """Run an archiver command, raising ArchiverFailedError on failure."""
    logger.debug("Running: %s", " ".join(cmd))
    try:
        process = subprocess.run(
            list(cmd),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise ArchiverFailedError(cmd[0], str(exc)) from exc

    if process.returncode != 0:
        msg = process.stderr
        if len(msg) > MAX_ERROR - len(TRUNC_PREFIX):
            msg = (TRUNC_PREFIX + msg)[:MAX_ERROR]
        raise ArchiverFailedError(
            cmd[0], f"exited with status {process.returncode}", stderr=msg
        )


class ArchiveTransport:
    """Archive paths into one compressed file and extract it back."""

    def __init__(
        self,
        preferred: BaseCompressor | None = None,
        fallback: BaseCompressor | None = None,
        tar: str = "tar",
        runner: CommandRunner | None = None,
    ) -> None:
        self._preferred = preferred or Lz4Compressor()
        self._fallback = fallback or GzipCompressor()
        self._tar = tar
        self._run = runner or run_command

    def _compressor_for(self, fmt: CompressionFormat) -> BaseCompressor:
        for compressor in (self._preferred, self._fallback):
            if compressor.format == fmt:
                return compressor
        return GzipCompressor() if fmt == CompressionFormat.GZIP else Lz4Compressor()

    def create(
        self,
        paths: list[str],
        output_path: Path,
        working_dir: Path,
    ) -> CompressionFormat:
        """Create ``output_path`` from ``paths`` (relative to ``working_dir``).

        Returns:
            The compression format actually used.

        Raises:
            ArchiverFailedError: If tar fails.
        """
        logger.info("Creating tar archive: %s", output_path)
        logger.info("Archiving %d paths", len(paths))

        compressor = select_compressor(self._preferred, self._fallback)
        file_list = Path(f"{output_path}.filelist")
        file_list.write_text("\n".join(paths) + "\n", encoding="utf-8")

        try:
            self._run([
                self._tar,
                "-cf", str(output_path),
                f"--use-compress-program={compressor.compress_program}",
                "-C", str(working_dir),
                "--files-from", str(file_list),
            ])
        finally:
            file_list.unlink(missing_ok=True)

        size_mb = Path(output_path).stat().st_size / 1024 / 1024
        logger.info("Archive created: %.2f MB (%s)", size_mb, compressor.format.value)
        return compressor.format

    def extract(self, archive_path: Path, target_dir: Path) -> CompressionFormat:
        """Extract ``archive_path`` into ``target_dir``.

        The format comes from the file's signature. There is no fallback on
        this path: a missing decoder is an error.

        Raises:
            DecoderUnavailableError: If the detected format cannot be decoded here.
            ArchiverFailedError: If tar fails.
        """
        logger.info("Extracting tar archive: %s", archive_path)
        Path(target_dir).mkdir(parents=True, exist_ok=True)

        fmt = detect_file_format(Path(archive_path))
        compressor = self._compressor_for(fmt)
        if not compressor.is_available():
            raise DecoderUnavailableError(fmt, compressor.program)

        self._run([
            self._tar,
            "-xf", str(archive_path),
            f"--use-compress-program={compressor.compress_program}",
            "-C", str(target_dir),
        ])
        logger.info("Archive extracted successfully (%s)", fmt.value)
        return fmt
