# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides a runner context, an in-memory object store, a tarfile-backed
archive transport and a populated working directory. No network access;
the external tar binary is only needed by tests that ask for it.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from s3cache.archive.compressors import CompressionFormat
from s3cache.core.models import CacheMetadata, RunnerContext
from s3cache.keys.builder import KeyBuilder
from s3cache.logging.context import clear_context
from s3cache.logging.logger import ROOT_LOGGER
from s3cache.logging.masking import clear_secrets
from s3cache.storage.base_object_store import BaseObjectStore, CacheNotFoundError


# === FAKES ===


class MemoryObjectStore(BaseObjectStore):
    """Dict-backed object store that records every probe."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.probed: list[str] = []
        self.uploads: list[str] = []

    def exists(self, key: str) -> bool:
        self.probed.append(key)
        return key in self.objects

    def metadata(self, key: str) -> CacheMetadata | None:
        if key not in self.objects:
            return None
        return CacheMetadata(
            key=key,
            size=len(self.objects[key]),
            last_modified=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )

    def upload(self, local_path: Path, key: str) -> None:
        self.objects[key] = Path(local_path).read_bytes()
        self.uploads.append(key)

    def download(self, key: str, local_path: Path) -> None:
        if key not in self.objects:
            raise CacheNotFoundError(key)
        Path(local_path).write_bytes(self.objects[key])


class TarfileTransport:
    """Archive transport stand-in using the tarfile module (gzip only)."""

    def __init__(self) -> None:
        self.created: list[list[str]] = []

    def create(self, paths: list[str], output_path: Path, working_dir: Path) -> CompressionFormat:
        self.created.append(list(paths))
        with tarfile.open(output_path, "w:gz") as tar:
            for p in paths:
                tar.add(str(Path(working_dir) / p), arcname=p)
        return CompressionFormat.GZIP

    def extract(self, archive_path: Path, target_dir: Path) -> CompressionFormat:
        Path(target_dir).mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, "r:gz") as tar:
            if hasattr(tarfile, "data_filter"):
                tar.extractall(target_dir, filter="data")
            else:
                tar.extractall(target_dir)
        return CompressionFormat.GZIP


# === FIXTURES: Context ===


@pytest.fixture(autouse=True)
def _reset_logging_state():
    clear_context()
    clear_secrets()
    yield
    clear_context()
    clear_secrets()
    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def runner_context() -> RunnerContext:
    """Context matching a feature-branch CI run."""
    return RunnerContext(org="myorg", repo="myrepo", branch="feature-x", workflow="CI")


@pytest.fixture
def key_builder(runner_context: RunnerContext) -> KeyBuilder:
    return KeyBuilder(runner_context)


# === FIXTURES: Stores and transports ===


@pytest.fixture
def memory_store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture
def tarfile_transport() -> TarfileTransport:
    return TarfileTransport()


# === FIXTURES: Temp dirs ===


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Working directory with an ``out/`` tree and a top-level file."""
    wd = tmp_path / "work"
    (wd / "out" / "nested").mkdir(parents=True)
    (wd / "out" / "a.txt").write_text("alpha")
    (wd / "out" / "nested" / "b.txt").write_text("beta")
    (wd / "build.log").write_text("log")
    return wd


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    root = tmp_path / "runner-temp"
    root.mkdir()
    return root


@pytest.fixture
def read_member(tmp_path: Path):
    """Return a reader for one member of a gzip tar held in memory."""

    def _read(data: bytes, name: str) -> bytes:
        archive = tmp_path / "inspect.tar.gz"
        archive.write_bytes(data)
        with tarfile.open(archive, "r:gz") as tar:
            member = tar.extractfile(name)
            assert member is not None
            return member.read()

    return _read


@pytest.fixture
def require_tar() -> None:
    """Skip unless the external tar and gzip binaries are installed."""
    if shutil.which("tar") is None or shutil.which("gzip") is None:
        pytest.skip("tar/gzip not available")
