# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests.

Container lifecycle:
- session scope: the MinIO container starts once per pytest session
- function scope: fresh bucket per test for isolation

Uses DockerContainer directly with bridge network IP + internal port;
the built-in helpers return localhost:mapped_port which is unreachable
from inside a devcontainer. Tests skip when no Docker daemon is reachable.
"""

from __future__ import annotations

import logging
import time
import uuid

import pytest

logger = logging.getLogger(__name__)


# ── Pytest markers ──────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "minio: marks tests requiring MinIO container")


# =====================================================================
#  DEVCONTAINER NETWORKING HELPERS
# =====================================================================

def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries.

    In docker-outside-of-docker setups, containers are on the host Docker
    daemon. The devcontainer must access them via bridge IP, not localhost.
    """
    for attempt in range(max_attempts):
        try:
            wrapped = container.get_wrapped_container()
            wrapped.reload()
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            for net_name, net_info in networks.items():
                ip = net_info.get("IPAddress", "")
                if ip:
                    logger.info(
                        "Container %s IP: %s (network: %s, attempt %d)",
                        wrapped.short_id, ip, net_name, attempt + 1,
                    )
                    return ip
            logger.debug("Container IP empty, attempt %d/%d", attempt + 1, max_attempts)
        except Exception as e:
            logger.debug("Error getting IP (attempt %d): %s", attempt + 1, e)
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


# =====================================================================
#  MINIO CONTAINER — session scope (bridge IP)
# =====================================================================

MINIO_IMAGE = "minio/minio:RELEASE.2025-04-22T22-12-26Z"
MINIO_PORT = 9000
MINIO_USER = "cacheuser"
MINIO_PASSWORD = "cachepassword"


@pytest.fixture(scope="session")
def minio_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = (
        DockerContainer(MINIO_IMAGE)
        .with_exposed_ports(MINIO_PORT)
        .with_env("MINIO_ROOT_USER", MINIO_USER)
        .with_env("MINIO_ROOT_PASSWORD", MINIO_PASSWORD)
        .with_command("server /data")
    )
    container.start()
    wait_for_logs(container, predicate=r"API:", timeout=60)
    time.sleep(1)

    ip = _get_container_bridge_ip(container)
    logger.info("MinIO ready at %s:%d", ip, MINIO_PORT)
    yield {"endpoint": f"http://{ip}:{MINIO_PORT}"}
    container.stop()


@pytest.fixture
def minio_bucket(minio_container) -> str:
    """Create an empty bucket for one test."""
    import boto3
    from botocore.config import Config

    bucket = f"cache-{uuid.uuid4().hex[:8]}"
    client = boto3.client(
        "s3",
        endpoint_url=minio_container["endpoint"],
        aws_access_key_id=MINIO_USER,
        aws_secret_access_key=MINIO_PASSWORD,
        region_name="us-east-1",
        config=Config(s3={"addressing_style": "path"}),
    )
    client.create_bucket(Bucket=bucket)
    return bucket


@pytest.fixture
def s3_store(minio_container, minio_bucket):
    from s3cache.storage.s3_store import S3ObjectStore
    return S3ObjectStore(
        bucket=minio_bucket,
        endpoint_url=minio_container["endpoint"],
        access_key_id=MINIO_USER,
        secret_access_key=MINIO_PASSWORD,
        region="us-east-1",
    )
