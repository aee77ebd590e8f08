# src/__init__.py — v1
"""s3cache: CI cache archives on S3-compatible object storage."""

from s3cache.version import __version__

__all__ = ["__version__"]
