# src/config/settings.py — v1
"""Typed action inputs loaded from the CI runner environment via pydantic-settings.

The runner exposes each action input as ``INPUT_<NAME>`` with the name
upper-cased and hyphens kept (``INPUT_RESTORE-KEYS``). Underscore spellings
are accepted too, and keyword arguments use the plain field names so the
same model serves the action entry point, the CLI and tests.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_S3_ENDPOINT = "https://s3-dcl1.ethquokkaops.io"
DEFAULT_S3_BUCKET = "github-actions-cache"
DEFAULT_S3_REGION = "us-east-1"

_PATH_SEPARATORS = re.compile(r"[\n,]")


class ConfigurationError(Exception):
    """Raised when action inputs are missing or invalid."""


def _input(name: str) -> AliasChoices:
    """Environment names for an input: ``INPUT_FIELD-NAME`` or ``INPUT_FIELD_NAME``.

    The bare field name is never read from the environment since ``path``
    would match the process ``PATH``. Keyword overrides are translated to
    the first alias by ``load_settings``.
    """
    hyphenated = "INPUT_" + name.replace("_", "-").upper()
    underscored = "INPUT_" + name.upper()
    if hyphenated == underscored:
        return AliasChoices(hyphenated)
    return AliasChoices(hyphenated, underscored)


class Settings(BaseSettings):
    """Action inputs for one save or restore invocation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Operation ===
    action: Literal["save", "restore"] = Field(validation_alias=_input("action"))
    key: str = Field(validation_alias=_input("key"))
    restore_keys: str = Field(default="", validation_alias=_input("restore_keys"))
    path: str = Field(validation_alias=_input("path"))

    # === Object store ===
    s3_endpoint: str = Field(
        default=DEFAULT_S3_ENDPOINT, validation_alias=_input("s3_endpoint")
    )
    cache_username: SecretStr = Field(validation_alias=_input("cache_username"))
    cache_password: SecretStr = Field(validation_alias=_input("cache_password"))
    s3_bucket: str = Field(
        default=DEFAULT_S3_BUCKET, validation_alias=_input("s3_bucket")
    )
    s3_region: str = Field(
        default=DEFAULT_S3_REGION, validation_alias=_input("s3_region")
    )
    store_backend: Literal["s3", "local"] = Field(
        default="s3", validation_alias=_input("store_backend")
    )
    local_store_root: Path = Field(
        default=Path("~/.s3cache/store"), validation_alias=_input("local_store_root")
    )

    # === Manifest ===
    strict_manifest: bool = Field(
        default=False, validation_alias=_input("strict_manifest")
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias=_input("log_level")
    )
    log_format: Literal["actions", "json", "text"] = Field(
        default="actions", validation_alias=_input("log_format")
    )

    # --- Validators ---

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Cache key is required and must not be blank."""
        if not v.strip():
            raise ValueError("Cache key is required")
        return v.strip()

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """At least one non-blank path must be specified."""
        if not any(p.strip() for p in _PATH_SEPARATORS.split(v)):
            raise ValueError("At least one path must be specified")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    # --- Helpers ---

    @property
    def restore_keys_list(self) -> list[str]:
        """Parse newline-separated restore keys."""
        return [k.strip() for k in self.restore_keys.split("\n") if k.strip()]

    @property
    def paths_list(self) -> list[str]:
        """Parse newline- or comma-separated path patterns."""
        return [p.strip() for p in _PATH_SEPARATORS.split(self.path) if p.strip()]


def _as_inputs(overrides: dict[str, object]) -> dict[str, object]:
    """Rename field-name overrides to the input alias the model validates."""
    translated: dict[str, object] = {}
    for name, value in overrides.items():
        field = Settings.model_fields.get(name)
        if field is not None and isinstance(field.validation_alias, AliasChoices):
            name = str(field.validation_alias.choices[0])
        translated[name] = value
    return translated


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment with optional overrides.

    Args:
        **overrides: Field-level overrides by field name (CLI flags, tests).
            Non-field keywords such as ``_env_file`` pass through unchanged.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If a required input is missing or a value is invalid.
    """
    try:
        return Settings(**_as_inputs(overrides))  # type: ignore[arg-type]
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid action inputs: {problems}") from exc
