# src/config/settings.py - v2
"""Typed configuration loaded from environment variables and .env via pydantic-settings.

Single source of truth for deployment-specific settings: where index files
live, which cache layers are active, which bucket backs the stream wrapper
and how logging is emitted.
"""

from __future__ import annotations

import hashlib
import tempfile
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


def default_index_dir(install_root: Path) -> Path:
    """Per-install temp directory, so co-located installs never share index files."""
    fingerprint = hashlib.md5(str(install_root).encode("utf-8")).hexdigest()[:8]  # noqa: S324
    return Path(tempfile.gettempdir()) / f"s3-index-{fingerprint}"


class Settings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_prefix="S3_LOCAL_INDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Index storage ===
    install_root: Path = Field(default_factory=Path.cwd)
    index_dir: Path | None = None
    rebuild_list_file: Path | None = None

    # === Cache ===
    cache_ttl: int = 3600
    memory_cache_capacity: int = 0
    external_cache_enabled: bool = False
    cache_redis_url: str = ""
    cache_group: str = "s3_local_index"
    cache_namespace: str = "s3li"

    # === Object store ===
    s3_bucket: str = ""
    s3_region: str = ""
    s3_endpoint_url: str = ""
    s3_protocol: str = "s3"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("s3_protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:  # noqa: N805
        if not v or ":" in v or "/" in v:
            raise ValueError("s3_protocol must be a bare scheme name, e.g. 's3'")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.external_cache_enabled and not self.cache_redis_url:
            errors.append(
                "EXTERNAL_CACHE_ENABLED requires CACHE_REDIS_URL to be set"
            )

        if self.cache_ttl < 0:
            errors.append("CACHE_TTL must be >= 0")

        if self.memory_cache_capacity < 0:
            errors.append("MEMORY_CACHE_CAPACITY must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def resolved_index_dir(self) -> Path:
        """Directory holding partition index files."""
        if self.index_dir is not None:
            return Path(self.index_dir).expanduser()
        return default_index_dir(self.install_root)

    @property
    def resolved_rebuild_list_file(self) -> Path:
        """Location of the durable rebuild queue."""
        if self.rebuild_list_file is not None:
            return Path(self.rebuild_list_file).expanduser()
        return self.resolved_index_dir / "rebuild-list.json"


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment / .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
