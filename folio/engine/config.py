"""
Folio Configuration — Load and validate folio.yaml at startup.

Usage:
    from folio.engine.config import load_config, get_config
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from folio.engine.errors import FolioConfigError

CONFIG_FILE_NAME = "folio.yaml"


# ---------------------------------------------------------------------------
# Pydantic models for folio.yaml
# ---------------------------------------------------------------------------

class DatabaseConfig(BaseModel):
    url: str = "sqlite:///folio.db"
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 1800
    pool_pre_ping: bool = True
    echo: bool = False


class LogAsyncQueueConfig(BaseModel):
    flush_interval_ms: int = 100
    flush_batch_size: int = 50
    max_queue_size: int = 10000


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".folio/logs"
    async_queue: LogAsyncQueueConfig = LogAsyncQueueConfig()

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"level must be DEBUG/INFO/WARNING/ERROR/CRITICAL, got '{v}'")
        return v


class DocumentsConfig(BaseModel):
    # Folder label for documents added or moved without a folder reference;
    # null keeps them as root documents
    default_folder: Optional[str] = "general"
    include_hidden_in_folder_listing: bool = False
    recycle_bin_retention_days: int = 15

    @field_validator("recycle_bin_retention_days")
    @classmethod
    def validate_retention(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"recycle_bin_retention_days must be at least 1, got {v}")
        return v


class FolioConfig(BaseModel):
    """Root model for folio.yaml."""
    name: str = "Folio"
    environment: str = "dev"

    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    documents: DocumentsConfig = DocumentsConfig()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ("dev", "staging", "prod"):
            raise ValueError(f"environment must be dev/staging/prod, got '{v}'")
        return v


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[FolioConfig] = None


def _find_project_root() -> Path:
    """Find the project root by looking for folio.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / CONFIG_FILE_NAME).exists():
            return parent
    return current


def load_config(config_path: Optional[str] = None) -> FolioConfig:
    """
    Load and validate folio.yaml.

    Args:
        config_path: Explicit path to folio.yaml. If None, auto-discovers.

    Returns:
        Validated FolioConfig instance. Defaults when no file exists.

    Raises:
        FolioConfigError: the file is not valid YAML or fails validation.
    """
    global _config

    if config_path is None:
        config_path = str(_find_project_root() / CONFIG_FILE_NAME)

    path = Path(config_path)
    if not path.exists():
        _config = FolioConfig()
        return _config

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise FolioConfigError(f"Could not parse {path}: {e}", object_ref=str(path)) from e

    if not isinstance(raw, dict):
        raise FolioConfigError(f"{path} must contain a mapping", object_ref=str(path))

    # Flatten the top-level "folio" key if present
    folio_data = raw.get("folio", {}) or {}
    config_data = {
        "name": folio_data.get("name", raw.get("name", "Folio")),
        "environment": folio_data.get("environment", raw.get("environment", "dev")),
        "database": raw.get("database", {}) or {},
        "logging": raw.get("logging", {}) or {},
        "documents": raw.get("documents", {}) or {},
    }

    try:
        _config = FolioConfig(**config_data)
    except ValidationError as e:
        raise FolioConfigError(
            f"Invalid configuration in {path}",
            object_ref=str(path),
            validation_errors=e.errors(),
        ) from e
    return _config


def get_config() -> FolioConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
