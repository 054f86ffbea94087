"""Application configuration loader.

Loads configuration from data/config/gradebook_v1.yaml, falling back to
built-in defaults when the file is missing.

Usage:
    from gradebook.config.app_config import load_app_config, get_db_path

    config = load_app_config()
    db_path = get_db_path()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/gradebook_v1.yaml")

# Environment override for the database location
DB_PATH_ENV = "GRADEBOOK_DB_PATH"


@dataclass
class DatabaseConfig:
    """Database location settings."""

    path: str = "db/gradebook.db"


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {
            "path": "db/gradebook.db",
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    db_data = data.get("database") or {}
    database = DatabaseConfig(
        path=str(db_data.get("path", DatabaseConfig.path)),
    )
    return AppConfig(database=database)


def load_app_config(force_reload: bool = False, config_file: Path | None = None) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.
        config_file: Alternative config file (defaults to CONFIG_FILE).

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    source = config_file or CONFIG_FILE
    data: dict[str, Any]

    if source.exists():
        logger.debug("loading_app_config", source=str(source))
        data = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def get_db_path() -> Path:
    """Get the database path, honouring the GRADEBOOK_DB_PATH override."""
    override = os.environ.get(DB_PATH_ENV)
    if override:
        return Path(override)
    return Path(load_app_config().database.path)


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
