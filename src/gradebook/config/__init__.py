"""Configuration package for the gradebook."""

from gradebook.config.app_config import (
    AppConfig,
    DatabaseConfig,
    clear_config_cache,
    get_db_path,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "clear_config_cache",
    "get_db_path",
    "load_app_config",
]
