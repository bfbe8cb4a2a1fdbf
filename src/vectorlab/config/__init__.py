"""Configuration package for vectorlab."""

from vectorlab.config.app_config import (
    AppConfig,
    DatabaseConfig,
    EditorConfig,
    WebConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "EditorConfig",
    "WebConfig",
    "clear_config_cache",
    "load_app_config",
]
