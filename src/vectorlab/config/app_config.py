"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults when the file is missing.

Usage:
    from vectorlab.config.app_config import load_app_config

    config = load_app_config()
    db_path = config.database.resolved_path()
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
CONFIG_FILE = Path("data/config/app_config_v1.yaml")

DB_PATH_ENV = "VECTORLAB_DB_PATH"


@dataclass
class DatabaseConfig:
    """Where the SQLite store lives."""

    path: str = "db/vectorlab.db"

    def resolved_path(self) -> Path:
        """Get database path, honouring the environment override."""
        override = os.environ.get(DB_PATH_ENV)
        if override:
            return Path(override)
        return Path(self.path)


@dataclass
class EditorConfig:
    """Configuration for the exercise editor."""

    autosave_delay_seconds: float = 1.2
    draft_idle_seconds: float = 600.0


@dataclass
class WebConfig:
    """Configuration for the HTTP API."""

    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    web: WebConfig = field(default_factory=WebConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {"path": "db/vectorlab.db"},
        "editor": {"autosave_delay_seconds": 1.2, "draft_idle_seconds": 600.0},
        "web": {"cors_origins": ["*"]},
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    db_data = data.get("database") or {}
    database = DatabaseConfig(
        path=str(db_data.get("path", defaults["database"]["path"])),
    )

    editor_data = data.get("editor") or {}
    editor = EditorConfig(
        autosave_delay_seconds=float(
            editor_data.get(
                "autosave_delay_seconds",
                defaults["editor"]["autosave_delay_seconds"],
            )
        ),
        draft_idle_seconds=float(
            editor_data.get("draft_idle_seconds", defaults["editor"]["draft_idle_seconds"])
        ),
    )

    web_data = data.get("web") or {}
    web = WebConfig(
        cors_origins=list(web_data.get("cors_origins", defaults["web"]["cors_origins"])),
    )

    return AppConfig(database=database, editor=editor, web=web)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
