"""
Configuration loader for the catalog service (server, store, notifications, logging).

Values come from ``config/catalog_config.yml`` when present, then environment
variables (``.env`` is honoured) override them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "catalog_config.yml"


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    static_dir: Optional[str] = "public"


class StoreConfig(BaseModel):
    """MongoDB settings; without a url the in-memory store is used."""

    url: Optional[str] = None
    database: str = "myDB"
    products_collection: str = "products"
    categories_collection: str = "categories"
    server_selection_timeout_ms: int = Field(default=5000, ge=1)


class NotificationsConfig(BaseModel):
    topic: str = "products"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CatalogConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# env var -> (section, key)
_ENV_OVERRIDES = {
    "MONGODB_URL": ("store", "url"),
    "MONGODB_DB": ("store", "database"),
    "CATALOG_HOST": ("server", "host"),
    "CATALOG_PORT": ("server", "port"),
    "CATALOG_STATIC_DIR": ("server", "static_dir"),
    "CATALOG_LOG_LEVEL": ("logging", "level"),
}


def _apply_env_overrides(data: dict) -> dict:
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is None or value == "":
            continue
        data.setdefault(section, {})
        data[section][key] = value
    return data


def load_catalog_config(config_path: Optional[Path] = None) -> CatalogConfig:
    """
    Load and validate the catalog configuration.

    Args:
        config_path: Path to a YAML file. Defaults to config/catalog_config.yml;
            a missing file means built-in defaults.

    Raises:
        ValidationError: If the merged configuration doesn't match the schema
    """
    load_dotenv()

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    data: dict = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.info("Catalog config not found at %s, using defaults", config_path)

    data = _apply_env_overrides(data)

    try:
        cfg = CatalogConfig(**data)
        logger.info("Loaded catalog config (store=%s)", "mongo" if cfg.store.url else "memory")
        return cfg
    except ValidationError as e:
        logger.error("Catalog config validation failed: %s", e)
        raise


def configure_logging(cfg: LoggingConfig, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, cfg.level.upper(), logging.INFO)
    # force: replace handlers installed by an earlier call (or by uvicorn).
    logging.basicConfig(level=level, format=cfg.format, force=True)
