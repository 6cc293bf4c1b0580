"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads the YAML configuration file and parses it into the frozen
``inventory_config.schema`` dataclasses, then applies environment
overrides.  The single public entry point for runtime config is
``inventory_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Root that is not a mapping  -> ``ValueError``.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    ApiConfig,
    DatabaseConfig,
    InventoryConfig,
    LoggingConfig,
)

# Environment variable -> (section, key, parser)
_ENV_OVERRIDES: tuple[tuple[str, str, str], ...] = (
    ("DATABASE_URL", "database", "url"),
    ("INVENTORY_DB_POOL_SIZE", "database", "pool_size"),
    ("INVENTORY_DB_ECHO", "database", "echo"),
    ("INVENTORY_LOG_LEVEL", "logging", "level"),
)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document root is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root in {path} must be a mapping")
    return data


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def parse_database(data: Mapping[str, Any]) -> DatabaseConfig:
    return DatabaseConfig(
        url=data["url"],
        echo=parse_bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 20)),
        max_overflow=int(data.get("max_overflow", 10)),
        pool_timeout=int(data.get("pool_timeout", 30)),
        pool_recycle=int(data.get("pool_recycle", 1800)),
    )


def parse_logging(data: Mapping[str, Any]) -> LoggingConfig:
    return LoggingConfig(level=str(data.get("level", "INFO")).upper())


def parse_api(data: Mapping[str, Any]) -> ApiConfig:
    roles = data.get("write_roles", ("ADMIN", "STAFF"))
    return ApiConfig(
        title=data.get("title", "Inventory Management API"),
        default_page_size=int(data.get("default_page_size", 10)),
        max_page_size=int(data.get("max_page_size", 100)),
        write_roles=tuple(str(role).upper() for role in roles),
    )


def apply_env_overrides(
    data: dict[str, Any],
    environ: Mapping[str, str],
) -> dict[str, Any]:
    """Return a copy of ``data`` with environment overrides applied."""
    merged = {section: dict(values or {}) for section, values in data.items()}
    for env_name, section, key in _ENV_OVERRIDES:
        value = environ.get(env_name)
        if value:
            merged.setdefault(section, {})[key] = value
    return merged


def parse_config(data: Mapping[str, Any]) -> InventoryConfig:
    """
    Parse a config dict.

    Raises:
        KeyError: when the ``database`` section or its ``url`` is missing.
    """
    return InventoryConfig(
        database=parse_database(data["database"]),
        logging=parse_logging(data.get("logging") or {}),
        api=parse_api(data.get("api") or {}),
    )


def load_config(
    path: Path,
    environ: Mapping[str, str] | None = None,
) -> InventoryConfig:
    environ = os.environ if environ is None else environ
    return parse_config(apply_env_overrides(load_yaml_file(path), environ))
