"""
InventoryConfig schema.

Frozen dataclasses for the runtime configuration.  YAML is parsed into
these types by the loader; nothing else in the system sees raw YAML.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DatabaseConfig:
    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class ApiConfig:
    title: str = "Inventory Management API"
    default_page_size: int = 10
    max_page_size: int = 100
    write_roles: tuple[str, ...] = ("ADMIN", "STAFF")


@dataclass(frozen=True)
class InventoryConfig:
    """Top-level runtime configuration."""

    database: DatabaseConfig
    logging: LoggingConfig
    api: ApiConfig
