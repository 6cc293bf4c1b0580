"""
inventory_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Defaults ship in ``defaults.yaml``; an
    alternate file may be passed explicitly or named by
    ``INVENTORY_CONFIG_FILE``.  Environment overrides are applied last.

Architecture position:
    Configuration.  Sits beside ``inventory_kernel`` and below
    ``inventory_api``.  The kernel MUST NEVER import from
    ``inventory_config``; the API layer translates config values into
    kernel calls.

Failure modes:
    - ``FileNotFoundError`` -- the named configuration file is missing.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ValueError`` -- the document root is not a mapping.
    - ``KeyError`` -- a required key (``database.url``) is missing.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from inventory_config.loader import load_config
from inventory_config.schema import (
    ApiConfig,
    DatabaseConfig,
    InventoryConfig,
    LoggingConfig,
)

_logger = logging.getLogger("inventory_kernel.config")

DEFAULT_CONFIG_FILE = Path(__file__).parent / "defaults.yaml"
CONFIG_FILE_ENV = "INVENTORY_CONFIG_FILE"


def get_active_config(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> InventoryConfig:
    """The ONLY public configuration entrypoint."""
    environ = os.environ if environ is None else environ
    if config_path is None:
        config_path = environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE
    path = Path(config_path)

    config = load_config(path, environ)
    _logger.info(
        "config_loaded",
        extra={
            "config_file": str(path),
            "log_level": config.logging.level,
            "pool_size": config.database.pool_size,
        },
    )
    return config


__all__ = [
    "ApiConfig",
    "DatabaseConfig",
    "InventoryConfig",
    "LoggingConfig",
    "get_active_config",
]
