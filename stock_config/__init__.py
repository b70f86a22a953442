"""
stock_config -- single public entrypoint for stock ledger configuration.

Responsibility:
    Provides the way to obtain configuration at runtime through
    ``get_active_config()``, which returns a frozen ``StockConfig``.

Architecture position:
    Configuration.  Sits above ``stock_kernel`` and below
    ``stock_modules``.  The kernel never imports from ``stock_config``;
    ``StockConfig.reset_policy()`` translates configuration into the
    kernel's ``DailyResetPolicy`` and ``stock_config.bridges`` builds
    the engine, logging and warehouse-aware TransferWorkflow from it.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` -- a required key is missing.
    - ``ValueError`` -- a value fails validation.

Every successful ``get_active_config()`` call emits a
``STOCK_CONFIG_TRACE`` log entry naming the file, config id and timezone.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stock_config.loader import load_yaml_file, parse_config
from stock_config.schema import DatabaseConfig, LoggingConfig, StockConfig

_logger = logging.getLogger("stock_kernel.config")

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> StockConfig:
    """Load and validate the active configuration.

    Args:
        path: YAML file to load.  Defaults to stock_config/sets/default.yaml.

    Raises:
        FileNotFoundError: If the file does not exist.
        KeyError: If a required key is missing.
        ValueError: If a value fails validation.
    """
    config_file = Path(path) if path is not None else _DEFAULT_CONFIG_FILE
    config = parse_config(load_yaml_file(config_file))

    _logger.info(
        "STOCK_CONFIG_TRACE",
        extra={
            "trace_type": "STOCK_CONFIG_TRACE",
            "config_file": str(config_file),
            "config_id": config.config_id,
            "operating_timezone": config.operating_timezone,
            "actor_timezone_count": len(config.actor_timezones),
        },
    )
    return config


__all__ = [
    "DatabaseConfig",
    "LoggingConfig",
    "StockConfig",
    "get_active_config",
]
