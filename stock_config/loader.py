"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen dataclasses
of ``stock_config.schema``.  Runtime callers use
``stock_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; required fields have no silent defaults.
* Every timezone name is resolved through ``zoneinfo`` at load time.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Unknown timezone, bad level or bad pool size  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from stock_config.schema import DatabaseConfig, LoggingConfig, StockConfig

_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def parse_timezone(value: Any) -> str:
    """Validate an IANA timezone name and return it unchanged."""
    if not isinstance(value, str) or not value:
        raise ValueError(f"Timezone must be a non-empty string, got {value!r}")
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone {value!r}") from exc
    return value


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    """Parse a DatabaseConfig; ``url`` is required."""
    pool_size = int(data.get("pool_size", 5))
    max_overflow = int(data.get("max_overflow", 10))
    if pool_size < 1 or max_overflow < 0:
        raise ValueError(
            f"Invalid pool settings: pool_size={pool_size}, max_overflow={max_overflow}"
        )
    return DatabaseConfig(
        url=data["url"],
        echo=bool(data.get("echo", False)),
        pool_size=pool_size,
        max_overflow=max_overflow,
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", "INFO")).upper()
    if level not in _LEVELS:
        raise ValueError(f"Unknown log level {level!r}")
    return LoggingConfig(level=level)


def parse_config(data: dict[str, Any]) -> StockConfig:
    """
    Parse a ``StockConfig`` from a dict.

    Preconditions:
        - ``data`` contains ``config_id``, ``operating_timezone``,
          ``warehouse_actor_id`` and ``database.url``.
    Raises:
        KeyError: if required keys are missing.
        ValueError: if a value is invalid.
    """
    actor_timezones = {
        str(actor_id): parse_timezone(name)
        for actor_id, name in (data.get("actor_timezones") or {}).items()
    }
    return StockConfig(
        config_id=data["config_id"],
        operating_timezone=parse_timezone(data["operating_timezone"]),
        warehouse_actor_id=str(data["warehouse_actor_id"]),
        database=parse_database(data["database"]),
        logging=parse_logging(data.get("logging") or {}),
        actor_timezones=actor_timezones,
    )
