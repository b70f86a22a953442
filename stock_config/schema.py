"""
Stock configuration schema.

Frozen dataclasses that YAML configuration files are parsed into by the
loader.  ``StockConfig`` is the runtime artifact returned by
``stock_config.get_active_config()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stock_kernel.domain.daily_reset import DailyResetPolicy

# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings passed to ``init_engine_from_url``."""

    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10


@dataclass(frozen=True)
class LoggingConfig:
    """Root level for the ``stock_kernel`` logger tree."""

    level: str = "INFO"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StockConfig:
    """Runtime configuration for the stock ledger.

    ``actor_timezones`` maps an actor id to the IANA zone whose midnight
    resets that actor's daily window; everyone else uses
    ``operating_timezone``.
    """

    config_id: str
    operating_timezone: str
    warehouse_actor_id: str
    database: DatabaseConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    actor_timezones: dict[str, str] = field(default_factory=dict)

    def reset_policy(self) -> DailyResetPolicy:
        """The daily reset policy for this configuration."""
        return DailyResetPolicy(
            timezone_name=self.operating_timezone,
            actor_timezones=dict(self.actor_timezones),
        )
