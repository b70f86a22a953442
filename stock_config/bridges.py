"""
Config -> Kernel Bridges.

Functions that turn a ``StockConfig`` into configured kernel objects.  They
live in stock_config (the producer) because the kernel must NEVER import
stock_config.

Usage:
    from stock_config import get_active_config
    from stock_config.bridges import bootstrap, build_transfer_workflow
    from stock_kernel.db.engine import session_scope

    config = get_active_config()
    bootstrap(config)
    with session_scope() as session:
        workflow = build_transfer_workflow(session, config)
        workflow.issue_to_rep("7", "rep1", 50)

``init_engine_from_url`` configures logging with defaults if nobody has
yet, so ``init_logging`` must run before ``init_engine``; ``bootstrap``
does both in that order.
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from stock_config.schema import StockConfig
from stock_kernel.db.engine import init_engine_from_url
from stock_kernel.domain.clock import Clock
from stock_kernel.logging_config import configure_logging
from stock_kernel.services.transaction_ledger import TransactionLedger
from stock_kernel.services.transfer_workflow import TransferWorkflow


def init_logging(config: StockConfig, handler: logging.Handler | None = None) -> None:
    """Configure the stock_kernel logger tree at the configured level."""
    configure_logging(level=config.logging.level, handler=handler)


def init_engine(config: StockConfig) -> Engine:
    """Initialize the kernel's engine and session factory from ``config.database``."""
    db = config.database
    return init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
    )


def bootstrap(config: StockConfig, handler: logging.Handler | None = None) -> Engine:
    """Logging first, then the engine."""
    init_logging(config, handler=handler)
    return init_engine(config)


def build_transfer_workflow(
    session: Session,
    config: StockConfig,
    clock: Clock | None = None,
) -> TransferWorkflow:
    """TransferWorkflow whose warehouse movements name the configured warehouse."""
    return TransferWorkflow(
        TransactionLedger(session, clock),
        warehouse_id=config.warehouse_actor_id,
    )
