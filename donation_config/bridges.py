"""
Config -> Kernel Bridges.

Functions that convert a ``PlatformConfig`` into kernel-compatible inputs.
These live in donation_config (the producer) because the kernel must NEVER
import donation_config.

Usage:
    from donation_config.bridges import build_ledger_policy, init_engine_from_config

    config = get_active_config()
    init_engine_from_config(config)
    reconciler = LedgerReconciler(session, policy=build_ledger_policy(config))
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine

from donation_config.schema import PlatformConfig
from donation_kernel.db.engine import init_engine_from_url
from donation_kernel.domain.policy import AllocationPolicy, LedgerPolicy
from donation_kernel.logging_config import configure_logging


def build_ledger_policy(config: PlatformConfig) -> LedgerPolicy:
    return LedgerPolicy(
        require_approved_campaign=config.ledger.require_approved_campaign,
        verify_callback_amount=config.ledger.verify_callback_amount,
    )


def build_allocation_policy(config: PlatformConfig) -> AllocationPolicy:
    return AllocationPolicy(
        auto_reject_sibling_orders=config.allocation.auto_reject_sibling_orders,
    )


def init_engine_from_config(config: PlatformConfig) -> Engine:
    db = config.database
    return init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
    )


def configure_logging_from_config(config: PlatformConfig) -> None:
    configure_logging(level=getattr(logging, config.logging.level))
