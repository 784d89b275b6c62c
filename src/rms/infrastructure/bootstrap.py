"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from rms.application.billing import BillingLedger
from rms.config import Settings, load_settings
from rms.domain.events import DomainEvent, InvoiceRequested, LateFeeAssessed
from rms.domain.model.availability import StatusPolicy
from rms.domain.model.value_objects import Money
from rms.domain.service.fee_calculator import FeeCalculator
from rms.infrastructure.messaging.event_bus import InMemoryEventBus, log_event
from rms.infrastructure.persistence.sqlite.connection import get_connection
from rms.infrastructure.persistence.sqlite.migrations import apply_migrations
from rms.infrastructure.persistence.sqlite.unit_of_work import SqliteUnitOfWork

_migrated: set[str] = set()


def settings() -> Settings:
    return load_settings()


def unit_of_work(config: Settings) -> SqliteUnitOfWork:
    """Return a unit of work on an up-to-date database."""
    key = str(config.db_path)
    if key not in _migrated:
        connection = get_connection(config.db_path, timeout=config.lock_timeout)
        try:
            apply_migrations(connection)
        finally:
            connection.close()
        _migrated.add(key)
    return SqliteUnitOfWork(config.db_path, lock_timeout=config.lock_timeout)


def status_policy(config: Settings) -> StatusPolicy:
    return StatusPolicy(limited_threshold=config.limited_threshold)


def fee_calculator(config: Settings) -> FeeCalculator:
    return FeeCalculator(
        default_late_fee_per_day=Money(config.late_fee_per_day),
        grace_period_days=config.late_fee_grace_days,
        max_fee_ratio=config.late_fee_max_ratio,
        daily_fee_ratio=config.late_fee_daily_ratio,
    )


def billing_ledger(config: Settings) -> BillingLedger:
    return BillingLedger(unit_of_work(config))


def event_bus(config: Settings) -> InMemoryEventBus:
    """Event bus with the billing ledger and the event log subscribed."""
    bus = InMemoryEventBus()
    billing = billing_ledger(config)
    bus.subscribe(DomainEvent, log_event)
    bus.subscribe(InvoiceRequested, billing.on_invoice_requested)
    bus.subscribe(LateFeeAssessed, billing.on_late_fee_assessed)
    return bus
