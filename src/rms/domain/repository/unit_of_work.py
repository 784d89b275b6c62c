"""Abstract Unit of Work — the transaction boundary.

Every repository a request touches hangs off one UnitOfWork so a single
``commit()`` makes all of its changes durable and anything short of that
rolls all of them back. Entering the context acquires the write lock on
the availability ledger; implementations raise ConcurrencyConflict when
the lock cannot be taken in time.

Usage::

    with uow:
        ...
        uow.commit()
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rms.domain.repository.availability_repository import AvailabilityRepository
from rms.domain.repository.handover_repository import HandoverRepository
from rms.domain.repository.invoice_repository import InvoiceRepository
from rms.domain.repository.order_repository import OrderRepository
from rms.domain.repository.product_repository import ProductRepository


class UnitOfWork(ABC):

    products: ProductRepository
    orders: OrderRepository
    availability: AvailabilityRepository
    handovers: HandoverRepository
    invoices: InvoiceRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # No-op after a successful commit.
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change since entering durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every uncommitted change."""
