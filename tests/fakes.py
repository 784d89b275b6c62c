"""In-memory fakes for testing.

The fake repositories implement the same abstract interfaces as the SQLite
repositories but keep everything in dicts on a shared FakeStore. No file
I/O, no side effects. FakeUnitOfWork gives them the same transaction
semantics: one lock over the store, and a rollback that restores the
store exactly as it was when the unit of work was entered.
"""

from __future__ import annotations

import copy
import threading
from datetime import date

from rms.domain.events import DomainEvent, EventPublisher
from rms.domain.exceptions import ConcurrencyConflict
from rms.domain.model.availability import AvailabilityDay
from rms.domain.model.handover import Handover
from rms.domain.model.invoice import Invoice
from rms.domain.model.order import RentalOrder
from rms.domain.model.product import Product
from rms.domain.repository.availability_repository import AvailabilityRepository
from rms.domain.repository.handover_repository import HandoverRepository
from rms.domain.repository.invoice_repository import InvoiceRepository
from rms.domain.repository.order_repository import OrderRepository
from rms.domain.repository.product_repository import ProductRepository
from rms.domain.repository.unit_of_work import UnitOfWork


class FakeStore:
    """Shared state behind every fake unit of work of one test."""

    def __init__(self, products: list[Product] | None = None) -> None:
        self.products: dict[str, Product] = {p.id: p for p in products or []}
        self.orders: dict[int, RentalOrder] = {}
        self.availability: dict[tuple[str, date], AvailabilityDay] = {}
        self.handovers: dict[int, Handover] = {}
        self.invoices: dict[int, Invoice] = {}
        self.next_ids = {"order": 1, "item": 1, "handover": 1, "invoice": 1}
        self.lock = threading.Lock()

    def next_id(self, kind: str) -> int:
        value = self.next_ids[kind]
        self.next_ids[kind] = value + 1
        return value

    def snapshot(self) -> dict:
        return copy.deepcopy(
            {
                "products": self.products,
                "orders": self.orders,
                "availability": self.availability,
                "handovers": self.handovers,
                "invoices": self.invoices,
                "next_ids": self.next_ids,
            }
        )

    def restore(self, state: dict) -> None:
        for name, value in state.items():
            target = getattr(self, name)
            target.clear()
            target.update(value)


class FakeProductRepository(ProductRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def get_by_id(self, product_id: str) -> Product | None:
        return self._store.products.get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for p in self._store.products.values():
            if p.name.lower() == name.lower():
                return p
        return None

    def list_all(self) -> list[Product]:
        return list(self._store.products.values())

    def save(self, product: Product) -> None:
        self._store.products[product.id] = product


class FakeOrderRepository(OrderRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def get_by_id(self, order_id: int) -> RentalOrder | None:
        return self._store.orders.get(order_id)

    def save(self, order: RentalOrder) -> None:
        if order.id is None:
            order.id = self._store.next_id("order")
        for item in order.items:
            if item.id is None:
                item.id = self._store.next_id("item")
        self._store.orders[order.id] = order


class FakeAvailabilityRepository(AvailabilityRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store
        self.saves = 0

    def get(self, product_id: str, day: date) -> AvailabilityDay | None:
        return self._store.availability.get((product_id, day))

    def list_from(self, product_id: str, start: date) -> list[AvailabilityDay]:
        rows = [
            row
            for (pid, day), row in self._store.availability.items()
            if pid == product_id and day >= start
        ]
        return sorted(rows, key=lambda row: row.day)

    def save(self, row: AvailabilityDay) -> None:
        self.saves += 1
        self._store.availability[(row.product_id, row.day)] = row


class FakeHandoverRepository(HandoverRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def list_for_order(self, order_id: int) -> list[Handover]:
        found = [h for h in self._store.handovers.values() if h.order_id == order_id]
        return sorted(found, key=lambda h: h.id)

    def save(self, handover: Handover) -> None:
        if handover.id is None:
            handover.id = self._store.next_id("handover")
        self._store.handovers[handover.id] = handover


class FakeInvoiceRepository(InvoiceRepository):

    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def list_for_order(self, order_id: int) -> list[Invoice]:
        found = [i for i in self._store.invoices.values() if i.order_id == order_id]
        return sorted(found, key=lambda i: i.id)

    def save(self, invoice: Invoice) -> None:
        if invoice.id is None:
            invoice.id = self._store.next_id("invoice")
        self._store.invoices[invoice.id] = invoice


class FakeUnitOfWork(UnitOfWork):

    def __init__(self, store: FakeStore | None = None, lock_timeout: float = 2.0) -> None:
        self.store = store if store is not None else FakeStore()
        self.lock_timeout = lock_timeout
        self.products = FakeProductRepository(self.store)
        self.orders = FakeOrderRepository(self.store)
        self.availability = FakeAvailabilityRepository(self.store)
        self.handovers = FakeHandoverRepository(self.store)
        self.invoices = FakeInvoiceRepository(self.store)
        self.commits = 0
        self._snapshot: dict | None = None

    def __enter__(self) -> FakeUnitOfWork:
        if not self.store.lock.acquire(timeout=self.lock_timeout):
            raise ConcurrencyConflict("Fake store is locked")
        self._snapshot = self.store.snapshot()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._snapshot = None
            self.store.lock.release()

    def commit(self) -> None:
        self._snapshot = None
        self.commits += 1

    def rollback(self) -> None:
        if self._snapshot is not None:
            self.store.restore(self._snapshot)
            self._snapshot = None


class RecordingPublisher(EventPublisher):

    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list[DomainEvent]:
        return [e for e in self.events if isinstance(e, event_type)]
