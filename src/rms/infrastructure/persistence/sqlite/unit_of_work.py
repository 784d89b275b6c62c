"""SQLite implementation of the UnitOfWork.

Each ``with uow:`` block opens its own connection and starts the
transaction with ``BEGIN IMMEDIATE``, which takes the database write lock
up front. Every ledger read that decides a reservation therefore happens
under the same lock as the writes that follow it. A lock that cannot be
taken within the connection timeout surfaces as ConcurrencyConflict
before anything was read or written.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from rms.domain.exceptions import ConcurrencyConflict
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.infrastructure.persistence.sqlite.availability_repository import (
    SqliteAvailabilityRepository,
)
from rms.infrastructure.persistence.sqlite.connection import get_connection, is_lock_error
from rms.infrastructure.persistence.sqlite.handover_repository import SqliteHandoverRepository
from rms.infrastructure.persistence.sqlite.invoice_repository import SqliteInvoiceRepository
from rms.infrastructure.persistence.sqlite.order_repository import SqliteOrderRepository
from rms.infrastructure.persistence.sqlite.product_repository import SqliteProductRepository
from rms.logging_config import get_logger

logger = get_logger(__name__)


class SqliteUnitOfWork(UnitOfWork):

    def __init__(self, database_path: Path, lock_timeout: float = 5.0) -> None:
        self._database_path = database_path
        self._lock_timeout = lock_timeout
        self._connection: sqlite3.Connection | None = None

    def __enter__(self) -> SqliteUnitOfWork:
        if self._connection is not None:
            raise RuntimeError("Unit of work is already in progress")
        connection = get_connection(self._database_path, timeout=self._lock_timeout)
        try:
            connection.execute("BEGIN IMMEDIATE")
        except sqlite3.OperationalError as exc:
            connection.close()
            if is_lock_error(exc):
                logger.warning("Could not lock the ledger within %.1fs", self._lock_timeout)
                raise ConcurrencyConflict(
                    f"Ledger is busy; could not acquire the lock within {self._lock_timeout}s"
                ) from exc
            raise

        self._connection = connection
        self.products = SqliteProductRepository(connection)
        self.orders = SqliteOrderRepository(connection)
        self.availability = SqliteAvailabilityRepository(connection)
        self.handovers = SqliteHandoverRepository(connection)
        self.invoices = SqliteInvoiceRepository(connection)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def commit(self) -> None:
        connection = self._require_connection()
        try:
            connection.execute("COMMIT")
        except sqlite3.OperationalError as exc:
            if is_lock_error(exc):
                raise ConcurrencyConflict("Commit failed because the ledger is busy") from exc
            raise

    def rollback(self) -> None:
        if self._connection is not None and self._connection.in_transaction:
            self._connection.execute("ROLLBACK")

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise RuntimeError("Unit of work is not in progress")
        return self._connection
