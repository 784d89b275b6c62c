"""SQLite-backed implementation of InvoiceRepository."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from decimal import Decimal

from rms.domain.events import PaymentType
from rms.domain.model.invoice import Invoice
from rms.domain.model.value_objects import Money
from rms.domain.repository.invoice_repository import InvoiceRepository


class SqliteInvoiceRepository(InvoiceRepository):

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def list_for_order(self, order_id: int) -> list[Invoice]:
        rows = self._connection.execute(
            "SELECT * FROM invoice WHERE order_id = ? ORDER BY id", (order_id,)
        ).fetchall()
        return [
            Invoice(
                id=int(row["id"]),
                order_id=int(row["order_id"]),
                payment_type=PaymentType(row["payment_type"]),
                amount=Money(Decimal(row["amount"]), row["currency"]),
                paid_amount=Money(Decimal(row["paid_amount"]), row["currency"]),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    def save(self, invoice: Invoice) -> None:
        if invoice.id is None:
            cursor = self._connection.execute(
                """
                INSERT INTO invoice (order_id, payment_type, amount, paid_amount,
                                     currency, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    invoice.order_id,
                    invoice.payment_type.value,
                    str(invoice.amount.amount),
                    str(invoice.paid_amount.amount),
                    invoice.amount.currency,
                    invoice.created_at.isoformat(),
                ),
            )
            invoice.id = int(cursor.lastrowid)
        else:
            self._connection.execute(
                "UPDATE invoice SET paid_amount = ? WHERE id = ?",
                (str(invoice.paid_amount.amount), invoice.id),
            )
