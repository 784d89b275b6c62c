"""SQLite-backed implementation of ProductRepository."""

from __future__ import annotations

import sqlite3
from decimal import Decimal

from rms.domain.model.product import Product, RentalUnit
from rms.domain.model.value_objects import Money
from rms.domain.repository.product_repository import ProductRepository


class SqliteProductRepository(ProductRepository):

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        row = self._connection.execute(
            "SELECT * FROM products WHERE id = ?", (product_id,)
        ).fetchone()
        return self._to_domain(row) if row else None

    def get_by_name(self, name: str) -> Product | None:
        row = self._connection.execute(
            "SELECT * FROM products WHERE lower(name) = lower(?)", (name,)
        ).fetchone()
        return self._to_domain(row) if row else None

    def list_all(self) -> list[Product]:
        rows = self._connection.execute(
            "SELECT * FROM products ORDER BY CAST(id AS INTEGER), id"
        ).fetchall()
        return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        self._connection.execute(
            """
            INSERT INTO products (id, name, total_quantity, rental_unit, base_rate,
                                  late_fee_per_day, currency)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                total_quantity = excluded.total_quantity,
                rental_unit = excluded.rental_unit,
                base_rate = excluded.base_rate,
                late_fee_per_day = excluded.late_fee_per_day,
                currency = excluded.currency
            """,
            (
                product.id,
                product.name,
                product.total_quantity,
                product.rental_unit.value,
                str(product.base_rate.amount),
                str(product.late_fee_per_day.amount) if product.late_fee_per_day else None,
                product.base_rate.currency,
            ),
        )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Product:
        currency = row["currency"]
        late_fee = row["late_fee_per_day"]
        return Product(
            id=row["id"],
            name=row["name"],
            total_quantity=int(row["total_quantity"]),
            base_rate=Money(Decimal(row["base_rate"]), currency),
            rental_unit=RentalUnit(row["rental_unit"]),
            late_fee_per_day=Money(Decimal(late_fee), currency) if late_fee is not None else None,
        )
