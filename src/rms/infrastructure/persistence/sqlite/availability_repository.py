"""SQLite-backed implementation of AvailabilityRepository."""

from __future__ import annotations

import sqlite3
from datetime import date

from rms.domain.model.availability import AvailabilityDay, AvailabilityStatus
from rms.domain.repository.availability_repository import AvailabilityRepository


class SqliteAvailabilityRepository(AvailabilityRepository):

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    # --- AvailabilityRepository interface -------------------------------------

    def get(self, product_id: str, day: date) -> AvailabilityDay | None:
        row = self._connection.execute(
            "SELECT * FROM availability_day WHERE product_id = ? AND day = ?",
            (product_id, day.isoformat()),
        ).fetchone()
        return self._to_domain(row) if row else None

    def list_from(self, product_id: str, start: date) -> list[AvailabilityDay]:
        rows = self._connection.execute(
            """
            SELECT * FROM availability_day
            WHERE product_id = ? AND day >= ?
            ORDER BY day
            """,
            (product_id, start.isoformat()),
        ).fetchall()
        return [self._to_domain(row) for row in rows]

    def save(self, row: AvailabilityDay) -> None:
        self._connection.execute(
            """
            INSERT INTO availability_day (product_id, day, total_quantity,
                                          reserved_quantity, available_quantity, status)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(product_id, day) DO UPDATE SET
                total_quantity = excluded.total_quantity,
                reserved_quantity = excluded.reserved_quantity,
                available_quantity = excluded.available_quantity,
                status = excluded.status
            """,
            (
                row.product_id,
                row.day.isoformat(),
                row.total_quantity,
                row.reserved_quantity,
                row.available_quantity,
                row.status.value,
            ),
        )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> AvailabilityDay:
        return AvailabilityDay(
            product_id=row["product_id"],
            day=date.fromisoformat(row["day"]),
            total_quantity=int(row["total_quantity"]),
            reserved_quantity=int(row["reserved_quantity"]),
            status=AvailabilityStatus(row["status"]),
        )
