"""SQLite-backed implementation of OrderRepository.

An order and its items are written together; items are matched on their
``order_item_id`` so item IDs stay stable across saves.
"""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from decimal import Decimal

from rms.domain.model.order import OrderItem, OrderStatus, RentalOrder
from rms.domain.model.product import RentalUnit
from rms.domain.model.value_objects import Money, Quantity
from rms.domain.repository.order_repository import OrderRepository


class SqliteOrderRepository(OrderRepository):

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> RentalOrder | None:
        row = self._connection.execute(
            "SELECT * FROM rental_order WHERE order_id = ?", (order_id,)
        ).fetchone()
        if row is None:
            return None
        item_rows = self._connection.execute(
            "SELECT * FROM rental_order_item WHERE order_id = ? ORDER BY order_item_id",
            (order_id,),
        ).fetchall()
        return self._to_domain(row, item_rows)

    def save(self, order: RentalOrder) -> None:
        values = self._order_values(order)
        if order.id is None:
            cursor = self._connection.execute(
                """
                INSERT INTO rental_order (customer_id, status, pickup_date, return_date,
                    total_amount, deposit_amount, late_fee_amount, damage_charges,
                    late_fee_per_day, currency, quotation_id, cancellation_reason,
                    return_condition, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                values,
            )
            order.id = int(cursor.lastrowid)
        else:
            self._connection.execute(
                """
                UPDATE rental_order SET customer_id = ?, status = ?, pickup_date = ?,
                    return_date = ?, total_amount = ?, deposit_amount = ?,
                    late_fee_amount = ?, damage_charges = ?, late_fee_per_day = ?,
                    currency = ?, quotation_id = ?, cancellation_reason = ?,
                    return_condition = ?, created_at = ?
                WHERE order_id = ?
                """,
                (*values, order.id),
            )

        for item in order.items:
            self._save_item(order.id, item)

    # --- Serialization --------------------------------------------------------

    def _save_item(self, order_id: int, item: OrderItem) -> None:
        values = (
            item.product_id,
            item.product_name,
            item.quantity.value,
            str(item.unit_price.amount),
            item.rental_duration,
            item.rental_unit.value,
            item.start_date.isoformat(),
            item.end_date.isoformat(),
        )
        if item.id is None:
            cursor = self._connection.execute(
                """
                INSERT INTO rental_order_item (order_id, product_id, product_name, quantity,
                    unit_price, rental_duration, rental_unit, start_date, end_date)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (order_id, *values),
            )
            item.id = int(cursor.lastrowid)
        else:
            self._connection.execute(
                """
                UPDATE rental_order_item SET product_id = ?, product_name = ?, quantity = ?,
                    unit_price = ?, rental_duration = ?, rental_unit = ?, start_date = ?,
                    end_date = ?
                WHERE order_item_id = ?
                """,
                (*values, item.id),
            )

    @staticmethod
    def _order_values(order: RentalOrder) -> tuple:
        return (
            order.customer_id,
            order.status.value,
            order.pickup_date.isoformat(),
            order.return_date.isoformat(),
            str(order.total_amount.amount),
            str(order.deposit_amount.amount),
            str(order.late_fee_amount.amount),
            str(order.damage_charges.amount),
            str(order.late_fee_per_day.amount) if order.late_fee_per_day else None,
            order.total_amount.currency,
            order.quotation_id,
            order.cancellation_reason,
            order.return_condition,
            order.created_at.isoformat(),
        )

    @staticmethod
    def _to_domain(row: sqlite3.Row, item_rows: list[sqlite3.Row]) -> RentalOrder:
        currency = row["currency"]

        def money(value: str) -> Money:
            return Money(Decimal(value), currency)

        items = [
            OrderItem(
                id=int(i["order_item_id"]),
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(int(i["quantity"])),
                unit_price=money(i["unit_price"]),
                start_date=date.fromisoformat(i["start_date"]),
                end_date=date.fromisoformat(i["end_date"]),
                rental_duration=int(i["rental_duration"]),
                rental_unit=RentalUnit(i["rental_unit"]),
            )
            for i in item_rows
        ]
        late_fee_per_day = row["late_fee_per_day"]
        return RentalOrder(
            id=int(row["order_id"]),
            customer_id=row["customer_id"],
            items=items,
            pickup_date=date.fromisoformat(row["pickup_date"]),
            return_date=date.fromisoformat(row["return_date"]),
            status=OrderStatus(row["status"]),
            total_amount=money(row["total_amount"]),
            deposit_amount=money(row["deposit_amount"]),
            late_fee_amount=money(row["late_fee_amount"]),
            damage_charges=money(row["damage_charges"]),
            late_fee_per_day=money(late_fee_per_day) if late_fee_per_day is not None else None,
            quotation_id=row["quotation_id"],
            cancellation_reason=row["cancellation_reason"],
            return_condition=row["return_condition"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
