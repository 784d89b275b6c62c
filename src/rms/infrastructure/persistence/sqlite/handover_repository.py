"""SQLite-backed implementation of HandoverRepository."""

from __future__ import annotations

import sqlite3
from datetime import date

from rms.domain.model.handover import Handover, HandoverKind, HandoverStatus
from rms.domain.repository.handover_repository import HandoverRepository


class SqliteHandoverRepository(HandoverRepository):

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def list_for_order(self, order_id: int) -> list[Handover]:
        rows = self._connection.execute(
            "SELECT * FROM handover WHERE order_id = ? ORDER BY id", (order_id,)
        ).fetchall()
        return [
            Handover(
                id=int(row["id"]),
                order_id=int(row["order_id"]),
                kind=HandoverKind(row["kind"]),
                scheduled_date=date.fromisoformat(row["scheduled_date"]),
                status=HandoverStatus(row["status"]),
                notes=row["notes"],
            )
            for row in rows
        ]

    def save(self, handover: Handover) -> None:
        values = (
            handover.order_id,
            handover.kind.value,
            handover.scheduled_date.isoformat(),
            handover.status.value,
            handover.notes,
        )
        if handover.id is None:
            cursor = self._connection.execute(
                """
                INSERT INTO handover (order_id, kind, scheduled_date, status, notes)
                VALUES (?, ?, ?, ?, ?)
                """,
                values,
            )
            handover.id = int(cursor.lastrowid)
        else:
            self._connection.execute(
                """
                UPDATE handover SET order_id = ?, kind = ?, scheduled_date = ?,
                    status = ?, notes = ?
                WHERE id = ?
                """,
                (*values, handover.id),
            )
