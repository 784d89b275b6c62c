"""Database migrations for SQLite schema versioning."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from rms.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Migration:
    version: int
    script: str


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        script="""
        CREATE TABLE IF NOT EXISTS products (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            total_quantity INTEGER NOT NULL DEFAULT 0 CHECK (total_quantity >= 0),
            rental_unit TEXT NOT NULL DEFAULT 'day',
            base_rate TEXT NOT NULL,
            late_fee_per_day TEXT,
            currency TEXT NOT NULL DEFAULT 'USD'
        );

        CREATE TABLE IF NOT EXISTS availability_day (
            product_id TEXT NOT NULL,
            day TEXT NOT NULL,
            total_quantity INTEGER NOT NULL CHECK (total_quantity >= 0),
            reserved_quantity INTEGER NOT NULL DEFAULT 0
                CHECK (reserved_quantity >= 0 AND reserved_quantity <= total_quantity),
            available_quantity INTEGER NOT NULL
                CHECK (available_quantity = total_quantity - reserved_quantity),
            status TEXT NOT NULL
                CHECK (status IN ('available', 'limited', 'fully_booked')),
            PRIMARY KEY (product_id, day),
            FOREIGN KEY (product_id) REFERENCES products(id)
        );

        CREATE TABLE IF NOT EXISTS rental_order (
            order_id INTEGER PRIMARY KEY AUTOINCREMENT,
            customer_id TEXT NOT NULL,
            status TEXT NOT NULL
                CHECK (status IN ('pending', 'confirmed', 'in_progress', 'completed', 'cancelled')),
            pickup_date TEXT NOT NULL,
            return_date TEXT NOT NULL,
            total_amount TEXT NOT NULL,
            deposit_amount TEXT NOT NULL DEFAULT '0.00',
            late_fee_amount TEXT NOT NULL DEFAULT '0.00',
            damage_charges TEXT NOT NULL DEFAULT '0.00',
            late_fee_per_day TEXT,
            currency TEXT NOT NULL DEFAULT 'USD',
            quotation_id INTEGER,
            cancellation_reason TEXT,
            return_condition TEXT,
            created_at TEXT NOT NULL,
            CHECK (return_date >= pickup_date)
        );

        CREATE TABLE IF NOT EXISTS rental_order_item (
            order_item_id INTEGER PRIMARY KEY AUTOINCREMENT,
            order_id INTEGER NOT NULL,
            product_id TEXT NOT NULL,
            product_name TEXT NOT NULL,
            quantity INTEGER NOT NULL CHECK (quantity > 0),
            unit_price TEXT NOT NULL,
            rental_duration INTEGER NOT NULL DEFAULT 1 CHECK (rental_duration > 0),
            rental_unit TEXT NOT NULL DEFAULT 'day',
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            FOREIGN KEY (order_id) REFERENCES rental_order(order_id),
            FOREIGN KEY (product_id) REFERENCES products(id),
            CHECK (end_date >= start_date)
        );

        CREATE INDEX IF NOT EXISTS idx_availability_day
            ON availability_day(day);
        CREATE INDEX IF NOT EXISTS idx_rental_order_status
            ON rental_order(status);
        CREATE INDEX IF NOT EXISTS idx_rental_order_item_order_id
            ON rental_order_item(order_id);
        """,
    ),
    Migration(
        version=2,
        script="""
        CREATE TABLE IF NOT EXISTS handover (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            order_id INTEGER NOT NULL,
            kind TEXT NOT NULL CHECK (kind IN ('pickup', 'return')),
            scheduled_date TEXT NOT NULL,
            status TEXT NOT NULL CHECK (status IN ('scheduled', 'completed', 'cancelled')),
            notes TEXT,
            FOREIGN KEY (order_id) REFERENCES rental_order(order_id)
        );

        CREATE TABLE IF NOT EXISTS invoice (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            order_id INTEGER NOT NULL,
            payment_type TEXT NOT NULL CHECK (payment_type IN ('rental', 'extension', 'final')),
            amount TEXT NOT NULL,
            paid_amount TEXT NOT NULL DEFAULT '0.00',
            currency TEXT NOT NULL DEFAULT 'USD',
            created_at TEXT NOT NULL,
            FOREIGN KEY (order_id) REFERENCES rental_order(order_id)
        );

        CREATE INDEX IF NOT EXISTS idx_handover_order_id
            ON handover(order_id);
        CREATE INDEX IF NOT EXISTS idx_invoice_order_id
            ON invoice(order_id);
        """,
    ),
]


def _fetch_schema_version(connection: sqlite3.Connection) -> int:
    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS app_meta (
            schema_version INTEGER NOT NULL
        );
        """
    )
    row = connection.execute(
        "SELECT schema_version FROM app_meta LIMIT 1"
    ).fetchone()
    if row is None:
        connection.execute("INSERT INTO app_meta (schema_version) VALUES (0)")
        return 0
    return int(row[0])


def apply_migrations(connection: sqlite3.Connection) -> int:
    """Apply pending database migrations and return the resulting version.

    Each migration runs in its own transaction together with the version
    bump, so a failed script leaves the schema at the previous version.
    """
    connection.execute("BEGIN IMMEDIATE")
    try:
        current_version = _fetch_schema_version(connection)
    except Exception:
        connection.execute("ROLLBACK")
        raise
    connection.execute("COMMIT")

    for migration in MIGRATIONS:
        if migration.version <= current_version:
            continue
        try:
            connection.executescript(
                "BEGIN IMMEDIATE;\n"
                f"{migration.script}\n"
                f"UPDATE app_meta SET schema_version = {migration.version};\n"
                "COMMIT;"
            )
        except Exception:
            if connection.in_transaction:
                connection.execute("ROLLBACK")
            logger.exception("Migration %s failed", migration.version)
            raise
        logger.info("Applied schema migration %s", migration.version)
        current_version = migration.version

    return current_version
