"""Database connection helpers."""

from __future__ import annotations

import sqlite3
from pathlib import Path


def get_connection(database_path: Path, timeout: float = 5.0) -> sqlite3.Connection:
    """Create a SQLite connection with foreign keys enabled.

    Transactions are managed explicitly (``isolation_level=None``) so the
    unit of work can open them with ``BEGIN IMMEDIATE``. *timeout* is how
    long a statement waits for another connection's lock before failing.
    """
    database_path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(database_path, timeout=timeout, isolation_level=None)
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON;")
    return connection


def is_lock_error(exc: sqlite3.OperationalError) -> bool:
    message = str(exc).lower()
    return "locked" in message or "busy" in message
