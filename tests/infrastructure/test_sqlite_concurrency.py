"""Competing reservations through separate SQLite connections."""

import threading
from datetime import date

from rms.application.add_product import AddProductHandler
from rms.application.create_order import CreateOrderHandler
from rms.application.dto import OrderItemSpec
from rms.application.retry import retry_on_conflict
from rms.domain.exceptions import CapacityError
from rms.infrastructure.persistence.sqlite.connection import get_connection
from rms.infrastructure.persistence.sqlite.migrations import apply_migrations
from rms.infrastructure.persistence.sqlite.unit_of_work import SqliteUnitOfWork
from tests.fakes import RecordingPublisher

DAY = date(2024, 6, 1)


def _database(tmp_path, quantity: int):
    db_path = tmp_path / "rms.db"
    connection = get_connection(db_path)
    try:
        apply_migrations(connection)
    finally:
        connection.close()
    AddProductHandler(SqliteUnitOfWork(db_path)).handle("Generator", quantity, "75.00")
    return db_path


def _place_concurrently(db_path, quantities: list[int]) -> list:
    barrier = threading.Barrier(len(quantities))
    outcomes: list = [None] * len(quantities)

    def place(index: int, quantity: int) -> None:
        handler = CreateOrderHandler(SqliteUnitOfWork(db_path, lock_timeout=10), RecordingPublisher())
        barrier.wait()
        try:
            outcomes[index] = retry_on_conflict(
                lambda: handler.handle(f"cust-{index}", [OrderItemSpec("1", quantity)], DAY, DAY),
                sleep=lambda _: None,
            )
        except Exception as exc:
            outcomes[index] = exc

    threads = [threading.Thread(target=place, args=(i, q)) for i, q in enumerate(quantities)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return outcomes


def _reserved(db_path) -> int:
    uow = SqliteUnitOfWork(db_path)
    with uow:
        return uow.availability.get("1", DAY).reserved_quantity


class TestConcurrentOrders:

    def test_exactly_one_of_two_competing_orders_wins(self, tmp_path):
        db_path = _database(tmp_path, quantity=5)

        outcomes = _place_concurrently(db_path, [3, 3])

        errors = [o for o in outcomes if isinstance(o, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], CapacityError)
        assert _reserved(db_path) == 3

    def test_many_writers_never_overbook(self, tmp_path):
        db_path = _database(tmp_path, quantity=4)

        outcomes = _place_concurrently(db_path, [1] * 6)

        assert sum(not isinstance(o, Exception) for o in outcomes) == 4
        assert all(isinstance(o, CapacityError) for o in outcomes if isinstance(o, Exception))
        assert _reserved(db_path) == 4
