"""Integration tests for the product catalog, stock changes and availability queries."""

from datetime import date

import pytest

from rms.application.add_product import AddProductHandler
from rms.application.check_availability import CheckAvailabilityHandler
from rms.application.create_order import CreateOrderHandler
from rms.application.dto import OrderItemSpec
from rms.application.set_stock import SetStockHandler
from rms.application.show_availability import ShowAvailabilityHandler
from rms.application.update_product import UpdateProductHandler
from rms.domain.exceptions import NotFoundError, ValidationError
from rms.domain.model.availability import StatusPolicy
from rms.domain.model.product import RentalUnit
from rms.domain.model.value_objects import Money
from tests.fakes import FakeUnitOfWork, RecordingPublisher


def _with_product(quantity: int = 3) -> FakeUnitOfWork:
    uow = FakeUnitOfWork()
    AddProductHandler(uow).handle("Ladder", quantity, "12.00")
    return uow


class TestAddProduct:

    def test_assigns_sequential_ids(self):
        uow = FakeUnitOfWork()
        handler = AddProductHandler(uow)

        first = handler.handle("Ladder", 3, "12.00")
        second = handler.handle("Drill", 2, "8.50", rental_unit="hour", late_fee_per_day="5")

        assert (first.id, second.id) == ("1", "2")
        assert second.rental_unit == RentalUnit.HOUR
        assert second.late_fee_per_day == Money.of("5")
        assert uow.commits == 2

    def test_duplicate_name_rejected(self):
        uow = _with_product()
        with pytest.raises(ValidationError, match="already exists"):
            AddProductHandler(uow).handle("ladder", 1, "1.00")

    def test_unknown_rental_unit_rejected(self):
        with pytest.raises(ValidationError, match="Unknown rental unit"):
            AddProductHandler(FakeUnitOfWork()).handle("Ladder", 1, "1.00", rental_unit="fortnight")

    def test_zero_rate_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            AddProductHandler(FakeUnitOfWork()).handle("Ladder", 1, "0")

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            AddProductHandler(FakeUnitOfWork()).handle("Ladder", -1, "1.00")


class TestUpdateProduct:

    def test_updates_rates(self):
        uow = _with_product()

        product = UpdateProductHandler(uow).handle("1", base_rate="14.00", late_fee_per_day="7.00")

        assert product.base_rate == Money.of("14.00")
        assert product.late_fee_per_day == Money.of("7.00")

    def test_unknown_product(self):
        with pytest.raises(NotFoundError, match="Product 9 not found"):
            UpdateProductHandler(FakeUnitOfWork()).handle("9", base_rate="1.00")


class TestAvailabilityQueries:

    def test_check_reports_conflicts(self):
        uow = _with_product(quantity=1)
        CreateOrderHandler(uow, RecordingPublisher()).handle(
            "cust-1", [OrderItemSpec("1", 1)], date(2024, 3, 2), date(2024, 3, 2)
        )

        result = CheckAvailabilityHandler(uow).handle("1", date(2024, 3, 1), date(2024, 3, 3), 1)

        assert not result.available
        assert result.conflicting_dates == [date(2024, 3, 2)]

    def test_calendar_lists_every_day(self):
        uow = _with_product(quantity=4)
        CreateOrderHandler(uow, RecordingPublisher()).handle(
            "cust-1", [OrderItemSpec("1", 1)], date(2024, 3, 2), date(2024, 3, 2)
        )

        days = ShowAvailabilityHandler(uow, StatusPolicy(limited_threshold=0.5)).handle(
            "1", date(2024, 3, 1), date(2024, 3, 3)
        )

        assert [(d.day, d.reserved, d.available, d.status) for d in days] == [
            ("2024-03-01", 0, 4, "available"),
            ("2024-03-02", 1, 3, "available"),
            ("2024-03-03", 0, 4, "available"),
        ]

    def test_calendar_for_unknown_product(self):
        with pytest.raises(NotFoundError):
            ShowAvailabilityHandler(FakeUnitOfWork()).handle("1", date(2024, 3, 1), date(2024, 3, 2))


class TestSetStock:

    def test_resizes_existing_days_from_effective_date(self):
        uow = _with_product(quantity=2)
        CheckAvailabilityHandler(uow).handle("1", date(2024, 3, 1), date(2024, 3, 4), 1)

        resized = SetStockHandler(uow).handle("1", 5, date(2024, 3, 3))

        assert resized == 2
        totals = [uow.availability.get("1", date(2024, 3, d)).total_quantity for d in range(1, 5)]
        assert totals == [2, 2, 5, 5]
        assert uow.products.get_by_id("1").total_quantity == 5

    def test_new_days_pick_up_the_new_stock(self):
        uow = _with_product(quantity=2)
        SetStockHandler(uow).handle("1", 6, date(2024, 3, 1))

        result = CheckAvailabilityHandler(uow).handle("1", date(2024, 3, 10), date(2024, 3, 10), 6)

        assert result.available

    def test_cannot_drop_below_reserved(self):
        uow = _with_product(quantity=3)
        CreateOrderHandler(uow, RecordingPublisher()).handle(
            "cust-1", [OrderItemSpec("1", 2)], date(2024, 3, 5), date(2024, 3, 6)
        )
        CheckAvailabilityHandler(uow).handle("1", date(2024, 3, 1), date(2024, 3, 1), 1)

        with pytest.raises(ValidationError, match="already reserved"):
            SetStockHandler(uow).handle("1", 1, date(2024, 3, 1))

        assert uow.availability.get("1", date(2024, 3, 1)).total_quantity == 3
        assert uow.products.get_by_id("1").total_quantity == 3


class TestStatusPolicyChanges:

    def test_existing_rows_follow_the_policy_in_force(self):
        uow = _with_product(quantity=4)
        CreateOrderHandler(uow, RecordingPublisher()).handle(
            "cust-1", [OrderItemSpec("1", 1)], date(2024, 3, 2), date(2024, 3, 2)
        )
        assert uow.availability.get("1", date(2024, 3, 2)).status.value == "limited"

        [relaxed] = ShowAvailabilityHandler(uow, StatusPolicy(limited_threshold=0.5)).handle(
            "1", date(2024, 3, 2), date(2024, 3, 2)
        )
        [default] = ShowAvailabilityHandler(uow).handle("1", date(2024, 3, 2), date(2024, 3, 2))

        assert (relaxed.available, relaxed.status) == (3, "available")
        assert (default.available, default.status) == (3, "limited")
