"""Unit tests for AvailabilityDay ledger rows and the status policy."""

from datetime import date

import pytest

from rms.domain.exceptions import ValidationError
from rms.domain.model.availability import AvailabilityDay, AvailabilityStatus, StatusPolicy

DAY = date(2024, 1, 10)


class TestStatusPolicy:

    def test_default_flags_any_reservation_as_limited(self):
        policy = StatusPolicy()
        assert policy.classify(5, 5) == AvailabilityStatus.AVAILABLE
        assert policy.classify(5, 4) == AvailabilityStatus.LIMITED
        assert policy.classify(5, 0) == AvailabilityStatus.FULLY_BOOKED

    def test_threshold(self):
        policy = StatusPolicy(limited_threshold=0.5)
        assert policy.classify(10, 5) == AvailabilityStatus.AVAILABLE
        assert policy.classify(10, 4) == AvailabilityStatus.LIMITED

    def test_zero_stock_is_fully_booked(self):
        assert StatusPolicy().classify(0, 0) == AvailabilityStatus.FULLY_BOOKED

    def test_threshold_out_of_range_rejected(self):
        with pytest.raises(ValidationError, match="between 0 and 1"):
            StatusPolicy(limited_threshold=1.5)


class TestAvailabilityDay:

    def test_open_row_is_fully_available(self):
        row = AvailabilityDay.open("1", DAY, 5)
        assert row.reserved_quantity == 0
        assert row.available_quantity == 5
        assert row.status == AvailabilityStatus.AVAILABLE

    def test_add_reservation_updates_counts_and_status(self):
        row = AvailabilityDay.open("1", DAY, 5)
        row.add_reservation(2)
        assert row.reserved_quantity == 2
        assert row.available_quantity == 3
        assert row.status == AvailabilityStatus.LIMITED

    def test_reserving_last_unit_fully_books_the_day(self):
        row = AvailabilityDay.open("1", DAY, 2)
        row.add_reservation(2)
        assert row.status == AvailabilityStatus.FULLY_BOOKED

    def test_over_reservation_rejected(self):
        row = AvailabilityDay.open("1", DAY, 2)
        with pytest.raises(ValidationError, match="only 2 available"):
            row.add_reservation(3)
        assert row.reserved_quantity == 0

    def test_release_clamps_at_zero(self):
        row = AvailabilityDay("1", DAY, total_quantity=5, reserved_quantity=1)
        row.remove_reservation(3)
        assert row.reserved_quantity == 0
        assert row.status == AvailabilityStatus.AVAILABLE

    def test_non_positive_quantities_rejected(self):
        row = AvailabilityDay.open("1", DAY, 5)
        with pytest.raises(ValidationError):
            row.add_reservation(0)
        with pytest.raises(ValidationError):
            row.remove_reservation(-1)

    def test_reserved_above_total_cannot_be_constructed(self):
        with pytest.raises(ValidationError, match="out of bounds"):
            AvailabilityDay("1", DAY, total_quantity=2, reserved_quantity=3)

    def test_resize_below_reserved_rejected(self):
        row = AvailabilityDay("1", DAY, total_quantity=5, reserved_quantity=3)
        with pytest.raises(ValidationError, match="already reserved"):
            row.resize(2)
        assert row.total_quantity == 5

    def test_resize_recomputes_status(self):
        row = AvailabilityDay("1", DAY, total_quantity=3, reserved_quantity=3)
        row.resize(4)
        assert row.available_quantity == 1
        assert row.status == AvailabilityStatus.LIMITED
