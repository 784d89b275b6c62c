"""Domain service: Availability Ledger.

Reads and lazily creates the per-day ledger rows of a product. A row that
does not exist yet is created with nothing reserved and the product's
current owned quantity as its total, so the ledger never needs to be
pre-populated for the whole calendar.

All methods must run inside an open UnitOfWork; lazily created rows are
written through the same transaction as the request that touched them.
"""

from __future__ import annotations

from datetime import date

from rms.domain.exceptions import NotFoundError
from rms.domain.model.availability import (
    DEFAULT_STATUS_POLICY,
    AvailabilityDay,
    StatusPolicy,
)
from rms.domain.model.product import Product
from rms.domain.model.value_objects import DateRange
from rms.domain.repository.availability_repository import AvailabilityRepository
from rms.domain.repository.product_repository import ProductRepository


class AvailabilityLedger:

    def __init__(
        self,
        product_repo: ProductRepository,
        availability_repo: AvailabilityRepository,
        policy: StatusPolicy = DEFAULT_STATUS_POLICY,
    ) -> None:
        self._product_repo = product_repo
        self._availability_repo = availability_repo
        self.policy = policy

    def product(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def get_or_create(self, product_id: str, day: date) -> AvailabilityDay:
        """Return the row for (product, day), creating it on first touch."""
        product = self.product(product_id)
        return self._get_or_create(product, day)

    def read(self, product_id: str, period: DateRange) -> list[AvailabilityDay]:
        """Return one row per day of *period*, in calendar order."""
        product = self.product(product_id)
        return [self._get_or_create(product, day) for day in period]

    def save(self, row: AvailabilityDay) -> None:
        self._availability_repo.save(row)

    def resize(self, product_id: str, total_quantity: int, from_day: date) -> list[AvailabilityDay]:
        """Apply a new owned quantity to every existing row from *from_day* on.

        Validates every row before changing any, so a day whose
        reservations exceed the new total leaves the ledger untouched.
        """
        rows = self._availability_repo.list_from(product_id, from_day)
        for row in rows:
            if total_quantity < row.reserved_quantity:
                # Let the row produce the descriptive error.
                row.resize(total_quantity, self.policy)
        for row in rows:
            row.resize(total_quantity, self.policy)
            self._availability_repo.save(row)
        return rows

    # --- Internal helpers -----------------------------------------------------

    def _get_or_create(self, product: Product, day: date) -> AvailabilityDay:
        row = self._availability_repo.get(product.id, day)
        if row is None:
            row = AvailabilityDay.open(product.id, day, product.total_quantity, self.policy)
            self._availability_repo.save(row)
        else:
            # Stored status may predate the policy in force.
            row.refresh_status(self.policy)
        return row
