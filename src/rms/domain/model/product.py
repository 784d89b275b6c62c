"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
rates change, stock is bought and retired, products are added to the
catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rms.domain.exceptions import ValidationError
from rms.domain.model.value_objects import Money


class RentalUnit(Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass
class Product:
    """A rentable product in the catalog.

    ``total_quantity`` is how many units the business owns. Ledger rows
    copy it the first time a calendar day is touched.
    """

    id: str
    name: str
    total_quantity: int
    base_rate: Money
    rental_unit: RentalUnit = RentalUnit.DAY
    late_fee_per_day: Money | None = None

    def __post_init__(self) -> None:
        if self.total_quantity < 0:
            raise ValidationError("Owned quantity cannot be negative")

    def update_rates(
        self,
        base_rate: Money | None = None,
        late_fee_per_day: Money | None = None,
    ) -> None:
        """Change the product's rates.

        Existing orders keep the prices captured when they were created.
        """
        if base_rate is not None:
            if base_rate.is_zero:
                raise ValidationError("Base rate must be greater than zero")
            self.base_rate = base_rate
        if late_fee_per_day is not None:
            self.late_fee_per_day = late_fee_per_day

    def set_total_quantity(self, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Owned quantity cannot be negative")
        self.total_quantity = quantity
