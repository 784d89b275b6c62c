"""AvailabilityDay — the per-product, per-calendar-day ledger row.

Each row knows how many units of one product exist on one day and how many
of them are promised to orders. Rows are created lazily the first time a
day is touched and are never deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from rms.domain.exceptions import ValidationError


class AvailabilityStatus(Enum):
    AVAILABLE = "available"
    LIMITED = "limited"
    FULLY_BOOKED = "fully_booked"


@dataclass(frozen=True)
class StatusPolicy:
    """Maps a day's counts to an AvailabilityStatus.

    A day is LIMITED when fewer than ``total * limited_threshold`` units are
    free. The default of 1.0 flags any partial reservation as LIMITED.
    """

    limited_threshold: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.limited_threshold <= 1.0:
            raise ValidationError(
                f"Limited threshold must be between 0 and 1, got {self.limited_threshold}"
            )

    def classify(self, total_quantity: int, available_quantity: int) -> AvailabilityStatus:
        if available_quantity <= 0:
            return AvailabilityStatus.FULLY_BOOKED
        if available_quantity < total_quantity * self.limited_threshold:
            return AvailabilityStatus.LIMITED
        return AvailabilityStatus.AVAILABLE


DEFAULT_STATUS_POLICY = StatusPolicy()


@dataclass
class AvailabilityDay:
    """Ledger row for (product_id, day).

    Invariants:
    - ``0 <= reserved_quantity <= total_quantity``
    - ``available_quantity == total_quantity - reserved_quantity``
    - ``status`` always reflects the current counts
    """

    product_id: str
    day: date
    total_quantity: int
    reserved_quantity: int = 0
    status: AvailabilityStatus = field(default=AvailabilityStatus.AVAILABLE)

    def __post_init__(self) -> None:
        if self.total_quantity < 0:
            raise ValidationError("Total quantity cannot be negative")
        if not 0 <= self.reserved_quantity <= self.total_quantity:
            raise ValidationError(
                f"Reserved quantity {self.reserved_quantity} out of bounds "
                f"for total {self.total_quantity}"
            )

    @classmethod
    def open(
        cls,
        product_id: str,
        day: date,
        total_quantity: int,
        policy: StatusPolicy = DEFAULT_STATUS_POLICY,
    ) -> AvailabilityDay:
        """Create a fresh row with nothing reserved."""
        row = cls(product_id=product_id, day=day, total_quantity=total_quantity)
        row.refresh_status(policy)
        return row

    @property
    def available_quantity(self) -> int:
        return self.total_quantity - self.reserved_quantity

    def add_reservation(
        self, quantity: int, policy: StatusPolicy = DEFAULT_STATUS_POLICY
    ) -> None:
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if quantity > self.available_quantity:
            raise ValidationError(
                f"Cannot reserve {quantity} on {self.day.isoformat()} "
                f"(only {self.available_quantity} available)"
            )
        self.reserved_quantity += quantity
        self.refresh_status(policy)

    def remove_reservation(
        self, quantity: int, policy: StatusPolicy = DEFAULT_STATUS_POLICY
    ) -> None:
        """Give back *quantity* units, clamping the reservation at zero."""
        if quantity <= 0:
            raise ValidationError("Release quantity must be positive")
        self.reserved_quantity = max(0, self.reserved_quantity - quantity)
        self.refresh_status(policy)

    def resize(
        self, total_quantity: int, policy: StatusPolicy = DEFAULT_STATUS_POLICY
    ) -> None:
        """Change the owned quantity recorded for this day."""
        if total_quantity < self.reserved_quantity:
            raise ValidationError(
                f"Cannot reduce stock to {total_quantity} on {self.day.isoformat()} "
                f"— {self.reserved_quantity} units already reserved"
            )
        self.total_quantity = total_quantity
        self.refresh_status(policy)

    def refresh_status(self, policy: StatusPolicy = DEFAULT_STATUS_POLICY) -> None:
        self.status = policy.classify(self.total_quantity, self.available_quantity)
