"""Domain service: Fee & Pricing Calculator.

Pure functions of an order, its products' rates and "now". Nothing here
reads the clock or touches a repository, so results are deterministic for
a fixed ``now``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from rms.domain.exceptions import ValidationError
from rms.domain.model.order import RentalOrder
from rms.domain.model.product import Product, RentalUnit
from rms.domain.model.value_objects import DateRange, Money, Quantity

DEFAULT_LATE_FEE_PER_DAY = Money(Decimal("50.00"))

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class LateFee:
    days_late: int
    fee_per_day: Money
    amount: Money


class FeeCalculator:
    """Late fees and order totals.

    ``grace_period_days`` days of lateness are free of charge and
    ``max_fee_ratio`` caps the fee at a fraction of the order total. When
    ``daily_fee_ratio`` is set, each late day costs that fraction of the
    order total instead of a flat amount. All three are disabled by default.

    Timezone-aware moments are compared in UTC.
    """

    def __init__(
        self,
        default_late_fee_per_day: Money = DEFAULT_LATE_FEE_PER_DAY,
        grace_period_days: int = 0,
        max_fee_ratio: Decimal | None = None,
        daily_fee_ratio: Decimal | None = None,
    ) -> None:
        if grace_period_days < 0:
            raise ValidationError("Grace period cannot be negative")
        if max_fee_ratio is not None and max_fee_ratio < 0:
            raise ValidationError("Maximum late fee ratio cannot be negative")
        if daily_fee_ratio is not None and daily_fee_ratio < 0:
            raise ValidationError("Daily late fee ratio cannot be negative")
        self.default_late_fee_per_day = default_late_fee_per_day
        self.grace_period_days = grace_period_days
        self.max_fee_ratio = max_fee_ratio
        self.daily_fee_ratio = daily_fee_ratio

    def late_fee(self, order: RentalOrder, now: date | datetime) -> LateFee:
        """Fee owed for returning *order* at *now*.

        ``days_late`` counts started days past midnight of the return date.
        """
        if self.daily_fee_ratio is not None:
            fee_per_day = order.total_amount.scaled(self.daily_fee_ratio)
        else:
            fee_per_day = order.late_fee_per_day or self.default_late_fee_per_day
        days_late = self.days_late(order.return_date, now)

        chargeable = max(0, days_late - self.grace_period_days)
        amount = fee_per_day * chargeable
        if self.max_fee_ratio is not None:
            cap = order.total_amount.scaled(self.max_fee_ratio)
            if amount > cap:
                amount = cap

        return LateFee(days_late=days_late, fee_per_day=fee_per_day, amount=amount)

    @staticmethod
    def days_late(return_date: date, now: date | datetime) -> int:
        due = datetime.combine(return_date, time.min)
        if isinstance(now, datetime):
            moment = now if now.tzinfo is None else now.astimezone(timezone.utc).replace(tzinfo=None)
        else:
            moment = datetime.combine(now, time.min)
        if moment <= due:
            return 0
        return math.ceil((moment - due) / _ONE_DAY)

    @staticmethod
    def recalculate_total(order: RentalOrder, late_fee: Money, damage_charges: Money) -> Money:
        return order.total_amount + late_fee + damage_charges

    @staticmethod
    def rental_charge(product: Product, quantity: int, duration: int = 1) -> Money:
        """Price of renting *quantity* units for *duration* rental units."""
        if duration <= 0:
            raise ValidationError("Rental duration must be positive")
        return product.base_rate * (Quantity(quantity).value * duration)

    @staticmethod
    def billable_units(unit: RentalUnit, period: DateRange) -> int:
        """Number of whole rental units needed to cover *period*."""
        days = len(period)
        if unit == RentalUnit.HOUR:
            return days * 24
        if unit == RentalUnit.WEEK:
            return math.ceil(days / 7)
        if unit == RentalUnit.MONTH:
            return math.ceil(days / 30)
        return days

    @staticmethod
    def late_fee_snapshot(products: list[Product]) -> Money | None:
        """Per-day late fee an order inherits from its products.

        The highest configured product rate applies; None means the system
        default will be used.
        """
        configured = [p.late_fee_per_day for p in products if p.late_fee_per_day is not None]
        if not configured:
            return None
        return max(configured, key=lambda m: m.amount)
