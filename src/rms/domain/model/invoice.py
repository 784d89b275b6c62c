"""Invoice — an amount owed by the customer for one order."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from rms.domain.events import PaymentType
from rms.domain.exceptions import ValidationError
from rms.domain.model.value_objects import Money


@dataclass
class Invoice:

    id: int | None
    order_id: int
    payment_type: PaymentType
    amount: Money
    paid_amount: Money = field(default_factory=Money.zero)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def balance(self) -> Money:
        return self.amount - self.paid_amount

    @property
    def is_settled(self) -> bool:
        return self.balance.is_zero

    def apply_payment(self, amount: Money) -> Money:
        """Apply up to *amount* to this invoice and return what is left over."""
        if amount.is_zero:
            raise ValidationError("Payment amount must be positive")
        applied = amount if amount <= self.balance else self.balance
        self.paid_amount = self.paid_amount + applied
        return amount - applied
