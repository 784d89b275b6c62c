"""RentalOrder aggregate — the order lifecycle state machine.

The RentalOrder is an aggregate root that owns its items. It enforces
which status transitions are legal and records the lifecycle events that
the application layer publishes after a successful commit. It never
touches the availability ledger itself: handlers reserve or release
through the ReservationEngine inside the same unit of work as the
matching transition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from rms.domain.events import (
    DomainEvent,
    InvoiceRequested,
    LateFeeAssessed,
    OrderStatusChanged,
    PaymentType,
)
from rms.domain.exceptions import InvalidStateTransition, ValidationError
from rms.domain.model.product import RentalUnit
from rms.domain.model.value_objects import DateRange, Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass
class OrderItem:
    """One product line of a rental order.

    ``unit_price`` is locked at order-creation time. ``start_date`` and
    ``end_date`` are the inclusive days reserved for this line.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money
    start_date: date
    end_date: date
    rental_duration: int = 1
    rental_unit: RentalUnit = RentalUnit.DAY
    id: int | None = None

    def __post_init__(self) -> None:
        if self.rental_duration <= 0:
            raise ValidationError("Rental duration must be positive")
        DateRange(self.start_date, self.end_date)

    @property
    def period(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def line_total(self) -> Money:
        return self.unit_price * (self.quantity.value * self.rental_duration)


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MAX_ORDER_ITEMS = 50


@dataclass
class RentalOrder:
    """Aggregate root for rental orders.

    Use the ``RentalOrder.create()`` factory for new orders — it enforces
    all business rules. The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer_id: str
    items: list[OrderItem]
    pickup_date: date
    return_date: date
    status: OrderStatus = OrderStatus.PENDING
    total_amount: Money = field(default_factory=Money.zero)
    deposit_amount: Money = field(default_factory=Money.zero)
    late_fee_amount: Money = field(default_factory=Money.zero)
    damage_charges: Money = field(default_factory=Money.zero)
    late_fee_per_day: Money | None = None
    quotation_id: int | None = None
    cancellation_reason: str | None = None
    return_condition: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _pending_events: list[tuple[type, dict[str, Any]]] = field(
        default_factory=list, repr=False, compare=False
    )

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_id: str,
        items: list[OrderItem],
        pickup_date: date,
        return_date: date,
        deposit_amount: Money | None = None,
        quotation_id: int | None = None,
        late_fee_per_day: Money | None = None,
    ) -> RentalOrder:
        """Create a new order, enforcing all invariants.

        Orders derived from a quotation start PENDING; direct orders start
        CONFIRMED. The handler reserves every item in the same unit of work.
        """
        if not customer_id or not str(customer_id).strip():
            raise ValidationError("Customer ID is required")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_ORDER_ITEMS:
            raise ValidationError(f"Maximum {MAX_ORDER_ITEMS} items per order")

        rental_period = DateRange(pickup_date, return_date)
        for item in items:
            if item.start_date not in rental_period or item.end_date not in rental_period:
                raise ValidationError(
                    f"Item {item.product_name} period {item.period} falls outside "
                    f"the rental period {rental_period}"
                )

        total = Money.zero()
        for item in items:
            total = total + item.line_total

        status = OrderStatus.PENDING if quotation_id is not None else OrderStatus.CONFIRMED
        order = RentalOrder(
            id=None,
            customer_id=str(customer_id).strip(),
            items=list(items),
            pickup_date=pickup_date,
            return_date=return_date,
            status=status,
            total_amount=total,
            deposit_amount=deposit_amount or Money.zero(),
            late_fee_per_day=late_fee_per_day,
            quotation_id=quotation_id,
        )
        order._record(OrderStatusChanged, new_status=status.value)
        if status == OrderStatus.CONFIRMED:
            order._request_invoice(PaymentType.RENTAL, order.total_amount)
        return order

    # --- State transitions ----------------------------------------------------

    def confirm(self) -> None:
        """Transition PENDING -> CONFIRMED.

        Inventory was reserved when the order was created, so confirming
        only changes status and bills the rental.
        """
        self._transition(OrderStatus.CONFIRMED, "confirm")
        self._request_invoice(PaymentType.RENTAL, self.total_amount)

    def start(self) -> None:
        """Transition CONFIRMED -> IN_PROGRESS (items handed to the customer)."""
        self._transition(OrderStatus.IN_PROGRESS, "start")

    def complete(
        self,
        late_fee: Money,
        damage_charges: Money,
        final_total: Money,
        return_condition: str | None = None,
    ) -> None:
        """Transition IN_PROGRESS -> COMPLETED and record the final charges.

        The handler releases every item in the same unit of work.
        """
        self._transition(OrderStatus.COMPLETED, "complete")
        self.late_fee_amount = late_fee
        self.damage_charges = damage_charges
        self.total_amount = final_total
        self.return_condition = return_condition
        if not late_fee.is_zero:
            self._record(LateFeeAssessed, amount=late_fee)
        extra = late_fee + damage_charges
        if not extra.is_zero:
            self._request_invoice(PaymentType.FINAL, extra)

    def cancel(self, reason: str | None = None) -> None:
        """Transition to CANCELLED from any non-terminal status.

        The handler releases every item in the same unit of work.
        """
        self._transition(OrderStatus.CANCELLED, "cancel")
        self.cancellation_reason = reason

    def extension_plan(self, new_return_date: date) -> list[tuple[OrderItem, DateRange]]:
        """Return the extra days each item needs to reach *new_return_date*.

        Only items that run until the current return date move with it.
        Pure: the order is not modified.
        """
        self._assert_open("extend")
        delta = self.rental_period.extension_to(new_return_date)
        return [(item, delta) for item in self.items if item.end_date == self.return_date]

    def extend(self, new_return_date: date, additional_amount: Money) -> None:
        """Move the return date later. The delta must already be reserved."""
        plan = self.extension_plan(new_return_date)
        for item, _ in plan:
            item.end_date = new_return_date
        self.return_date = new_return_date
        self.total_amount = self.total_amount + additional_amount
        if not additional_amount.is_zero:
            self._request_invoice(PaymentType.EXTENSION, additional_amount)

    def reduction_plan(self, new_return_date: date) -> list[tuple[OrderItem, DateRange]]:
        """Return the days each item gives back when ending at *new_return_date*."""
        self._assert_open("shorten")
        self.rental_period.reduction_to(new_return_date)
        plan: list[tuple[OrderItem, DateRange]] = []
        for item in self.items:
            if item.end_date <= new_return_date:
                continue
            if item.start_date > new_return_date:
                raise ValidationError(
                    f"Item {item.product_name} starts after {new_return_date.isoformat()}"
                )
            plan.append((item, item.period.reduction_to(new_return_date)))
        return plan

    def shorten(self, new_return_date: date, refund_amount: Money) -> None:
        """Move the return date earlier. The handler releases the dropped days."""
        plan = self.reduction_plan(new_return_date)
        for item, _ in plan:
            item.end_date = new_return_date
        self.return_date = new_return_date
        self.total_amount = self.total_amount - refund_amount

    # --- Computed properties --------------------------------------------------

    @property
    def rental_period(self) -> DateRange:
        return DateRange(self.pickup_date, self.return_date)

    def pull_events(self) -> list[DomainEvent]:
        """Return and forget the events recorded since the last pull.

        Events are materialized here so they carry the ID the repository
        assigned on save.
        """
        events = [event_cls(order_id=self.id, **kwargs) for event_cls, kwargs in self._pending_events]
        self._pending_events.clear()
        return events

    # --- Internal helpers -----------------------------------------------------

    def _transition(self, target: OrderStatus, action: str) -> None:
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStateTransition(self.id, self.status.value, action)
        self.status = target
        self._record(OrderStatusChanged, new_status=target.value)

    def _assert_open(self, action: str) -> None:
        if self.status.is_terminal:
            raise InvalidStateTransition(self.id, self.status.value, action)

    def _request_invoice(self, payment_type: PaymentType, amount: Money) -> None:
        self._record(InvoiceRequested, payment_type=payment_type, amount=amount)

    def _record(self, event_cls: type, **kwargs: Any) -> None:
        self._pending_events.append((event_cls, kwargs))
