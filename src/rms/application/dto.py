"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rms.domain.model.availability import AvailabilityDay
from rms.domain.model.handover import Handover
from rms.domain.model.order import RentalOrder


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for.

    ``unit_price`` defaults to the product's base rate and
    ``rental_duration`` to the number of rental units the period spans.
    """

    product_id: str
    quantity: int
    unit_price: str | None = None
    rental_duration: int | None = None


@dataclass(frozen=True)
class OrderItemDTO:
    """Output: a single order item as displayed to the user."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str
    start_date: str
    end_date: str


@dataclass(frozen=True)
class HandoverDTO:

    kind: str
    scheduled_date: str
    status: str
    notes: str | None = None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete rental order as displayed to the user."""

    id: int
    customer_id: str
    status: str
    pickup_date: str
    return_date: str
    items: list[OrderItemDTO]
    total: str
    deposit: str
    late_fee: str
    damage_charges: str
    created_at: str
    handovers: list[HandoverDTO] = field(default_factory=list)


@dataclass(frozen=True)
class CompletionDTO:
    """Output: the result of returning a rental."""

    order: OrderDTO
    days_late: int
    fee_per_day: str
    late_fee: str
    damage_charges: str
    new_total: str


@dataclass(frozen=True)
class AvailabilityDayDTO:
    """Output: one ledger row of the availability calendar."""

    day: str
    total: int
    reserved: int
    available: int
    status: str


@dataclass(frozen=True)
class BalanceDTO:

    order_id: int
    amount_due: str
    amount_paid: str
    balance: str


# --- Mapping ------------------------------------------------------------------


def order_to_dto(order: RentalOrder, handovers: list[Handover] | None = None) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        customer_id=order.customer_id,
        status=order.status.value,
        pickup_date=order.pickup_date.isoformat(),
        return_date=order.return_date.isoformat(),
        items=[
            OrderItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
                start_date=item.start_date.isoformat(),
                end_date=item.end_date.isoformat(),
            )
            for item in order.items
        ],
        total=str(order.total_amount),
        deposit=str(order.deposit_amount),
        late_fee=str(order.late_fee_amount),
        damage_charges=str(order.damage_charges),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        handovers=[
            HandoverDTO(
                kind=h.kind.value,
                scheduled_date=h.scheduled_date.isoformat(),
                status=h.status.value,
                notes=h.notes,
            )
            for h in handovers or []
        ],
    )


def availability_to_dto(row: AvailabilityDay) -> AvailabilityDayDTO:
    return AvailabilityDayDTO(
        day=row.day.isoformat(),
        total=row.total_quantity,
        reserved=row.reserved_quantity,
        available=row.available_quantity,
        status=row.status.value,
    )
