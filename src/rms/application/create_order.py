"""Application service: Create Order use case.

Resolves every requested product, prices the items, reserves each item's
period on the availability ledger and persists the order — all inside one
unit of work. If any item cannot be reserved the unit of work rolls back,
so the items reserved before it are released with it and the ledger is
left exactly as it was.
"""

from __future__ import annotations

from datetime import date

from rms.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from rms.domain.events import EventPublisher
from rms.domain.exceptions import CapacityError, NotFoundError
from rms.domain.model.availability import DEFAULT_STATUS_POLICY, StatusPolicy
from rms.domain.model.handover import Handover, HandoverKind
from rms.domain.model.order import OrderItem, OrderStatus, RentalOrder
from rms.domain.model.product import Product
from rms.domain.model.value_objects import DateRange, Money, Quantity
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.domain.service.fee_calculator import FeeCalculator
from rms.domain.service.reservation_engine import ReservationEngine
from rms.logging_config import get_logger

logger = get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        publisher: EventPublisher,
        policy: StatusPolicy = DEFAULT_STATUS_POLICY,
    ) -> None:
        self._uow = uow
        self._publisher = publisher
        self._policy = policy

    def handle(
        self,
        customer_id: str,
        item_specs: list[OrderItemSpec],
        pickup_date: date,
        return_date: date,
        deposit_amount: str = "0",
        quotation_id: int | None = None,
    ) -> OrderDTO:
        """Create a rental order and reserve its inventory.

        Steps:
        1. Resolve each product (fail if not found).
        2. Build OrderItems with *current* prices (snapshot).
        3. Let the RentalOrder aggregate validate all business rules.
        4. Reserve every item's period; any shortage aborts everything.
        5. Persist, commit, then publish the lifecycle events.
        """
        period = DateRange(pickup_date, return_date)
        deposit = Money.of(deposit_amount)

        with self._uow:
            engine = ReservationEngine.for_unit_of_work(self._uow, self._policy)

            products: list[Product] = []
            items: list[OrderItem] = []
            for spec in item_specs:
                product = self._uow.products.get_by_id(spec.product_id)
                if product is None:
                    raise NotFoundError(f"Product {spec.product_id} not found")
                products.append(product)
                items.append(self._build_item(product, spec, period))

            order = RentalOrder.create(
                customer_id=customer_id,
                items=items,
                pickup_date=pickup_date,
                return_date=return_date,
                deposit_amount=deposit,
                quotation_id=quotation_id,
                late_fee_per_day=FeeCalculator.late_fee_snapshot(products),
            )

            try:
                for item in order.items:
                    engine.reserve(item.product_id, item.period, item.quantity.value)
            except CapacityError:
                logger.info(
                    "Order for customer %s rejected; rolling back its reservations",
                    customer_id,
                )
                raise

            self._uow.orders.save(order)
            handovers = []
            if order.status == OrderStatus.CONFIRMED:
                pickup = Handover(None, order.id, HandoverKind.PICKUP, order.pickup_date)
                self._uow.handovers.save(pickup)
                handovers.append(pickup)
            self._uow.commit()

        logger.info("Created order #%s (%s) for customer %s", order.id, order.status.value, customer_id)
        for event in order.pull_events():
            self._publisher.publish(event)
        return order_to_dto(order, handovers)

    # --- Helpers --------------------------------------------------------------

    @staticmethod
    def _build_item(product: Product, spec: OrderItemSpec, period: DateRange) -> OrderItem:
        duration = spec.rental_duration or FeeCalculator.billable_units(product.rental_unit, period)
        if spec.unit_price is not None:
            unit_price = Money.of(spec.unit_price)
        else:
            unit_price = FeeCalculator.rental_charge(product, 1)
        return OrderItem(
            product_id=product.id,
            product_name=product.name,
            quantity=Quantity(spec.quantity),
            unit_price=unit_price,  # <-- price snapshot
            start_date=period.start,
            end_date=period.end,
            rental_duration=duration,
            rental_unit=product.rental_unit,
        )
