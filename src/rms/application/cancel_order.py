"""Application service: Cancel Order use case.

Releases every item's reservation and cancels any scheduled pickup or
return. Release clamps at zero, so a retried cancellation can never drive
the ledger negative.
"""

from __future__ import annotations

from rms.application.dto import OrderDTO, order_to_dto
from rms.domain.events import EventPublisher
from rms.domain.exceptions import NotFoundError
from rms.domain.model.availability import DEFAULT_STATUS_POLICY, StatusPolicy
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.domain.service.reservation_engine import ReservationEngine
from rms.logging_config import get_logger

logger = get_logger(__name__)


class CancelOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        publisher: EventPublisher,
        policy: StatusPolicy = DEFAULT_STATUS_POLICY,
    ) -> None:
        self._uow = uow
        self._publisher = publisher
        self._policy = policy

    def handle(self, order_id: int, reason: str | None = None) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")

            order.cancel(reason)

            engine = ReservationEngine.for_unit_of_work(self._uow, self._policy)
            for item in order.items:
                engine.release(item.product_id, item.period, item.quantity.value)

            for handover in self._uow.handovers.list_for_order(order.id):
                if handover.is_open:
                    handover.cancel()
                    self._uow.handovers.save(handover)

            self._uow.orders.save(order)
            handovers = self._uow.handovers.list_for_order(order.id)
            self._uow.commit()

        logger.info("Cancelled order #%s (reason: %s)", order_id, reason or "none given")
        for event in order.pull_events():
            self._publisher.publish(event)
        return order_to_dto(order, handovers)
