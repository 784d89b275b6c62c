"""Application service: Start Rental use case.

Hands the items to the customer: CONFIRMED -> IN_PROGRESS, closes the
pickup record and schedules the expected return.
"""

from __future__ import annotations

from rms.application.dto import OrderDTO, order_to_dto
from rms.domain.events import EventPublisher
from rms.domain.exceptions import NotFoundError
from rms.domain.model.handover import Handover, HandoverKind
from rms.domain.repository.unit_of_work import UnitOfWork


class StartRentalHandler:

    def __init__(self, uow: UnitOfWork, publisher: EventPublisher) -> None:
        self._uow = uow
        self._publisher = publisher

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")

            order.start()
            for handover in self._uow.handovers.list_for_order(order.id):
                if handover.kind == HandoverKind.PICKUP and handover.is_open:
                    handover.complete()
                    self._uow.handovers.save(handover)
            self._uow.handovers.save(
                Handover(None, order.id, HandoverKind.RETURN, order.return_date)
            )
            self._uow.orders.save(order)
            handovers = self._uow.handovers.list_for_order(order.id)
            self._uow.commit()

        for event in order.pull_events():
            self._publisher.publish(event)
        return order_to_dto(order, handovers)
