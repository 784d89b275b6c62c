"""Application service: Extend Order use case.

Reserves the extra days ``(old_return, new_return]`` for every item before
moving the return date. If any of those days is short the unit of work
rolls back and the order, its total and the ledger stay unchanged.
"""

from __future__ import annotations

from datetime import date

from rms.application.dto import OrderDTO, order_to_dto
from rms.domain.events import EventPublisher
from rms.domain.exceptions import NotFoundError
from rms.domain.model.availability import DEFAULT_STATUS_POLICY, StatusPolicy
from rms.domain.model.handover import HandoverKind
from rms.domain.model.value_objects import Money
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.domain.service.reservation_engine import ReservationEngine


class ExtendOrderHandler:

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
        self, order_id: int, new_return_date: date, additional_amount: str = "0"
    ) -> OrderDTO:
        additional = Money.of(additional_amount)

        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")

            engine = ReservationEngine.for_unit_of_work(self._uow, self._policy)
            for item, delta in order.extension_plan(new_return_date):
                engine.reserve(item.product_id, delta, item.quantity.value)

            order.extend(new_return_date, additional)
            for handover in self._uow.handovers.list_for_order(order.id):
                if handover.kind == HandoverKind.RETURN and handover.is_open:
                    handover.reschedule(new_return_date)
                    self._uow.handovers.save(handover)

            self._uow.orders.save(order)
            handovers = self._uow.handovers.list_for_order(order.id)
            self._uow.commit()

        for event in order.pull_events():
            self._publisher.publish(event)
        return order_to_dto(order, handovers)
