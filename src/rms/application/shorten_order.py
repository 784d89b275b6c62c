"""Application service: Shorten Order use case.

Moves the return date earlier and releases the days ``(new_return,
old_return]`` of every item that ran past it, optionally refunding part of
the total.
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


class ShortenOrderHandler:

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
        self, order_id: int, new_return_date: date, refund_amount: str = "0"
    ) -> OrderDTO:
        refund = Money.of(refund_amount)

        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")

            engine = ReservationEngine.for_unit_of_work(self._uow, self._policy)
            for item, dropped in order.reduction_plan(new_return_date):
                engine.release(item.product_id, dropped, item.quantity.value)

            order.shorten(new_return_date, refund)
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
