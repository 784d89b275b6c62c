"""Application service: Show Order use case (query)."""

from __future__ import annotations

from rms.application.dto import OrderDTO, order_to_dto
from rms.domain.exceptions import NotFoundError
from rms.domain.repository.unit_of_work import UnitOfWork


class ShowOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")
            handovers = self._uow.handovers.list_for_order(order.id)
        return order_to_dto(order, handovers)
