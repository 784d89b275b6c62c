"""Application service: Complete Rental use case.

Records the return of an IN_PROGRESS order: assesses the late fee, adds
damage charges to the total, releases every item's reservation and closes
the return record, all in one unit of work.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from rms.application.dto import CompletionDTO, order_to_dto
from rms.domain.events import EventPublisher
from rms.domain.exceptions import NotFoundError
from rms.domain.model.availability import DEFAULT_STATUS_POLICY, StatusPolicy
from rms.domain.model.handover import HandoverKind
from rms.domain.model.value_objects import Money
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.domain.service.fee_calculator import FeeCalculator
from rms.domain.service.reservation_engine import ReservationEngine


class CompleteRentalHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        publisher: EventPublisher,
        fee_calculator: FeeCalculator | None = None,
        clock: Callable[[], date] = date.today,
        policy: StatusPolicy = DEFAULT_STATUS_POLICY,
    ) -> None:
        self._uow = uow
        self._publisher = publisher
        self._fees = fee_calculator or FeeCalculator()
        self._clock = clock
        self._policy = policy

    def handle(
        self,
        order_id: int,
        damage_charges: str = "0",
        return_condition: str | None = None,
    ) -> CompletionDTO:
        damage = Money.of(damage_charges)
        now = self._clock()

        with self._uow:
            order = self._uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")

            late_fee = self._fees.late_fee(order, now)
            new_total = self._fees.recalculate_total(order, late_fee.amount, damage)
            order.complete(
                late_fee=late_fee.amount,
                damage_charges=damage,
                final_total=new_total,
                return_condition=return_condition,
            )

            engine = ReservationEngine.for_unit_of_work(self._uow, self._policy)
            for item in order.items:
                engine.release(item.product_id, item.period, item.quantity.value)

            for handover in self._uow.handovers.list_for_order(order.id):
                if handover.kind == HandoverKind.RETURN and handover.is_open:
                    handover.complete(notes=return_condition)
                    self._uow.handovers.save(handover)

            self._uow.orders.save(order)
            handovers = self._uow.handovers.list_for_order(order.id)
            self._uow.commit()

        for event in order.pull_events():
            self._publisher.publish(event)
        return CompletionDTO(
            order=order_to_dto(order, handovers),
            days_late=late_fee.days_late,
            fee_per_day=str(late_fee.fee_per_day),
            late_fee=str(late_fee.amount),
            damage_charges=str(damage),
            new_total=str(new_total),
        )
