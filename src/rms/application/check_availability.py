"""Application service: Check Availability use case (query).

Runs inside a unit of work because first-touch ledger rows are created and
must be written through the same lock as every other ledger access.
"""

from __future__ import annotations

from datetime import date

from rms.domain.model.availability import DEFAULT_STATUS_POLICY, StatusPolicy
from rms.domain.model.value_objects import DateRange
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.domain.service.reservation_engine import AvailabilityCheck, ReservationEngine


class CheckAvailabilityHandler:

    def __init__(self, uow: UnitOfWork, policy: StatusPolicy = DEFAULT_STATUS_POLICY) -> None:
        self._uow = uow
        self._policy = policy

    def handle(
        self, product_id: str, start_date: date, end_date: date, quantity: int
    ) -> AvailabilityCheck:
        period = DateRange(start_date, end_date)
        with self._uow:
            engine = ReservationEngine.for_unit_of_work(self._uow, self._policy)
            result = engine.check_availability(product_id, period, quantity)
            self._uow.commit()
        return result
