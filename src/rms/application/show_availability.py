"""Application service: Availability Calendar use case (query)."""

from __future__ import annotations

from datetime import date

from rms.application.dto import AvailabilityDayDTO, availability_to_dto
from rms.domain.model.availability import DEFAULT_STATUS_POLICY, StatusPolicy
from rms.domain.model.value_objects import DateRange
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.domain.service.availability_ledger import AvailabilityLedger


class ShowAvailabilityHandler:

    def __init__(self, uow: UnitOfWork, policy: StatusPolicy = DEFAULT_STATUS_POLICY) -> None:
        self._uow = uow
        self._policy = policy

    def handle(self, product_id: str, start_date: date, end_date: date) -> list[AvailabilityDayDTO]:
        """Return one ledger row per day between the two dates, inclusive."""
        with self._uow:
            ledger = AvailabilityLedger(self._uow.products, self._uow.availability, self._policy)
            rows = ledger.read(product_id, DateRange(start_date, end_date))
            self._uow.commit()
        return [availability_to_dto(row) for row in rows]
