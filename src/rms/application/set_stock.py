"""Application service: Set Stock use case.

Changes how many units of a product the business owns from a given day
onwards. Ledger rows already created on or after that day take the new
total; days never touched pick it up lazily. The change is refused if any
of those days already has more units reserved than the new total.
"""

from __future__ import annotations

from datetime import date

from rms.domain.model.availability import DEFAULT_STATUS_POLICY, StatusPolicy
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.domain.service.availability_ledger import AvailabilityLedger
from rms.logging_config import get_logger

logger = get_logger(__name__)


class SetStockHandler:

    def __init__(self, uow: UnitOfWork, policy: StatusPolicy = DEFAULT_STATUS_POLICY) -> None:
        self._uow = uow
        self._policy = policy

    def handle(self, product_id: str, quantity: int, effective_from: date) -> int:
        """Set the owned quantity and return how many ledger days were resized."""
        with self._uow:
            ledger = AvailabilityLedger(self._uow.products, self._uow.availability, self._policy)
            product = ledger.product(product_id)
            product.set_total_quantity(quantity)
            rows = ledger.resize(product_id, quantity, effective_from)
            self._uow.products.save(product)
            self._uow.commit()

        logger.info(
            "Stock of product %s set to %s from %s (%s ledger days updated)",
            product_id,
            quantity,
            effective_from.isoformat(),
            len(rows),
        )
        return len(rows)
