"""Domain service: Reservation Engine.

Turns a (product, date range, quantity) request into ledger mutations on
every day of the range, or rejects the whole request.

The same two-phase approach is used for every write (validate-then-mutate):
  Phase 1 — load every day of the range and check capacity. Fails before
            any mutation.
  Phase 2 — mutate and persist every day.

Callers run the engine inside an open UnitOfWork, which holds the ledger
write lock for the duration, so the capacity check and the writes form one
atomic step and two concurrent requests can never both see the last unit
as free.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from rms.domain.exceptions import CapacityError
from rms.domain.model.availability import DEFAULT_STATUS_POLICY, StatusPolicy
from rms.domain.model.value_objects import DateRange, Quantity
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.domain.service.availability_ledger import AvailabilityLedger
from rms.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AvailabilityCheck:
    product_id: str
    period: DateRange
    requested: int
    available: bool
    min_available: int
    conflicting_dates: list[date] = field(default_factory=list)


@dataclass(frozen=True)
class ReservationResult:
    product_id: str
    quantity: int
    reserved_dates: list[date]


@dataclass(frozen=True)
class ReleaseResult:
    product_id: str
    quantity: int
    released_dates: list[date]


class ReservationEngine:

    def __init__(self, ledger: AvailabilityLedger) -> None:
        self._ledger = ledger

    @classmethod
    def for_unit_of_work(
        cls, uow: UnitOfWork, policy: StatusPolicy = DEFAULT_STATUS_POLICY
    ) -> ReservationEngine:
        """Build an engine over the repositories of an open unit of work."""
        return cls(AvailabilityLedger(uow.products, uow.availability, policy))

    def check_availability(
        self, product_id: str, period: DateRange, quantity: int
    ) -> AvailabilityCheck:
        """Compare every day of *period* against the requested quantity.

        ``min_available`` is the smallest free quantity seen over the range,
        i.e. how much could be fulfilled for the whole period.
        """
        requested = Quantity(quantity).value
        rows = self._ledger.read(product_id, period)
        conflicting = [row.day for row in rows if row.available_quantity < requested]
        min_available = min(row.available_quantity for row in rows)
        return AvailabilityCheck(
            product_id=product_id,
            period=period,
            requested=requested,
            available=not conflicting,
            min_available=min_available,
            conflicting_dates=conflicting,
        )

    def reserve(self, product_id: str, period: DateRange, quantity: int) -> ReservationResult:
        """Reserve *quantity* units on every day of *period*.

        Raises CapacityError, with the check's diagnostics, when any day is
        short; no day is modified in that case.
        """
        # Phase 1: validate the whole range
        check = self.check_availability(product_id, period, quantity)
        if not check.available:
            logger.info(
                "Rejected reservation of %s x product %s for %s (min available %s)",
                check.requested,
                product_id,
                period,
                check.min_available,
            )
            raise CapacityError(
                product_id=product_id,
                requested=check.requested,
                min_available=check.min_available,
                conflicting_dates=check.conflicting_dates,
            )

        # Phase 2: mutate and persist
        rows = self._ledger.read(product_id, period)
        for row in rows:
            row.add_reservation(check.requested, self._ledger.policy)
            self._ledger.save(row)

        logger.info("Reserved %s x product %s for %s", check.requested, product_id, period)
        return ReservationResult(
            product_id=product_id,
            quantity=check.requested,
            reserved_dates=[row.day for row in rows],
        )

    def release(self, product_id: str, period: DateRange, quantity: int) -> ReleaseResult:
        """Give back *quantity* units on every day of *period*.

        Over-release clamps at zero instead of failing so a retried
        cancellation cannot corrupt the ledger.
        """
        released = Quantity(quantity).value
        rows = self._ledger.read(product_id, period)
        for row in rows:
            if row.reserved_quantity < released:
                logger.warning(
                    "Releasing %s x product %s on %s but only %s reserved; clamping",
                    released,
                    product_id,
                    row.day.isoformat(),
                    row.reserved_quantity,
                )
            row.remove_reservation(released, self._ledger.policy)
            self._ledger.save(row)

        logger.info("Released %s x product %s for %s", released, product_id, period)
        return ReleaseResult(
            product_id=product_id,
            quantity=released,
            released_dates=[row.day for row in rows],
        )
