"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Callers tell transient failures apart from business outcomes with the
``retryable`` flag.
"""

from __future__ import annotations

from datetime import date


class DomainException(Exception):
    """Base class for all domain errors."""

    retryable = False


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class NotFoundError(DomainException):
    """A requested product or order does not exist."""


class CapacityError(DomainException):
    """The requested quantity is not free for every day of the range."""

    def __init__(
        self,
        product_id: str,
        requested: int,
        min_available: int,
        conflicting_dates: list[date],
    ) -> None:
        self.product_id = product_id
        self.requested = requested
        self.min_available = min_available
        self.conflicting_dates = list(conflicting_dates)
        days = ", ".join(d.isoformat() for d in self.conflicting_dates)
        super().__init__(
            f"Insufficient availability for product {product_id} "
            f"(need {requested}, only {min_available} available). "
            f"Conflicts on: {days}"
        )


class ConcurrencyConflict(DomainException):
    """The transaction could not acquire or commit its locks in time."""

    retryable = True


class InvalidStateTransition(DomainException):
    """The order's current status does not allow the requested action."""

    def __init__(self, order_id: int | None, current: str, action: str) -> None:
        self.order_id = order_id
        self.current = current
        self.action = action
        super().__init__(
            f"Cannot {action} order #{order_id} — current status is {current}"
        )
