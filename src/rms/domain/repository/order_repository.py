"""Abstract repository for RentalOrder aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rms.domain.model.order import RentalOrder


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> RentalOrder | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def save(self, order: RentalOrder) -> None:
        """Persist a new or updated order, assigning IDs to new rows."""
