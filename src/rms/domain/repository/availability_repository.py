"""Abstract repository for AvailabilityDay ledger rows."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from rms.domain.model.availability import AvailabilityDay


class AvailabilityRepository(ABC):

    @abstractmethod
    def get(self, product_id: str, day: date) -> AvailabilityDay | None:
        """Return the ledger row for (product, day), or None if never touched."""

    @abstractmethod
    def list_from(self, product_id: str, start: date) -> list[AvailabilityDay]:
        """Return every existing row for the product on or after *start*, by day."""

    @abstractmethod
    def save(self, row: AvailabilityDay) -> None:
        """Insert or update a ledger row."""
