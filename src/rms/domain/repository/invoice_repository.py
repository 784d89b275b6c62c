"""Abstract repository for Invoice records."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rms.domain.model.invoice import Invoice


class InvoiceRepository(ABC):

    @abstractmethod
    def list_for_order(self, order_id: int) -> list[Invoice]:
        """Return every invoice of an order, oldest first."""

    @abstractmethod
    def save(self, invoice: Invoice) -> None:
        """Persist a new or updated invoice."""
