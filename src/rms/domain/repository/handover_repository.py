"""Abstract repository for pickup/return Handover records."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rms.domain.model.handover import Handover


class HandoverRepository(ABC):

    @abstractmethod
    def list_for_order(self, order_id: int) -> list[Handover]:
        """Return every handover of an order, oldest first."""

    @abstractmethod
    def save(self, handover: Handover) -> None:
        """Persist a new or updated handover."""
