"""Handover records — scheduled pickups and returns for an order."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from rms.domain.exceptions import ValidationError


class HandoverKind(Enum):
    PICKUP = "pickup"
    RETURN = "return"


class HandoverStatus(Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class Handover:

    id: int | None
    order_id: int
    kind: HandoverKind
    scheduled_date: date
    status: HandoverStatus = HandoverStatus.SCHEDULED
    notes: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status == HandoverStatus.SCHEDULED

    def reschedule(self, new_date: date) -> None:
        if not self.is_open:
            raise ValidationError(
                f"Cannot reschedule a {self.status.value} {self.kind.value}"
            )
        self.scheduled_date = new_date

    def complete(self, notes: str | None = None) -> None:
        if not self.is_open:
            raise ValidationError(
                f"Cannot complete a {self.status.value} {self.kind.value}"
            )
        self.status = HandoverStatus.COMPLETED
        self.notes = notes

    def cancel(self) -> None:
        # Completed handovers are history and stay as they are.
        if self.is_open:
            self.status = HandoverStatus.CANCELLED
