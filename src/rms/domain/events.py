"""Lifecycle events emitted to collaborators.

Events are recorded by the RentalOrder aggregate while it changes state and
published by the application handlers only after the unit of work commits,
so subscribers never observe a change that was rolled back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from rms.domain.model.value_objects import Money


class PaymentType(Enum):
    RENTAL = "rental"
    EXTENSION = "extension"
    FINAL = "final"


@dataclass(frozen=True)
class DomainEvent:
    order_id: int


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    new_status: str


@dataclass(frozen=True)
class InvoiceRequested(DomainEvent):
    payment_type: PaymentType
    amount: Money


@dataclass(frozen=True)
class LateFeeAssessed(DomainEvent):
    amount: Money


class EventPublisher(ABC):

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Deliver *event* to every interested subscriber."""
