"""Application service: Invoice/Payment ledger.

Subscribes to lifecycle events and records what each order owes. Runs in
its own unit of work after the order's transaction has committed, so a
billing failure never undoes a reservation.
"""

from __future__ import annotations

from rms.application.dto import BalanceDTO
from rms.domain.events import InvoiceRequested, LateFeeAssessed
from rms.domain.exceptions import NotFoundError, ValidationError
from rms.domain.model.invoice import Invoice
from rms.domain.model.value_objects import Money
from rms.domain.repository.unit_of_work import UnitOfWork
from rms.logging_config import get_logger

logger = get_logger(__name__)


class BillingLedger:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    # --- Event subscribers ----------------------------------------------------

    def on_invoice_requested(self, event: InvoiceRequested) -> None:
        with self._uow:
            invoice = Invoice(
                id=None,
                order_id=event.order_id,
                payment_type=event.payment_type,
                amount=event.amount,
            )
            self._uow.invoices.save(invoice)
            self._uow.commit()
        logger.info(
            "Invoiced %s (%s) for order #%s",
            event.amount,
            event.payment_type.value,
            event.order_id,
        )

    def on_late_fee_assessed(self, event: LateFeeAssessed) -> None:
        # The fee itself is billed through the FINAL invoice.
        logger.info("Late fee of %s assessed on order #%s", event.amount, event.order_id)

    # --- Commands and queries -------------------------------------------------

    def record_payment(self, order_id: int, amount: str) -> BalanceDTO:
        """Apply a payment to the order's open invoices, oldest first."""
        payment = Money.of(amount)
        if payment.is_zero:
            raise ValidationError("Payment amount must be positive")

        with self._uow:
            self._require_order(order_id)
            invoices = self._uow.invoices.list_for_order(order_id)
            outstanding = self._total(inv.balance for inv in invoices)
            if payment > outstanding:
                raise ValidationError(
                    f"Payment {payment} exceeds outstanding balance {outstanding} "
                    f"on order #{order_id}"
                )

            remaining = payment
            for invoice in invoices:
                if remaining.is_zero:
                    break
                if invoice.is_settled:
                    continue
                remaining = invoice.apply_payment(remaining)
                self._uow.invoices.save(invoice)
            self._uow.commit()

        logger.info("Recorded payment of %s on order #%s", payment, order_id)
        return self._to_dto(order_id, invoices)

    def balance(self, order_id: int) -> BalanceDTO:
        with self._uow:
            self._require_order(order_id)
            invoices = self._uow.invoices.list_for_order(order_id)
        return self._to_dto(order_id, invoices)

    # --- Internal helpers -----------------------------------------------------

    def _require_order(self, order_id: int) -> None:
        if self._uow.orders.get_by_id(order_id) is None:
            raise NotFoundError(f"Order #{order_id} not found")

    @staticmethod
    def _total(amounts) -> Money:
        result = Money.zero()
        for amount in amounts:
            result = result + amount
        return result

    @classmethod
    def _to_dto(cls, order_id: int, invoices: list[Invoice]) -> BalanceDTO:
        due = cls._total(inv.amount for inv in invoices)
        paid = cls._total(inv.paid_amount for inv in invoices)
        return BalanceDTO(
            order_id=order_id,
            amount_due=str(due),
            amount_paid=str(paid),
            balance=str(due - paid),
        )
