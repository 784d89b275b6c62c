"""CLI commands for invoices and payments."""

from __future__ import annotations

import click

from rms.application.dto import BalanceDTO
from rms.config import Settings
from rms.infrastructure.bootstrap import billing_ledger
from rms.infrastructure.cli.support import run


def _display_balance(dto: BalanceDTO) -> None:
    click.echo(f"Order #{dto.order_id}")
    click.echo(f"  {'Invoiced':<10} {dto.amount_due:>12}")
    click.echo(f"  {'Paid':<10} {dto.amount_paid:>12}")
    click.echo(f"  {'Balance':<10} {dto.balance:>12}")


@click.command("pay")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.option("--amount", required=True, help="Amount paid (e.g. 150.00).")
@click.pass_obj
def billing_pay(config: Settings, order_id: int, amount: str) -> None:
    """Record a payment against an order's open invoices."""
    ledger = billing_ledger(config)

    dto = run(config, lambda: ledger.record_payment(order_id, amount))

    click.echo(f"Payment of ${amount} recorded.")
    _display_balance(dto)


@click.command("show")
@click.option("--order", "order_id", required=True, type=int, help="Order ID.")
@click.pass_obj
def billing_show(config: Settings, order_id: int) -> None:
    """Show what an order has been invoiced and paid."""
    ledger = billing_ledger(config)

    dto = run(config, lambda: ledger.balance(order_id))

    _display_balance(dto)
