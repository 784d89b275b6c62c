"""CLI commands for the RentalOrder aggregate."""

from __future__ import annotations

from datetime import date

import click

from rms.application.cancel_order import CancelOrderHandler
from rms.application.complete_rental import CompleteRentalHandler
from rms.application.confirm_order import ConfirmOrderHandler
from rms.application.create_order import CreateOrderHandler
from rms.application.dto import OrderDTO, OrderItemSpec
from rms.application.extend_order import ExtendOrderHandler
from rms.application.show_order import ShowOrderHandler
from rms.application.shorten_order import ShortenOrderHandler
from rms.application.start_rental import StartRentalHandler
from rms.config import Settings
from rms.infrastructure.bootstrap import (
    event_bus,
    fee_calculator,
    status_policy,
    unit_of_work,
)
from rms.infrastructure.cli.support import ISO_DATE, run


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:3,2:5' (product ID : quantity) into an OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductID:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(OrderItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo(f"Period:   {dto.pickup_date} .. {dto.return_date}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()

    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}  Days")
    click.echo(f"  {'-'*72}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>10} "
            f"{item.line_total:>10}  {item.start_date}..{item.end_date}"
        )
    click.echo(f"  {'-'*72}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")
    click.echo(f"  {'Deposit':<27} {dto.deposit:>20}")
    if dto.late_fee != "$0.00" or dto.damage_charges != "$0.00":
        click.echo(f"  {'Late fee':<27} {dto.late_fee:>20}")
        click.echo(f"  {'Damage charges':<27} {dto.damage_charges:>20}")

    if dto.handovers:
        click.echo()
        for handover in dto.handovers:
            click.echo(
                f"  {handover.kind:<7} {handover.scheduled_date}  {handover.status}"
                + (f"  ({handover.notes})" if handover.notes else "")
            )


@click.command("create")
@click.option("--customer", required=True, help="Customer ID.")
@click.option("--items", required=True, help="Items as 'ProductID:Qty,ProductID:Qty'.")
@click.option("--pickup", required=True, type=ISO_DATE, help="Pickup date (YYYY-MM-DD).")
@click.option("--return", "return_date", required=True, type=ISO_DATE, help="Return date, inclusive.")
@click.option("--deposit", default="0", show_default=True, help="Security deposit.")
@click.option("--quotation", "quotation_id", type=int, default=None, help="Source quotation; the order starts pending.")
@click.pass_obj
def order_create(
    config: Settings,
    customer: str,
    items: str,
    pickup: date,
    return_date: date,
    deposit: str,
    quotation_id: int | None,
) -> None:
    """Create a rental order and reserve its items."""
    specs = _parse_items(items)

    handler = CreateOrderHandler(
        uow=unit_of_work(config),
        publisher=event_bus(config),
        policy=status_policy(config),
    )

    dto = run(
        config,
        lambda: handler.handle(
            customer_id=customer,
            item_specs=specs,
            pickup_date=pickup,
            return_date=return_date,
            deposit_amount=deposit,
            quotation_id=quotation_id,
        ),
    )

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(config: Settings, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(uow=unit_of_work(config))

    dto = run(config, lambda: handler.handle(order_id))

    _display_order(dto)


@click.command("confirm")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to confirm.")
@click.pass_obj
def order_confirm(config: Settings, order_id: int) -> None:
    """Confirm a pending order and schedule its pickup."""
    handler = ConfirmOrderHandler(uow=unit_of_work(config), publisher=event_bus(config))

    dto = run(config, lambda: handler.handle(order_id))

    click.echo(f"Order #{dto.id} confirmed — pickup on {dto.pickup_date}.")


@click.command("start")
@click.option("--id", "order_id", required=True, type=int, help="Order ID being picked up.")
@click.pass_obj
def order_start(config: Settings, order_id: int) -> None:
    """Hand the items to the customer."""
    handler = StartRentalHandler(uow=unit_of_work(config), publisher=event_bus(config))

    dto = run(config, lambda: handler.handle(order_id))

    click.echo(f"Order #{dto.id} in progress — return due {dto.return_date}.")


@click.command("complete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID being returned.")
@click.option("--damage", default="0", show_default=True, help="Damage charges.")
@click.option("--condition", default=None, help="Condition of the returned items.")
@click.option("--returned-on", type=ISO_DATE, default=None, help="Return date (default today).")
@click.pass_obj
def order_complete(
    config: Settings,
    order_id: int,
    damage: str,
    condition: str | None,
    returned_on: date | None,
) -> None:
    """Record the return of a rental and assess late fees."""
    handler = CompleteRentalHandler(
        uow=unit_of_work(config),
        publisher=event_bus(config),
        fee_calculator=fee_calculator(config),
        clock=(lambda: returned_on) if returned_on else date.today,
        policy=status_policy(config),
    )

    result = run(
        config,
        lambda: handler.handle(order_id, damage_charges=damage, return_condition=condition),
    )

    click.echo(f"Order #{order_id} completed.")
    if result.days_late:
        click.echo(
            f"  Returned {result.days_late} day(s) late at {result.fee_per_day}/day: "
            f"late fee {result.late_fee}"
        )
    click.echo(f"  Damage charges: {result.damage_charges}")
    click.echo(f"  New total:      {result.new_total}")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--reason", default=None, help="Why the order is cancelled.")
@click.pass_obj
def order_cancel(config: Settings, order_id: int, reason: str | None) -> None:
    """Cancel an order and release its reservations."""
    handler = CancelOrderHandler(
        uow=unit_of_work(config),
        publisher=event_bus(config),
        policy=status_policy(config),
    )

    run(config, lambda: handler.handle(order_id, reason))

    click.echo(f"Order #{order_id} cancelled.")


@click.command("extend")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to extend.")
@click.option("--until", "new_return_date", required=True, type=ISO_DATE, help="New return date.")
@click.option("--charge", default="0", show_default=True, help="Additional amount billed.")
@click.pass_obj
def order_extend(config: Settings, order_id: int, new_return_date: date, charge: str) -> None:
    """Move an order's return date later."""
    handler = ExtendOrderHandler(
        uow=unit_of_work(config),
        publisher=event_bus(config),
        policy=status_policy(config),
    )

    dto = run(config, lambda: handler.handle(order_id, new_return_date, charge))

    click.echo(f"Order #{dto.id} extended — return due {dto.return_date}, total {dto.total}.")


@click.command("shorten")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to shorten.")
@click.option("--until", "new_return_date", required=True, type=ISO_DATE, help="New return date.")
@click.option("--refund", default="0", show_default=True, help="Amount taken off the total.")
@click.pass_obj
def order_shorten(config: Settings, order_id: int, new_return_date: date, refund: str) -> None:
    """Move an order's return date earlier and release the dropped days."""
    handler = ShortenOrderHandler(
        uow=unit_of_work(config),
        publisher=event_bus(config),
        policy=status_policy(config),
    )

    dto = run(config, lambda: handler.handle(order_id, new_return_date, refund))

    click.echo(f"Order #{dto.id} shortened — return due {dto.return_date}, total {dto.total}.")
