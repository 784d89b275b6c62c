"""CLI commands for the Product catalog and stock."""

from __future__ import annotations

from datetime import date

import click

from rms.application.add_product import AddProductHandler
from rms.application.set_stock import SetStockHandler
from rms.application.update_product import UpdateProductHandler
from rms.config import Settings
from rms.infrastructure.bootstrap import status_policy, unit_of_work
from rms.infrastructure.cli.support import ISO_DATE, run


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--quantity", required=True, type=int, help="Units owned.")
@click.option("--rate", required=True, help="Base rate per rental unit (e.g. 15.00).")
@click.option(
    "--unit",
    type=click.Choice(["hour", "day", "week", "month"]),
    default="day",
    show_default=True,
    help="Rental unit the rate applies to.",
)
@click.option("--late-fee", default=None, help="Late fee per day (defaults to the system rate).")
@click.pass_obj
def product_add(
    config: Settings, name: str, quantity: int, rate: str, unit: str, late_fee: str | None
) -> None:
    """Add a new rentable product to the catalog."""
    handler = AddProductHandler(uow=unit_of_work(config))

    product = run(
        config,
        lambda: handler.handle(
            name=name,
            total_quantity=quantity,
            base_rate=rate,
            rental_unit=unit,
            late_fee_per_day=late_fee,
        ),
    )

    click.echo(
        f"Product #{product.id} '{product.name}' added: {product.total_quantity} units "
        f"at {product.base_rate}/{product.rental_unit.value}"
    )


@click.command("list")
@click.pass_obj
def product_list(config: Settings) -> None:
    """List all products in the catalog."""
    uow = unit_of_work(config)
    with uow:
        products = uow.products.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Units':>6} {'Rate':>10} {'Per':<6} {'Late fee':>10}")
    click.echo("-" * 63)
    for p in products:
        late_fee = str(p.late_fee_per_day) if p.late_fee_per_day else "default"
        click.echo(
            f"{p.id:<6} {p.name:<20} {p.total_quantity:>6} {str(p.base_rate):>10} "
            f"{p.rental_unit.value:<6} {late_fee:>10}"
        )


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--rate", default=None, help="New base rate (e.g. 29.99).")
@click.option("--late-fee", default=None, help="New late fee per day.")
@click.pass_obj
def product_update(
    config: Settings, product_id: str, rate: str | None, late_fee: str | None
) -> None:
    """Update a product's rates."""
    if rate is None and late_fee is None:
        raise click.UsageError("Nothing to update: pass --rate and/or --late-fee")

    handler = UpdateProductHandler(uow=unit_of_work(config))
    product = run(
        config,
        lambda: handler.handle(product_id=product_id, base_rate=rate, late_fee_per_day=late_fee),
    )

    late = str(product.late_fee_per_day) if product.late_fee_per_day else "default"
    click.echo(f"Product #{product.id} rate {product.base_rate}, late fee {late}")


@click.command("set-stock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units owned from now on.")
@click.option("--from", "effective_from", type=ISO_DATE, default=None, help="First affected day (default today).")
@click.pass_obj
def product_set_stock(
    config: Settings, product_id: str, quantity: int, effective_from: date | None
) -> None:
    """Change how many units of a product are owned."""
    start = effective_from or date.today()
    handler = SetStockHandler(uow=unit_of_work(config), policy=status_policy(config))

    resized = run(config, lambda: handler.handle(product_id, quantity, start))

    click.echo(
        f"Product #{product_id} stock set to {quantity} from {start.isoformat()} "
        f"({resized} calendar days updated)"
    )
