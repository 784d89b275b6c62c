"""CLI commands for querying the availability ledger."""

from __future__ import annotations

from datetime import date

import click

from rms.application.check_availability import CheckAvailabilityHandler
from rms.application.show_availability import ShowAvailabilityHandler
from rms.config import Settings
from rms.infrastructure.bootstrap import status_policy, unit_of_work
from rms.infrastructure.cli.support import ISO_DATE, run


@click.command("check")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--start", required=True, type=ISO_DATE, help="First day (YYYY-MM-DD).")
@click.option("--end", required=True, type=ISO_DATE, help="Last day, inclusive.")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units wanted.")
@click.pass_obj
def availability_check(
    config: Settings, product_id: str, start: date, end: date, quantity: int
) -> None:
    """Check whether a quantity is free on every day of a range."""
    handler = CheckAvailabilityHandler(uow=unit_of_work(config), policy=status_policy(config))

    result = run(config, lambda: handler.handle(product_id, start, end, quantity))

    if result.available:
        click.echo(
            f"Available: {quantity} x product {product_id} for {result.period} "
            f"(at least {result.min_available} free each day)"
        )
        return

    click.echo(
        f"Not available: need {quantity}, only {result.min_available} free "
        f"on the tightest day"
    )
    click.echo("Conflicts on: " + ", ".join(d.isoformat() for d in result.conflicting_dates))


@click.command("calendar")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--start", required=True, type=ISO_DATE, help="First day (YYYY-MM-DD).")
@click.option("--end", required=True, type=ISO_DATE, help="Last day, inclusive.")
@click.pass_obj
def availability_calendar(config: Settings, product_id: str, start: date, end: date) -> None:
    """Show the day-by-day availability of a product."""
    handler = ShowAvailabilityHandler(uow=unit_of_work(config), policy=status_policy(config))

    days = run(config, lambda: handler.handle(product_id, start, end))

    click.echo(f"{'Day':<12} {'Total':>6} {'Reserved':>9} {'Available':>10}  Status")
    click.echo("-" * 52)
    for day in days:
        click.echo(
            f"{day.day:<12} {day.total:>6} {day.reserved:>9} {day.available:>10}  {day.status}"
        )
