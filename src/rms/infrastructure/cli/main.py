import click

from rms.domain.exceptions import DomainException
from rms.infrastructure.bootstrap import settings
from rms.infrastructure.cli.availability_commands import (
    availability_calendar,
    availability_check,
)
from rms.infrastructure.cli.billing_commands import billing_pay, billing_show
from rms.infrastructure.cli.order_commands import (
    order_cancel,
    order_complete,
    order_confirm,
    order_create,
    order_extend,
    order_show,
    order_shorten,
    order_start,
)
from rms.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_set_stock,
    product_update,
)
from rms.logging_config import configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """RMS — Rental Reservation & Availability Engine"""
    try:
        config = settings()
    except DomainException as exc:
        raise click.ClickException(str(exc))
    configure_logging(config)
    ctx.obj = config


@cli.group()
def product() -> None:
    """Manage rentable products."""


@cli.group()
def availability() -> None:
    """Query the availability calendar."""


@cli.group()
def order() -> None:
    """Manage rental orders."""


@cli.group()
def billing() -> None:
    """Invoices and payments."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
product.add_command(product_set_stock)
availability.add_command(availability_check)
availability.add_command(availability_calendar)
order.add_command(order_create)
order.add_command(order_show)
order.add_command(order_confirm)
order.add_command(order_start)
order.add_command(order_complete)
order.add_command(order_cancel)
order.add_command(order_extend)
order.add_command(order_shorten)
billing.add_command(billing_pay)
billing.add_command(billing_show)
