"""Helpers shared by the CLI command modules."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import TypeVar

import click
from dateutil import parser as date_parser

from rms.application.retry import retry_on_conflict
from rms.config import Settings
from rms.domain.exceptions import DomainException

T = TypeVar("T")


class IsoDateType(click.ParamType):
    """Calendar date given as ISO 8601 text, e.g. ``2024-01-15``."""

    name = "date"

    def convert(self, value, param, ctx) -> date:
        if isinstance(value, date):
            return value
        try:
            return date_parser.isoparse(value).date()
        except (ValueError, OverflowError):
            self.fail(f"'{value}' is not an ISO date (YYYY-MM-DD)", param, ctx)


ISO_DATE = IsoDateType()


def run(config: Settings, operation: Callable[[], T]) -> T:
    """Run a use case, retrying lock conflicts, and report domain errors."""
    try:
        return retry_on_conflict(
            operation,
            attempts=config.retry_attempts,
            base_delay=config.retry_base_delay,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
