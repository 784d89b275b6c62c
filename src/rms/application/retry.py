"""Bounded retry for transient ledger lock conflicts.

Only ConcurrencyConflict is retried. Capacity shortages and every other
domain error are business outcomes and propagate on the first attempt.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from rms.domain.exceptions import ConcurrencyConflict
from rms.logging_config import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


def retry_on_conflict(
    operation: Callable[[], T],
    attempts: int = 3,
    base_delay: float = 0.05,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run *operation*, retrying on ConcurrencyConflict with exponential backoff.

    Waits ``base_delay * 2**n`` seconds after the n-th failed attempt and
    re-raises the last conflict once *attempts* are used up.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except ConcurrencyConflict:
            if attempt == attempts:
                logger.warning("Giving up after %s conflicting attempts", attempts)
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.info("Ledger busy (attempt %s/%s); retrying in %.3fs", attempt, attempts, delay)
            sleep(delay)
    raise AssertionError("unreachable")
