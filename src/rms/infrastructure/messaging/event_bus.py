"""In-process event bus.

Delivery is fire-and-forget: the change that produced an event has
already been committed, so a failing subscriber is logged and the
remaining subscribers still run.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable

from rms.domain.events import DomainEvent, EventPublisher
from rms.logging_config import get_logger

logger = get_logger(__name__)

Subscriber = Callable[[DomainEvent], None]


class InMemoryEventBus(EventPublisher):

    def __init__(self) -> None:
        self._subscribers: dict[type[DomainEvent], list[Subscriber]] = defaultdict(list)

    def subscribe(self, event_type: type[DomainEvent], handler: Subscriber) -> None:
        """Call *handler* for every published event of *event_type* or a subclass."""
        self._subscribers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        logger.debug("Publishing %s", event)
        for event_type, handlers in list(self._subscribers.items()):
            if not isinstance(event, event_type):
                continue
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "Subscriber %r failed on %s for order #%s",
                        handler,
                        type(event).__name__,
                        event.order_id,
                    )


def log_event(event: DomainEvent) -> None:
    """Subscriber that writes every lifecycle event to the log."""
    logger.info("Event %s: %s", type(event).__name__, event)
