"""Synchronous in-process event bus for booking notifications."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable

from roombooking.domain.events import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class EventBus:
    """Publish/subscribe bus for domain events.

    A handler subscribed to a class also receives its subclasses, so
    subscribing to ``DomainEvent`` sees everything. Handlers run
    synchronously, most specific event class first, then in registration
    order.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type[DomainEvent], list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        handlers = [
            handler
            for cls in type(event).__mro__
            for handler in self._subscribers.get(cls, [])
        ]
        logger.debug("publishing %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            handler(event)
