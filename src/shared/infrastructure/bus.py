"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, List, Sequence, Type

import structlog

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """In-process bus dispatching on the event's exact class.

    Handlers run synchronously in subscription order; an exception from a
    handler propagates to the publisher (the outbox relay records it).
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def handlers_for(self, event_class: Type[DomainEvent]) -> Sequence[IEventHandler]:
        return tuple(self._handlers.get(event_class, ()))

    def publish(self, event: DomainEvent) -> None:
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.debug("event_bus.no_handlers", event_name=event.event_name)
            return
        for handler in handlers:
            handler.handle(event)
        logger.debug(
            "event_bus.published",
            event_name=event.event_name,
            event_id=str(event.event_id),
            handlers=len(handlers),
        )


# Process-wide bus; apps subscribe their handlers in AppConfig.ready()

event_bus = InMemoryEventBus()
