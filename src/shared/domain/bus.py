"""Domain bus interfaces for in-process event handling.

The outbox relay is the only publisher: events reach handlers after the
transaction that recorded them has committed, never from inside it.
"""

from __future__ import annotations

from typing import Generic, Protocol, Sequence, Type, TypeVar

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[E]):
    """Handler interface for domain events."""

    def handle(self, event: E) -> None: ...


class IEventBus(Protocol):
    """Event bus interface."""

    def publish(self, event: DomainEvent) -> None: ...

    def subscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None: ...

    def handlers_for(self, event_class: Type[DomainEvent]) -> Sequence[IEventHandler]: ...
