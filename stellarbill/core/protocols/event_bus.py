"""EventBus protocol for domain event fan-out.

Domain code publishes committed events through the EventDispatcher; the event
log and any merchant-facing consumers subscribe at startup.

Usage:
    await event_bus.publish(PaymentEvent.completed(...))

    event_bus.subscribe("*", event_log.handle)
    event_bus.subscribe("payment::*", notifier, organization_id="org_1")
"""

from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class DomainEvent(Protocol):
    """What the bus needs from an event to route it."""

    @property
    def event_id(self) -> str: ...

    @property
    def event_type(self) -> str:
        """One of the ``{domain}::{action}`` values in core.events.enums."""
        ...

    @property
    def timestamp(self) -> datetime: ...

    @property
    def organization_id(self) -> str:
        """Merchant the event belongs to."""
        ...


EventHandler = Callable[[DomainEvent], Awaitable[None]]


@runtime_checkable
class EventBus(Protocol):
    """Fan-out of domain events to subscribers.

    A failing subscriber never affects the others or the publisher.
    """

    async def publish(self, event: DomainEvent) -> None:
        """Deliver ``event`` to every matching subscription."""
        ...

    def subscribe(
        self,
        event_pattern: str,
        handler: EventHandler,
        *,
        organization_id: Optional[str] = None,
    ) -> None:
        """Register ``handler``.

        Args:
            event_pattern: ``*``, ``<domain>::*`` or an exact event type.
            handler: Async callable invoked for each matching event.
            organization_id: Only deliver this merchant's events.

        Raises:
            ValueError: the pattern is not part of the event vocabulary.
        """
        ...


@runtime_checkable
class EventSubscriber(Protocol):
    """A component that registers its own handlers on the bus at startup."""

    def register(self, event_bus: EventBus) -> None: ...
