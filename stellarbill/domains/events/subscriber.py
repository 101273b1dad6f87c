"""Event log subscriber.

Appends every domain event published on the bus to the ``event`` table.
Runs after the originating transaction committed, in its own session, so
a failing append never undoes the state the event describes; the bus logs
the failure.
"""

from typing import Optional

from stellarbill.core.events.base import DomainEvent
from stellarbill.core.protocols.event_bus import EventBus, EventSubscriber
from stellarbill.core.protocols.session import SessionFactory
from stellarbill.domains.events.repository import EventRepositoryProtocol


class EventLogSubscriber(EventSubscriber):
    """Persists published events (write-once)."""

    def __init__(
        self,
        event_repo: EventRepositoryProtocol,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        """Initialize with the event repository and an optional session factory."""
        self._event_repo = event_repo
        self._session_factory = session_factory

    def register(self, event_bus: EventBus) -> None:
        """Subscribe to every event type."""
        event_bus.subscribe("*", self.handle)

    async def handle(self, event: DomainEvent) -> None:
        """Append ``event``."""
        factory = self._session_factory
        if factory is None:
            from stellarbill.db.session import get_db_context

            factory = get_db_context

        async with factory() as db:
            await self._event_repo.append(
                db,
                values={
                    "id": event.event_id,
                    "organization_id": event.organization_id,
                    "environment": event.environment.value,
                    "type": event.event_type.value,
                    "customer_id": event.customer_id,
                    "data": event.data(),
                    "created_at": event.timestamp,
                },
            )
