"""Event dispatcher: run a unit of work, then emit the events it describes.

Events are only mapped and published after ``work`` returns. If ``work``
raises, the exception propagates unchanged and nothing is published, so
subscribers never observe a state that was rolled back.

Usage:
    payouts = await dispatcher.with_event(
        lambda: repo.create_many(db, items),
        EventSpec(map=lambda rows: [PayoutEvent(...) for row in rows]),
    )
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Iterable, TypeVar, Union

from stellarbill.core.events.base import DomainEvent
from stellarbill.core.protocols.event_bus import EventBus

logger = logging.getLogger(__name__)

T = TypeVar("T")

MappedEvents = Union[DomainEvent, Iterable[DomainEvent], None]


@dataclass(frozen=True)
class EventSpec(Generic[T]):
    """Maps the committed result of a unit of work to the events it produced.

    ``map`` may return a single event, a list (one per created row), or
    None when the result warrants no event (e.g. an idempotent no-op).
    """

    map: Callable[[T], MappedEvents]


class EventDispatcher:
    """Couples event emission to the successful completion of a unit of work."""

    def __init__(self, event_bus: EventBus) -> None:
        """Initialize with the bus events are published to."""
        self._event_bus = event_bus

    async def with_event(self, work: Callable[[], Awaitable[T]], spec: EventSpec[T]) -> T:
        """Run ``work``; on success publish ``spec.map(result)`` and return the result."""
        result = await work()
        await self.emit(spec.map(result))
        return result

    async def emit(self, events: MappedEvents) -> int:
        """Publish already-committed events in order. Returns how many were published."""
        batch = _as_list(events)
        for event in batch:
            await self._event_bus.publish(event)
        if batch:
            logger.debug(
                "Dispatched %d event(s): %s", len(batch), ", ".join(e.event_type for e in batch)
            )
        return len(batch)


def _as_list(events: MappedEvents) -> list[DomainEvent]:
    if events is None:
        return []
    if isinstance(events, DomainEvent):
        return [events]
    return list(events)


