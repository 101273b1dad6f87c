"""In-process event bus.

Delivers each event to the matching subscriptions one after another, in the
order they were registered: the event log (registered by the container
factory) always records an event before any merchant-facing consumer sees it.
Events reach the bus only after the state they describe is committed (see
core.events.dispatcher), so a subscriber failure is logged and never raised.
"""

import logging
from typing import TYPE_CHECKING, Optional

from stellarbill.core.events.routing import EventRoute, event_type_of

if TYPE_CHECKING:
    from stellarbill.core.protocols.event_bus import DomainEvent, EventHandler

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    """EventBus keeping its subscriptions in a list.

    Usage:
        bus = InMemoryEventBus()
        bus.subscribe("*", event_log.handle)
        bus.subscribe("payout::requested", payout_processor)
        bus.subscribe("payment::*", notifier, organization_id="org_1")
    """

    def __init__(self) -> None:
        """Initialize with no subscriptions."""
        self._routes: list[tuple[EventRoute, "EventHandler"]] = []

    def subscribe(
        self,
        event_pattern: str,
        handler: "EventHandler",
        *,
        organization_id: Optional[str] = None,
    ) -> None:
        """Register ``handler`` for ``event_pattern``.

        Raises:
            ValueError: the pattern is not part of the event vocabulary.
        """
        route = EventRoute.parse(event_pattern, organization_id=organization_id)
        self._routes.append((route, handler))
        logger.debug(f"EventBus: subscribed to '{event_pattern}' ({route})")

    async def publish(self, event: "DomainEvent") -> None:
        """Deliver ``event`` to every matching subscription."""
        event_type = event_type_of(event)
        delivered = failed = 0
        for route, handler in self._routes:
            if not route.matches(event):
                continue
            try:
                await handler(event)
                delivered += 1
            except Exception as e:
                failed += 1
                logger.error(
                    f"EventBus: subscriber {getattr(handler, '__qualname__', handler)} "
                    f"failed for '{event_type}' ({event.event_id}): {e}",
                    exc_info=True,
                )

        if failed:
            logger.warning(
                f"EventBus: '{event_type}' delivered to {delivered}, failed for {failed}"
            )
        elif not delivered:
            logger.debug(f"EventBus: no subscribers for '{event_type}'")
