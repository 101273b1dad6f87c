"""Routing of domain events to subscribers.

Subscriptions name events by the same ``{domain}::{action}`` strings merchants
receive. Only three shapes are accepted: ``*``, ``<domain>::*`` and an exact
event type. Every pattern is checked against the closed vocabulary in
``core.events.enums`` when it is registered, so a misspelt subscription fails
at startup instead of silently never firing.
"""

from dataclasses import dataclass
from typing import Any, Optional

from stellarbill.core.events.enums import ALL_EVENT_TYPE_ENUMS

SEPARATOR = "::"
WILDCARD = "*"

EVENT_TYPES: frozenset[str] = frozenset(
    member.value for enum_cls in ALL_EVENT_TYPE_ENUMS for member in enum_cls
)
EVENT_DOMAINS: frozenset[str] = frozenset(t.split(SEPARATOR, 1)[0] for t in EVENT_TYPES)


def event_type_of(event: Any) -> str:
    """The ``{domain}::{action}`` string of an event (enum or plain str)."""
    event_type = event.event_type
    return getattr(event_type, "value", event_type)


@dataclass(frozen=True)
class EventRoute:
    """Which events a subscription receives.

    ``domain``/``action`` of None match anything; ``organization_id`` restricts
    delivery to one merchant's events.
    """

    domain: Optional[str] = None
    action: Optional[str] = None
    organization_id: Optional[str] = None

    @classmethod
    def parse(cls, pattern: str, organization_id: Optional[str] = None) -> "EventRoute":
        """Build a route from a subscription pattern.

        Raises:
            ValueError: the pattern names no known domain or event type.
        """
        if pattern == WILDCARD:
            return cls(organization_id=organization_id)

        domain, sep, action = pattern.partition(SEPARATOR)
        if not sep or domain not in EVENT_DOMAINS:
            raise ValueError(
                f"Unknown event pattern '{pattern}'; known domains: {sorted(EVENT_DOMAINS)}"
            )
        if action == WILDCARD:
            return cls(domain=domain, organization_id=organization_id)
        if pattern not in EVENT_TYPES:
            raise ValueError(f"Unknown event type '{pattern}'")
        return cls(domain=domain, action=action, organization_id=organization_id)

    def matches(self, event: Any) -> bool:
        """Whether ``event`` should be delivered on this route."""
        if self.organization_id is not None and event.organization_id != self.organization_id:
            return False
        domain, _, action = event_type_of(event).partition(SEPARATOR)
        if self.domain is not None and domain != self.domain:
            return False
        return self.action is None or action == self.action
