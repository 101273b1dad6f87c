"""Core protocols for dependency injection.

Domain-specific protocols (repositories, services) live in their
respective domains/ directories. This module keeps cross-cutting
infrastructure protocols only.
"""

from stellarbill.core.protocols.chain import (
    ChainClient,
    ChainClientRegistry,
    ChargeReceipt,
    SubscriptionAction,
)
from stellarbill.core.protocols.event_bus import (
    DomainEvent,
    EventBus,
    EventHandler,
    EventSubscriber,
)
from stellarbill.core.protocols.session import SessionFactory
from stellarbill.core.protocols.webhooks import WebhookSignatureVerifier

__all__ = [
    "ChainClient",
    "ChainClientRegistry",
    "ChargeReceipt",
    "DomainEvent",
    "EventBus",
    "EventHandler",
    "EventSubscriber",
    "SessionFactory",
    "SubscriptionAction",
    "WebhookSignatureVerifier",
]
