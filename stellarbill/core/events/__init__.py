"""Domain events for the event bus."""

from stellarbill.core.events.base import DomainEvent
from stellarbill.core.events.checkout import CheckoutLifecycleEvent
from stellarbill.core.events.dispatcher import EventDispatcher, EventSpec
from stellarbill.core.events.enums import (
    CheckoutEventType,
    EventType,
    PaymentEventType,
    PayoutEventType,
    RefundEventType,
    SubscriptionEventType,
)
from stellarbill.core.events.payment import PaymentEvent
from stellarbill.core.events.payout import PayoutEvent
from stellarbill.core.events.refund import RefundEvent
from stellarbill.core.events.subscription import SubscriptionLifecycleEvent

__all__ = [
    "CheckoutEventType",
    "CheckoutLifecycleEvent",
    "DomainEvent",
    "EventDispatcher",
    "EventSpec",
    "EventType",
    "PaymentEvent",
    "PaymentEventType",
    "PayoutEvent",
    "PayoutEventType",
    "RefundEvent",
    "RefundEventType",
    "SubscriptionEventType",
    "SubscriptionLifecycleEvent",
]
