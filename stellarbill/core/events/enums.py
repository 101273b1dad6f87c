"""Event type enums, the vocabulary of the event bus.

Every domain event must use one of these enums for its event_type field.
Values follow the ``{domain}::{action}`` convention that merchants receive,
so subscribers route on ``payment::*`` style patterns (see routing.py).

When adding a new event domain:
1. Define its enum here
2. Add it to the EventType union
3. Add it to ALL_EVENT_TYPE_ENUMS
"""

from enum import Enum


class PaymentEventType(str, Enum):
    """Payment outcome event types (checkout settlement and recurring charges)."""

    COMPLETED = "payment::completed"
    FAILED = "payment::failed"


class CheckoutEventType(str, Enum):
    """Checkout lifecycle event types."""

    CREATED = "checkout::created"
    UPDATED = "checkout::updated"
    EXPIRED = "checkout::expired"


class SubscriptionEventType(str, Enum):
    """Subscription lifecycle event types."""

    CREATED = "subscription::created"
    UPDATED = "subscription::updated"
    CANCELED = "subscription::canceled"


class PayoutEventType(str, Enum):
    """Payout lifecycle event types."""

    REQUESTED = "payout::requested"
    PROCESSED = "payout::processed"


class RefundEventType(str, Enum):
    """Refund lifecycle event types."""

    REQUESTED = "refund::requested"
    PROCESSED = "refund::processed"


EventType = (
    PaymentEventType
    | CheckoutEventType
    | SubscriptionEventType
    | PayoutEventType
    | RefundEventType
)

ALL_EVENT_TYPE_ENUMS: tuple[type[Enum], ...] = (
    PaymentEventType,
    CheckoutEventType,
    SubscriptionEventType,
    PayoutEventType,
    RefundEventType,
)
