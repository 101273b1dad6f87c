"""Checkout lifecycle events."""

from decimal import Decimal

from stellarbill.core.events.base import DomainEvent
from stellarbill.core.events.enums import CheckoutEventType
from stellarbill.core.shared_models import CheckoutStatus


class CheckoutLifecycleEvent(DomainEvent):
    """Event published when a checkout is created or changes status.

    - CREATED: checkout opened for a customer
    - UPDATED: pending -> processing observed on chain
    - EXPIRED: checkout timed out before a transaction was seen
    """

    event_type: CheckoutEventType

    checkout_id: str
    product_id: str
    amount: Decimal
    status: CheckoutStatus
