"""Subscription lifecycle events."""

from datetime import datetime
from typing import Optional

from stellarbill.core.events.base import DomainEvent
from stellarbill.core.events.enums import SubscriptionEventType
from stellarbill.core.shared_models import SubscriptionStatus


class SubscriptionLifecycleEvent(DomainEvent):
    """Event published when a subscription is created or its status/period changes."""

    event_type: SubscriptionEventType

    subscription_id: str
    product_id: str
    status: SubscriptionStatus
    current_period_end: Optional[datetime] = None
