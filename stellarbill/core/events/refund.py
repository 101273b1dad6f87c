"""Refund domain events."""

from decimal import Decimal
from typing import Optional

from stellarbill.core.events.base import DomainEvent
from stellarbill.core.events.enums import RefundEventType
from stellarbill.core.shared_models import RefundStatus


class RefundEvent(DomainEvent):
    """Event published when a refund is requested or settled."""

    event_type: RefundEventType

    refund_id: str
    payment_id: str
    amount: Decimal
    wallet_address: str
    reason: Optional[str] = None
    status: RefundStatus = RefundStatus.PENDING
    transaction_hash: Optional[str] = None
