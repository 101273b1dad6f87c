"""Payout domain events."""

from decimal import Decimal
from typing import Optional

from stellarbill.core.events.base import DomainEvent
from stellarbill.core.events.enums import PayoutEventType
from stellarbill.core.shared_models import PayoutStatus


class PayoutEvent(DomainEvent):
    """Event published when a payout is requested or settled.

    REQUESTED is consumed by the payout processor; PROCESSED carries the
    final status reported by settlement.
    """

    event_type: PayoutEventType

    payout_id: str
    amount: Decimal
    wallet_address: str
    memo: Optional[str] = None
    status: PayoutStatus = PayoutStatus.PENDING
    transaction_hash: Optional[str] = None
