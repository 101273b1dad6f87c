"""Payment domain events.

Published once per settled checkout and once per recurring charge attempt.
"""

from decimal import Decimal
from typing import Optional

from stellarbill.core.events.base import DomainEvent
from stellarbill.core.events.enums import PaymentEventType
from stellarbill.core.shared_models import Network


class PaymentEvent(DomainEvent):
    """Event published when a payment confirms or fails on chain."""

    event_type: PaymentEventType

    payment_id: str
    amount: Decimal
    product_id: str
    checkout_id: Optional[str] = None
    subscription_id: Optional[str] = None
    transaction_hash: Optional[str] = None

    @classmethod
    def completed(
        cls,
        organization_id: str,
        environment: Network,
        customer_id: str,
        payment_id: str,
        amount: Decimal,
        product_id: str,
        checkout_id: Optional[str] = None,
        subscription_id: Optional[str] = None,
        transaction_hash: Optional[str] = None,
    ) -> "PaymentEvent":
        """Create a COMPLETED event."""
        return cls(
            event_type=PaymentEventType.COMPLETED,
            organization_id=organization_id,
            environment=environment,
            customer_id=customer_id,
            payment_id=payment_id,
            amount=amount,
            product_id=product_id,
            checkout_id=checkout_id,
            subscription_id=subscription_id,
            transaction_hash=transaction_hash,
        )

    @classmethod
    def failed(
        cls,
        organization_id: str,
        environment: Network,
        customer_id: str,
        payment_id: str,
        amount: Decimal,
        product_id: str,
        checkout_id: Optional[str] = None,
        subscription_id: Optional[str] = None,
        transaction_hash: Optional[str] = None,
    ) -> "PaymentEvent":
        """Create a FAILED event."""
        return cls(
            event_type=PaymentEventType.FAILED,
            organization_id=organization_id,
            environment=environment,
            customer_id=customer_id,
            payment_id=payment_id,
            amount=amount,
            product_id=product_id,
            checkout_id=checkout_id,
            subscription_id=subscription_id,
            transaction_hash=transaction_hash,
        )
