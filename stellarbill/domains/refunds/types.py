"""Refund request types and validation."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field
from stellar_sdk import StrKey

from stellarbill.core.shared_models import PaymentStatus
from stellarbill.models.payment import Payment

REASON_MAX_LENGTH = 255


class RefundRequest(BaseModel):
    """A requested refund. Without ``amount`` whatever is left of the payment is refunded."""

    payment_id: str = Field(..., description="Confirmed payment to refund")
    wallet_address: str = Field(..., description="Stellar account (G...) receiving the refund")
    amount: Optional[Decimal] = Field(None, description="Amount to refund, in the asset's units")
    reason: Optional[str] = Field(None, max_length=REASON_MAX_LENGTH)


def refund_rejection(
    payment: Payment, amount: Decimal, already_refunded: Decimal, wallet_address: str
) -> Optional[str]:
    """Reason ``amount`` cannot be refunded from ``payment``, or None when it can."""
    if payment.status != PaymentStatus.CONFIRMED.value:
        return f"payment {payment.id} is {payment.status}, only confirmed payments are refundable"
    if not StrKey.is_valid_ed25519_public_key(wallet_address):
        return f"invalid Stellar address {wallet_address!r}"
    if not amount.is_finite() or amount <= 0:
        return "amount must be positive"
    remaining = payment.amount - already_refunded
    if amount > remaining:
        return f"amount {amount} exceeds the {remaining} left to refund on payment {payment.id}"
    return None
