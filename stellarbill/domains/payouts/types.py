"""Payout request types and validation."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field
from stellar_sdk import StrKey

from stellarbill.core.context import BaseContext
from stellarbill.core.shared_models import Network

MEMO_MAX_BYTES = 28


class PayoutItem(BaseModel):
    """One requested payout.

    ``organization_id``/``environment`` are optional claims; when present
    they must match the caller's context.
    """

    amount: Decimal = Field(..., description="Amount to pay out, in the asset's units")
    wallet_address: str = Field(..., description="Destination Stellar account (G...)")
    memo: Optional[str] = Field(None, description="Text memo, at most 28 bytes")
    organization_id: Optional[str] = None
    environment: Optional[Network] = None


def validate_payout_item(item: PayoutItem, ctx: BaseContext) -> Optional[str]:
    """Reason ``item`` cannot be paid out for ``ctx``, or None when it can."""
    if item.organization_id is not None and item.organization_id != ctx.organization_id:
        return "belongs to another organization"
    if item.environment is not None and Network(item.environment) != ctx.environment:
        return f"targets {Network(item.environment).value}, not {ctx.environment.value}"
    if not item.amount.is_finite() or item.amount <= 0:
        return "amount must be positive"
    if not StrKey.is_valid_ed25519_public_key(item.wallet_address):
        return f"invalid Stellar address {item.wallet_address!r}"
    if item.memo is not None and len(item.memo.encode("utf-8")) > MEMO_MAX_BYTES:
        return f"memo longer than {MEMO_MAX_BYTES} bytes"
    return None
