"""Payout schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stellarbill.core.shared_models import Network, PayoutStatus
from stellarbill.domains.payouts.types import PayoutItem


class PayoutRequest(BaseModel):
    """Batch of payouts; validated as a whole."""

    items: list[PayoutItem] = Field(..., min_length=1)


class PayoutSettlementUpdate(BaseModel):
    """Settlement reported by the external payout confirmer."""

    status: PayoutStatus
    transaction_hash: Optional[str] = None


class PayoutResponse(BaseModel):
    """Schema for a payout returned by the API."""

    id: str
    organization_id: str
    environment: Network
    amount: Decimal
    wallet_address: str
    memo: Optional[str] = None
    status: PayoutStatus
    transaction_hash: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
